"""Chunked, resumable and cancellable renderer.

The Renderer drives the pixel kernel over bands of image rows. Between
bands it can report progress, yield control back to the caller, or stop
when a cancel event is set, which makes it easy to embed in an event loop
or a worker thread.

Every pixel uses its own random stream, so a render split into any number
of chunks is identical to a render done in one go.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.config import RenderSettings
    >>> from pathtracer.core.renderer import Renderer
    >>> from pathtracer.scene.presets import create_three_spheres_scene
    >>>
    >>> scene, camera = create_three_spheres_scene()
    >>> renderer = Renderer(scene, camera, RenderSettings(width=400, height=225))
    >>> for rows_done, height in renderer.iter_chunks():
    ...     print(f"Progress: {rows_done}/{height} rows")
    >>> image = renderer.image
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Generator

from pathtracer.camera.rays import setup_camera
from pathtracer.camera.thin_lens import ThinLensCamera
from pathtracer.config import ProgressCallback, RenderSettings
from pathtracer.core.image import Image
from pathtracer.core.integrator import render_rows, setup_background
from pathtracer.errors import ConfigurationError, RenderCancelledError
from pathtracer.scene.intersection import upload_scene
from pathtracer.scene.manager import Scene

logger = logging.getLogger(__name__)


# The device fields hold one scene and camera at a time; this remembers whose.
_uploaded_by: Renderer | None = None

# Held from upload through the kernel launch.
_device_lock = threading.Lock()


def forget_uploads() -> None:
    """Force the next render to upload its scene and camera again.

    Call after writing to the scene, material or camera fields directly.
    """
    global _uploaded_by
    with _device_lock:
        _uploaded_by = None


class Renderer:
    """Renders one scene through one camera into an Image.

    The scene, camera and settings are validated at construction, before
    any kernel runs.

    Attributes:
        scene: The scene being rendered.
        camera: The camera rays are generated from.
        settings: Validated render settings.
    """

    def __init__(self, scene: Scene, camera: ThinLensCamera, settings: RenderSettings) -> None:
        """Initialize the renderer.

        Raises:
            ConfigurationError: If any argument is of the wrong type or any
                setting is invalid.
        """
        if not isinstance(scene, Scene):
            raise ConfigurationError(f"scene must be a Scene, got {type(scene).__name__}")
        if not isinstance(camera, ThinLensCamera):
            raise ConfigurationError(
                f"camera must be a ThinLensCamera, got {type(camera).__name__}"
            )
        settings.validate()

        self.scene = scene
        self.camera = camera
        self.settings = settings
        self._image = Image(settings.width, settings.height)
        self._rows_completed = 0

        image_aspect = settings.aspect_ratio
        if abs(camera.aspect_ratio - image_aspect) > 0.01 * image_aspect:
            logger.warning(
                "Camera aspect ratio %.4f differs from image aspect ratio %.4f; "
                "the image will be stretched",
                camera.aspect_ratio,
                image_aspect,
            )

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.settings.width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self.settings.height

    @property
    def rows_completed(self) -> int:
        """Number of rows rendered so far, counted from the top."""
        return self._rows_completed

    @property
    def is_complete(self) -> bool:
        """Whether every row has been rendered."""
        return self._rows_completed >= self.height

    @property
    def image(self) -> Image:
        """The image being rendered. Rows not yet rendered are black."""
        return self._image

    def _ensure_uploaded(self) -> None:
        global _uploaded_by
        if _uploaded_by is self:
            return
        upload_scene(self.scene)
        setup_camera(self.camera)
        setup_background(self.settings.background_bottom, self.settings.background_top)
        _uploaded_by = self

    def render_rows(self, row_start: int, row_end: int) -> None:
        """Render rows [row_start, row_end) into the image.

        Rows may be rendered in any order; ``rows_completed`` only tracks the
        contiguous progress made by ``iter_chunks``.

        Raises:
            ValueError: If the range is empty or outside the image.
        """
        if not 0 <= row_start < row_end <= self.height:
            raise ValueError(
                f"Invalid row range [{row_start}, {row_end}) for image height {self.height}"
            )
        s = self.settings
        with _device_lock:
            self._ensure_uploaded()
            rows = render_rows(
                row_start,
                row_end,
                s.width,
                s.height,
                s.samples_per_pixel,
                s.max_depth,
                s.seed,
            )
        self._image.write_rows(row_start, rows)
        logger.debug("Rendered rows %d-%d", row_start, row_end - 1)

    def iter_chunks(self) -> Generator[tuple[int, int], None, None]:
        """Render the remaining rows chunk by chunk.

        A new call resumes from the first row not yet rendered, so a caller
        may stop iterating at any point and continue later.

        Yields:
            Tuple of (rows_completed, total_rows) after each chunk.
        """
        chunk = self.settings.rows_per_chunk
        while self._rows_completed < self.height:
            row_start = self._rows_completed
            row_end = min(row_start + chunk, self.height)
            self.render_rows(row_start, row_end)
            self._rows_completed = row_end
            yield (self._rows_completed, self.height)

    def render(
        self,
        progress: ProgressCallback | None = None,
        cancel_event: threading.Event | None = None,
    ) -> Image:
        """Render all remaining rows and return the finished image.

        Args:
            progress: Optional callback called after each chunk with
                (rows_completed, total_rows).
            cancel_event: Optional event checked before each chunk; when set,
                the render stops.

        Returns:
            The completed image.

        Raises:
            RenderCancelledError: If the cancel event was set before the
                image was complete.
        """
        s = self.settings
        logger.info(
            "Rendering %dx%d, %d spp, max depth %d, %d rows per chunk",
            s.width,
            s.height,
            s.samples_per_pixel,
            s.max_depth,
            s.rows_per_chunk,
        )
        start = time.perf_counter()

        chunks = self.iter_chunks()
        while not self.is_complete:
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Render cancelled after %d/%d rows", self._rows_completed, s.height)
                raise RenderCancelledError(self._rows_completed, s.height)
            rows_done, total = next(chunks)
            if progress is not None:
                progress(rows_done, total)

        logger.info("Render finished in %.2f s", time.perf_counter() - start)
        return self._image

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"rows_completed={self._rows_completed})"
        )
