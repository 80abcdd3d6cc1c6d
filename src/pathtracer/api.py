"""Public entry points of the path tracer.

These functions are the embeddable surface of the package: build a scene,
build a camera, render, read pixels. Modules holding Taichi fields are
imported on first use, so ``pathtracer.api`` itself can be imported before
the backend is initialised.

Example:
    >>> from pathtracer import api
    >>> from pathtracer.config import init_backend
    >>> from pathtracer.geometry.sphere import SphereInfo
    >>> from pathtracer.materials.base import Lambertian
    >>> init_backend("cpu")
    >>> scene = api.new_scene()
    >>> api.add(scene, SphereInfo((0, 0, -1), 0.5, Lambertian((0.7, 0.3, 0.3))))
    >>> camera = api.new_camera((0, 0, 0), (0, 0, -1), (0, 1, 0), 90, 2.0)
    >>> image = api.render(scene, camera, 200, 100, samples_per_pixel=10, max_depth=10)
    >>> api.get_pixel(image, 100, 50)
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from typing import Union

from pathtracer.camera.thin_lens import ThinLensCamera
from pathtracer.config import (
    DEFAULT_BACKGROUND_BOTTOM,
    DEFAULT_BACKGROUND_TOP,
    DEFAULT_ROWS_PER_CHUNK,
    Color,
    ProgressCallback,
    RenderSettings,
)
from pathtracer.core.image import Image
from pathtracer.geometry.sphere import SphereInfo
from pathtracer.scene.manager import Scene


def new_scene() -> Scene:
    """Create an empty scene."""
    return Scene()


def add(scene: Scene, hittable: Union[SphereInfo, Scene]) -> None:
    """Append a sphere, or every sphere of another scene, to a scene.

    Raises:
        ConfigurationError: If ``hittable`` is not a sphere or a scene.
    """
    scene.add(hittable)


def new_camera(
    look_from: Iterable[float],
    look_at: Iterable[float],
    up: Iterable[float],
    vertical_fov: float,
    aspect_ratio: float,
    aperture: float = 0.0,
    focus_distance: float = 1.0,
) -> ThinLensCamera:
    """Create a camera.

    Args:
        look_from: Camera position.
        look_at: Point the camera looks at.
        up: Up direction; must not be parallel to the view direction.
        vertical_fov: Vertical field of view in degrees, in (0, 180).
        aspect_ratio: Width divided by height, positive.
        aperture: Lens diameter, 0 for a pinhole camera.
        focus_distance: Distance to the plane of perfect focus, positive.

    Raises:
        ConfigurationError: If any parameter is invalid.
    """
    return ThinLensCamera(
        lookfrom=tuple(look_from),
        lookat=tuple(look_at),
        vup=tuple(up),
        vfov=vertical_fov,
        aspect_ratio=aspect_ratio,
        aperture=aperture,
        focus_dist=focus_distance,
    )


def render(
    scene: Scene,
    camera: ThinLensCamera,
    width: int,
    height: int,
    samples_per_pixel: int,
    max_depth: int,
    *,
    seed: int = 0,
    rows_per_chunk: int = DEFAULT_ROWS_PER_CHUNK,
    background_bottom: Color = DEFAULT_BACKGROUND_BOTTOM,
    background_top: Color = DEFAULT_BACKGROUND_TOP,
    progress: ProgressCallback | None = None,
    cancel_event: threading.Event | None = None,
) -> Image:
    """Render a scene to a new image.

    The Taichi backend must already be initialised (see
    ``pathtracer.config.init_backend``).

    Args:
        scene: The scene to render.
        camera: The camera to render through.
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Samples averaged per pixel.
        max_depth: Maximum path segments per sample.
        seed: Seed of the per-pixel random streams.
        rows_per_chunk: Rows rendered between progress and cancel checks.
        background_bottom: Sky color for rays pointing straight down.
        background_top: Sky color for rays pointing straight up.
        progress: Optional callback receiving (rows_completed, total_rows).
        cancel_event: Optional event that aborts the render when set.

    Returns:
        The finished image.

    Raises:
        ConfigurationError: If any parameter is invalid. Raised before any
            rendering work starts.
        RenderCancelledError: If the cancel event was set.
    """
    settings = RenderSettings(
        width=width,
        height=height,
        samples_per_pixel=samples_per_pixel,
        max_depth=max_depth,
        seed=seed,
        rows_per_chunk=rows_per_chunk,
        background_bottom=background_bottom,
        background_top=background_top,
    )
    settings.validate()

    from pathtracer.core.renderer import Renderer

    renderer = Renderer(scene, camera, settings)
    return renderer.render(progress=progress, cancel_event=cancel_event)


def get_pixel(image: Image, x: int, y: int) -> tuple[float, float, float]:
    """Color at column x, row y (row 0 = top), each channel in [0, 1].

    Raises:
        IndexError: If (x, y) is outside the image.
    """
    return image.get_pixel(x, y)


def get_pixel_u8(image: Image, x: int, y: int) -> tuple[int, int, int]:
    """Color at (x, y) quantized to 8 bits per channel."""
    return image.get_pixel_u8(x, y)


def dimensions(image: Image) -> tuple[int, int]:
    """Return (width, height) of an image."""
    return image.dimensions()
