"""Render configuration and backend initialisation.

The render knobs are collected in ``RenderSettings``, which validates eagerly
so that configuration errors surface before any kernel is launched.

Example:
    >>> from pathtracer.config import RenderSettings, init_backend
    >>> init_backend("cpu")
    >>> settings = RenderSettings(width=320, height=180, samples_per_pixel=50, max_depth=20)
    >>> settings.validate()
"""

from __future__ import annotations

import math
import numbers
from collections.abc import Callable, Iterable, Mapping
from dataclasses import asdict, dataclass, fields
from typing import Any

from pathtracer.errors import ConfigurationError

Color = tuple[float, float, float]

# Progress callback receives (rows_completed, total_rows)
ProgressCallback = Callable[[int, int], None]

# Sky gradient endpoints: bottom is used for straight-down rays, top for straight-up rays
DEFAULT_BACKGROUND_BOTTOM: Color = (0.8, 0.8, 0.8)
DEFAULT_BACKGROUND_TOP: Color = (0.1, 0.2, 0.65)

DEFAULT_ROWS_PER_CHUNK = 16

_ARCH_NAMES = ("cpu", "gpu", "cuda", "vulkan", "metal", "opengl", "x64", "arm64")


def coerce_vec3(value: Iterable[float], name: str) -> tuple[float, float, float]:
    """Convert a 3-component sequence to a tuple of finite floats.

    Args:
        value: Any iterable of three numbers.
        name: Parameter name used in error messages.

    Returns:
        The components as a tuple of floats.

    Raises:
        ConfigurationError: If the value does not have exactly three finite
            numeric components.
    """
    try:
        components = tuple(float(c) for c in value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be a sequence of 3 numbers, got {value!r}") from exc
    if len(components) != 3:
        raise ConfigurationError(f"{name} must have 3 components, got {len(components)}")
    if not all(math.isfinite(c) for c in components):
        raise ConfigurationError(f"{name} components must be finite, got {components}")
    return components[0], components[1], components[2]


@dataclass
class RenderSettings:
    """Parameters controlling a single render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Number of jittered primary rays averaged per pixel.
            Trades render time for lower variance.
        max_depth: Maximum number of path segments per primary ray. 0 renders
            a black image.
        seed: Seed of the per-pixel random streams, in [0, 2**32).
        rows_per_chunk: Rows rendered per kernel launch. Cancellation and
            progress reporting happen between chunks.
        background_bottom: Sky color for rays pointing straight down.
        background_top: Sky color for rays pointing straight up.
    """

    width: int
    height: int
    samples_per_pixel: int = 100
    max_depth: int = 50
    seed: int = 0
    rows_per_chunk: int = DEFAULT_ROWS_PER_CHUNK
    background_bottom: Color = DEFAULT_BACKGROUND_BOTTOM
    background_top: Color = DEFAULT_BACKGROUND_TOP

    def validate(self) -> None:
        """Check every parameter.

        Raises:
            ConfigurationError: If any parameter is out of range.
        """
        for name in ("width", "height", "samples_per_pixel", "max_depth", "seed", "rows_per_chunk"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Integral):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")
            setattr(self, name, int(value))

        if self.width < 1 or self.height < 1:
            raise ConfigurationError(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.samples_per_pixel < 1:
            raise ConfigurationError(
                f"samples_per_pixel must be at least 1, got {self.samples_per_pixel}"
            )
        if self.max_depth < 0:
            raise ConfigurationError(f"max_depth must be non-negative, got {self.max_depth}")
        if not 0 <= self.seed < 2**32:
            raise ConfigurationError(f"seed must be in [0, 2**32), got {self.seed}")
        if self.rows_per_chunk < 1:
            raise ConfigurationError(
                f"rows_per_chunk must be at least 1, got {self.rows_per_chunk}"
            )

        for name in ("background_bottom", "background_top"):
            color = coerce_vec3(getattr(self, name), name)
            if any(c < 0.0 for c in color):
                raise ConfigurationError(f"{name} components must be non-negative, got {color}")
            setattr(self, name, color)

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height

    def to_dict(self) -> dict[str, Any]:
        """Export the settings as a plain dictionary."""
        data = asdict(self)
        data["background_bottom"] = list(self.background_bottom)
        data["background_top"] = list(self.background_top)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RenderSettings:
        """Build validated settings from a dictionary.

        Args:
            data: Mapping with the dataclass field names as keys. ``width`` and
                ``height`` are required.

        Returns:
            The validated settings.

        Raises:
            ConfigurationError: On unknown keys, missing dimensions or invalid
                values.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown render settings: {sorted(unknown)}")
        if "width" not in data or "height" not in data:
            raise ConfigurationError("Render settings require 'width' and 'height'")

        kwargs = dict(data)
        for name in ("background_bottom", "background_top"):
            if name in kwargs:
                kwargs[name] = coerce_vec3(kwargs[name], name)

        settings = cls(**kwargs)
        settings.validate()
        return settings


def init_backend(arch: str = "cpu", debug: bool = False, **kwargs: Any) -> None:
    """Initialise the Taichi runtime.

    Must be called before any module holding Taichi fields is imported
    (``scene.intersection``, ``materials.registry``, ``camera.rays``,
    ``core.integrator``).

    Args:
        arch: Backend name: "cpu", "gpu", "cuda", "vulkan", "metal", "opengl".
        debug: Enable Taichi debug mode (bounds checks, slower).
        **kwargs: Extra keyword arguments forwarded to ``ti.init``.

    Raises:
        ConfigurationError: If the backend name is unknown.
    """
    import taichi as ti

    if arch not in _ARCH_NAMES:
        raise ConfigurationError(f"Unknown Taichi arch {arch!r}; expected one of {_ARCH_NAMES}")

    ti.init(arch=getattr(ti, arch), debug=debug, **kwargs)
