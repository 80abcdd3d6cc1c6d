"""Image buffer holding the final, gamma-corrected pixel colors.

Pixels are stored row-major in a float64 NumPy array of shape
(height, width, 3); row 0 is the top of the image. Values written by the
renderer are already clamped to [0, 1] and gamma corrected.
"""

from __future__ import annotations

import numbers
from collections.abc import Iterable

import numpy as np

from pathtracer.config import coerce_vec3
from pathtracer.errors import ConfigurationError


class Image:
    """A width x height grid of RGB colors.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(self, width: int, height: int) -> None:
        """Create a black image.

        Raises:
            ConfigurationError: If either dimension is less than 1.
        """
        if isinstance(width, bool) or isinstance(height, bool):
            raise ConfigurationError("Image dimensions must be integers")
        if not isinstance(width, numbers.Integral) or not isinstance(height, numbers.Integral):
            raise ConfigurationError(f"Image dimensions must be integers, got {width!r}x{height!r}")
        width = int(width)
        height = int(height)
        if width < 1 or height < 1:
            raise ConfigurationError(f"Image dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self._pixels = np.zeros((height, width, 3), dtype=np.float64)

    def __repr__(self) -> str:
        return f"Image(width={self.width}, height={self.height})"

    def _check(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(
                f"Pixel ({x}, {y}) is outside the {self.width}x{self.height} image"
            )

    def dimensions(self) -> tuple[int, int]:
        """Return (width, height)."""
        return self.width, self.height

    def set_pixel(self, x: int, y: int, color: Iterable[float]) -> None:
        """Store a color at column x, row y (row 0 = top)."""
        self._check(x, y)
        self._pixels[y, x] = coerce_vec3(color, "color")

    def get_pixel(self, x: int, y: int) -> tuple[float, float, float]:
        """Read the color at column x, row y (row 0 = top)."""
        self._check(x, y)
        r, g, b = self._pixels[y, x]
        return float(r), float(g), float(b)

    def get_pixel_u8(self, x: int, y: int) -> tuple[int, int, int]:
        """Read the color at (x, y) quantized to 8 bits per channel."""
        self._check(x, y)
        r, g, b = _quantize(self._pixels[y, x])
        return int(r), int(g), int(b)

    def write_rows(self, row_start: int, rows: np.ndarray) -> None:
        """Copy a band of rows into the image.

        Args:
            row_start: Row index of the first row in ``rows``.
            rows: Array of shape (n, width, 3).

        Raises:
            ValueError: If the band does not fit the image.
        """
        rows = np.asarray(rows)
        if rows.ndim != 3 or rows.shape[1:] != (self.width, 3):
            raise ValueError(f"Expected rows of shape (n, {self.width}, 3), got {rows.shape}")
        row_end = row_start + rows.shape[0]
        if row_start < 0 or row_end > self.height:
            raise ValueError(f"Rows [{row_start}, {row_end}) exceed image height {self.height}")
        self._pixels[row_start:row_end] = rows

    @property
    def raw(self) -> np.ndarray:
        """Read-only view of the (height, width, 3) float64 pixel array."""
        view = self._pixels.view()
        view.flags.writeable = False
        return view

    def to_uint8(self) -> np.ndarray:
        """Return the pixels as a (height, width, 3) uint8 array."""
        return _quantize(self._pixels)

    def copy(self) -> Image:
        """Return an independent copy of the image."""
        other = Image(self.width, self.height)
        other._pixels[:] = self._pixels
        return other


def _quantize(values: np.ndarray) -> np.ndarray:
    """floor(255 * v) after clamping to [0, 1]."""
    return (np.clip(values, 0.0, 1.0) * 255).astype(np.uint8)
