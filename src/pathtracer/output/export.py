"""Image export utilities for rendered images.

Rendered images are already clamped and gamma corrected, so exporting is
only quantization and encoding.

Supported formats:
    - PNG (8-bit via Pillow)
    - Raw RGBA8 buffer (for handing pixels to a host display surface)

Example:
    >>> from pathtracer.output.export import save_png
    >>> save_png(image, "output.png")
"""

from __future__ import annotations

import io
from os import PathLike
from typing import Union

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from pathtracer.core.image import Image

ImageLike = Union[Image, npt.NDArray[np.floating]]


def image_to_uint8(image: ImageLike) -> npt.NDArray[np.uint8]:
    """Quantize an image to 8 bits per channel.

    Args:
        image: An Image, or a float array of shape (H, W, 3) in [0, 1].

    Returns:
        Array of shape (H, W, 3) with dtype uint8; each channel is
        floor(255 * clamp(v, 0, 1)).
    """
    if isinstance(image, Image):
        return image.to_uint8()
    array = np.asarray(image, dtype=np.float64)
    if array.ndim != 3 or array.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) array, got shape {array.shape}")
    return (np.clip(array, 0.0, 1.0) * 255).astype(np.uint8)


def to_rgba_bytes(image: ImageLike) -> bytes:
    """Encode an image as a row-major RGBA8 buffer with opaque alpha.

    Row 0 of the image comes first. The buffer has 4 * width * height bytes.
    """
    rgb = image_to_uint8(image)
    height, width, _ = rgb.shape
    rgba = np.full((height, width, 4), 255, dtype=np.uint8)
    rgba[:, :, :3] = rgb
    return rgba.tobytes()


def encode_png(image: ImageLike) -> bytes:
    """Encode an image as PNG and return the file contents."""
    buffer = io.BytesIO()
    PILImage.fromarray(image_to_uint8(image)).save(buffer, format="PNG")
    return buffer.getvalue()


def save_png(image: ImageLike, filepath: Union[str, PathLike[str]]) -> None:
    """Save an image as an 8-bit PNG file.

    Args:
        image: The image to save.
        filepath: Output file path (should end in .png).
    """
    pil_image = PILImage.fromarray(image_to_uint8(image))
    pil_image.save(filepath, format="PNG")


def compute_rmse(image_a: ImageLike, image_b: ImageLike) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image.
        image_b: Second image (must have the same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    a = image_a.raw if isinstance(image_a, Image) else np.asarray(image_a)
    b = image_b.raw if isinstance(image_b, Image) else np.asarray(image_b)
    if a.shape != b.shape:
        raise ValueError(f"Image shapes must match: {a.shape} vs {b.shape}")

    diff = a.astype(np.float64) - b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
