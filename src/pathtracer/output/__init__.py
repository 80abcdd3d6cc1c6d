"""Output helpers for finished images.

Components:
    export: 8-bit quantization, PNG encoding and raw RGBA buffers
"""

from .export import compute_rmse, encode_png, image_to_uint8, save_png, to_rgba_bytes

__all__ = [
    "image_to_uint8",
    "to_rgba_bytes",
    "encode_png",
    "save_png",
    "compute_rmse",
]
