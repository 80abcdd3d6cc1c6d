"""Core rendering module.

This module contains the fundamental building blocks for path tracing:

Components:
    ray: Ray data structure, vector utilities and random sampling helpers
    rng: Explicit per-stream random number generation
    integrator: Material dispatch, ray_color and the pixel kernel
    renderer: Chunked, resumable and cancellable render driver
    image: Final image buffer

All compute-intensive operations use Taichi kernels.
"""

from .image import Image
from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    near_zero,
    normalize,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_unit_vector,
    ray_at,
    reflect,
    refract,
    schlick_fresnel,
    vec3,
)
from .rng import next_state, random_float, random_range, seed_stream, wang_hash

# Note: integrator and renderer are NOT imported here because they allocate
# Taichi fields, which requires ti.init() to have run first.
#
# For rendering, use:
#   from pathtracer.core.renderer import Renderer

__all__ = [
    "Image",
    "Ray",
    "ray_at",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "refract",
    "schlick_fresnel",
    "near_zero",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_in_unit_disk",
    "wang_hash",
    "seed_stream",
    "next_state",
    "random_float",
    "random_range",
]
