"""Lambertian (ideal diffuse) scattering.

Scattered directions are drawn as normal + random_unit_vector, which
produces a cosine-weighted distribution over the hemisphere around the
normal. With that distribution the BRDF and pdf cancel and the path weight
is simply the albedo.

Example:
    >>> # Within a Taichi kernel:
    >>> # direction, attenuation, state = scatter_lambertian(albedo, normal, state)
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import near_zero, normalize, random_unit_vector

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3, state: ti.u32):
    """Sample a diffuse scatter direction.

    Args:
        albedo: The diffuse reflectance color (RGB).
        normal: The unit surface normal at the hit point, facing the
            incoming ray.
        state: The caller's generator state.

    Returns:
        A tuple of (scattered_direction, attenuation, new_state) where the
        direction is unit length and satisfies dot(direction, normal) >= 0.
    """
    offset, s = random_unit_vector(state)
    scattered_direction = normal + offset

    # normal and offset nearly cancel
    if near_zero(scattered_direction):
        scattered_direction = normal

    return normalize(scattered_direction), albedo, s
