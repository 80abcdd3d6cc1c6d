"""Dielectric (glass/water) scattering.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when sin(theta_t) > 1

The material randomly chooses between reflection and refraction with the
Fresnel reflectance as the reflection probability, so glass looks more
mirror-like at grazing angles.
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import normalize, reflect, refract, schlick_fresnel
from pathtracer.core.rng import random_float

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def will_reflect(cos_theta: ti.f32, refraction_ratio: ti.f32, r: ti.f32) -> ti.i32:
    """Decide between reflection and refraction for a given random draw.

    Args:
        cos_theta: Cosine of the incident angle, in [0, 1].
        refraction_ratio: n_incident / n_transmitted.
        r: Uniform random number in [0, 1).

    Returns:
        1 on total internal reflection or when r is below the Schlick
        reflectance, 0 otherwise.
    """
    sin_theta = ti.sqrt(tm.max(0.0, 1.0 - cos_theta * cos_theta))
    cannot_refract = refraction_ratio * sin_theta > 1.0
    reflectance = schlick_fresnel(cos_theta, refraction_ratio)
    return cannot_refract or r < reflectance


@ti.func
def scatter_dielectric(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    state: ti.u32,
):
    """Compute the scattered ray direction for a dielectric surface.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The unit surface normal, facing the incoming ray.
        front_face: 1 if the ray enters the material, 0 if it leaves it.
        state: The caller's generator state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, new_state):
        - scattered_direction: The reflected or refracted direction (unit).
        - attenuation: White; clear glass does not absorb.
        - did_scatter: Always 1.
    """
    attenuation = vec3(1.0, 1.0, 1.0)

    refraction_ratio = 1.0 / ior
    if front_face == 0:
        refraction_ratio = ior

    unit_direction = normalize(incident_direction)
    cos_theta = tm.min(-tm.dot(unit_direction, normal), 1.0)

    r, s = random_float(state)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    if will_reflect(cos_theta, refraction_ratio, r):
        scattered_direction = reflect(unit_direction, normal)
    else:
        scattered_direction = refract(unit_direction, normal, refraction_ratio)

    return normalize(scattered_direction), attenuation, 1, s
