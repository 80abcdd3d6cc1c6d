"""Metal (specular reflective) scattering.

Perfect metals (fuzz = 0) produce mirror reflections; fuzzier metals perturb
the mirror direction by a random point in a sphere of radius ``fuzz``:

    R = reflect(unit(I), N) + fuzz * random_in_unit_sphere()

Rays perturbed below the surface are absorbed.
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import normalize, random_in_unit_sphere, reflect

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_metal(
    albedo: vec3,
    fuzz: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    state: ti.u32,
):
    """Compute the scattered ray direction for a metal surface.

    Args:
        albedo: The reflective tint (RGB).
        fuzz: Perturbation radius in [0, 1]. 0 = perfect mirror.
        incident_direction: The incoming ray direction (any length).
        normal: The unit surface normal, facing the incoming ray.
        state: The caller's generator state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, new_state):
        - scattered_direction: The reflected direction (unit length), or the
          zero vector when absorbed.
        - attenuation: The albedo.
        - did_scatter: 1 if the ray left above the surface, 0 if absorbed.
    """
    reflected = reflect(normalize(incident_direction), normal)
    offset, s = random_in_unit_sphere(state)
    scattered_direction = reflected + fuzz * offset

    did_scatter = 1
    if tm.dot(scattered_direction, normal) <= 0.0:
        did_scatter = 0
        scattered_direction = vec3(0.0, 0.0, 0.0)
    else:
        scattered_direction = normalize(scattered_direction)

    return scattered_direction, albedo, did_scatter, s
