"""Path tracing integrator for Monte Carlo light transport.

This module implements the path tracer itself: material dispatch, the
iterative ``ray_color`` estimator, the sky background and the kernel that
renders a band of image rows.

A path starts at the camera and bounces off surfaces according to their
material until it escapes to the sky, is absorbed, or runs out of depth.
Light only comes from the sky, so the radiance of a path is the product of
the attenuations along it times the background color where it escapes:

    color = throughput * background(direction)  on escape
    color = 0                                   when absorbed or out of depth

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.integrator import render_rows
    >>> from pathtracer.camera.rays import setup_camera
    >>> from pathtracer.scene.intersection import upload_scene
    >>> upload_scene(scene)
    >>> setup_camera(camera)
    >>> rows = render_rows(0, 16, width=64, height=64, samples_per_pixel=16, max_depth=10)
"""

import numpy as np
import taichi as ti
import taichi.math as tm

from pathtracer.camera.rays import get_ray_jittered
from pathtracer.config import DEFAULT_BACKGROUND_BOTTOM, DEFAULT_BACKGROUND_TOP
from pathtracer.core.ray import normalize
from pathtracer.core.rng import seed_stream
from pathtracer.materials.base import MaterialType
from pathtracer.materials.dielectric import scatter_dielectric
from pathtracer.materials.lambertian import scatter_lambertian
from pathtracer.materials.metal import scatter_metal
from pathtracer.materials.registry import (
    get_material_albedo,
    get_material_param,
    get_material_type,
)
from pathtracer.scene.intersection import T_MAX, T_MIN, intersect_scene

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Background
# =============================================================================

_background_bottom = ti.Vector.field(3, dtype=ti.f32, shape=())
_background_top = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_background(
    bottom: tuple[float, float, float],
    top: tuple[float, float, float],
) -> None:
    """Set the sky gradient.

    Args:
        bottom: Color seen by rays pointing straight down.
        top: Color seen by rays pointing straight up.
    """
    _background_bottom[None] = vec3(bottom[0], bottom[1], bottom[2])
    _background_top[None] = vec3(top[0], top[1], top[2])


def reset_background() -> None:
    """Restore the default sky gradient."""
    setup_background(DEFAULT_BACKGROUND_BOTTOM, DEFAULT_BACKGROUND_TOP)


@ti.func
def background_color(direction: vec3) -> vec3:
    """Sky color for an escaping ray.

    Blends linearly between the bottom and top colors by the height of the
    unit direction: a = 0.5 * (unit.y + 1).
    """
    unit = normalize(direction)
    a = 0.5 * (unit.y + 1.0)
    return (1.0 - a) * _background_bottom[None] + a * _background_top[None]


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    state: ti.u32,
):
    """Dispatch to the scattering function of the hit material.

    Args:
        material_id: The material id from the hit record.
        incident_direction: The incoming ray direction.
        normal: The unit surface normal, facing the incoming ray.
        front_face: 1 if hit front face, 0 if back face.
        state: The caller's generator state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, new_state).
        Unknown material ids absorb the ray.
    """
    mat_type = get_material_type(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0
    s = state

    if mat_type == int(MaterialType.LAMBERTIAN):
        albedo = get_material_albedo(material_id)
        scattered_direction, attenuation, s = scatter_lambertian(albedo, normal, s)
        did_scatter = 1

    elif mat_type == int(MaterialType.METAL):
        albedo = get_material_albedo(material_id)
        fuzz = get_material_param(material_id)
        scattered_direction, attenuation, did_scatter, s = scatter_metal(
            albedo, fuzz, incident_direction, normal, s
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        ior = get_material_param(material_id)
        scattered_direction, attenuation, did_scatter, s = scatter_dielectric(
            ior, incident_direction, normal, front_face, s
        )

    return scattered_direction, attenuation, did_scatter, s


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def trace_path(origin: vec3, direction: vec3, max_depth: ti.i32, state: ti.u32):
    """Trace a single path through the scene.

    Args:
        origin: Ray origin.
        direction: Ray direction (any non-zero length).
        max_depth: Maximum number of path segments. 0 or less yields black.
        state: The caller's generator state.

    Returns:
        A tuple (color, segments, new_state) where segments is the number of
        scene intersection tests performed (at most max_depth).
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    ray_origin = origin
    ray_direction = direction
    s = state
    segments = 0

    # Taichi doesn't support break in ti.func loops
    active = 1

    for _ in range(max_depth):
        if active == 1:
            segments += 1
            rec = intersect_scene(ray_origin, ray_direction, T_MIN, T_MAX)

            if rec.hit == 0:
                color = throughput * background_color(ray_direction)
                active = 0
            else:
                scattered, attenuation, did_scatter, s = _scatter_material(
                    rec.material_id, ray_direction, rec.normal, rec.front_face, s
                )
                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    ray_origin = rec.point
                    ray_direction = scattered

    return color, segments, s


@ti.func
def ray_color(origin: vec3, direction: vec3, max_depth: ti.i32, state: ti.u32):
    """Estimate the radiance arriving along a ray.

    Returns:
        A tuple (color, new_state).
    """
    color, segments, s = trace_path(origin, direction, max_depth, state)
    return color, s


@ti.func
def _sanitize(color: vec3) -> vec3:
    """Replace NaN or infinite channels with zero."""
    result = color
    for c in ti.static(range(3)):
        if tm.isnan(result[c]) or tm.isinf(result[c]):
            result[c] = 0.0
    return result


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_rows(
    out: ti.types.ndarray(dtype=ti.f32, ndim=3),
    row_start: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    seed: ti.u32,
):
    """Render rows [row_start, row_start + out.shape[0]) into out.

    Row 0 is the top of the image. Every pixel draws from its own random
    stream keyed by its linear index, so results do not depend on how the
    image is split into row bands.
    """
    for r, i in ti.ndrange(out.shape[0], width):
        j = row_start + r
        state = seed_stream(seed, ti.cast(j * width + i, ti.u32))

        total = vec3(0.0, 0.0, 0.0)
        for _ in range(samples_per_pixel):
            ray, state = get_ray_jittered(i, j, width, height, state)
            sample, state = ray_color(ray.origin, ray.direction, max_depth, state)
            total += _sanitize(sample)

        mean = total / ti.cast(samples_per_pixel, ti.f32)
        # Gamma 2
        pixel = tm.sqrt(tm.clamp(mean, 0.0, 1.0))
        for c in ti.static(range(3)):
            out[r, i, c] = pixel[c]


def render_rows(
    row_start: int,
    row_end: int,
    width: int,
    height: int,
    samples_per_pixel: int,
    max_depth: int,
    seed: int = 0,
) -> np.ndarray:
    """Render a band of rows with the currently uploaded scene and camera.

    Args:
        row_start: First row to render (0 = top).
        row_end: One past the last row to render.
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Samples averaged per pixel.
        max_depth: Maximum path segments per sample.
        seed: Render seed in [0, 2**32).

    Returns:
        Gamma-corrected colors in [0, 1], shape (row_end - row_start, width, 3).
    """
    out = np.zeros((row_end - row_start, width, 3), dtype=np.float32)
    _render_rows(out, row_start, width, height, samples_per_pixel, max_depth, seed)
    return out


@ti.kernel
def _trace_single_ray(origin: vec3, direction: vec3, max_depth: ti.i32, seed: ti.u32) -> vec3:
    state = seed_stream(seed, ti.u32(0))
    color, state = ray_color(origin, direction, max_depth, state)
    return color


@ti.kernel
def _count_path_segments(origin: vec3, direction: vec3, max_depth: ti.i32, seed: ti.u32) -> ti.i32:
    state = seed_stream(seed, ti.u32(0))
    color, segments, state = trace_path(origin, direction, max_depth, state)
    return segments


def trace_single_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int,
    seed: int = 0,
) -> tuple[float, float, float]:
    """Trace one path from the host, without gamma or clamping.

    Useful for testing and debugging the integrator.

    Returns:
        Tuple of (R, G, B) radiance.
    """
    color = _trace_single_ray(vec3(*origin), vec3(*direction), max_depth, seed)
    return (float(color[0]), float(color[1]), float(color[2]))


def count_path_segments(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int,
    seed: int = 0,
) -> int:
    """Number of segments traced for one path (at most max_depth)."""
    return int(_count_path_segments(vec3(*origin), vec3(*direction), max_depth, seed))


reset_background()
