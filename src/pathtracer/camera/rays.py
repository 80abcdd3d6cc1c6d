"""Device-side camera state and primary ray generation.

``setup_camera`` copies a ThinLensCamera's derived geometry into Taichi
fields; ``get_ray`` and ``get_ray_jittered`` build primary rays inside
kernels.

Image coordinates are normalized:
    s in [0, 1]: left to right across the image
    t in [0, 1]: bottom to top across the image

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.camera.rays import get_ray, setup_camera
    >>> setup_camera(camera)
    >>> @ti.kernel
    ... def center_ray() -> ti.math.vec3:
    ...     ray, state = get_ray(0.5, 0.5, ti.u32(1))
    ...     return ray.direction
"""

import taichi as ti
import taichi.math as tm

from pathtracer.camera.thin_lens import ThinLensCamera
from pathtracer.core.ray import Ray, normalize, random_in_unit_disk
from pathtracer.core.rng import random_float

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())
_lens_radius = ti.field(dtype=ti.f32, shape=())


def setup_camera(camera: ThinLensCamera) -> None:
    """Copy a camera's derived geometry into the device fields.

    Must be called before rendering and whenever the camera changes.

    Args:
        camera: The validated camera description.
    """
    _camera_origin[None] = vec3(*camera.origin)
    _camera_u[None] = vec3(*camera.u)
    _camera_v[None] = vec3(*camera.v)
    _viewport_horizontal[None] = vec3(*camera.horizontal)
    _viewport_vertical[None] = vec3(*camera.vertical)
    _lower_left_corner[None] = vec3(*camera.lower_left)
    _lens_radius[None] = camera.lens_radius


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_ray(s: ti.f32, t: ti.f32, state: ti.u32):
    """Generate a primary ray through normalized image coordinates.

    With a non-zero lens radius the origin is offset by a random point on
    the lens disk, so every ray through (s, t) converges on the focus plane.

    Args:
        s: Horizontal coordinate in [0, 1] (left to right).
        t: Vertical coordinate in [0, 1] (bottom to top).
        state: The caller's generator state.

    Returns:
        A tuple (ray, new_state); the ray direction is unit length.
    """
    origin = _camera_origin[None]
    radius = _lens_radius[None]
    s_out = state

    offset = vec3(0.0, 0.0, 0.0)
    if radius > 0.0:
        disk, s_out = random_in_unit_disk(s_out)
        rd = radius * disk
        offset = _camera_u[None] * rd.x + _camera_v[None] * rd.y

    target = _lower_left_corner[None] + s * _viewport_horizontal[None] + t * _viewport_vertical[None]
    ray_origin = origin + offset
    direction = normalize(target - ray_origin)

    return Ray(origin=ray_origin, direction=direction), s_out


@ti.func
def get_ray_jittered(pixel_x: ti.i32, pixel_y: ti.i32, width: ti.i32, height: ti.i32, state: ti.u32):
    """Generate a ray through a random point inside a pixel.

    Args:
        pixel_x: Pixel column (0 = left).
        pixel_y: Pixel row (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.
        state: The caller's generator state.

    Returns:
        A tuple (ray, new_state).
    """
    jitter_x, s = random_float(state)
    jitter_y, s = random_float(s)

    u = (ti.cast(pixel_x, ti.f32) + jitter_x) / ti.cast(width, ti.f32)
    # Row 0 is the top of the image, t = 1 the top of the viewport
    v = (ti.cast(height - 1 - pixel_y, ti.f32) + jitter_y) / ti.cast(height, ti.f32)

    return get_ray(u, v, s)


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Read back the device camera state for debugging."""
    names = {
        "origin": _camera_origin,
        "u": _camera_u,
        "v": _camera_v,
        "horizontal": _viewport_horizontal,
        "vertical": _viewport_vertical,
        "lower_left": _lower_left_corner,
    }
    info = {}
    for name, field in names.items():
        vec = field[None]
        info[name] = (float(vec[0]), float(vec[1]), float(vec[2]))
    return info
