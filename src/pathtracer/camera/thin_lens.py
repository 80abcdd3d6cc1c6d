"""Thin-lens camera model with depth of field.

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The viewport sits on the plane of perfect focus, ``focus_dist`` in front of
the lens. Rays start at a random point on a lens disk of radius
``aperture / 2`` and pass through the viewport point, so objects away from
the focus plane blur. An aperture of 0 is a pinhole camera.

All derived quantities are computed once at construction, on the host, with
NumPy; ``pathtracer.camera.rays.setup_camera`` copies them to the device.

Example:
    >>> from pathtracer.camera.thin_lens import ThinLensCamera
    >>> camera = ThinLensCamera(
    ...     lookfrom=(3.0, 3.0, 2.0),
    ...     lookat=(0.0, 0.0, -1.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     vfov=20.0,
    ...     aspect_ratio=16.0 / 9.0,
    ...     aperture=2.0,
    ...     focus_dist=5.2,
    ... )
    >>> camera.lens_radius
    1.0
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from pathtracer.config import coerce_vec3
from pathtracer.errors import ConfigurationError

Vec3 = tuple[float, float, float]


def _as_tuple(a: np.ndarray) -> Vec3:
    return float(a[0]), float(a[1]), float(a[2])


@dataclass(frozen=True)
class ThinLensCamera:
    """Configuration and derived geometry of a thin-lens camera.

    Attributes:
        lookfrom: Camera position in world space.
        lookat: Point the camera is looking at.
        vup: Up direction used to orient the camera (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees, in (0, 180).
        aspect_ratio: Width divided by height of the output image.
        aperture: Lens diameter. 0 gives a pinhole camera.
        focus_dist: Distance from the lens to the plane of perfect focus.
        origin: Lens center (equals lookfrom). Derived.
        u: Unit right vector. Derived.
        v: Unit up vector. Derived.
        w: Unit backward vector. Derived.
        horizontal: Full viewport width vector on the focus plane. Derived.
        vertical: Full viewport height vector on the focus plane. Derived.
        lower_left: Lower-left corner of the viewport. Derived.
        lens_radius: aperture / 2. Derived.
    """

    lookfrom: Vec3
    lookat: Vec3
    vup: Vec3
    vfov: float
    aspect_ratio: float
    aperture: float = 0.0
    focus_dist: float = 1.0

    origin: Vec3 = field(init=False, repr=False)
    u: Vec3 = field(init=False, repr=False)
    v: Vec3 = field(init=False, repr=False)
    w: Vec3 = field(init=False, repr=False)
    horizontal: Vec3 = field(init=False, repr=False)
    vertical: Vec3 = field(init=False, repr=False)
    lower_left: Vec3 = field(init=False, repr=False)
    lens_radius: float = field(init=False, repr=False)

    def __post_init__(self) -> None:
        lookfrom = coerce_vec3(self.lookfrom, "lookfrom")
        lookat = coerce_vec3(self.lookat, "lookat")
        vup = coerce_vec3(self.vup, "vup")
        vfov = self._number(self.vfov, "vfov")
        aspect_ratio = self._number(self.aspect_ratio, "aspect_ratio")
        aperture = self._number(self.aperture, "aperture")
        focus_dist = self._number(self.focus_dist, "focus_dist")

        if not 0.0 < vfov < 180.0:
            raise ConfigurationError(f"vfov must be in (0, 180) degrees, got {vfov}")
        if aspect_ratio <= 0.0:
            raise ConfigurationError(f"aspect_ratio must be positive, got {aspect_ratio}")
        if aperture < 0.0:
            raise ConfigurationError(f"aperture must be non-negative, got {aperture}")
        if focus_dist <= 0.0:
            raise ConfigurationError(f"focus_dist must be positive, got {focus_dist}")

        eye = np.array(lookfrom, dtype=np.float64)
        target = np.array(lookat, dtype=np.float64)
        up = np.array(vup, dtype=np.float64)

        # w points from lookat toward lookfrom (backward)
        w = eye - target
        w_len = np.linalg.norm(w)
        if w_len == 0.0:
            raise ConfigurationError("lookfrom and lookat must be different points")
        w = w / w_len

        # u points right (perpendicular to w and vup)
        u = np.cross(up, w)
        u_len = np.linalg.norm(u)
        if u_len < 1e-12 * max(np.linalg.norm(up), 1.0):
            raise ConfigurationError("vup must not be parallel to the view direction")
        u = u / u_len

        v = np.cross(w, u)

        h = math.tan(math.radians(vfov) / 2.0)
        viewport_height = 2.0 * h
        viewport_width = aspect_ratio * viewport_height

        horizontal = focus_dist * viewport_width * u
        vertical = focus_dist * viewport_height * v
        lower_left = eye - horizontal / 2.0 - vertical / 2.0 - focus_dist * w

        values: dict[str, Any] = {
            "lookfrom": lookfrom,
            "lookat": lookat,
            "vup": vup,
            "vfov": vfov,
            "aspect_ratio": aspect_ratio,
            "aperture": aperture,
            "focus_dist": focus_dist,
            "origin": lookfrom,
            "u": _as_tuple(u),
            "v": _as_tuple(v),
            "w": _as_tuple(w),
            "horizontal": _as_tuple(horizontal),
            "vertical": _as_tuple(vertical),
            "lower_left": _as_tuple(lower_left),
            "lens_radius": aperture / 2.0,
        }
        for name, value in values.items():
            object.__setattr__(self, name, value)

    @staticmethod
    def _number(value: Any, name: str) -> float:
        try:
            result = float(value)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"{name} must be a number, got {value!r}") from exc
        if not math.isfinite(result):
            raise ConfigurationError(f"{name} must be finite, got {result}")
        return result

    def ray_through(self, s: float, t: float) -> tuple[Vec3, Vec3]:
        """Compute the pinhole ray through viewport coordinates on the host.

        Ignores the lens; useful for checks and previews.

        Args:
            s: Horizontal coordinate in [0, 1] (left to right).
            t: Vertical coordinate in [0, 1] (bottom to top).

        Returns:
            Tuple of (origin, unit direction).
        """
        origin = np.array(self.origin)
        target = (
            np.array(self.lower_left)
            + s * np.array(self.horizontal)
            + t * np.array(self.vertical)
        )
        direction = target - origin
        direction = direction / np.linalg.norm(direction)
        return self.origin, _as_tuple(direction)

    def to_dict(self) -> dict[str, Any]:
        """Export the construction parameters."""
        return {
            "lookfrom": list(self.lookfrom),
            "lookat": list(self.lookat),
            "vup": list(self.vup),
            "vfov": self.vfov,
            "aspect_ratio": self.aspect_ratio,
            "aperture": self.aperture,
            "focus_dist": self.focus_dist,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ThinLensCamera:
        """Build a camera from a dictionary produced by ``to_dict``.

        Raises:
            ConfigurationError: On missing or unknown keys, or invalid values.
        """
        required = {"lookfrom", "lookat", "vup", "vfov", "aspect_ratio"}
        allowed = required | {"aperture", "focus_dist"}
        missing = required - set(data)
        if missing:
            raise ConfigurationError(f"Camera is missing parameters: {sorted(missing)}")
        unknown = set(data) - allowed
        if unknown:
            raise ConfigurationError(f"Unknown camera parameters: {sorted(unknown)}")
        return cls(**data)
