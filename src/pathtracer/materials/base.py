"""Host-side material descriptions.

Materials form a closed set of variants. Each variant is a frozen (hashable)
dataclass validated at construction; ``MaterialType`` is the integer tag used
for dispatch inside kernels.

Example:
    >>> from pathtracer.materials.base import Dielectric, Lambertian, Metal
    >>> red = Lambertian(albedo=(0.7, 0.3, 0.3))
    >>> gold = Metal(albedo=(0.8, 0.6, 0.2), fuzz=0.3)
    >>> glass = Dielectric(refractive_index=1.5)
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Union

from pathtracer.config import coerce_vec3
from pathtracer.errors import ConfigurationError


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Used by the integrator to select the scattering function.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


def _validate_albedo(albedo: Any) -> tuple[float, float, float]:
    color = coerce_vec3(albedo, "albedo")
    for i, component in enumerate(color):
        if component < 0.0 or component > 1.0:
            raise ConfigurationError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )
    return color


def _to_float(value: Any, name: str) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from exc
    if not math.isfinite(result):
        raise ConfigurationError(f"{name} must be finite, got {result}")
    return result


@dataclass(frozen=True)
class Lambertian:
    """Ideal diffuse material.

    Attributes:
        albedo: Diffuse reflectance (RGB, each component in [0, 1]).
    """

    albedo: tuple[float, float, float]

    material_type = MaterialType.LAMBERTIAN

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", _validate_albedo(self.albedo))

    @property
    def param(self) -> float:
        """Scalar parameter stored in the material table (unused)."""
        return 0.0


@dataclass(frozen=True)
class Metal:
    """Specular reflector with optional fuzz.

    Attributes:
        albedo: Reflectance tint (RGB, each component in [0, 1]).
        fuzz: Radius of the random perturbation added to the mirror
            direction, in [0, 1]. 0 is a perfect mirror.
    """

    albedo: tuple[float, float, float]
    fuzz: float = 0.0

    material_type = MaterialType.METAL

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", _validate_albedo(self.albedo))
        fuzz = _to_float(self.fuzz, "fuzz")
        if fuzz < 0.0 or fuzz > 1.0:
            raise ConfigurationError(f"Metal fuzz must be in [0, 1], got {fuzz}")
        object.__setattr__(self, "fuzz", fuzz)

    @property
    def param(self) -> float:
        """Scalar parameter stored in the material table (the fuzz)."""
        return self.fuzz


@dataclass(frozen=True)
class Dielectric:
    """Clear refractive material such as glass or water.

    Attributes:
        refractive_index: Index of refraction relative to the surrounding
            medium. Common values: water 1.33, glass 1.5, diamond 2.4. Values
            below 1 model a bubble of air inside a denser medium.
    """

    refractive_index: float

    material_type = MaterialType.DIELECTRIC

    def __post_init__(self) -> None:
        ior = _to_float(self.refractive_index, "refractive_index")
        if ior <= 0.0:
            raise ConfigurationError(f"refractive_index must be positive, got {ior}")
        object.__setattr__(self, "refractive_index", ior)

    @property
    def albedo(self) -> tuple[float, float, float]:
        """Dielectrics do not absorb."""
        return (1.0, 1.0, 1.0)

    @property
    def param(self) -> float:
        """Scalar parameter stored in the material table (the index)."""
        return self.refractive_index


Material = Union[Lambertian, Metal, Dielectric]

_TYPE_NAMES = {
    "lambertian": MaterialType.LAMBERTIAN,
    "metal": MaterialType.METAL,
    "dielectric": MaterialType.DIELECTRIC,
}


def material_to_dict(material: Material) -> dict[str, Any]:
    """Export a material as a plain dictionary with a ``type`` key."""
    if isinstance(material, Lambertian):
        return {"type": "lambertian", "albedo": list(material.albedo)}
    if isinstance(material, Metal):
        return {"type": "metal", "albedo": list(material.albedo), "fuzz": material.fuzz}
    if isinstance(material, Dielectric):
        return {"type": "dielectric", "refractive_index": material.refractive_index}
    raise ConfigurationError(f"Unsupported material: {material!r}")


def material_from_dict(data: Mapping[str, Any]) -> Material:
    """Build a material from a dictionary produced by ``material_to_dict``.

    Args:
        data: Mapping with a ``type`` key ("lambertian", "metal" or
            "dielectric") and the variant's parameters.

    Returns:
        The validated material.

    Raises:
        ConfigurationError: On an unknown type, missing parameters or invalid
            values.
    """
    type_name = str(data.get("type", "")).lower()
    material_type = _TYPE_NAMES.get(type_name)
    if material_type is None:
        raise ConfigurationError(f"Unknown material type: {data.get('type')!r}")

    try:
        if material_type == MaterialType.LAMBERTIAN:
            return Lambertian(albedo=data["albedo"])
        if material_type == MaterialType.METAL:
            return Metal(albedo=data["albedo"], fuzz=data.get("fuzz", 0.0))
        return Dielectric(refractive_index=data["refractive_index"])
    except KeyError as exc:
        raise ConfigurationError(
            f"Material of type {type_name!r} is missing parameter {exc.args[0]!r}"
        ) from exc
