"""Materials module for surface scattering models.

Components:
    base: Host-side material descriptions and the MaterialType tag
    lambertian: Ideal diffuse reflection
    metal: Specular reflection with optional fuzz
    dielectric: Glass-like materials with refraction (Schlick Fresnel)
    registry: Device-side material table (import after ti.init)

Each scatter function takes the caller's random state and returns
(direction, attenuation, [did_scatter,] new_state).
"""

from .base import (
    Dielectric,
    Lambertian,
    Material,
    MaterialType,
    Metal,
    material_from_dict,
    material_to_dict,
)
from .dielectric import scatter_dielectric, will_reflect
from .lambertian import scatter_lambertian
from .metal import scatter_metal

__all__ = [
    "Material",
    "MaterialType",
    "Lambertian",
    "Metal",
    "Dielectric",
    "material_from_dict",
    "material_to_dict",
    "scatter_lambertian",
    "scatter_metal",
    "scatter_dielectric",
    "will_reflect",
]
