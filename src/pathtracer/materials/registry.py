"""Device-side material table.

All materials share one id space. Each entry stores the material tag, an
albedo and a single scalar parameter (metal fuzz or dielectric index of
refraction) in Taichi fields for lookup during scattering.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.materials.base import Lambertian
    >>> from pathtracer.materials.registry import add_material, clear_materials
    >>> clear_materials()
    >>> mat_id = add_material(Lambertian(albedo=(0.7, 0.3, 0.3)))
"""

import taichi as ti
import taichi.math as tm

from pathtracer.materials.base import Material

# Type alias for 3D vectors
vec3 = tm.vec3

# Maximum number of materials across all types
MAX_MATERIALS = 1024

# material_types[i] stores the MaterialType of material i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
# Fuzz for metals, index of refraction for dielectrics
material_params = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Remove all materials from the table."""
    num_materials[None] = 0


def add_material(material: Material) -> int:
    """Append a material to the table.

    Args:
        material: A validated Lambertian, Metal or Dielectric.

    Returns:
        The id of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    albedo = material.albedo
    material_types[idx] = int(material.material_type)
    material_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    material_params[idx] = material.param
    num_materials[None] = idx + 1
    return idx


def get_material_count() -> int:
    """Get the number of materials in the table."""
    return int(num_materials[None])


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the MaterialType tag of a material.

    Returns:
        The tag as an integer, or -1 for an invalid id.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_albedo(material_id: ti.i32) -> vec3:
    """Get the albedo of a material."""
    return material_albedos[material_id]


@ti.func
def get_material_param(material_id: ti.i32) -> ti.f32:
    """Get the scalar parameter (fuzz or index of refraction) of a material."""
    return material_params[material_id]
