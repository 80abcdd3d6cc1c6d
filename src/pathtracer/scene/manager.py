"""Host-side scene description.

A Scene is an ordered list of spheres, each carrying its material. Scenes
are plain Python objects: several can exist at once, and one is copied into
the device fields only when a render starts (see
``pathtracer.scene.intersection.upload_scene``).

Materials are shared by value: equal materials collapse into one entry of
the material table on export and upload.

Example:
    >>> from pathtracer.materials.base import Dielectric, Lambertian
    >>> from pathtracer.scene.manager import Scene
    >>> scene = Scene()
    >>> scene.add_sphere((0, -100.5, -1), 100, Lambertian((0.8, 0.8, 0.0)))
    >>> scene.add_sphere((0, 0, -1), 0.5, Dielectric(1.5))
    >>> len(scene)
    2
"""

from __future__ import annotations

import numbers
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from pathtracer.errors import ConfigurationError
from pathtracer.geometry.sphere import SphereInfo
from pathtracer.materials.base import Material, material_from_dict, material_to_dict


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material configurations, indexed by material id.
        spheres: List of sphere configurations referencing material ids.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


class Scene:
    """Ordered collection of spheres.

    Attributes:
        spheres: The spheres in insertion order.
    """

    def __init__(self, spheres: Iterable[SphereInfo] = ()) -> None:
        """Initialize a scene, optionally with spheres."""
        self.spheres: list[SphereInfo] = []
        for sphere in spheres:
            self.add(sphere)

    def __len__(self) -> int:
        return len(self.spheres)

    def __iter__(self) -> Iterator[SphereInfo]:
        return iter(self.spheres)

    def __repr__(self) -> str:
        return f"Scene(spheres={len(self.spheres)}, materials={len(self.materials())})"

    def clear(self) -> None:
        """Remove every sphere."""
        self.spheres.clear()

    # =========================================================================
    # Building
    # =========================================================================

    def add(self, hittable: Union[SphereInfo, Scene]) -> None:
        """Append a hittable to the scene.

        Args:
            hittable: A SphereInfo, or another Scene whose spheres are
                appended in order.

        Raises:
            ConfigurationError: If the object is not a sphere or a scene.
        """
        if isinstance(hittable, SphereInfo):
            self.spheres.append(hittable)
        elif isinstance(hittable, Scene):
            if hittable is self:
                raise ConfigurationError("A scene cannot be added to itself")
            self.spheres.extend(hittable.spheres)
        else:
            raise ConfigurationError(
                f"Only spheres and scenes can be added to a scene, got {type(hittable).__name__}"
            )

    def add_sphere(
        self,
        center: Iterable[float],
        radius: float,
        material: Material,
    ) -> SphereInfo:
        """Create a sphere and append it.

        Returns:
            The validated SphereInfo that was added.

        Raises:
            ConfigurationError: If the radius is not positive or the center
                is invalid.
        """
        sphere = SphereInfo(center=tuple(center), radius=radius, material=material)
        self.spheres.append(sphere)
        return sphere

    # =========================================================================
    # Materials
    # =========================================================================

    def materials(self) -> list[Material]:
        """Distinct materials in order of first use."""
        return self.material_table()[0]

    def material_ids(self) -> list[int]:
        """Material id of each sphere, indexing into ``materials()``."""
        return self.material_table()[1]

    def material_table(self) -> tuple[list[Material], list[int]]:
        """Deduplicated material table and the per-sphere ids into it.

        Returns:
            Tuple of (materials, ids) with ``ids[i]`` the material id of
            ``spheres[i]``.
        """
        table: list[Material] = []
        index: dict[Material, int] = {}
        ids: list[int] = []
        for sphere in self.spheres:
            mat_id = index.get(sphere.material)
            if mat_id is None:
                mat_id = len(table)
                index[sphere.material] = mat_id
                table.append(sphere.material)
            ids.append(mat_id)
        return table, ids

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        table, ids = self.material_table()
        config = SceneConfig()
        config.materials = [material_to_dict(mat) for mat in table]
        for sphere, mat_id in zip(self.spheres, ids):
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": mat_id,
                }
            )
        return config

    @classmethod
    def from_config(cls, config: SceneConfig) -> Scene:
        """Build a scene from a configuration object.

        Raises:
            ConfigurationError: If a material is invalid or a sphere refers to
                a material id that does not exist.
        """
        table = [material_from_dict(mat) for mat in config.materials]
        scene = cls()
        for i, sphere_config in enumerate(config.spheres):
            try:
                center = sphere_config["center"]
                radius = sphere_config["radius"]
                material_id = sphere_config.get("material_id", 0)
            except (KeyError, TypeError) as exc:
                raise ConfigurationError(f"Sphere {i} is malformed: {sphere_config!r}") from exc
            if isinstance(material_id, bool) or not isinstance(material_id, numbers.Integral):
                raise ConfigurationError(f"Sphere {i} material_id must be an integer")
            if not 0 <= material_id < len(table):
                raise ConfigurationError(
                    f"Sphere {i} refers to material {material_id}, "
                    f"but only {len(table)} materials are defined"
                )
            scene.add_sphere(center, radius, table[material_id])
        return scene

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {"materials": config.materials, "spheres": config.spheres}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Scene:
        """Build a scene from a dictionary with 'materials' and 'spheres' keys."""
        unknown = set(data) - {"materials", "spheres"}
        if unknown:
            raise ConfigurationError(f"Unknown scene keys: {sorted(unknown)}")
        config = SceneConfig(
            materials=list(data.get("materials", [])),
            spheres=list(data.get("spheres", [])),
        )
        return cls.from_config(config)
