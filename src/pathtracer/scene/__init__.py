"""Scene module for scene description and ray-scene queries.

Components:
    manager: Host-side Scene holding spheres and their materials
    presets: Ready-made scenes with matching cameras
    intersection: Device-side sphere storage and closest-hit search
        (import after ti.init)
"""

from .manager import Scene, SceneConfig
from .presets import (
    PRESETS,
    create_random_spheres_scene,
    create_single_sphere_scene,
    create_three_spheres_scene,
)

__all__ = [
    "Scene",
    "SceneConfig",
    "PRESETS",
    "create_single_sphere_scene",
    "create_three_spheres_scene",
    "create_random_spheres_scene",
]
