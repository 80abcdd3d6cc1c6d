"""Ready-made scenes.

Each factory returns a ``(Scene, ThinLensCamera)`` pair. Scenes are plain
host-side descriptions, so the factories can run before Taichi is
initialised.

Example:
    >>> from pathtracer.scene.presets import create_three_spheres_scene
    >>> scene, camera = create_three_spheres_scene(aspect_ratio=16 / 9)
    >>> len(scene)
    4
"""

import numpy as np

from pathtracer.camera.thin_lens import ThinLensCamera
from pathtracer.materials.base import Dielectric, Lambertian, Metal
from pathtracer.scene.manager import Scene

# =============================================================================
# Scene Constants
# =============================================================================

RED_ALBEDO = (0.7, 0.3, 0.3)
GROUND_ALBEDO = (0.8, 0.8, 0.0)
BIG_GROUND_ALBEDO = (0.5, 0.5, 0.5)
DIFFUSE_SPHERE_ALBEDO = (0.1, 0.2, 0.5)
GLASS_IOR = 1.5
METAL_ALBEDO = (0.8, 0.6, 0.2)
METAL_FUZZ = 0.0

DEFAULT_ASPECT_RATIO = 16.0 / 9.0


# =============================================================================
# Scene Factories
# =============================================================================


def create_single_sphere_scene(
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> tuple[Scene, ThinLensCamera]:
    """Create the smallest useful scene: one red diffuse sphere.

    The sphere sits at (0, 0, -1) with radius 0.5, in front of a camera at
    the origin looking down -Z.
    """
    scene = Scene()
    scene.add_sphere((0.0, 0.0, -1.0), 0.5, Lambertian(RED_ALBEDO))

    camera = ThinLensCamera(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=aspect_ratio,
    )
    return scene, camera


def create_three_spheres_scene(
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
    aperture: float = 0.0,
) -> tuple[Scene, ThinLensCamera]:
    """Create a ground plane with a glass, a diffuse and a metal sphere.

    Args:
        aspect_ratio: Camera aspect ratio (width / height).
        aperture: Lens diameter. The focus plane passes through the center
            sphere.
    """
    scene = Scene()

    # Ground: a huge sphere below the others
    scene.add_sphere((0.0, -100.5, -1.0), 100.0, Lambertian(GROUND_ALBEDO))
    scene.add_sphere((0.0, 0.0, -1.0), 0.5, Lambertian(DIFFUSE_SPHERE_ALBEDO))
    scene.add_sphere((-1.0, 0.0, -1.0), 0.5, Dielectric(GLASS_IOR))
    scene.add_sphere((1.0, 0.0, -1.0), 0.5, Metal(METAL_ALBEDO, METAL_FUZZ))

    lookfrom = (-2.0, 2.0, 1.0)
    lookat = (0.0, 0.0, -1.0)
    focus_dist = float(np.linalg.norm(np.subtract(lookfrom, lookat)))

    camera = ThinLensCamera(
        lookfrom=lookfrom,
        lookat=lookat,
        vup=(0.0, 1.0, 0.0),
        vfov=40.0,
        aspect_ratio=aspect_ratio,
        aperture=aperture,
        focus_dist=focus_dist,
    )
    return scene, camera


def create_random_spheres_scene(
    seed: int = 0,
    grid: int = 11,
    aspect_ratio: float = 3.0 / 2.0,
) -> tuple[Scene, ThinLensCamera]:
    """Create the classic cover scene: many small random spheres.

    Small spheres are scattered on a ``(2 * grid) x (2 * grid)`` lattice
    with jitter. Materials are 80% diffuse, 15% metal and 5% glass. Three
    large feature spheres sit in the middle and the camera has a small
    aperture for depth of field.

    Args:
        seed: Seed for the scene layout.
        grid: Half-width of the lattice; 11 gives up to 484 small spheres.
        aspect_ratio: Camera aspect ratio (width / height).
    """
    rng = np.random.default_rng(seed)
    scene = Scene()

    scene.add_sphere((0.0, -1000.0, 0.0), 1000.0, Lambertian(BIG_GROUND_ALBEDO))

    keep_clear = np.array([4.0, 0.2, 0.0])
    for a in range(-grid, grid):
        for b in range(-grid, grid):
            choose_mat = rng.random()
            center = np.array([a + 0.9 * rng.random(), 0.2, b + 0.9 * rng.random()])

            if np.linalg.norm(center - keep_clear) <= 0.9:
                continue

            if choose_mat < 0.8:
                albedo = rng.random(3) * rng.random(3)
                material = Lambertian(tuple(albedo))
            elif choose_mat < 0.95:
                albedo = rng.uniform(0.5, 1.0, 3)
                material = Metal(tuple(albedo), float(rng.uniform(0.0, 0.5)))
            else:
                material = Dielectric(GLASS_IOR)
            scene.add_sphere(tuple(center), 0.2, material)

    scene.add_sphere((0.0, 1.0, 0.0), 1.0, Dielectric(GLASS_IOR))
    scene.add_sphere((-4.0, 1.0, 0.0), 1.0, Lambertian((0.4, 0.2, 0.1)))
    scene.add_sphere((4.0, 1.0, 0.0), 1.0, Metal((0.7, 0.6, 0.5), 0.0))

    camera = ThinLensCamera(
        lookfrom=(13.0, 2.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=0.1,
        focus_dist=10.0,
    )
    return scene, camera


PRESETS = {
    "single": create_single_sphere_scene,
    "three": create_three_spheres_scene,
    "random": create_random_spheres_scene,
}
