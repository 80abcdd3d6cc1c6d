"""Monte Carlo path tracer for sphere scenes, built on Taichi.

This package renders images by tracing randomized light paths through a scene
of spheres with diffuse, metallic and glass materials:
- Sphere intersection with front-face normal orientation
- Lambertian, Metal (fuzzy reflection) and Dielectric (refraction) materials
- Thin-lens camera with optional depth of field
- Chunked, resumable, cancellable per-pixel sampling loop

Subpackages:
    core: Vector/ray math, random streams, integrator, renderer, image buffer
    geometry: Sphere primitive and intersection
    materials: Material variants and their device-side storage
    scene: Scene description, scene storage and preset scenes
    camera: Camera description and primary ray generation
    output: Export helpers for finished images

Modules holding Taichi fields are imported lazily; call
``pathtracer.config.init_backend()`` (or ``ti.init``) before rendering.
"""

__version__ = "0.1.0"
