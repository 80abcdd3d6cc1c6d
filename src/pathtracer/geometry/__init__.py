"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with ray-sphere intersection

Intersection routines are Taichi functions (@ti.func) returning a HitRecord.
"""

from .sphere import HitRecord, Sphere, SphereInfo, hit_sphere, make_sphere_info

__all__ = [
    "Sphere",
    "SphereInfo",
    "HitRecord",
    "hit_sphere",
    "make_sphere_info",
]
