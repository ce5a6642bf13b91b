"""Geometry module.

Components:
    sphere: Sphere primitive, hit records and ray-sphere intersection

Intersection routines are Taichi functions (@ti.func) and report a miss
rather than raising.
"""

from .sphere import HitRecord, Sphere, hit_sphere, make_miss_record, make_sphere

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "make_miss_record",
]
