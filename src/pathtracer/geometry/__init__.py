"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive, hit records and ray-sphere intersection
"""

from .sphere import Face, HitRecord, Sphere, hit_sphere, make_hit_record, make_miss_record

__all__ = [
    "Face",
    "HitRecord",
    "Sphere",
    "hit_sphere",
    "make_hit_record",
    "make_miss_record",
]
