"""Geometry module: the sphere primitive and its intersection routine.

Components:
    sphere: SphereShape, HitRecord and the ray-sphere intersection test

Intersection runs inside Taichi kernels. Spheres are the only primitive;
scenes are small enough that a linear scan over them (see
``skytrace.scene.intersection``) replaces any acceleration structure.
"""

from .sphere import HIT_EPSILON, HitRecord, SphereShape, hit_sphere, make_miss_record, make_sphere

__all__ = [
    "HIT_EPSILON",
    "SphereShape",
    "HitRecord",
    "hit_sphere",
    "make_miss_record",
    "make_sphere",
]
