"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with ray-sphere intersection

The intersection routine is a Taichi function (@ti.func) so it can be
evaluated for many rays in parallel. It follows the pattern:
    record = hit_sphere(ray_origin, ray_direction, sphere, t_min, t_max)
"""

from .sphere import HitRecord, Sphere, hit_sphere, make_sphere

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
]
