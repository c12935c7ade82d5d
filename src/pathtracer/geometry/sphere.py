"""Sphere primitive with ray-sphere intersection.

The sphere is the only surface primitive. Its radius is signed: a negative
radius flips the outward normal, which turns the sphere into a hollow shell
when nested inside a larger sphere of the same dielectric material.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.geometry.sphere import Sphere, HitRecord, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.vector import vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and signed radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere. Negative values invert the
            surface so its normals point toward the center.
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-sphere intersection.

    Attributes:
        hit: Whether the ray intersected the sphere (1 if hit, 0 if miss).
        t: The ray parameter of the intersection. Only valid if hit == 1.
        point: The 3D point where the ray intersected the sphere.
            Only valid if hit == 1.
        normal: The unit surface normal at the intersection point, always
            oriented against the incoming ray. Only valid if hit == 1.
        front_face: 1 if the geometric outward normal already opposed the
            ray (the ray arrives from outside), 0 otherwise.
            Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection inside the window [t_min, t_max].

    The intersection is found by solving:
        |ray_origin + t * ray_direction - center|^2 = radius^2

    which expands to the quadratic equation a*t^2 + 2*half_b*t + c = 0 with:
        a = dot(direction, direction)
        half_b = dot(oc, direction)
        c = dot(oc, oc) - radius^2
        oc = origin - center

    The smaller root is preferred; the larger one is only used when the
    smaller falls outside the window (e.g. the ray starts inside the sphere).

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (any non-zero length).
        sphere: The sphere to test intersection against.
        t_min: Minimum accepted t (inclusive).
        t_max: Maximum accepted t (inclusive).

    Returns:
        A HitRecord containing intersection information. Check the hit field
        to determine if intersection occurred.
    """
    oc = ray_origin - sphere.center

    a = tm.dot(ray_direction, ray_direction)
    half_b = tm.dot(oc, ray_direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius

    discriminant = half_b * half_b - a * c

    # Initialize result fields (Taichi requires outer-scope declaration)
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    is_front_face = 0

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        root = (-half_b - sqrt_d) / a
        valid = root >= t_min and root <= t_max

        if not valid:
            root = (-half_b + sqrt_d) / a
            valid = root >= t_min and root <= t_max

        if valid:
            did_hit = 1
            hit_t = root
            hit_point = ray_origin + root * ray_direction

            # Dividing by the signed radius flips the normal of hollow spheres
            outward_normal = (hit_point - sphere.center) / sphere.radius

            if tm.dot(ray_direction, outward_normal) < 0.0:
                is_front_face = 1
                hit_normal = outward_normal
            else:
                is_front_face = 0
                hit_normal = -outward_normal

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        front_face=is_front_face,
    )


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and signed radius inside a Taichi kernel."""
    return Sphere(center=center, radius=radius)
