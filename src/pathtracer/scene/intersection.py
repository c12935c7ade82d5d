"""Scene-level ray intersection testing.

The scene stores its spheres in Taichi fields (Structure-of-Arrays layout) and
resolves the closest hit along a ray with a linear scan. Each sphere carries a
material ID used by the integrator to dispatch scattering.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.scene.intersection import (
    ...     SceneHitRecord, add_sphere, intersect_scene, clear_scene
    ... )
    >>> clear_scene()
    >>> add_sphere(vec3(0, 0, -1), 0.5, material_id=0)
    >>> add_sphere(vec3(0, -100.5, -1), 100.0, material_id=1)
    >>> # Use intersect_scene within a Taichi kernel
"""

import logging

import taichi as ti

from pathtracer.core.vector import vec3
from pathtracer.geometry.sphere import HitRecord, Sphere, hit_sphere

logger = logging.getLogger(__name__)


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with material information.

    Extends the basic HitRecord with material_id for scene-level queries.

    Attributes:
        hit: Whether the ray intersected any sphere (1 if hit, 0 if miss).
        t: The ray parameter of the closest intersection.
        point: The 3D point of the closest intersection.
        normal: The unit surface normal, oriented against the incoming ray.
        front_face: Whether the ray hit the outside (1) or inside (0).
        material_id: The material ID of the hit sphere; -1 for a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout for GPU efficiency
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all spheres from the scene.

    Resets the sphere count to zero. The field data is overwritten when new
    spheres are added.
    """
    num_spheres[None] = 0


def add_sphere(center: vec3, radius: float, material_id: int = 0) -> int:
    """Append a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The signed radius of the sphere (negative for hollow shells).
        material_id: The material ID to associate with this sphere.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
        ValueError: If the radius is zero.
    """
    if radius == 0.0:
        raise ValueError("Sphere radius must be non-zero")

    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = center
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    logger.debug("Added sphere %d (radius=%s, material_id=%d)", idx, radius, material_id)
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def _hit_record_to_scene_hit_record(rec: HitRecord, material_id: ti.i32) -> SceneHitRecord:
    """Attach a material ID to a primitive hit record."""
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        front_face=rec.front_face,
        material_id=material_id,
    )


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> SceneHitRecord:
    """Find the closest sphere hit along a ray.

    Scans every sphere once. After each accepted hit the upper bound of the
    window shrinks to that hit's t, so a later sphere only wins when it is
    no farther away. The result does not depend on insertion order except
    for exact ties, where the later sphere is reported.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        t_min: Minimum t value to consider a valid hit.
        t_max: Maximum t value to consider a valid hit.

    Returns:
        A SceneHitRecord containing the closest intersection, or a miss
        record if no intersection was found.
    """
    closest_t = t_max
    result = _make_miss_record()

    for i in range(num_spheres[None]):
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = _hit_record_to_scene_hit_record(rec, sphere_material_ids[i])

    return result
