"""Lambertian (ideal diffuse) material implementation.

A diffuse surface scatters every incoming ray. The new direction is the
surface normal plus a random unit vector, which distributes scattered rays
proportionally to the cosine of the angle from the normal. The attenuation is
the surface albedo.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.materials.lambertian import scatter_lambertian
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation = scatter_lambertian(albedo, normal)
"""

import logging

import taichi as ti

from pathtracer.core.vector import near_zero, random_unit_vector, vec3

logger = logging.getLogger(__name__)


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3):
    """Sample a scattered ray direction for a Lambertian surface.

    When the random unit vector almost exactly cancels the normal, the sum is
    too close to zero to use as a direction; the normal itself is used
    instead.

    Args:
        albedo: The diffuse reflectance color (RGB, each component in [0, 1]).
        normal: The unit surface normal at the hit point.

    Returns:
        A tuple of (scattered_direction, attenuation) where the direction is
        not normalized and the attenuation equals the albedo.
    """
    scattered_direction = normal + random_unit_vector()

    if near_zero(scattered_direction):
        scattered_direction = normal

    return scattered_direction, albedo


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Lambertian materials in the scene
MAX_LAMBERTIAN_MATERIALS = 1024

# Storage for Lambertian material properties
lambertian_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    """Clear all Lambertian materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_lambertian_materials[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Add a Lambertian material to the material registry.

    Args:
        albedo: The diffuse reflectance color as (R, G, B) tuple.
            Each component must be in [0, 1].

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "A surface cannot reflect more light than it receives."
            )

    idx = num_lambertian_materials[None]
    if idx >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )

    lambertian_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    num_lambertian_materials[None] = idx + 1
    logger.debug("Registered Lambertian material %d with albedo %s", idx, albedo)
    return idx


def get_lambertian_material_count() -> int:
    """Get the number of Lambertian materials in the registry."""
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a Lambertian material by registry index."""
    return lambertian_albedos[material_idx]
