"""Dielectric (glass/water) material implementation.

This module implements the dielectric BSDF, which models transparent materials
like glass and water with refraction and Fresnel reflectance.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when sin(theta_t) > 1

The material randomly chooses between reflection and refraction based on
the Fresnel reflectance probability, which increases at grazing angles.
Clear glass absorbs nothing, so the attenuation is always white.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation = scatter_dielectric(
    >>> #     ior, incident_dir, normal, front_face
    >>> # )
"""

import logging

import taichi as ti
import taichi.math as tm

from pathtracer.core.vector import (
    normalize,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)

logger = logging.getLogger(__name__)


@ti.func
def _refraction_ratio(ior: ti.f32, front_face: ti.i32) -> ti.f32:
    """Return n_incident / n_transmitted for the side the ray arrives from."""
    ratio = 1.0 / ior
    if front_face == 0:
        ratio = ior
    return ratio


@ti.func
def scatter_dielectric(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Compute the scattered ray direction for a dielectric material.

    Dielectrics always scatter. The ray reflects when total internal
    reflection forbids refraction, or with probability equal to the Schlick
    reflectance; otherwise it refracts.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The unit surface normal, facing the incoming ray.
        front_face: 1 if the ray hits the outside of the surface,
            0 if it travels inside the material.

    Returns:
        A tuple of (scattered_direction, attenuation) where the attenuation
        is white (1, 1, 1).
    """
    attenuation = vec3(1.0, 1.0, 1.0)
    refraction_ratio = _refraction_ratio(ior, front_face)

    unit_direction = normalize(incident_direction)
    cos_theta = tm.min(tm.dot(-unit_direction, normal), 1.0)
    sin_theta = ti.sqrt(1.0 - cos_theta * cos_theta)

    cannot_refract = refraction_ratio * sin_theta > 1.0

    scattered_direction = vec3(0.0, 0.0, 0.0)
    if cannot_refract or schlick_reflectance(cos_theta, refraction_ratio) > ti.random(ti.f32):
        scattered_direction = reflect(unit_direction, normal)
    else:
        scattered_direction = refract(unit_direction, normal, refraction_ratio)

    return scattered_direction, attenuation


@ti.func
def will_reflect(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.i32:
    """Determine if total internal reflection will occur.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (unit length).
        normal: The unit surface normal, facing the incoming ray.
        front_face: 1 if the ray hits the outside of the surface,
            0 if it travels inside the material.

    Returns:
        1 if total internal reflection will occur, 0 otherwise.
    """
    refraction_ratio = _refraction_ratio(ior, front_face)
    cos_theta = tm.min(-tm.dot(incident_direction, normal), 1.0)
    sin_theta = ti.sqrt(1.0 - cos_theta * cos_theta)

    result = 0
    if refraction_ratio * sin_theta > 1.0:
        result = 1
    return result


@ti.func
def fresnel_reflectance(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.f32:
    """Compute the Schlick reflectance for a ray hitting this surface."""
    refraction_ratio = _refraction_ratio(ior, front_face)
    cos_theta = tm.min(-tm.dot(incident_direction, normal), 1.0)
    return schlick_reflectance(cos_theta, refraction_ratio)


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 1024

# Storage for dielectric material properties
dielectric_iors = ti.field(dtype=ti.f32, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Clear all dielectric materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_dielectric_materials[None] = 0


def add_dielectric_material(ior: float = 1.5) -> int:
    """Add a dielectric material to the material registry.

    Args:
        ior: Index of refraction. Default is 1.5 (typical glass).
            Must be positive. Common values:
            - Air: 1.0
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If the IOR is not positive.
    """
    if ior <= 0.0:
        raise ValueError(f"Index of refraction = {ior} must be positive.")

    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_iors[idx] = ior
    num_dielectric_materials[None] = idx + 1
    logger.debug("Registered dielectric material %d with ior %s", idx, ior)
    return idx


def get_dielectric_material_count() -> int:
    """Get the number of dielectric materials in the registry."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_ior(material_idx: ti.i32) -> ti.f32:
    """Get the IOR for a dielectric material by index.

    Args:
        material_idx: The index of the material in the registry.

    Returns:
        The index of refraction for the material.
    """
    return dielectric_iors[material_idx]
