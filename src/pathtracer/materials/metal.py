"""Metal (specular reflective) material implementation.

Perfect metals (fuzz = 0) produce mirror reflections. Fuzzy metals perturb the
mirror direction by a random offset inside a ball of radius ``fuzz``; when the
perturbed direction dips below the surface, the ray is absorbed.

The reflection formula is:
    R = I - 2(I . N)N

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.materials.metal import scatter_metal
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_metal(
    >>> #     albedo, fuzz, incident_dir, normal
    >>> # )
"""

import logging

import taichi as ti
import taichi.math as tm

from pathtracer.core.vector import normalize, random_in_unit_sphere, reflect, vec3

logger = logging.getLogger(__name__)


@ti.func
def scatter_metal(
    albedo: vec3,
    fuzz: ti.f32,
    incident_direction: vec3,
    normal: vec3,
):
    """Compute the scattered ray direction for a metal surface.

    Args:
        albedo: The reflective color (RGB, each component in [0, 1]).
        fuzz: The surface roughness in [0, 1]. 0 = perfect mirror.
        incident_direction: The incoming ray direction (any length).
        normal: The unit surface normal, facing the incoming ray.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: The fuzzed reflection (not normalized).
        - attenuation: The albedo.
        - did_scatter: 1 if the direction leaves the surface, 0 if absorbed.
    """
    reflected = reflect(normalize(incident_direction), normal)
    scattered_direction = reflected + fuzz * random_in_unit_sphere()

    did_scatter = 0
    if tm.dot(scattered_direction, normal) > 0.0:
        did_scatter = 1

    return scattered_direction, albedo, did_scatter


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of metal materials in the scene
MAX_METAL_MATERIALS = 1024

# Storage for metal material properties
metal_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_METAL_MATERIALS)
metal_fuzzes = ti.field(dtype=ti.f32, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    """Clear all metal materials."""
    num_metal_materials[None] = 0


def add_metal_material(
    albedo: tuple[float, float, float],
    fuzz: float = 0.0,
) -> int:
    """Add a metal material to the material registry.

    Args:
        albedo: The reflective color as (R, G, B) tuple.
            Each component must be in [0, 1].
        fuzz: The surface roughness in [0, 1]. Default is 0 (perfect mirror).

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
        ValueError: If fuzz is outside [0, 1].
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "A surface cannot reflect more light than it receives."
            )

    if fuzz < 0.0 or fuzz > 1.0:
        raise ValueError(
            f"Fuzz = {fuzz} is outside [0, 1]. "
            "Fuzz must be between 0 (perfect mirror) and 1 (maximum roughness)."
        )

    idx = num_metal_materials[None]
    if idx >= MAX_METAL_MATERIALS:
        raise RuntimeError(
            f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded"
        )

    metal_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    metal_fuzzes[idx] = fuzz
    num_metal_materials[None] = idx + 1
    logger.debug("Registered metal material %d with albedo %s, fuzz %s", idx, albedo, fuzz)
    return idx


def get_metal_material_count() -> int:
    """Get the number of metal materials in the registry."""
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a metal material by registry index."""
    return metal_albedos[material_idx]


@ti.func
def get_metal_fuzz(material_idx: ti.i32) -> ti.f32:
    """Get the fuzz for a metal material by registry index."""
    return metal_fuzzes[material_idx]
