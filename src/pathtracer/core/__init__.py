"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    vector: Geometric vector operators and Monte Carlo sampling helpers
    ray: Ray data structure
    settings: Image size and sampling configuration
    integrator: Light transport loop, pixel sampler and render target
    progressive: Progressive accumulation wrapper around the integrator

The integrator walks each camera ray through a chain of material scattering
events until it escapes to the sky gradient, is absorbed, or reaches the
bounce limit. Pixels are averaged over jittered samples and gamma corrected.

All per-ray computation runs inside Taichi kernels.
"""

from .ray import Ray, make_ray, ray_at
from .settings import RenderSettings
from .vector import (
    NEAR_ZERO_EPSILON,
    cross,
    dot,
    length,
    length_squared,
    near_zero,
    normalize,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_unit_vector,
    random_vec3,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)

# Note: integrator and progressive are NOT imported here to avoid circular imports.
# Import directly from pathtracer.core.integrator or pathtracer.core.progressive.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "RenderSettings",
    "vec3",
    "NEAR_ZERO_EPSILON",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "refract",
    "schlick_reflectance",
    "near_zero",
    "random_vec3",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_in_unit_disk",
]
