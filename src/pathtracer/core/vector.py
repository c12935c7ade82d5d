"""Vector kernel for the path tracer.

Arithmetic on 3-component vectors (add, subtract, negate, scalar multiply and
divide, component-wise multiply) comes directly from ``taichi.math.vec3``.
This module adds the geometric operators and Monte Carlo sampling helpers the
rest of the renderer builds on. Vectors double as linear RGB colors.

All functions are Taichi functions and must be called from inside a kernel.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.vector import reflect, vec3
    >>> @ti.kernel
    ... def mirror() -> vec3:
    ...     return reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))
    >>> mirror()  # (1, 1, 0)
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Components smaller than this (in absolute value) count as zero.
NEAR_ZERO_EPSILON = 1e-8


# =============================================================================
# Geometric Operators
# =============================================================================


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product of two vectors."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(length_squared(v))


@ti.func
def normalize(v: vec3) -> vec3:
    """Scale a vector to unit length.

    A zero-length input has no direction. Callers must rule it out
    beforehand; with ``ti.init(debug=True)`` the assertion below fires.

    Args:
        v: The input vector (non-zero).

    Returns:
        v / length(v).
    """
    assert length_squared(v) > 0.0, "normalize() called with a zero-length vector"
    return v / length(v)


@ti.func
def reflect(v: vec3, n: vec3) -> vec3:
    """Reflect a vector about a unit normal.

    Args:
        v: The incoming direction (pointing toward the surface).
        n: The surface normal (unit length).

    Returns:
        v - 2 * dot(v, n) * n
    """
    return v - 2.0 * tm.dot(v, n) * n


@ti.func
def refract(uv: vec3, n: vec3, etai_over_etat: ti.f32) -> vec3:
    """Refract a unit direction through a surface using Snell's law.

    The refracted ray is split into the components perpendicular and
    parallel to the normal:

        r_perp = eta * (uv + cos_theta * n)
        r_parallel = -sqrt(|1 - |r_perp|^2|) * n

    Total internal reflection is not detected here; callers check
    ``eta * sin_theta > 1`` first and reflect instead.

    Args:
        uv: The incoming direction (unit length).
        n: The surface normal on the incoming side (unit length).
        etai_over_etat: Ratio of refractive indices n_incident / n_transmitted.

    Returns:
        The refracted direction.
    """
    cos_theta = tm.min(tm.dot(-uv, n), 1.0)
    r_out_perp = etai_over_etat * (uv + cos_theta * n)
    r_out_parallel = -ti.sqrt(ti.abs(1.0 - length_squared(r_out_perp))) * n
    return r_out_perp + r_out_parallel


@ti.func
def schlick_reflectance(cosine: ti.f32, ref_idx: ti.f32) -> ti.f32:
    """Schlick's polynomial approximation of Fresnel reflectance.

    R(cos) = r0 + (1 - r0) * (1 - cos)^5, with r0 = ((1 - n) / (1 + n))^2.

    Args:
        cosine: Cosine of the angle between the incoming ray and the normal.
        ref_idx: Refractive index ratio across the surface.

    Returns:
        The probability of reflection in [0, 1].
    """
    r0 = ((1.0 - ref_idx) / (1.0 + ref_idx)) ** 2
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check whether every component is below NEAR_ZERO_EPSILON.

    Returns:
        1 if the vector is near zero in all dimensions, 0 otherwise.
    """
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_vec3(lo: ti.f32, hi: ti.f32) -> vec3:
    """Draw a vector with each component uniform in [lo, hi)."""
    return lo + (hi - lo) * vec3(ti.random(ti.f32), ti.random(ti.f32), ti.random(ti.f32))


@ti.func
def random_in_unit_sphere() -> vec3:
    """Generate a uniformly distributed point strictly inside the unit ball.

    Rejection sampling over the cube [-1, 1]^3. The loop has no iteration
    cap; it takes about 1.91 draws on average (cube volume / ball volume).

    Returns:
        A random point p with |p|^2 < 1.
    """
    result = vec3(0.0, 0.0, 0.0)
    while True:
        p = random_vec3(-1.0, 1.0)
        if length_squared(p) < 1.0:
            result = p
            break
    return result


@ti.func
def random_unit_vector() -> vec3:
    """Generate a random direction on the unit sphere.

    Normalizes a sample from random_in_unit_sphere(), rejecting the
    (measure-zero) samples too close to the origin to normalize safely.
    """
    result = vec3(0.0, 0.0, 1.0)
    while True:
        p = random_in_unit_sphere()
        if length_squared(p) > 1e-20:
            result = normalize(p)
            break
    return result


@ti.func
def random_in_unit_disk() -> vec3:
    """Generate a random point inside the unit disk in the xy-plane.

    Used for lens sampling in the thin-lens camera. Same rejection
    technique as random_in_unit_sphere() restricted to two components.

    Returns:
        A random point (x, y, 0) with x^2 + y^2 < 1.
    """
    result = vec3(0.0, 0.0, 0.0)
    while True:
        p = vec3(ti.random(ti.f32) * 2.0 - 1.0, ti.random(ti.f32) * 2.0 - 1.0, 0.0)
        if length_squared(p) < 1.0:
            result = p
            break
    return result
