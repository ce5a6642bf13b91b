"""Vector math and random sampling utilities.

This module provides the 3-component double precision vector type used for
directions, positions and colors, together with the geometric helpers and
Monte Carlo sampling routines the tracer is built on. Device-side helpers are
Taichi functions (@ti.func) and must be called from inside a kernel; the
host-side helper at the bottom is used when configuring the camera.

Taichi vectors already support +, -, unary -, scalar and component-wise *,
and / so only the named operations are defined here.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from mcray.core.vector import vec3, normalize
    >>> @ti.kernel
    ... def unit_x() -> vec3:
    ...     return normalize(vec3(3.0, 0.0, 0.0))
"""

import math

import taichi as ti
import taichi.math as tm

# Scalar type used for every component
real = ti.f64

# Type alias for 3D vectors, reused as positions and colors
vec3 = ti.types.vector(3, real)
Point3 = vec3
Color = vec3

# Components below this magnitude count as zero in near_zero()
NEAR_ZERO_EPSILON = 1e-8


@ti.func
def dot(a: vec3, b: vec3) -> real:
    """Compute the dot product of two vectors."""
    return a.x * b.x + a.y * b.y + a.z * b.z


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return vec3(
        a.y * b.z - a.z * b.y,
        a.z * b.x - a.x * b.z,
        a.x * b.y - a.y * b.x,
    )


@ti.func
def length_squared(v: vec3) -> real:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return dot(v, v)


@ti.func
def length(v: vec3) -> real:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(length_squared(v))


@ti.func
def normalize(v: vec3) -> vec3:
    """Scale a vector to unit length.

    Precondition: length(v) > 0. The check is only active when Taichi is
    initialized with debug=True; with debugging off a zero vector yields NaN
    components, so callers must never pass one.

    Args:
        v: The input vector.

    Returns:
        A unit vector pointing the same way as v.
    """
    len_sq = length_squared(v)
    assert len_sq > 0.0, "normalize() requires a non-zero vector"
    return v / ti.sqrt(len_sq)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check whether every component of v is close to zero.

    Used to detect degenerate scatter directions.

    Returns:
        1 if |x|, |y| and |z| are all below NEAR_ZERO_EPSILON, 0 otherwise.
    """
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def reflect(v: vec3, n: vec3) -> vec3:
    """Mirror v about the normal n.

    For unit n the result has the same length as v.

    Args:
        v: The incoming direction (pointing toward the surface).
        n: The surface normal (unit length).

    Returns:
        v - 2 * dot(v, n) * n
    """
    return v - 2.0 * dot(v, n) * n


@ti.func
def refract(uv: vec3, n: vec3, etai_over_etat: real) -> vec3:
    """Refract a unit direction through a surface using Snell's law.

    The caller is responsible for detecting total internal reflection
    beforehand; this function always returns a direction.

    Args:
        uv: The incoming direction (unit length).
        n: The surface normal facing against uv (unit length).
        etai_over_etat: Ratio of refractive indices, incident over transmitted.

    Returns:
        The transmitted direction.
    """
    cos_theta = tm.min(dot(-uv, n), 1.0)
    r_out_perp = etai_over_etat * (uv + cos_theta * n)
    r_out_parallel = -ti.sqrt(ti.abs(1.0 - length_squared(r_out_perp))) * n
    return r_out_perp + r_out_parallel


@ti.func
def schlick_reflectance(cosine: real, ref_idx: real) -> real:
    """Approximate the Fresnel reflectance with Schlick's polynomial.

    Args:
        cosine: Cosine of the angle between the incoming ray and the normal.
        ref_idx: Ratio of refractive indices at the interface.

    Returns:
        The probability of reflection in [0, 1].
    """
    r0 = (1.0 - ref_idx) / (1.0 + ref_idx)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_real(lo: real, hi: real) -> real:
    """Draw a uniform number in [lo, hi)."""
    return lo + (hi - lo) * ti.random(real)


@ti.func
def random_vector() -> vec3:
    """Draw a vector uniformly from the unit cube [0, 1)^3."""
    return vec3(ti.random(real), ti.random(real), ti.random(real))


@ti.func
def random_vector_range(lo: real, hi: real) -> vec3:
    """Draw a vector uniformly from the cube [lo, hi)^3."""
    return vec3(random_real(lo, hi), random_real(lo, hi), random_real(lo, hi))


@ti.func
def random_in_unit_sphere() -> vec3:
    """Draw a point uniformly from inside the unit ball.

    Rejection sampling: candidates come from the cube [-1, 1)^3 until one has
    squared length below 1. The loop has no iteration cap; on average it runs
    about twice.

    Returns:
        A random point with length < 1.
    """
    # Seed outside the ball so the loop body runs at least once
    p = vec3(1.0, 1.0, 1.0)
    while length_squared(p) >= 1.0:
        p = random_vector_range(-1.0, 1.0)
    return p


@ti.func
def random_unit_vector() -> vec3:
    """Draw a unit vector uniformly distributed on the sphere."""
    return normalize(random_in_unit_sphere())


@ti.func
def random_in_hemisphere(normal: vec3) -> vec3:
    """Draw a point from the unit ball, flipped into the hemisphere of normal.

    Args:
        normal: The direction defining the hemisphere.

    Returns:
        A random vector with non-negative dot product against normal.
    """
    in_unit_sphere = random_in_unit_sphere()
    result = in_unit_sphere
    if dot(in_unit_sphere, normal) <= 0.0:
        result = -in_unit_sphere
    return result


@ti.func
def random_in_unit_disk() -> vec3:
    """Draw a point uniformly from the unit disk in the xy-plane.

    Rejection sampling over the square [-1, 1)^2 with no iteration cap.

    Returns:
        A random point (x, y, 0) with x^2 + y^2 < 1.
    """
    p = vec3(1.0, 1.0, 0.0)
    while length_squared(p) >= 1.0:
        p = vec3(random_real(-1.0, 1.0), random_real(-1.0, 1.0), 0.0)
    return p


@ti.func
def random_cosine_direction() -> vec3:
    """Draw a direction with density cos(theta) / pi about the local +z axis."""
    r1 = ti.random(real)
    r2 = ti.random(real)
    phi = 2.0 * tm.pi * r1
    sqrt_r2 = ti.sqrt(r2)
    return vec3(ti.cos(phi) * sqrt_r2, ti.sin(phi) * sqrt_r2, ti.sqrt(1.0 - r2))


@ti.func
def build_onb(normal: vec3):
    """Build an orthonormal basis whose third axis is normal.

    Args:
        normal: The surface normal (unit length).

    Returns:
        A tuple (tangent, bitangent, normal).
    """
    a = vec3(1.0, 0.0, 0.0)
    if ti.abs(normal.x) > 0.9:
        a = vec3(0.0, 1.0, 0.0)
    tangent = normalize(cross(a, normal))
    bitangent = cross(normal, tangent)
    return tangent, bitangent, normal


@ti.func
def random_cosine_hemisphere(normal: vec3) -> vec3:
    """Draw a unit direction about normal with cosine-weighted density."""
    local = random_cosine_direction()
    tangent, bitangent, n = build_onb(normal)
    return local.x * tangent + local.y * bitangent + local.z * n


# =============================================================================
# Host-side helpers
# =============================================================================


def degrees_to_radians(degrees: float) -> float:
    """Convert an angle in degrees to radians."""
    return degrees * math.pi / 180.0
