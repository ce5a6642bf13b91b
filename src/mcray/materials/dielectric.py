"""Dielectric (glass/water) material implementation.

Dielectrics either reflect or refract every ray that hits them:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Total internal reflection when the refraction ratio times sin(theta)
      exceeds 1
    - Otherwise reflection with probability given by Schlick's approximation

Attenuation is always white; the glass is not tinted.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from mcray.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_dielectric(ir, ray, rec)
"""

import taichi as ti
import taichi.math as tm

from mcray.core.ray import Ray
from mcray.core.vector import (
    dot,
    normalize,
    real,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)
from mcray.geometry.sphere import HitRecord


@ti.func
def refraction_ratio_for(ir: real, front_face: ti.i32) -> real:
    """Ratio of refractive indices seen by a ray crossing the surface.

    Entering from outside (front face) the ratio is 1 / ir; leaving the
    material it is ir.
    """
    ratio = ir
    if front_face == 1:
        ratio = 1.0 / ir
    return ratio


@ti.func
def incidence_cosine(unit_direction: vec3, normal: vec3) -> real:
    """Cosine between the reversed unit direction and the normal, capped at 1."""
    return tm.min(dot(-unit_direction, normal), 1.0)


@ti.func
def cannot_refract(ratio: real, cos_theta: real) -> ti.i32:
    """Check whether the ray undergoes total internal reflection."""
    sin_theta = ti.sqrt(1.0 - cos_theta * cos_theta)
    return ratio * sin_theta > 1.0


@ti.func
def scatter_dielectric(ir: real, ray_in: Ray, rec: HitRecord):
    """Reflect or refract a ray at a dielectric boundary.

    Args:
        ir: Index of refraction of the material.
        ray_in: The incoming ray.
        rec: The hit record of the surface.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter). The
        attenuation is white and did_scatter is always 1.
    """
    attenuation = vec3(1.0, 1.0, 1.0)
    ratio = refraction_ratio_for(ir, rec.front_face)

    unit_direction = normalize(ray_in.direction)
    cos_theta = incidence_cosine(unit_direction, rec.normal)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    total_internal = cannot_refract(ratio, cos_theta)
    if total_internal or schlick_reflectance(cos_theta, ratio) > ti.random(real):
        scattered_direction = reflect(unit_direction, rec.normal)
    else:
        scattered_direction = refract(unit_direction, rec.normal, ratio)

    return scattered_direction, attenuation, 1


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 256

# Storage for dielectric material properties
dielectric_irs = ti.field(dtype=real, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Clear all dielectric materials."""
    num_dielectric_materials[None] = 0


def add_dielectric_material(ir: float = 1.5) -> int:
    """Add a dielectric material to the material registry.

    Args:
        ir: Index of refraction. Default is 1.5 (typical glass).

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If ir is not positive.
    """
    if ir <= 0.0:
        raise ValueError(f"Index of refraction = {ir} must be positive.")

    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_irs[idx] = ir
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    """Get the number of dielectric materials in the registry."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_ir(material_idx: ti.i32) -> real:
    """Get the index of refraction for a dielectric material by index."""
    return dielectric_irs[material_idx]


@ti.func
def scatter_dielectric_by_id(material_idx: ti.i32, ray_in: Ray, rec: HitRecord):
    """Scatter off the dielectric material stored at material_idx.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter).
    """
    return scatter_dielectric(get_dielectric_ir(material_idx), ray_in, rec)
