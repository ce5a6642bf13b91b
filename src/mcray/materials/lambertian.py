"""Lambertian (ideal diffuse) material implementation.

A Lambertian surface scatters toward rec.normal + random_unit_vector(), a
point on the unit sphere tangent to the surface at the hit point. The
resulting directions follow a cosine-weighted distribution about the normal,
so the attenuation is simply the albedo.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from mcray.materials.lambertian import scatter_lambertian
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_lambertian(albedo, rec)
"""

import taichi as ti

from mcray.core.vector import Color, near_zero, random_unit_vector, real, vec3
from mcray.geometry.sphere import HitRecord


@ti.func
def lambertian_direction(normal: vec3, sample: vec3) -> vec3:
    """Offset the normal by a unit sample, falling back to the normal.

    If the sample nearly cancels the normal the sum degenerates to a zero
    vector and the normal itself is returned.
    """
    scattered_direction = normal + sample
    if near_zero(scattered_direction):
        scattered_direction = normal
    return scattered_direction


@ti.func
def scatter_lambertian(albedo: Color, rec: HitRecord):
    """Scatter a ray off a diffuse surface.

    Args:
        albedo: The diffuse reflectance color.
        rec: The hit record of the surface.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter). The
        direction is not normalized, the attenuation equals albedo and
        did_scatter is always 1.
    """
    scattered_direction = lambertian_direction(rec.normal, random_unit_vector())
    return scattered_direction, albedo, 1


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Lambertian materials in the scene
MAX_LAMBERTIAN_MATERIALS = 256

# Storage for Lambertian material properties
lambertian_albedos = ti.Vector.field(3, dtype=real, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    """Clear all Lambertian materials."""
    num_lambertian_materials[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Add a Lambertian material to the material registry.

    Args:
        albedo: The diffuse reflectance color as (R, G, B) tuple.

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
                "This would violate energy conservation."
            )

    idx = num_lambertian_materials[None]
    if idx >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )

    lambertian_albedos[idx] = [albedo[0], albedo[1], albedo[2]]
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    """Get the number of Lambertian materials in the registry."""
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a Lambertian material by index."""
    return lambertian_albedos[material_idx]


@ti.func
def scatter_lambertian_by_id(material_idx: ti.i32, rec: HitRecord):
    """Scatter off the Lambertian material stored at material_idx.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter).
    """
    return scatter_lambertian(get_lambertian_albedo(material_idx), rec)
