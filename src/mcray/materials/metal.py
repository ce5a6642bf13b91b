"""Metal (specular reflective) material implementation.

The incoming direction is normalized and mirrored about the surface normal:
    R = I - 2(I . N)N
then perturbed by fuzz * random_in_unit_sphere(). A fuzz of 0 gives a
perfect mirror; larger values blur the reflection. Rays perturbed below the
surface are absorbed.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from mcray.materials.metal import scatter_metal
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_metal(albedo, fuzz, ray, rec)
"""

import taichi as ti

from mcray.core.ray import Ray
from mcray.core.vector import Color, dot, normalize, random_in_unit_sphere, real, reflect, vec3
from mcray.geometry.sphere import HitRecord


@ti.func
def scatter_metal(albedo: Color, fuzz: real, ray_in: Ray, rec: HitRecord):
    """Reflect a ray off a metal surface.

    Args:
        albedo: The reflective color.
        fuzz: The perturbation radius in [0, 1].
        ray_in: The incoming ray.
        rec: The hit record of the surface.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where
        did_scatter is 0 if the fuzzed direction points into the surface.
    """
    reflected = reflect(normalize(ray_in.direction), rec.normal)
    scattered_direction = reflected + fuzz * random_in_unit_sphere()

    did_scatter = 0
    if dot(scattered_direction, rec.normal) > 0.0:
        did_scatter = 1

    return scattered_direction, albedo, did_scatter


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of metal materials in the scene
MAX_METAL_MATERIALS = 256

# Storage for metal material properties
metal_albedos = ti.Vector.field(3, dtype=real, shape=MAX_METAL_MATERIALS)
metal_fuzzes = ti.field(dtype=real, shape=MAX_METAL_MATERIALS)
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
        fuzz: The reflection perturbation. Clamped to [0, 1].

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

    idx = num_metal_materials[None]
    if idx >= MAX_METAL_MATERIALS:
        raise RuntimeError(
            f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded"
        )

    metal_albedos[idx] = [albedo[0], albedo[1], albedo[2]]
    metal_fuzzes[idx] = clamp_fuzz(fuzz)
    num_metal_materials[None] = idx + 1
    return idx


def clamp_fuzz(fuzz: float) -> float:
    """Clamp a fuzz value to [0, 1]."""
    return min(max(fuzz, 0.0), 1.0)


def get_metal_material_count() -> int:
    """Get the number of metal materials in the registry."""
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a metal material by index."""
    return metal_albedos[material_idx]


@ti.func
def get_metal_fuzz(material_idx: ti.i32) -> real:
    """Get the fuzz for a metal material by index."""
    return metal_fuzzes[material_idx]


@ti.func
def scatter_metal_by_id(material_idx: ti.i32, ray_in: Ray, rec: HitRecord):
    """Scatter off the metal material stored at material_idx.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter).
    """
    return scatter_metal(
        get_metal_albedo(material_idx), get_metal_fuzz(material_idx), ray_in, rec
    )
