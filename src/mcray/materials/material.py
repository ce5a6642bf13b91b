"""Unified material ids and scatter dispatch.

Materials form a closed set of variants. A unified material id is a tag
(material_types[id]) plus an index into that variant's own parameter table
(material_type_indices[id]). scatter() switches on the tag. A sphere stores
only the id, so any number of spheres may share one material without
copying it.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from mcray.materials.material import MaterialType, register_material
    >>> from mcray.materials.lambertian import add_lambertian_material
    >>> idx = add_lambertian_material((0.5, 0.5, 0.5))
    >>> material_id = register_material(MaterialType.LAMBERTIAN, idx)
"""

from enum import IntEnum

import taichi as ti

from mcray.core.ray import Ray
from mcray.core.vector import vec3
from mcray.geometry.sphere import HitRecord
from mcray.materials.dielectric import scatter_dielectric_by_id
from mcray.materials.lambertian import scatter_lambertian_by_id
from mcray.materials.metal import scatter_metal_by_id


class MaterialType(IntEnum):
    """The closed set of material variants."""

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


# Maximum number of materials across all types
MAX_MATERIALS = 768  # 256 per type * 3 types

# material_types[i] stores the MaterialType for material_id i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[i] stores the index into the type-specific table
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_material_tracking() -> None:
    """Forget every unified material id."""
    num_materials[None] = 0


def register_material(material_type: MaterialType, type_index: int) -> int:
    """Assign a unified material id to an entry of a type-specific table.

    Args:
        material_type: The variant of the material.
        type_index: The index returned by the variant's add_*_material().

    Returns:
        The new unified material id.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    material_id = num_materials[None]
    if material_id >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    material_types[material_id] = int(material_type)
    material_type_indices[material_id] = type_index
    num_materials[None] = material_id + 1
    return material_id


def get_material_count() -> int:
    """Get the number of registered material ids."""
    return int(num_materials[None])


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the variant tag for a material id, or -1 if the id is invalid."""
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the type-specific table index for a material id, or -1."""
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


@ti.func
def scatter(material_id: ti.i32, ray_in: Ray, rec: HitRecord):
    """Scatter a ray off the material with the given id.

    The scattered ray starts at rec.point and travels along the returned
    direction. An unknown id absorbs the ray.

    Args:
        material_id: The unified material id of the hit surface.
        ray_in: The incoming ray.
        rec: The hit record of the surface.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter).
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        scattered_direction, attenuation, did_scatter = scatter_lambertian_by_id(
            type_index, rec
        )
    elif mat_type == int(MaterialType.METAL):
        scattered_direction, attenuation, did_scatter = scatter_metal_by_id(
            type_index, ray_in, rec
        )
    elif mat_type == int(MaterialType.DIELECTRIC):
        scattered_direction, attenuation, did_scatter = scatter_dielectric_by_id(
            type_index, ray_in, rec
        )

    return scattered_direction, attenuation, did_scatter
