"""Materials module.

Components:
    lambertian: Ideal diffuse reflection
    metal: Mirror reflection perturbed by fuzz
    dielectric: Glass-like refraction with Schlick reflectance
    material: Unified material ids and scatter dispatch

Each variant keeps its parameters in its own Taichi field table. A unified
material id maps to a (variant, index) pair.
"""

from .dielectric import (
    add_dielectric_material,
    clear_dielectric_materials,
    get_dielectric_ir,
    get_dielectric_material_count,
    scatter_dielectric,
    scatter_dielectric_by_id,
)
from .lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
    get_lambertian_albedo,
    get_lambertian_material_count,
    scatter_lambertian,
    scatter_lambertian_by_id,
)
from .material import (
    MAX_MATERIALS,
    MaterialType,
    clear_material_tracking,
    get_material_count,
    get_material_type,
    get_material_type_index,
    register_material,
    scatter,
)
from .metal import (
    add_metal_material,
    clear_metal_materials,
    get_metal_albedo,
    get_metal_fuzz,
    get_metal_material_count,
    scatter_metal,
    scatter_metal_by_id,
)

__all__ = [
    # Lambertian
    "scatter_lambertian",
    "scatter_lambertian_by_id",
    "add_lambertian_material",
    "clear_lambertian_materials",
    "get_lambertian_material_count",
    "get_lambertian_albedo",
    # Metal
    "scatter_metal",
    "scatter_metal_by_id",
    "add_metal_material",
    "clear_metal_materials",
    "get_metal_material_count",
    "get_metal_albedo",
    "get_metal_fuzz",
    # Dielectric
    "scatter_dielectric",
    "scatter_dielectric_by_id",
    "add_dielectric_material",
    "clear_dielectric_materials",
    "get_dielectric_material_count",
    "get_dielectric_ir",
    # Dispatch
    "MaterialType",
    "MAX_MATERIALS",
    "register_material",
    "clear_material_tracking",
    "get_material_count",
    "get_material_type",
    "get_material_type_index",
    "scatter",
]
