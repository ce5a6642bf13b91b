"""Scene module.

Components:
    intersection: Sphere storage and nearest-hit queries
    manager: Scene builder coordinating spheres and materials
    presets: Ready-made scenes with matching cameras
"""

from .intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
)
from .manager import MaterialInfo, SceneConfig, SceneManager, SphereInfo
from .presets import create_single_sphere_scene, create_three_spheres_scene

__all__ = [
    # Intersection module
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    # Presets
    "create_three_spheres_scene",
    "create_single_sphere_scene",
]
