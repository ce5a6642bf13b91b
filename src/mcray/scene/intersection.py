"""Scene-level ray intersection.

The scene is an ordered collection of spheres stored in Taichi fields
(structure of arrays). Each sphere carries the id of its material, so
several spheres can share a single material.

intersect_scene() tests every sphere and narrows the upper bound to the
closest hit found so far. The nearest intersection in the original range
therefore wins no matter in which order the spheres were added.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from mcray.scene.intersection import add_sphere, clear_scene
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0)
    0
    >>> # Use intersect_scene within a Taichi kernel
"""

import taichi as ti

from mcray.core.ray import Ray
from mcray.core.vector import real
from mcray.geometry.sphere import HitRecord, Sphere, hit_sphere, make_miss_record

# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=real, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=real, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all spheres from the scene.

    Only the count is reset; stale field data is overwritten by later adds.
    """
    num_spheres[None] = 0


def add_sphere(
    center: tuple[float, float, float],
    radius: float,
    material_id: int = 0,
) -> int:
    """Append a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius. Negative values model a hollow shell.
        material_id: The material shared with any other sphere using this id.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = [center[0], center[1], center[2]]
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def get_sphere(index: ti.i32) -> Sphere:
    """Load the sphere stored at index."""
    return Sphere(center=sphere_centers[index], radius=sphere_radii[index])


@ti.func
def intersect_scene(ray: Ray, t_min: real, t_max: real) -> HitRecord:
    """Find the nearest intersection of a ray with any sphere in the scene.

    Args:
        ray: The ray to trace.
        t_min: Exclusive lower bound on t.
        t_max: Exclusive upper bound on t.

    Returns:
        The HitRecord of the closest hit with its material_id filled in, or
        a miss record.
    """
    closest_so_far = t_max
    result = make_miss_record()

    for i in range(num_spheres[None]):
        rec = hit_sphere(ray, get_sphere(i), t_min, closest_so_far)
        if rec.hit == 1:
            closest_so_far = rec.t
            rec.material_id = sphere_material_ids[i]
            result = rec

    return result
