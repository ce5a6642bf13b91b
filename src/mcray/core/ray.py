"""Ray data structure.

A ray is an origin point plus a direction vector. The direction is not
required to be unit length; intersection code accounts for its magnitude.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from mcray.core.ray import Ray, ray_at, vec3
    >>> ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -1.0))
    >>> # ray_at(ray, 5.0) inside a kernel gives (0, 0, -5)
"""

import taichi as ti

from mcray.core.vector import Point3, real, vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray.
        direction: The direction of travel. Not necessarily normalized.
    """

    origin: Point3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: real) -> Point3:
    """Compute the point origin + t * direction.

    No range check is made on t; negative values lie behind the origin.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: Point3, direction: vec3) -> Ray:
    """Create a ray from origin and direction inside a kernel."""
    return Ray(origin=origin, direction=direction)
