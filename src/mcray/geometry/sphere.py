"""Sphere primitive and ray-sphere intersection.

The intersection solves |O + tD - C|^2 = r^2 with the half-b form of the
quadratic formula and accepts the nearest root inside the open interval
(t_min, t_max). The outward normal is (P - C) / radius, so a sphere with a
negative radius has inward-pointing "outward" normals. Nesting such a
sphere inside a positive one with the same dielectric material models a
hollow glass shell.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from mcray.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti

from mcray.core.ray import Ray, ray_at
from mcray.core.vector import Point3, dot, length_squared, real, vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere.
        radius: The radius. Negative values flip the surface normal.
    """

    center: Point3
    radius: real


@ti.dataclass
class HitRecord:
    """Record of a ray-surface intersection.

    Attributes:
        hit: 1 if the ray intersected the surface, 0 otherwise. The
            remaining fields are only meaningful when hit == 1.
        t: The ray parameter of the intersection.
        point: The world-space intersection point.
        normal: Unit surface normal, always facing against the incoming ray.
        front_face: 1 if the ray arrived from the side the outward normal
            points to, 0 if it arrived from the other side.
        material_id: The material of the hit surface, -1 if not assigned.
    """

    hit: ti.i32
    t: real
    point: Point3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord that reports no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def hit_sphere(
    ray: Ray,
    sphere: Sphere,
    t_min: real,
    t_max: real,
) -> HitRecord:
    """Test for a ray-sphere intersection in the open range (t_min, t_max).

    With oc = origin - center the quadratic coefficients are:
        a = |direction|^2
        half_b = dot(direction, oc)
        c = |oc|^2 - radius^2

    A negative discriminant half_b^2 - a*c means the ray misses. Otherwise
    the smaller root is preferred; if it falls outside the range the larger
    root is tried, and if both fall outside there is no hit.

    Args:
        ray: The ray to test. Its direction need not be normalized.
        sphere: The sphere to test against.
        t_min: Exclusive lower bound on t.
        t_max: Exclusive upper bound on t.

    Returns:
        A HitRecord; check its hit field. material_id is left at -1.
    """
    oc = ray.origin - sphere.center
    a = length_squared(ray.direction)
    half_b = dot(ray.direction, oc)
    c = length_squared(oc) - sphere.radius * sphere.radius
    discriminant = half_b * half_b - a * c

    result = make_miss_record()

    if discriminant >= 0.0:
        sqrtd = ti.sqrt(discriminant)

        # Nearest root that lies in the acceptable range
        root = (-half_b - sqrtd) / a
        valid = root > t_min and root < t_max
        if not valid:
            root = (-half_b + sqrtd) / a
            valid = root > t_min and root < t_max

        if valid:
            point = ray_at(ray, root)
            outward_normal = (point - sphere.center) / sphere.radius
            front_face = 1
            normal = outward_normal
            if dot(ray.direction, outward_normal) >= 0.0:
                front_face = 0
                normal = -outward_normal

            result = HitRecord(
                hit=1,
                t=root,
                point=point,
                normal=normal,
                front_face=front_face,
                material_id=-1,
            )

    return result


@ti.func
def make_sphere(center: Point3, radius: real) -> Sphere:
    """Create a sphere from center and radius inside a kernel."""
    return Sphere(center=center, radius=radius)
