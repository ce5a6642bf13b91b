"""Core rendering module.

Components:
    vector: f64 vector math, reflection, refraction and random sampling
    ray: Ray data structure and evaluation
    integrator: Recursive color integrator and render target
    progressive: Render settings and progressive sample accumulation

The integrator works in linear color. Averaging and gamma correction happen
in the output stage.
"""

from .ray import Ray, make_ray, ray_at
from .vector import (
    Color,
    Point3,
    cross,
    degrees_to_radians,
    dot,
    length,
    length_squared,
    near_zero,
    normalize,
    random_cosine_hemisphere,
    random_in_hemisphere,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_real,
    random_unit_vector,
    random_vector,
    random_vector_range,
    real,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)

# integrator and progressive hold Taichi fields and are not imported here.
# Import them directly after ti.init():
#   from mcray.core.progressive import ProgressiveRenderer

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "real",
    "vec3",
    "Point3",
    "Color",
    "dot",
    "cross",
    "length",
    "length_squared",
    "normalize",
    "near_zero",
    "reflect",
    "refract",
    "schlick_reflectance",
    "random_real",
    "random_vector",
    "random_vector_range",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_in_hemisphere",
    "random_in_unit_disk",
    "random_cosine_hemisphere",
    "degrees_to_radians",
]
