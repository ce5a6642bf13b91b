"""Monte Carlo ray tracer built on Taichi.

Renders scenes of spheres under a sky gradient by recursive path tracing,
with support for:
- Lambertian, metal and dielectric materials shared between spheres
- A thin-lens camera with defocus blur
- Progressive sample accumulation with progress callbacks
- Plain-text PPM and PNG output

Subpackages:
    core: Vector math, rays, the color integrator and progressive driver
    geometry: The sphere primitive and hit records
    materials: Material variants and scatter dispatch
    scene: Scene storage, the scene manager and preset scenes
    camera: The thin-lens camera
    preview: Image export

Modules under this package hold Taichi fields, so import them after
calling ti.init().
"""

__version__ = "0.1.0"
