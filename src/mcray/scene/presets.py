"""Ready-made scenes.

create_three_spheres_scene() builds the classic frame of the renderer:
- A large yellow-green ground sphere
- A blue diffuse sphere in the center
- A hollow glass sphere on the left (radius 0.5 with an inner radius -0.45
  shell sharing the same material)
- A polished gold metal sphere on the right

The camera looks down at the spheres from (3, 3, 2) with a narrow field of
view and a wide aperture focused on the center sphere, so the foreground
and background are blurred.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from mcray.scene.presets import create_three_spheres_scene
    >>> from mcray.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_three_spheres_scene()
    >>> setup_camera(camera)
"""

import math

from mcray.camera.thin_lens import ThinLensCamera
from mcray.scene.manager import SceneManager

# =============================================================================
# Three Spheres Parameters
# =============================================================================

GROUND_ALBEDO = (0.8, 0.8, 0.0)
CENTER_ALBEDO = (0.1, 0.2, 0.5)
GOLD_ALBEDO = (0.8, 0.6, 0.2)
GLASS_IR = 1.5

LOOK_FROM = (3.0, 3.0, 2.0)
LOOK_AT = (0.0, 0.0, -1.0)
VIEW_UP = (0.0, 1.0, 0.0)
VFOV = 20.0
APERTURE = 2.0


def create_three_spheres_scene(
    aspect_ratio: float = 16.0 / 9.0,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create the ground, diffuse, glass and metal sphere scene.

    Args:
        aspect_ratio: Width divided by height of the output image.

    Returns:
        Tuple of (SceneManager, ThinLensCamera).
    """
    scene = SceneManager()

    ground = scene.add_lambertian_material(GROUND_ALBEDO)
    center = scene.add_lambertian_material(CENTER_ALBEDO)
    glass = scene.add_dielectric_material(GLASS_IR)
    gold = scene.add_metal_material(GOLD_ALBEDO, fuzz=0.0)

    scene.add_sphere((0.0, -100.5, -1.0), 100.0, ground)
    scene.add_sphere((0.0, 0.0, -1.0), 0.5, center)
    scene.add_sphere((-1.0, 0.0, -1.0), 0.5, glass)
    scene.add_sphere((-1.0, 0.0, -1.0), -0.45, glass)
    scene.add_sphere((1.0, 0.0, -1.0), 0.5, gold)

    focus_dist = math.dist(LOOK_FROM, LOOK_AT)
    camera = ThinLensCamera(
        look_from=LOOK_FROM,
        look_at=LOOK_AT,
        view_up=VIEW_UP,
        vfov=VFOV,
        aspect_ratio=aspect_ratio,
        aperture=APERTURE,
        focus_dist=focus_dist,
    )

    return scene, camera


def create_single_sphere_scene(
    aspect_ratio: float = 16.0 / 9.0,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create a single gray diffuse sphere lit only by the sky.

    The pinhole camera sits at the origin looking down -z.
    """
    scene = SceneManager()
    scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.5, 0.5, 0.5))

    camera = ThinLensCamera(
        look_from=(0.0, 0.0, 0.0),
        look_at=(0.0, 0.0, -1.0),
        view_up=VIEW_UP,
        vfov=90.0,
        aspect_ratio=aspect_ratio,
        aperture=0.0,
        focus_dist=1.0,
    )

    return scene, camera
