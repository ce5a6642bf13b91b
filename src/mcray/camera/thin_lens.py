"""Thin-lens camera model with defocus blur.

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from look_at toward look_from (opposite the view direction)
- u: points right in the image plane
- v: points up in the image plane

The viewport sits on the focal plane, focus_dist in front of the camera.
Every ray for a given (s, t) passes through the same focal-plane point, but
starts from a random point on a lens disk of radius aperture / 2. Geometry
off the focal plane is therefore blurred. With aperture 0 the camera is a
pinhole.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from mcray.camera.thin_lens import ThinLensCamera, setup_camera
    >>> camera = ThinLensCamera(
    ...     look_from=(3.0, 3.0, 2.0),
    ...     look_at=(0.0, 0.0, -1.0),
    ...     view_up=(0.0, 1.0, 0.0),
    ...     vfov=20.0,
    ...     aspect_ratio=16.0 / 9.0,
    ...     aperture=2.0,
    ...     focus_dist=5.196,
    ... )
    >>> setup_camera(camera)
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from mcray.core.ray import Ray, make_ray
from mcray.core.vector import Point3, degrees_to_radians, random_in_unit_disk, real, vec3

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class ThinLensCamera:
    """Configuration for a thin-lens camera.

    Attributes:
        look_from: Camera position in world space.
        look_at: Point the camera looks at.
        view_up: Up direction used to orient the camera.
        vfov: Vertical field of view in degrees, in (0, 180).
        aspect_ratio: Width divided by height of the output image.
        aperture: Lens diameter. 0 disables defocus blur.
        focus_dist: Distance from the camera to the plane of perfect focus.
    """

    look_from: tuple[float, float, float]
    look_at: tuple[float, float, float]
    view_up: tuple[float, float, float] = (0.0, 1.0, 0.0)
    vfov: float = 90.0
    aspect_ratio: float = 16.0 / 9.0
    aperture: float = 0.0
    focus_dist: float = 1.0

    def validate(self) -> None:
        """Check the parameters describe a usable camera.

        Raises:
            ValueError: If any parameter is out of range or the view basis
                would be degenerate.
        """
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov = {self.vfov} must be in (0, 180) degrees")
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio = {self.aspect_ratio} must be positive")
        if self.aperture < 0.0:
            raise ValueError(f"aperture = {self.aperture} must not be negative")
        if self.focus_dist <= 0.0:
            raise ValueError(f"focus_dist = {self.focus_dist} must be positive")
        if tuple(self.look_from) == tuple(self.look_at):
            raise ValueError("look_from and look_at must be different points")

        view = np.subtract(self.look_from, self.look_at)
        if np.linalg.norm(np.cross(self.view_up, view)) == 0.0:
            raise ValueError("view_up must not be parallel to the view direction")


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=real, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=real, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=real, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=real, shape=())  # Backward (opposite view)

# Viewport on the focal plane
_viewport_horizontal = ti.Vector.field(3, dtype=real, shape=())
_viewport_vertical = ti.Vector.field(3, dtype=real, shape=())
_lower_left_corner = ti.Vector.field(3, dtype=real, shape=())

_lens_radius = ti.field(dtype=real, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per frame)
# =============================================================================


def setup_camera(camera: ThinLensCamera) -> None:
    """Derive the camera basis and viewport and store them for the kernels.

    Args:
        camera: Camera configuration.

    Raises:
        ValueError: If the configuration is invalid (see ThinLensCamera.validate).
    """
    camera.validate()

    theta = degrees_to_radians(camera.vfov)
    h = math.tan(theta / 2.0)
    viewport_height = 2.0 * h
    viewport_width = camera.aspect_ratio * viewport_height

    look_from = np.array(camera.look_from, dtype=np.float64)
    look_at = np.array(camera.look_at, dtype=np.float64)
    view_up = np.array(camera.view_up, dtype=np.float64)

    w = look_from - look_at
    w = w / np.linalg.norm(w)

    u = np.cross(view_up, w)
    u = u / np.linalg.norm(u)

    v = np.cross(w, u)

    horizontal = camera.focus_dist * viewport_width * u
    vertical = camera.focus_dist * viewport_height * v
    lower_left = look_from - horizontal / 2.0 - vertical / 2.0 - camera.focus_dist * w

    _camera_origin[None] = look_from.tolist()
    _camera_u[None] = u.tolist()
    _camera_v[None] = v.tolist()
    _camera_w[None] = w.tolist()
    _viewport_horizontal[None] = horizontal.tolist()
    _viewport_vertical[None] = vertical.tolist()
    _lower_left_corner[None] = lower_left.tolist()
    _lens_radius[None] = camera.aperture / 2.0


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_ray(s: real, t: real) -> Ray:
    """Generate a ray through normalized image coordinates (s, t).

    s = 0 is the left edge and t = 0 the bottom edge of the image. The ray
    starts at a random point of the lens disk and aims at the focal-plane
    point for (s, t). Its direction is not normalized.

    Args:
        s: Horizontal coordinate in [0, 1].
        t: Vertical coordinate in [0, 1].

    Returns:
        The camera ray.
    """
    rd = _lens_radius[None] * random_in_unit_disk()
    offset = _camera_u[None] * rd.x + _camera_v[None] * rd.y

    origin = _camera_origin[None] + offset
    target = (
        _lower_left_corner[None] + s * _viewport_horizontal[None] + t * _viewport_vertical[None]
    )
    return make_ray(origin, target - origin)


@ti.func
def get_ray_jittered(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate a ray with a random sub-pixel offset.

    Pixel coordinates map to s = (i + jitter) / (width - 1) and
    t = (j + jitter) / (height - 1).

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = bottom).
        width: Image width in pixels (at least 2).
        height: Image height in pixels (at least 2).

    Returns:
        The camera ray for one sample of the pixel.
    """
    s = (ti.cast(pixel_i, real) + ti.random(real)) / ti.cast(width - 1, real)
    t = (ti.cast(pixel_j, real) + ti.random(real)) / ti.cast(height - 1, real)
    return get_ray(s, t)


@ti.func
def get_camera_origin() -> Point3:
    """Get the lens center in world space."""
    return _camera_origin[None]


@ti.func
def get_camera_basis():
    """Get the camera basis as a tuple (u, v, w)."""
    return _camera_u[None], _camera_v[None], _camera_w[None]


# =============================================================================
# Utility Functions
# =============================================================================


def _as_tuple(value: vec3) -> tuple[float, float, float]:
    return (float(value[0]), float(value[1]), float(value[2]))


def get_camera_info() -> dict[str, object]:
    """Get the derived camera state for inspection.

    Returns:
        Dictionary with origin, u, v, w, horizontal, vertical, lower_left
        (3-tuples) and lens_radius (float).
    """
    return {
        "origin": _as_tuple(_camera_origin[None]),
        "u": _as_tuple(_camera_u[None]),
        "v": _as_tuple(_camera_v[None]),
        "w": _as_tuple(_camera_w[None]),
        "horizontal": _as_tuple(_viewport_horizontal[None]),
        "vertical": _as_tuple(_viewport_vertical[None]),
        "lower_left": _as_tuple(_lower_left_corner[None]),
        "lens_radius": float(_lens_radius[None]),
    }
