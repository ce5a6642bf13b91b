"""Color integrator and render target.

ray_color() returns the radiance arriving along a ray:
    - with no bounces left the result is black
    - a ray that escapes the scene sees the sky gradient
    - a ray absorbed by a material contributes black
    - otherwise the result is attenuation * ray_color(scattered, depth - 1)

Taichi functions cannot recurse, so the recursion runs as a loop that keeps
the product of attenuations gathered so far. Both forms give the same
depth-bounded result.

The render target holds, per pixel, the *sum* of all sample radiances and the
number of samples taken. Dividing and gamma correcting happens in the output
stage (mcray.preview.export).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from mcray.core.integrator import render_image, setup_render_target
    >>> from mcray.scene.presets import create_three_spheres_scene
    >>> from mcray.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_three_spheres_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(400, 225)
    >>> render_image(num_samples=100, max_depth=50)
"""

import math

import numpy as np
import numpy.typing as npt
import taichi as ti

from mcray.camera.thin_lens import get_ray_jittered
from mcray.core.ray import Ray, make_ray
from mcray.core.vector import Color, normalize, real, vec3
from mcray.materials.material import scatter
from mcray.scene.intersection import intersect_scene

# =============================================================================
# Rendering Constants
# =============================================================================

# Default recursion budget per camera ray
MAX_DEPTH = 50

# Lower t bound for scene queries; excludes self-intersections (shadow acne)
T_MIN = 0.001
T_MAX = math.inf


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 1024
MAX_IMAGE_HEIGHT = 1024

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Sum of sample radiances per pixel, indexed (column, row) with row 0 at the bottom
_color_buffer = ti.Vector.field(3, dtype=real, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Sample count per pixel
_sample_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Set the active image size and clear the buffers.

    Args:
        width: Image width in pixels, in [2, MAX_IMAGE_WIDTH].
        height: Image height in pixels, in [2, MAX_IMAGE_HEIGHT].

    Raises:
        ValueError: If a dimension is out of range.
    """
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )
    # Pixel coordinates are divided by (size - 1)
    if width < 2 or height < 2:
        raise ValueError(f"Image dimensions ({width}x{height}) must be at least 2x2")

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _color_buffer.fill(0.0)
    _sample_count.fill(0)


def release_render_target() -> None:
    """Clear the buffers and mark the render target as not set up."""
    clear_render_target()
    _render_target_initialized[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Raise if the render target has not been set up."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Radiance
# =============================================================================


@ti.func
def background(direction: vec3) -> Color:
    """Sky color seen along a direction that escapes the scene.

    Blends white at t = 0 into sky blue at t = 1, where
    t = 0.5 * (unit(direction).y + 1).
    """
    unit_direction = normalize(direction)
    t = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - t) * vec3(1.0, 1.0, 1.0) + t * vec3(0.5, 0.7, 1.0)


@ti.func
def ray_color(ray: Ray, max_depth: ti.i32) -> Color:
    """Radiance arriving along a ray with at most max_depth scatter events.

    Args:
        ray: The ray to trace.
        max_depth: Remaining recursion budget. 0 returns black.

    Returns:
        The linear-space color seen along the ray.
    """
    current = ray
    throughput = vec3(1.0, 1.0, 1.0)
    result = vec3(0.0, 0.0, 0.0)
    depth = max_depth
    active = 1

    while active == 1:
        if depth <= 0:
            # Recursion budget exhausted
            active = 0
        else:
            rec = intersect_scene(current, T_MIN, T_MAX)
            if rec.hit == 0:
                result = throughput * background(current.direction)
                active = 0
            else:
                direction, attenuation, did_scatter = scatter(rec.material_id, current, rec)
                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    current = make_ray(rec.point, direction)
                    depth -= 1

    return result


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_one_spp(width: ti.i32, height: ti.i32, max_depth: ti.i32):
    """Add one sample to every pixel.

    Scanlines are visited top to bottom on a single thread; every sample
    draws from one shared random stream.
    """
    ti.loop_config(serialize=True)
    for row in range(height):
        j = height - 1 - row
        for i in range(width):
            ray = get_ray_jittered(i, j, width, height)
            _color_buffer[i, j] += ray_color(ray, max_depth)
            _sample_count[i, j] += 1


@ti.kernel
def _trace_single_ray(
    ox: real,
    oy: real,
    oz: real,
    dx: real,
    dy: real,
    dz: real,
    max_depth: ti.i32,
) -> vec3:
    """Trace one ray given by its components."""
    return ray_color(make_ray(vec3(ox, oy, oz), vec3(dx, dy, dz)), max_depth)


@ti.kernel
def _render_single_pixel(
    pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32, max_depth: ti.i32
) -> vec3:
    """Trace one jittered camera sample for a pixel."""
    return ray_color(get_ray_jittered(pixel_i, pixel_j, width, height), max_depth)


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int = MAX_DEPTH,
) -> tuple[float, float, float]:
    """Compute the color seen along a single ray.

    Args:
        origin: The ray origin.
        direction: The ray direction (need not be normalized, must be non-zero).
        max_depth: Maximum number of scatter events.

    Returns:
        Tuple of (R, G, B) linear color values.

    Raises:
        ValueError: If direction is the zero vector.
    """
    if direction[0] == 0.0 and direction[1] == 0.0 and direction[2] == 0.0:
        raise ValueError(f"Ray direction {tuple(direction)} must be non-zero")

    color = _trace_single_ray(
        origin[0], origin[1], origin[2], direction[0], direction[1], direction[2], max_depth
    )
    return (float(color[0]), float(color[1]), float(color[2]))


def render_sample(
    pixel_i: int, pixel_j: int, max_depth: int = MAX_DEPTH
) -> tuple[float, float, float]:
    """Render one camera sample for a pixel without touching the buffers.

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = bottom).
        max_depth: Maximum number of scatter events.

    Returns:
        Tuple of (R, G, B) color values.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    color = _render_single_pixel(pixel_i, pixel_j, width, height, max_depth)
    return (float(color[0]), float(color[1]), float(color[2]))


def render_image(num_samples: int = 1, max_depth: int = MAX_DEPTH) -> None:
    """Add num_samples samples to every pixel of the render target.

    Can be called repeatedly; samples keep accumulating.

    Args:
        num_samples: Number of samples to add per pixel.
        max_depth: Maximum number of scatter events per sample.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    for _ in range(num_samples):
        _render_one_spp(width, height, max_depth)


def get_total_samples() -> int:
    """Get the number of samples accumulated per pixel.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    return int(_sample_count[0, 0])


def get_accumulated_image_numpy() -> npt.NDArray[np.float64]:
    """Get the per-pixel radiance sums as a NumPy array.

    The values are not divided by the sample count. The array has shape
    (height, width, 3) with the top scanline first.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    image = _color_buffer.to_numpy()[:width, :height, :]

    # (width, height, 3) -> (height, width, 3), then put the top row first
    image = np.transpose(image, (1, 0, 2))
    image = np.flipud(image)

    return np.ascontiguousarray(image, dtype=np.float64)
