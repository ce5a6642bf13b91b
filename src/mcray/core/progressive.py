"""Progressive renderer for iterative sample accumulation.

This module wraps the core integrator with:
- Render settings (image size, samples per pixel, depth) and their validation
- Batch rendering (several samples per pixel per call)
- Progress callbacks or a generator for reporting remaining work
- Export of the accumulated image as PPM or PNG

Example:
    >>> import sys
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from mcray.core.progressive import ProgressiveRenderer
    >>> from mcray.scene.presets import create_three_spheres_scene
    >>> from mcray.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_three_spheres_scene()
    >>> setup_camera(camera)
    >>>
    >>> renderer = ProgressiveRenderer(400, 225)
    >>> renderer.render(100)
    >>> renderer.write_ppm(sys.stdout)
"""

from collections.abc import Callable, Generator
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

import numpy as np
import numpy.typing as npt

from mcray.core.integrator import (
    MAX_DEPTH,
    MAX_IMAGE_HEIGHT,
    MAX_IMAGE_WIDTH,
    clear_render_target,
    get_accumulated_image_numpy,
    get_total_samples,
    render_image,
    setup_render_target,
)
from mcray.preview import export

# Callback receives (current_samples, total_target_samples)
ProgressCallback = Callable[[int, int], None]


@dataclass
class RenderSettings:
    """Image and sampling settings for a render.

    Attributes:
        image_width: Output width in pixels.
        aspect_ratio: Width divided by height.
        samples_per_pixel: Number of jittered samples averaged per pixel.
        max_depth: Maximum number of scatter events per camera ray.
    """

    image_width: int = 400
    aspect_ratio: float = 16.0 / 9.0
    samples_per_pixel: int = 100
    max_depth: int = MAX_DEPTH

    @property
    def image_height(self) -> int:
        """Output height in pixels, truncated from width / aspect_ratio."""
        return int(self.image_width / self.aspect_ratio)

    def validate(self) -> None:
        """Check the settings can be rendered.

        Raises:
            ValueError: If a value is out of range.
        """
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio = {self.aspect_ratio} must be positive")
        if not 2 <= self.image_width <= MAX_IMAGE_WIDTH:
            raise ValueError(
                f"image_width = {self.image_width} must be in [2, {MAX_IMAGE_WIDTH}]"
            )
        if not 2 <= self.image_height <= MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"image_height = {self.image_height} must be in [2, {MAX_IMAGE_HEIGHT}]"
            )
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel = {self.samples_per_pixel} must be at least 1")
        if self.max_depth < 0:
            raise ValueError(f"max_depth = {self.max_depth} must not be negative")


class ProgressiveRenderer:
    """A renderer that accumulates samples over repeated calls.

    The renderer delegates to the module-level integrator buffers, so only
    one renderer is active at a time.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: Maximum number of scatter events per camera ray.
    """

    def __init__(self, width: int, height: int, max_depth: int = MAX_DEPTH) -> None:
        """Set up the render target.

        Raises:
            ValueError: If a dimension is out of range or max_depth is negative.
        """
        if max_depth < 0:
            raise ValueError(f"max_depth = {max_depth} must not be negative")
        self._width = width
        self._height = height
        self.max_depth = max_depth
        setup_render_target(width, height)

    @classmethod
    def from_settings(cls, settings: RenderSettings) -> "ProgressiveRenderer":
        """Create a renderer sized by a validated RenderSettings."""
        settings.validate()
        return cls(settings.image_width, settings.image_height, settings.max_depth)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def sample_count(self) -> int:
        """Get the current number of accumulated samples per pixel."""
        return get_total_samples()

    def reset(self) -> None:
        """Discard accumulated samples, keeping the image size."""
        clear_render_target()

    def render(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Accumulate num_samples more samples per pixel.

        Args:
            num_samples: Number of samples to add.
            batch_size: Number of samples to render between callbacks.
            callback: Called after each batch with
                (current_total_samples, target_total_samples).

        Raises:
            ValueError: If batch_size is less than 1.
        """
        for current, target in self.render_progressive(num_samples, batch_size):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Accumulate samples, yielding progress after each batch.

        Yields:
            Tuple of (current_total_samples, target_total_samples).

        Example:
            >>> for current, target in renderer.render_progressive(100, batch_size=10):
            ...     print(f"{target - current} samples remaining")
        """
        if batch_size < 1:
            raise ValueError(f"batch_size = {batch_size} must be at least 1")
        if num_samples <= 0:
            return

        target_samples = self.sample_count + num_samples

        remaining = num_samples
        while remaining > 0:
            batch = min(batch_size, remaining)
            render_image(batch, self.max_depth)
            remaining -= batch
            yield (self.sample_count, target_samples)

    def get_accumulated_image(self) -> npt.NDArray[np.float64]:
        """Get the per-pixel radiance sums, shape (height, width, 3), top row first."""
        return get_accumulated_image_numpy()

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the averaged, gamma corrected image as 8-bit RGB."""
        return export.to_rgb8(self.get_accumulated_image(), self._require_samples())

    def write_ppm(self, stream: TextIO) -> None:
        """Write the averaged image as plain-text PPM."""
        export.write_ppm(stream, self.get_accumulated_image(), self._require_samples())

    def save_ppm(self, filepath: str | Path) -> None:
        """Save the averaged image to a plain-text PPM file."""
        export.save_ppm(filepath, self.get_accumulated_image(), self._require_samples())

    def save_png(self, filepath: str | Path) -> None:
        """Save the averaged image to a PNG file."""
        export.save_png(filepath, self.get_accumulated_image(), self._require_samples())

    def _require_samples(self) -> int:
        samples = self.sample_count
        if samples == 0:
            raise RuntimeError("No samples rendered yet. Call render() first.")
        return samples

    def __repr__(self) -> str:
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"samples={self.sample_count})"
        )
