"""Image export for accumulated renders.

The render target stores per-pixel sums of linear radiance. Exporting
divides by the sample count, gamma corrects with gamma 2 (a square root),
clamps to [0, 0.999] and scales by 256 to get 8-bit channels.

Supported formats:
    - Plain-text PPM (P3) written to any text stream
    - PNG via Pillow

Example:
    >>> import sys
    >>> from mcray.preview.export import write_ppm
    >>> from mcray.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(400, 225)
    >>> renderer.render(100)
    >>> write_ppm(sys.stdout, renderer.get_accumulated_image(), renderer.sample_count)
"""

from __future__ import annotations

from pathlib import Path
from typing import TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

# Largest displayable channel value before scaling
CHANNEL_CLAMP_MAX = 0.999

PPM_MAX_VALUE = 255


def gamma_correct(
    color_sums: npt.NDArray[np.floating],
    samples_per_pixel: int,
) -> npt.NDArray[np.float64]:
    """Average the sums and apply gamma 2 correction.

    Args:
        color_sums: Linear radiance summed over samples, any shape ending in 3.
        samples_per_pixel: Number of samples contributing to each sum.

    Returns:
        sqrt(color_sums / samples_per_pixel) clamped to [0, 0.999].

    Raises:
        ValueError: If samples_per_pixel is not positive.
    """
    if samples_per_pixel <= 0:
        raise ValueError(f"samples_per_pixel = {samples_per_pixel} must be positive")

    scale = 1.0 / samples_per_pixel
    averaged = np.maximum(np.asarray(color_sums, dtype=np.float64) * scale, 0.0)
    return np.clip(np.sqrt(averaged), 0.0, CHANNEL_CLAMP_MAX)


def to_rgb8(
    color_sums: npt.NDArray[np.floating],
    samples_per_pixel: int,
) -> npt.NDArray[np.uint8]:
    """Convert radiance sums into 8-bit RGB values.

    Args:
        color_sums: Linear radiance summed over samples.
        samples_per_pixel: Number of samples contributing to each sum.

    Returns:
        Array of the same shape with dtype uint8.
    """
    corrected = gamma_correct(color_sums, samples_per_pixel)
    return (256.0 * corrected).astype(np.uint8)


def write_ppm(
    stream: TextIO,
    color_sums: npt.NDArray[np.floating],
    samples_per_pixel: int,
) -> None:
    """Write an image as plain-text PPM.

    The header is "P3", then "width height", then the maximum value 255.
    One "r g b" line per pixel follows, row-major with the top row first.

    Args:
        stream: Text stream to write to.
        color_sums: Radiance sums of shape (height, width, 3), top row first.
        samples_per_pixel: Number of samples contributing to each sum.
    """
    rgb = to_rgb8(color_sums, samples_per_pixel)
    height, width, _ = rgb.shape

    stream.write(f"P3\n{width} {height}\n{PPM_MAX_VALUE}\n")
    for row in rgb:
        for r, g, b in row:
            stream.write(f"{r} {g} {b}\n")


def save_ppm(
    filepath: str | Path,
    color_sums: npt.NDArray[np.floating],
    samples_per_pixel: int,
) -> None:
    """Write an image to a plain-text PPM file."""
    with open(filepath, "w", encoding="ascii") as stream:
        write_ppm(stream, color_sums, samples_per_pixel)


def save_png(
    filepath: str | Path,
    color_sums: npt.NDArray[np.floating],
    samples_per_pixel: int,
) -> None:
    """Write an image to a PNG file using the same conversion as PPM.

    Args:
        filepath: Output file path (should end in .png).
        color_sums: Radiance sums of shape (height, width, 3), top row first.
        samples_per_pixel: Number of samples contributing to each sum.
    """
    image_uint8 = to_rgb8(color_sums, samples_per_pixel)
    pil_image = PILImage.fromarray(image_uint8)
    pil_image.save(filepath)


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes must match: {image_a.shape} vs {image_b.shape}"
        )

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
