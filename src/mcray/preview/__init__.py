"""Image output.

Components:
    export: Gamma correction, plain-text PPM and PNG export

Example:
    >>> import sys
    >>> from mcray.preview import write_ppm
    >>> write_ppm(sys.stdout, renderer.get_accumulated_image(), renderer.sample_count)
"""

from mcray.preview.export import (
    compute_rmse,
    gamma_correct,
    save_png,
    save_ppm,
    to_rgb8,
    write_ppm,
)

__all__ = [
    "gamma_correct",
    "to_rgb8",
    "write_ppm",
    "save_ppm",
    "save_png",
    "compute_rmse",
]
