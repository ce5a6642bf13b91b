"""Camera module.

Components:
    thin_lens: Look-at camera with a lens disk for defocus blur

Image coordinates are normalized:
    s in [0, 1]: left to right across the image
    t in [0, 1]: bottom to top across the image
"""

from .thin_lens import (
    ThinLensCamera,
    get_camera_basis,
    get_camera_info,
    get_camera_origin,
    get_ray,
    get_ray_jittered,
    setup_camera,
)

__all__ = [
    "ThinLensCamera",
    "setup_camera",
    "get_ray",
    "get_ray_jittered",
    "get_camera_origin",
    "get_camera_basis",
    "get_camera_info",
]
