"""Camera module for view and ray generation.

Components:
    thin_lens: Positionable perspective camera with optional depth of field

Camera responsibilities:
    - Transform (s, t) image coordinates to world-space rays
    - Apply anti-aliasing jitter for sub-pixel sampling
    - Support look-at positioning with up vector
    - Sample ray origins over a lens aperture for defocus blur

Ray generation uses normalized image coordinates:
    s in [0, 1]: left to right across image
    t in [0, 1]: bottom to top across image
"""

from .thin_lens import (
    ThinLensCamera,
    check_camera_initialized,
    get_camera_info,
    get_ray,
    get_ray_jittered,
    is_camera_initialized,
    reset_camera,
    setup_camera,
)

__all__ = [
    "ThinLensCamera",
    "setup_camera",
    "get_ray",
    "get_ray_jittered",
    "get_camera_info",
    "is_camera_initialized",
    "check_camera_initialized",
    "reset_camera",
]
