"""Thin-lens camera model for perspective ray generation with depth of field.

This module implements a positionable camera that generates primary rays for
rendering. The camera supports:
- Look-at positioning (lookfrom, lookat, vup)
- Vertical field of view in degrees
- Arbitrary aspect ratios
- A finite circular aperture focused at a chosen distance (defocus blur)
- Jittered sampling for anti-aliasing

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The viewport sits on the focus plane, ``focus_dist`` units in front of the
lens, so geometry at that distance stays sharp. Ray origins are spread over a
lens disk of radius ``aperture / 2``; with ``aperture = 0`` every ray starts at
``lookfrom`` and the model reduces to a pinhole camera.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.camera.thin_lens import ThinLensCamera, setup_camera, get_ray
    >>>
    >>> camera = ThinLensCamera(
    ...     lookfrom=(3.0, 3.0, 2.0),
    ...     lookat=(0.0, 0.0, -1.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     vfov=20.0,
    ...     aspect_ratio=16.0 / 9.0,
    ...     aperture=2.0,
    ...     focus_dist=5.2,
    ... )
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(0.5, 0.5)  # Ray through image center
"""

import logging
import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from pathtracer.core.ray import Ray, make_ray
from pathtracer.core.vector import random_in_unit_disk

logger = logging.getLogger(__name__)

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class ThinLensCamera:
    """Configuration for a thin-lens (perspective) camera.

    Attributes:
        lookfrom: Camera (lens center) position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Up direction hint for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees, in (0, 180).
        aspect_ratio: Width divided by height of the output image.
        aperture: Lens diameter. 0 gives a pinhole camera with no blur.
        focus_dist: Distance from the lens to the plane of perfect focus.
    """

    lookfrom: tuple[float, float, float]
    lookat: tuple[float, float, float]
    vup: tuple[float, float, float]
    vfov: float
    aspect_ratio: float
    aperture: float = 0.0
    focus_dist: float = 1.0

    def __post_init__(self) -> None:
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov = {self.vfov} must be in (0, 180) degrees")
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio = {self.aspect_ratio} must be positive")
        if self.aperture < 0.0:
            raise ValueError(f"aperture = {self.aperture} must be non-negative")
        if self.focus_dist <= 0.0:
            raise ValueError(f"focus_dist = {self.focus_dist} must be positive")

    @property
    def lens_radius(self) -> float:
        """Radius of the lens disk that ray origins are sampled from."""
        return self.aperture / 2.0


# =============================================================================
# Taichi Fields for Camera State (GPU-accessible)
# =============================================================================

# Camera origin (lens center)
_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward (opposite view)

# Viewport vectors on the focus plane
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())  # Full width
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())  # Full height
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())  # Lower-left of viewport

_lens_radius = ti.field(dtype=ti.f32, shape=())

# Set by setup_camera(); rays generated before that have a zero direction
_camera_initialized = ti.field(dtype=ti.i32, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def setup_camera(camera: ThinLensCamera) -> None:
    """Initialize camera state from configuration.

    Computes the camera's orthonormal basis (u, v, w) and the viewport on the
    focus plane. This must be called before rendering.

    Args:
        camera: Camera configuration with position, orientation, FOV and lens.

    Raises:
        ValueError: If lookfrom equals lookat, or vup is parallel to the
            view direction (no orthonormal basis exists).
    """
    theta = math.radians(camera.vfov)
    h = math.tan(theta / 2.0)
    viewport_height = 2.0 * h
    viewport_width = camera.aspect_ratio * viewport_height

    lookfrom = np.array(camera.lookfrom, dtype=np.float64)
    lookat = np.array(camera.lookat, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)

    # w points from lookat toward lookfrom (backward)
    w = lookfrom - lookat
    w_len = np.linalg.norm(w)
    if w_len == 0.0:
        raise ValueError("lookfrom and lookat must be distinct points")
    w = w / w_len

    # u points right (perpendicular to w and vup)
    u = np.cross(vup, w)
    u_len = np.linalg.norm(u)
    if u_len < 1e-12:
        raise ValueError(f"vup = {camera.vup} must not be parallel to the view direction")
    u = u / u_len

    # v points up in the camera's frame
    v = np.cross(w, u)

    horizontal = camera.focus_dist * viewport_width * u
    vertical = camera.focus_dist * viewport_height * v
    lower_left = lookfrom - horizontal / 2.0 - vertical / 2.0 - camera.focus_dist * w

    _camera_origin[None] = lookfrom.tolist()
    _camera_u[None] = u.tolist()
    _camera_v[None] = v.tolist()
    _camera_w[None] = w.tolist()
    _viewport_horizontal[None] = horizontal.tolist()
    _viewport_vertical[None] = vertical.tolist()
    _lower_left_corner[None] = lower_left.tolist()
    _lens_radius[None] = camera.lens_radius
    _camera_initialized[None] = 1

    logger.debug(
        "Camera at %s looking at %s (vfov=%.1f, aperture=%.3f, focus_dist=%.3f)",
        camera.lookfrom,
        camera.lookat,
        camera.vfov,
        camera.aperture,
        camera.focus_dist,
    )


# =============================================================================
# Ray Generation (Taichi-compatible, GPU-callable)
# =============================================================================


@ti.func
def get_ray(s: ti.f32, t: ti.f32) -> Ray:
    """Generate a ray through normalized image coordinates (s, t).

    The ray starts at a random point on the lens disk and passes through the
    point (s, t) of the viewport on the focus plane:
    - s = 0: left edge, s = 1: right edge
    - t = 0: bottom edge, t = 1: top edge

    Args:
        s: Horizontal coordinate in [0, 1] (left to right).
        t: Vertical coordinate in [0, 1] (bottom to top).

    Returns:
        A Ray whose direction is not normalized.
    """
    rd = _lens_radius[None] * random_in_unit_disk()
    offset = _camera_u[None] * rd.x + _camera_v[None] * rd.y

    origin = _camera_origin[None]
    target = (
        _lower_left_corner[None] + s * _viewport_horizontal[None] + t * _viewport_vertical[None]
    )

    return make_ray(origin + offset, target - origin - offset)


@ti.func
def get_ray_jittered(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate a jittered ray for anti-aliasing.

    Two independent uniform offsets in [0, 1) are added to the pixel
    coordinates before normalizing, so accumulated samples cover the full
    pixel footprint.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A Ray with random sub-pixel offset for anti-aliasing.
    """
    jitter_s = ti.random(ti.f32)
    jitter_t = ti.random(ti.f32)

    s = (ti.cast(pixel_i, ti.f32) + jitter_s) / ti.cast(width, ti.f32)
    t = (ti.cast(pixel_j, ti.f32) + jitter_t) / ti.cast(height, ti.f32)

    return get_ray(s, t)


# =============================================================================
# Utility Functions
# =============================================================================


def is_camera_initialized() -> bool:
    """Return True once setup_camera() has succeeded."""
    return bool(_camera_initialized[None])


def check_camera_initialized() -> None:
    """Raise if no camera has been set up.

    Raises:
        RuntimeError: If setup_camera() has not been called since the last
            reset_camera().
    """
    if _camera_initialized[None] == 0:
        raise RuntimeError("Camera not set up. Call setup_camera() first.")


def reset_camera() -> None:
    """Forget the current camera so that rendering requires a new setup."""
    _camera_initialized[None] = 0


def get_camera_info() -> dict[str, tuple[float, float, float] | float]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, u, v, w, horizontal, vertical, lower_left
        (3-tuples) and lens_radius (float).
    """

    def _as_tuple(field) -> tuple[float, float, float]:
        vec = field[None]
        return (float(vec[0]), float(vec[1]), float(vec[2]))

    return {
        "origin": _as_tuple(_camera_origin),
        "u": _as_tuple(_camera_u),
        "v": _as_tuple(_camera_v),
        "w": _as_tuple(_camera_w),
        "horizontal": _as_tuple(_viewport_horizontal),
        "vertical": _as_tuple(_viewport_vertical),
        "lower_left": _as_tuple(_lower_left_corner),
        "lens_radius": float(_lens_radius[None]),
    }
