"""Path tracing integrator and pixel sampler.

This module implements the light-transport estimate for a single camera ray
and the per-pixel sampling loop built on top of it.

A camera ray is followed through a chain of scattering events. At every
bounce the closest sphere is found, its material either absorbs the ray or
produces a new direction and an attenuation color, and the running product of
attenuations is carried forward. A ray that escapes the scene picks up the sky
gradient, scaled by that product. An absorbed ray, or one still bouncing when
the depth budget runs out, contributes black.

Pixels accumulate a running sum of jittered samples. Resolving the buffer
divides by the sample count, applies gamma 2 (square root), clamps and
quantizes to 8 bits.

Key features:
    - Material dispatch (Lambertian, Metal, Dielectric)
    - Sky gradient background (the only light source)
    - Normal-visualization shading mode for diagnostics
    - Progressive sample accumulation

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.integrator import (
    ...     render_image, setup_render_target, get_image_rgb8
    ... )
    >>> from pathtracer.scene.presets import create_material_showcase_scene
    >>> from pathtracer.camera import setup_camera
    >>>
    >>> scene, camera = create_material_showcase_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(400, 225)
    >>> render_image(num_samples=100)
    >>> pixels = get_image_rgb8()  # (225, 400, 3) uint8, top row first
"""

import logging
from enum import IntEnum

import numpy as np
import taichi as ti
import taichi.math as tm

from pathtracer.camera.thin_lens import check_camera_initialized, get_ray, get_ray_jittered
from pathtracer.core.vector import normalize, vec3
from pathtracer.materials.dielectric import get_dielectric_ior, scatter_dielectric
from pathtracer.materials.lambertian import get_lambertian_albedo, scatter_lambertian
from pathtracer.materials.metal import get_metal_albedo, get_metal_fuzz, scatter_metal
from pathtracer.scene.intersection import intersect_scene
from pathtracer.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

# Default maximum number of scattering events per path
MAX_DEPTH = 50

# Ray parameter window for scene queries. The lower bound skips hits caused by
# floating point error at the surface a ray just left (shadow acne).
T_MIN = 0.001
T_MAX = tm.inf

# Largest linear value kept after gamma correction, so that 256 * value < 256
MAX_INTENSITY = 0.999

# Sky gradient endpoints: straight down blends to GROUND_COLOR, straight up
# to SKY_COLOR
GROUND_COLOR = vec3(1.0, 1.0, 1.0)
SKY_COLOR = vec3(0.5, 0.7, 1.0)


class ShadingMode(IntEnum):
    """How a camera ray is turned into a color.

    PATH_TRACE follows the full material walk. NORMALS stops at the first hit
    and maps its unit normal to a color, 0.5 * (n + 1).
    """

    PATH_TRACE = 0
    NORMALS = 1


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Running sum of sample colors (preallocated to max size)
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Sample count per pixel (preallocated to max size)
_sample_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Quantized 8-bit channel values written by resolve_image()
_resolved_buffer = ti.Vector.field(3, dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers.
    The buffers are preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT
    to avoid Taichi kernel recompilation issues.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum
            supported size.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Image dimensions ({width}x{height}) must be positive")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()
    logger.debug("Render target set up at %dx%d", width, height)


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _color_buffer.fill(0.0)
    _sample_count.fill(0)
    _resolved_buffer.fill(0)


def reset_render_target() -> None:
    """Clear the buffers and mark the render target as not set up."""
    clear_render_target()
    _render_target_initialized[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def get_sample_count() -> "ti.ScalarField":
    """Get the sample count field.

    Note: This returns the full preallocated buffer. Use get_image_dimensions()
    to determine the active region.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return _sample_count


# =============================================================================
# Shading
# =============================================================================


@ti.func
def background_color(direction: vec3) -> vec3:
    """Sky gradient seen by a ray that escapes the scene.

    Blends linearly from GROUND_COLOR to SKY_COLOR with the height of the
    normalized direction, t = 0.5 * (unit_direction.y + 1).
    """
    unit_direction = normalize(direction)
    t = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - t) * GROUND_COLOR + t * SKY_COLOR


@ti.func
def shade_normals(normal: vec3) -> vec3:
    """Map a unit normal to an RGB color in [0, 1]."""
    return 0.5 * (normal + vec3(1.0, 1.0, 1.0))


@ti.func
def _scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Dispatch to the appropriate material scattering function.

    Args:
        material_id: The unified material ID.
        incident_direction: The incoming ray direction (any length).
        normal: The unit surface normal, facing the incoming ray.
        front_face: 1 if hit front face, 0 if back face.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: The new ray direction (not normalized).
        - attenuation: The color attenuation for this bounce.
        - did_scatter: 1 if ray scattered, 0 if absorbed.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        albedo = get_lambertian_albedo(type_index)
        scattered_direction, attenuation = scatter_lambertian(albedo, normal)
        did_scatter = 1

    elif mat_type == int(MaterialType.METAL):
        albedo = get_metal_albedo(type_index)
        fuzz = get_metal_fuzz(type_index)
        scattered_direction, attenuation, did_scatter = scatter_metal(
            albedo, fuzz, incident_direction, normal
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        ior = get_dielectric_ior(type_index)
        scattered_direction, attenuation = scatter_dielectric(
            ior, incident_direction, normal, front_face
        )
        did_scatter = 1

    return scattered_direction, attenuation, did_scatter


@ti.func
def ray_color(origin: vec3, direction: vec3, max_depth: ti.i32, mode: ti.i32) -> vec3:
    """Estimate the color carried back along a ray.

    Iterative form of the recursive definition

        color(ray, depth) = attenuation * color(scattered, depth - 1)

    The product of attenuations is kept in ``throughput``; the loop ends when
    the ray escapes (sky gradient times throughput), is absorbed (black) or
    runs out of depth (black). A max_depth below 1 yields black.

    Args:
        origin: Ray origin.
        direction: Ray direction (any non-zero length).
        max_depth: Maximum number of scene queries along the path.
        mode: A ShadingMode value.

    Returns:
        The estimated linear RGB color.
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    ray_origin = origin
    ray_direction = direction

    # Active flag for path continuation
    active = 1

    for _ in range(max_depth):
        if active == 1:
            rec = intersect_scene(ray_origin, ray_direction, T_MIN, T_MAX)

            if rec.hit == 0:
                color = throughput * background_color(ray_direction)
                active = 0
            elif mode == int(ShadingMode.NORMALS):
                color = throughput * shade_normals(rec.normal)
                active = 0
            else:
                scattered_direction, attenuation, did_scatter = _scatter_material(
                    rec.material_id, ray_direction, rec.normal, rec.front_face
                )

                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    ray_origin = rec.point
                    ray_direction = scattered_direction

    return color


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_one_spp(width: ti.i32, height: ti.i32, max_depth: ti.i32, mode: ti.i32):
    """Trace one jittered sample through every pixel and accumulate it."""
    for i, j in ti.ndrange(width, height):
        ray = get_ray_jittered(i, j, width, height)
        color = ray_color(ray.origin, ray.direction, max_depth, mode)

        # Drop NaN/Inf samples from degenerate geometry
        for c in ti.static(range(3)):
            if tm.isnan(color[c]) or tm.isinf(color[c]):
                color[c] = 0.0

        _color_buffer[i, j] += color
        _sample_count[i, j] += 1


@ti.kernel
def _resolve(width: ti.i32, height: ti.i32):
    """Average, gamma correct, clamp and quantize the accumulated samples."""
    for i, j in ti.ndrange(width, height):
        n = _sample_count[i, j]
        rgb = vec3(0.0, 0.0, 0.0)
        if n > 0:
            rgb = ti.sqrt(_color_buffer[i, j] / ti.cast(n, ti.f32))
        rgb = tm.clamp(rgb, 0.0, MAX_INTENSITY)
        _resolved_buffer[i, j] = ti.cast(256.0 * rgb, ti.i32)


@ti.kernel
def _render_single_pixel(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    max_depth: ti.i32,
    mode: ti.i32,
) -> vec3:
    """Render a single jittered sample for a specific pixel."""
    ray = get_ray_jittered(pixel_i, pixel_j, width, height)
    return ray_color(ray.origin, ray.direction, max_depth, mode)


@ti.kernel
def _trace_camera_ray(s: ti.f32, t: ti.f32, max_depth: ti.i32, mode: ti.i32) -> vec3:
    """Trace the camera ray through viewport coordinates (s, t)."""
    ray = get_ray(s, t)
    return ray_color(ray.origin, ray.direction, max_depth, mode)


# =============================================================================
# Public Rendering API
# =============================================================================


def _check_depth(max_depth: int) -> None:
    if max_depth < 0:
        raise ValueError(f"max_depth must be non-negative, got {max_depth}")


def render_sample(
    pixel_i: int,
    pixel_j: int,
    max_depth: int = MAX_DEPTH,
    mode: ShadingMode = ShadingMode.PATH_TRACE,
) -> tuple[float, float, float]:
    """Render a single sample for a specific pixel.

    This is a Python-callable function for testing. For production rendering,
    use render_image() which processes all pixels in parallel.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        max_depth: Maximum number of scattering events.
        mode: How the camera ray is shaded.

    Returns:
        Tuple of linear (R, G, B) color values.

    Raises:
        RuntimeError: If the render target or the camera has not been set up.
    """
    _check_render_target_initialized()
    _check_depth(max_depth)
    check_camera_initialized()

    width, height = get_image_dimensions()
    color = _render_single_pixel(pixel_i, pixel_j, width, height, max_depth, int(mode))

    return (float(color[0]), float(color[1]), float(color[2]))


def trace_camera_ray(
    s: float,
    t: float,
    max_depth: int = MAX_DEPTH,
    mode: ShadingMode = ShadingMode.PATH_TRACE,
) -> tuple[float, float, float]:
    """Trace one camera ray through normalized viewport coordinates.

    Unlike render_sample() no jitter is applied, so with a pinhole camera the
    ray is fully determined by (s, t). Does not need a render target.

    Args:
        s: Horizontal coordinate in [0, 1] (left to right).
        t: Vertical coordinate in [0, 1] (bottom to top).
        max_depth: Maximum number of scattering events.
        mode: How the camera ray is shaded.

    Returns:
        Tuple of linear (R, G, B) color values.

    Raises:
        RuntimeError: If the camera has not been set up.
    """
    _check_depth(max_depth)
    check_camera_initialized()
    color = _trace_camera_ray(s, t, max_depth, int(mode))
    return (float(color[0]), float(color[1]), float(color[2]))


def render_image(
    num_samples: int = 1,
    max_depth: int = MAX_DEPTH,
    mode: ShadingMode = ShadingMode.PATH_TRACE,
) -> None:
    """Render the image with the specified number of samples per pixel.

    Adds samples to the running sum in the color buffer. Can be called
    multiple times to add more samples for convergence.

    Args:
        num_samples: Number of samples to render per pixel.
        max_depth: Maximum number of scattering events per path.
        mode: How camera rays are shaded.

    Raises:
        RuntimeError: If the render target or the camera has not been set up.
        ValueError: If num_samples or max_depth is negative.
    """
    _check_render_target_initialized()
    _check_depth(max_depth)
    if num_samples < 0:
        raise ValueError(f"num_samples must be non-negative, got {num_samples}")
    check_camera_initialized()

    width, height = get_image_dimensions()

    for _ in range(num_samples):
        _render_one_spp(width, height, max_depth, int(mode))


def get_total_samples() -> int:
    """Get the total number of samples rendered so far.

    Returns the sample count from pixel (0, 0), which is the same for all
    pixels after calling render_image().

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    return int(_sample_count[0, 0])


def resolve_image() -> None:
    """Convert the accumulated samples into 8-bit channel values.

    Each channel becomes int(256 * clamp(sqrt(sum / n), 0, MAX_INTENSITY)),
    which always lands in [0, 255]. Pixels without samples resolve to black.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    _resolve(width, height)


def get_image_rgb8() -> np.ndarray:
    """Resolve the image and return it as an 8-bit RGB array.

    Returns:
        NumPy array of shape (height, width, 3) and dtype uint8, top row
        first.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    resolve_image()

    width, height = get_image_dimensions()
    full_image = _resolved_buffer.to_numpy()

    # Extract active region
    image = full_image[:width, :height, :]

    # Transpose from (width, height, 3) to (height, width, 3) for standard image format
    image = np.transpose(image, (1, 0, 2))

    # Flip vertically (pixel row 0 is the bottom of the viewport)
    image = np.flipud(image)

    return np.ascontiguousarray(image, dtype=np.uint8)
