"""Progressive renderer for iterative sample accumulation.

This module provides a convenient wrapper around the core integrator that supports:
- Progressive rendering that refines over time
- Batch rendering (multiple SPP in one call)
- Progress callbacks for UI updates
- Easy reset and re-render functionality

A render is cancelled simply by not asking for more samples: stop iterating
the generator, or stop calling render().

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.progressive import ProgressiveRenderer
    >>> from pathtracer.scene.presets import create_material_showcase_scene
    >>> from pathtracer.camera import setup_camera
    >>>
    >>> scene, camera = create_material_showcase_scene()
    >>> setup_camera(camera)
    >>>
    >>> renderer = ProgressiveRenderer(400, 225)
    >>> renderer.render(100)  # Render 100 SPP
    >>> image = renderer.get_image_rgb8()
"""

import logging
from collections.abc import Callable, Generator
from pathlib import Path

import numpy as np
import numpy.typing as npt

from pathtracer.core.integrator import (
    MAX_DEPTH,
    ShadingMode,
    clear_render_target,
    get_image_rgb8,
    get_total_samples,
    render_image,
    setup_render_target,
)
from pathtracer.core.settings import RenderSettings

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (current_samples, total_target_samples)
ProgressCallback = Callable[[int, int], None]


class ProgressiveRenderer:
    """A progressive renderer that accumulates samples over time.

    The renderer keeps its own width, height, depth limit and shading mode,
    and delegates to the global integrator buffers (which are Taichi fields).

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: Maximum number of scattering events per path.
        mode: How camera rays are shaded.
    """

    def __init__(
        self,
        width: int,
        height: int,
        max_depth: int = MAX_DEPTH,
        mode: ShadingMode = ShadingMode.PATH_TRACE,
    ) -> None:
        """Initialize the progressive renderer.

        Args:
            width: Image width in pixels (max 2048).
            height: Image height in pixels (max 2048).
            max_depth: Maximum number of scattering events per path.
            mode: How camera rays are shaded.

        Raises:
            ValueError: If dimensions are invalid or max_depth is negative.
        """
        if max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {max_depth}")
        self._width = width
        self._height = height
        self.max_depth = max_depth
        self.mode = mode
        setup_render_target(width, height)

    @classmethod
    def from_settings(
        cls,
        settings: RenderSettings,
        mode: ShadingMode = ShadingMode.PATH_TRACE,
    ) -> "ProgressiveRenderer":
        """Create a renderer sized and limited by a RenderSettings."""
        return cls(settings.image_width, settings.image_height, settings.max_depth, mode)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def sample_count(self) -> int:
        """Get the current number of accumulated samples per pixel."""
        return get_total_samples()

    def reset(self) -> None:
        """Reset the accumulator for a new render.

        Clears the color buffer and sample count, allowing a fresh render
        without changing the image dimensions.
        """
        clear_render_target()

    def resize(self, width: int, height: int) -> None:
        """Resize the render target and reset accumulator.

        Raises:
            ValueError: If dimensions are invalid. The renderer keeps its
                previous size in that case.
        """
        setup_render_target(width, height)
        self._width = width
        self._height = height

    def render(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render samples progressively with optional progress callback.

        Accumulates the specified number of samples into the existing buffer.
        Can be called multiple times to continue refining the image.

        Args:
            num_samples: Total number of samples to add.
            batch_size: Number of samples to render before each callback.
                A larger batch size reduces callback overhead but provides
                less frequent updates.
            callback: Optional callback function called after each batch.
                Receives (current_total_samples, target_total_samples).

        Raises:
            ValueError: If batch_size is less than 1.

        Example:
            >>> def progress(current, target):
            ...     print(f"Progress: {current}/{target} samples")
            >>> renderer.render(100, batch_size=10, callback=progress)
        """
        for current, target in self.render_progressive(num_samples, batch_size):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Render samples progressively, yielding progress after each batch.

        This is a generator-based alternative to render() with callbacks.

        Args:
            num_samples: Total number of samples to add.
            batch_size: Number of samples to render before each yield.

        Yields:
            Tuple of (current_total_samples, target_total_samples).

        Raises:
            ValueError: If batch_size is less than 1.

        Example:
            >>> for current, target in renderer.render_progressive(100, batch_size=10):
            ...     print(f"Progress: {current}/{target} samples")
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        if num_samples <= 0:
            return

        start_samples = self.sample_count
        target_samples = start_samples + num_samples
        logger.debug(
            "Rendering %d samples (%dx%d, max_depth=%d, mode=%s)",
            num_samples,
            self.width,
            self.height,
            self.max_depth,
            self.mode.name,
        )

        remaining = num_samples
        while remaining > 0:
            batch = min(batch_size, remaining)
            render_image(batch, self.max_depth, self.mode)
            remaining -= batch
            yield (self.sample_count, target_samples)

    def get_image_rgb8(self) -> npt.NDArray[np.uint8]:
        """Get the gamma-corrected 8-bit image, shape (height, width, 3)."""
        return get_image_rgb8()

    def save_image(self, filepath: str | Path) -> None:
        """Save the rendered image to a file.

        The format follows the extension: ``.ppm`` writes plain-text PPM,
        anything else goes through Pillow.

        Args:
            filepath: Path to save the image (e.g., "output.png").
        """
        from pathtracer.preview.export import save_image

        save_image(self.get_image_rgb8(), filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"samples={self.sample_count})"
        )
