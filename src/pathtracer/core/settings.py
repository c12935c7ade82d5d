"""Render settings shared by the pixel sampler, renderer and CLI.

The defaults reproduce the reference render: a 400 pixel wide 16:9 image with
100 samples per pixel and a bounce limit of 50.
"""

from dataclasses import dataclass

# Default image and sampling parameters
DEFAULT_ASPECT_RATIO = 16.0 / 9.0
DEFAULT_IMAGE_WIDTH = 400
DEFAULT_SAMPLES_PER_PIXEL = 100
DEFAULT_MAX_DEPTH = 50


@dataclass
class RenderSettings:
    """Image size and sampling configuration.

    Attributes:
        image_width: Output width in pixels.
        aspect_ratio: Width divided by height. The image height is derived
            from it (truncated toward zero, at least one row).
        samples_per_pixel: Number of jittered camera rays averaged per pixel.
        max_depth: Maximum number of scattering events per path.
        seed: Seed for the Taichi random generator. Renders with the same
            seed, backend and settings draw the same random sequence.

    Example:
        >>> settings = RenderSettings(image_width=200)
        >>> settings.image_height
        112
    """

    image_width: int = DEFAULT_IMAGE_WIDTH
    aspect_ratio: float = DEFAULT_ASPECT_RATIO
    samples_per_pixel: int = DEFAULT_SAMPLES_PER_PIXEL
    max_depth: int = DEFAULT_MAX_DEPTH
    seed: int = 0

    def __post_init__(self) -> None:
        if self.image_width < 1:
            raise ValueError(f"image_width must be at least 1, got {self.image_width}")
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.samples_per_pixel < 1:
            raise ValueError(
                f"samples_per_pixel must be at least 1, got {self.samples_per_pixel}"
            )
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")

    @property
    def image_height(self) -> int:
        """Image height in pixels, derived from width and aspect ratio."""
        return max(1, int(self.image_width / self.aspect_ratio))
