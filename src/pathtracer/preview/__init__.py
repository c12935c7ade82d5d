"""Preview module for output and visualization.

Components:
    display: Matplotlib-based preview display
    export: PPM and PNG image export utilities

Example:
    >>> from pathtracer.preview import show_preview, save_image
    >>> from pathtracer.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(400, 225)
    >>> renderer.render(100)
    >>> show_preview(renderer)
    >>> save_image(renderer.get_image_rgb8(), "output.png")
"""

from pathtracer.preview.display import show_comparison, show_preview
from pathtracer.preview.export import (
    compute_rmse,
    save_image,
    save_png,
    write_ppm,
)

__all__ = [
    # Display functions
    "show_preview",
    "show_comparison",
    # Export functions
    "write_ppm",
    "save_png",
    "save_image",
    "compute_rmse",
]
