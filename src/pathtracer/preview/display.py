"""Matplotlib-based preview display for rendered images.

Matplotlib is imported lazily, so the rest of the package works without a
display backend.

Example:
    >>> from pathtracer.preview.display import show_preview
    >>> from pathtracer.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(400, 225)
    >>> renderer.render(100)
    >>> show_preview(renderer)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from pathtracer.preview.export import compute_rmse

if TYPE_CHECKING:
    from pathtracer.core.progressive import ProgressiveRenderer


def show_preview(
    renderer: ProgressiveRenderer,
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 4.5),
    block: bool = True,
) -> None:
    """Display the current render as a Matplotlib figure.

    The sample count is displayed in the title.

    Args:
        renderer: The ProgressiveRenderer instance to display.
        title: Custom title (default shows sample count).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    image = renderer.get_image_rgb8()

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(image)
    ax.axis("off")

    if title is None:
        title = f"Render Preview - {renderer.sample_count} SPP"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)


def show_comparison(
    image_a: npt.NDArray[np.uint8],
    image_b: npt.NDArray[np.uint8],
    *,
    labels: tuple[str, str] = ("A", "B"),
    diff_scale: float = 10.0,
    figsize: tuple[float, float] = (16, 6),
    block: bool = True,
) -> float:
    """Display side-by-side comparison of two images with difference view.

    Args:
        image_a: First 8-bit image (H, W, 3).
        image_b: Second 8-bit image (H, W, 3).
        labels: Labels for the two images.
        diff_scale: Scale factor for difference amplification.
        figsize: Figure size in inches.
        block: Whether to block execution until figure is closed.

    Returns:
        RMSE between the two images, in [0, 1] channel units.
    """
    import matplotlib.pyplot as plt

    a = image_a.astype(np.float64) / 255.0
    b = image_b.astype(np.float64) / 255.0
    rmse = compute_rmse(a, b)

    diff_amplified = np.clip(np.abs(a - b) * diff_scale, 0.0, 1.0)

    fig, axes = plt.subplots(1, 3, figsize=figsize)

    axes[0].imshow(image_a)
    axes[0].set_title(labels[0])
    axes[0].axis("off")

    axes[1].imshow(image_b)
    axes[1].set_title(labels[1])
    axes[1].axis("off")

    axes[2].imshow(diff_amplified)
    axes[2].set_title(f"Difference ({diff_scale}x) - RMSE: {rmse:.6f}")
    axes[2].axis("off")

    plt.tight_layout()
    plt.show(block=block)

    return rmse
