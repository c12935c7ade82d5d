"""Image export utilities for rendered images.

Rendered images arrive here already resolved: 8-bit RGB arrays of shape
(height, width, 3), top row first, as returned by ``get_image_rgb8()``.

Supported formats:
    - PPM (plain-text P3, written by hand)
    - PNG and anything else Pillow can write

Example:
    >>> from pathtracer.preview.export import write_ppm
    >>> from pathtracer.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(400, 225)
    >>> renderer.render(100)
    >>> with open("output.ppm", "w") as f:
    ...     write_ppm(renderer.get_image_rgb8(), f)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)


def _check_rgb8(image: npt.NDArray[np.uint8]) -> None:
    """Raise ValueError unless image is a (H, W, 3) uint8 array."""
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (H, W, 3), got {image.shape}")
    if image.dtype != np.uint8:
        raise ValueError(f"Expected a uint8 image, got dtype {image.dtype}")


def _write_ppm_stream(image: npt.NDArray[np.uint8], stream: TextIO) -> None:
    height, width, _ = image.shape
    stream.write(f"P3\n{width} {height}\n255\n")
    for row in image:
        for r, g, b in row:
            stream.write(f"{r} {g} {b}\n")


def write_ppm(image: npt.NDArray[np.uint8], target: str | Path | TextIO) -> None:
    """Write an image in the plain-text PPM (P3) format.

    The header is ``P3``, then ``width height``, then the maximum channel
    value ``255``. Each pixel follows on its own line as ``r g b``, rows
    from top to bottom, pixels left to right.

    Args:
        image: 8-bit RGB image of shape (H, W, 3), top row first.
        target: A file path, or an open text stream to write into.

    Raises:
        ValueError: If the image is not a (H, W, 3) uint8 array.
    """
    _check_rgb8(image)

    if isinstance(target, (str, Path)):
        with open(target, "w", encoding="ascii") as f:
            _write_ppm_stream(image, f)
        logger.info("Wrote %dx%d PPM to %s", image.shape[1], image.shape[0], target)
    else:
        _write_ppm_stream(image, target)


def save_png(image: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save an 8-bit RGB image with Pillow.

    The image has already been gamma corrected by the pixel sampler, so the
    values are written as-is.

    Args:
        image: 8-bit RGB image of shape (H, W, 3), top row first.
        filepath: Output file path (e.g. "output.png").

    Raises:
        ValueError: If the image is not a (H, W, 3) uint8 array.
    """
    _check_rgb8(image)

    pil_image = PILImage.fromarray(image)
    pil_image.save(filepath)
    logger.info("Wrote %dx%d image to %s", image.shape[1], image.shape[0], filepath)


def save_image(image: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save an image, choosing the format from the file extension.

    ``.ppm`` writes plain-text P3; every other extension goes to Pillow.
    """
    if Path(filepath).suffix.lower() == ".ppm":
        write_ppm(image, filepath)
    else:
        save_png(image, filepath)


def compute_rmse(
    image_a: npt.NDArray[np.generic],
    image_b: npt.NDArray[np.generic],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes must match: {image_a.shape} vs {image_b.shape}"
        )

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
