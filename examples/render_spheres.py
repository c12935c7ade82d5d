#!/usr/bin/env python3
"""Render a sphere scene with the path tracer.

This script renders one of the preset scenes end to end: it creates the
scene, sets up the thin-lens camera, renders with progressive refinement and
writes the result as plain-text PPM or PNG (chosen by the output extension).

Usage:
    python examples/render_spheres.py [options]

Options:
    --scene {showcase,random}   Preset scene (default: showcase)
    --width WIDTH               Image width in pixels (default: 400)
    --aspect-ratio RATIO        Width / height (default: 1.7778)
    --samples SAMPLES           Samples per pixel (default: 100)
    --max-depth DEPTH           Maximum bounces per path (default: 50)
    --seed SEED                 Random seed (default: 0)
    --aperture APERTURE         Override the camera aperture
    --vfov DEGREES              Override the vertical field of view
    --normals                   Shade by surface normal instead of path tracing
    --output OUTPUT             Output file path (default: spheres.ppm)
    --batch-size SIZE           Samples per progress update (default: 10)
    --gpu                       Try the GPU backend first
    --preview                   Show the result with Matplotlib
    --quiet                     Suppress progress output

Example:
    python examples/render_spheres.py --scene random --width 200 --samples 20 --output random.png
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
import time
from pathlib import Path

import taichi as ti

logger = logging.getLogger("render_spheres")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a sphere scene with the path tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        choices=("showcase", "random"),
        default="showcase",
        help="Preset scene (default: showcase)",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=400,
        help="Image width in pixels (default: 400)",
    )
    parser.add_argument(
        "--aspect-ratio",
        type=float,
        default=16.0 / 9.0,
        help="Image width divided by height (default: 16/9)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=100,
        help="Number of samples per pixel (default: 100)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=50,
        help="Maximum number of bounces per path (default: 50)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Seed for the renderer and the random scene layout (default: 0)",
    )
    parser.add_argument(
        "--aperture",
        type=float,
        default=None,
        help="Override the camera aperture (0 disables depth of field)",
    )
    parser.add_argument(
        "--vfov",
        type=float,
        default=None,
        help="Override the vertical field of view in degrees",
    )
    parser.add_argument(
        "--normals",
        action="store_true",
        help="Shade by surface normal instead of path tracing",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="spheres.ppm",
        help="Output file path, .ppm or any Pillow format (default: spheres.ppm)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=10,
        help="Samples per progress update (default: 10)",
    )
    parser.add_argument(
        "--gpu",
        action="store_true",
        help="Try the GPU backend first, falling back to CPU",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Show the finished render in a Matplotlib window",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def render_spheres(
    settings,
    scene_name: str = "showcase",
    output_path: str = "spheres.ppm",
    batch_size: int = 10,
    aperture: float | None = None,
    vfov: float | None = None,
    normals: bool = False,
    preview: bool = False,
    quiet: bool = False,
) -> Path:
    """Render a preset scene and save it to a file.

    Args:
        settings: RenderSettings with image size, sampling and seed.
        scene_name: "showcase" or "random".
        output_path: Output file path (.ppm or a Pillow format).
        batch_size: Number of samples to render between progress updates.
        aperture: Optional camera aperture override.
        vfov: Optional vertical field of view override.
        normals: If True, shade by surface normal.
        preview: If True, show the result with Matplotlib.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from pathtracer.camera import setup_camera
    from pathtracer.core.integrator import ShadingMode
    from pathtracer.core.progressive import ProgressiveRenderer
    from pathtracer.scene.presets import (
        create_material_showcase_scene,
        create_random_spheres_scene,
    )

    if not quiet:
        print(f"Creating {scene_name} scene ({settings.image_width}x{settings.image_height})...")

    if scene_name == "random":
        scene, camera = create_random_spheres_scene(
            seed=settings.seed, aspect_ratio=settings.aspect_ratio
        )
    else:
        scene, camera = create_material_showcase_scene(aspect_ratio=settings.aspect_ratio)

    overrides = {}
    if aperture is not None:
        overrides["aperture"] = aperture
    if vfov is not None:
        overrides["vfov"] = vfov
    if overrides:
        camera = dataclasses.replace(camera, **overrides)

    setup_camera(camera)

    mode = ShadingMode.NORMALS if normals else ShadingMode.PATH_TRACE
    renderer = ProgressiveRenderer.from_settings(settings, mode=mode)

    if not quiet:
        print(f"Rendering {settings.samples_per_pixel} samples per pixel...")

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (current / target) * 100 if target > 0 else 0
            samples_per_sec = current / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {current}/{target} samples "
                f"({progress_pct:.1f}%) - {samples_per_sec:.1f} spp/s",
                end="",
                flush=True,
            )

    renderer.render(
        num_samples=settings.samples_per_pixel,
        batch_size=batch_size,
        callback=progress_callback,
    )

    if not quiet:
        print()  # Newline after progress

    output_file = Path(output_path)
    renderer.save_image(output_file)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    if preview:
        from pathtracer.preview.display import show_preview

        show_preview(renderer)

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    from pathtracer.core.settings import RenderSettings

    try:
        settings = RenderSettings(
            image_width=args.width,
            aspect_ratio=args.aspect_ratio,
            samples_per_pixel=args.samples,
            max_depth=args.max_depth,
            seed=args.seed,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # Initialize Taichi; the seed fixes the per-thread random streams
    if args.gpu:
        try:
            ti.init(arch=ti.gpu, random_seed=settings.seed)
            logger.info("Using GPU backend")
        except Exception:
            ti.init(arch=ti.cpu, random_seed=settings.seed)
            logger.info("GPU unavailable, using CPU backend")
    else:
        ti.init(arch=ti.cpu, random_seed=settings.seed)
        logger.info("Using CPU backend")

    try:
        render_spheres(
            settings,
            scene_name=args.scene,
            output_path=args.output,
            batch_size=args.batch_size,
            aperture=args.aperture,
            vfov=args.vfov,
            normals=args.normals,
            preview=args.preview,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
