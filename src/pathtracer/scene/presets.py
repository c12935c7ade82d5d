"""Preset scenes for rendering and testing.

Two scenes are provided:

- The material showcase: a huge diffuse sphere acting as the ground, a blue
  diffuse sphere in the middle, a hollow glass sphere on the left (a glass
  sphere with a smaller negative-radius glass sphere inside it) and a gold
  mirror on the right.
- The random spheres field: a grid of small spheres with randomly chosen
  materials scattered across a large ground sphere, plus one large sphere of
  each material type.

Each factory returns a ``(SceneManager, ThinLensCamera)`` pair. The camera is
not uploaded; call ``setup_camera`` before rendering.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.scene.presets import create_material_showcase_scene
    >>> from pathtracer.camera import setup_camera
    >>>
    >>> scene, camera = create_material_showcase_scene()
    >>> setup_camera(camera)
"""

import logging
import math
from dataclasses import dataclass

import numpy as np

from pathtracer.camera.thin_lens import ThinLensCamera
from pathtracer.core.settings import DEFAULT_ASPECT_RATIO
from pathtracer.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# =============================================================================
# Material Showcase Constants
# =============================================================================

GROUND_ALBEDO = (0.8, 0.8, 0.0)
CENTER_ALBEDO = (0.1, 0.2, 0.5)
GLASS_IOR = 1.5
GOLD_ALBEDO = (0.8, 0.6, 0.2)
GOLD_FUZZ = 0.0


@dataclass
class ShowcaseCameraParams:
    """Camera placement for the material showcase scene.

    The defaults look down at the three spheres from above and to the right,
    focused on the center sphere with a wide aperture.

    Attributes:
        lookfrom: Camera position.
        lookat: Point the camera looks at (the center sphere).
        vfov: Vertical field of view in degrees.
        aperture: Lens diameter. Use 0 for a pinhole camera.
        focus_dist: Focus distance. None focuses on ``lookat``.
    """

    lookfrom: tuple[float, float, float] = (3.0, 3.0, 2.0)
    lookat: tuple[float, float, float] = (0.0, 0.0, -1.0)
    vfov: float = 20.0
    aperture: float = 2.0
    focus_dist: float | None = None


@dataclass
class RandomSpheresParams:
    """Parameters for the random spheres field.

    Attributes:
        grid_extent: Small spheres are placed on the integer grid
            [-grid_extent, grid_extent) in x and z.
        small_radius: Radius of the small spheres.
        diffuse_probability: Chance that a small sphere is diffuse.
        metal_probability: Chance that a small sphere is metal. The rest
            are glass.
    """

    grid_extent: int = 11
    small_radius: float = 0.2
    diffuse_probability: float = 0.8
    metal_probability: float = 0.15


def _distance(a: tuple[float, float, float], b: tuple[float, float, float]) -> float:
    return math.sqrt(sum((x - y) ** 2 for x, y in zip(a, b)))


def create_material_showcase_scene(
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
    params: ShowcaseCameraParams | None = None,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create the material showcase scene (four objects built from five spheres).

    Args:
        aspect_ratio: Aspect ratio of the output image.
        params: Optional camera placement. Defaults to ShowcaseCameraParams().

    Returns:
        A tuple of (SceneManager, ThinLensCamera).
    """
    if params is None:
        params = ShowcaseCameraParams()

    scene = SceneManager()

    ground = scene.add_lambertian_material(GROUND_ALBEDO)
    center = scene.add_lambertian_material(CENTER_ALBEDO)
    glass = scene.add_dielectric_material(GLASS_IOR)
    gold = scene.add_metal_material(GOLD_ALBEDO, GOLD_FUZZ)

    scene.add_sphere((0.0, -100.5, -1.0), 100.0, ground)
    scene.add_sphere((0.0, 0.0, -1.0), 0.5, center)
    scene.add_sphere((-1.0, 0.0, -1.0), 0.5, glass)
    # Negative radius flips the normals, leaving a thin glass shell
    scene.add_sphere((-1.0, 0.0, -1.0), -0.4, glass)
    scene.add_sphere((1.0, 0.0, -1.0), 0.5, gold)

    focus_dist = params.focus_dist
    if focus_dist is None:
        focus_dist = _distance(params.lookfrom, params.lookat)

    camera = ThinLensCamera(
        lookfrom=params.lookfrom,
        lookat=params.lookat,
        vup=(0.0, 1.0, 0.0),
        vfov=params.vfov,
        aspect_ratio=aspect_ratio,
        aperture=params.aperture,
        focus_dist=focus_dist,
    )

    logger.info("Created material showcase scene with %d spheres", scene.get_sphere_count())
    return scene, camera


def create_random_spheres_scene(
    seed: int = 0,
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
    params: RandomSpheresParams | None = None,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create the random spheres field.

    Scene layout is drawn on the host with NumPy, so the same seed always
    yields the same scene regardless of the Taichi backend.

    Args:
        seed: Seed for the layout random generator.
        aspect_ratio: Aspect ratio of the output image.
        params: Optional layout parameters. Defaults to RandomSpheresParams().

    Returns:
        A tuple of (SceneManager, ThinLensCamera).
    """
    if params is None:
        params = RandomSpheresParams()

    rng = np.random.default_rng(seed)
    scene = SceneManager()

    scene.add_lambertian_sphere((0.0, -1000.0, 0.0), 1000.0, (0.5, 0.5, 0.5))

    radius = params.small_radius
    # Small spheres too close to the metal showpiece would intersect it
    keep_clear_of = (4.0, radius, 0.0)

    for a in range(-params.grid_extent, params.grid_extent):
        for b in range(-params.grid_extent, params.grid_extent):
            choose_mat = rng.random()
            center = (
                a + 0.9 * rng.random(),
                radius,
                b + 0.9 * rng.random(),
            )
            if _distance(center, keep_clear_of) <= 0.9:
                continue

            if choose_mat < params.diffuse_probability:
                albedo = tuple(float(c) for c in rng.random(3) * rng.random(3))
                scene.add_lambertian_sphere(center, radius, albedo)
            elif choose_mat < params.diffuse_probability + params.metal_probability:
                albedo = tuple(float(c) for c in rng.uniform(0.5, 1.0, 3))
                fuzz = float(rng.uniform(0.0, 0.5))
                scene.add_metal_sphere(center, radius, albedo, fuzz)
            else:
                scene.add_dielectric_sphere(center, radius, 1.5)

    scene.add_dielectric_sphere((0.0, 1.0, 0.0), 1.0, 1.5)
    scene.add_lambertian_sphere((-4.0, 1.0, 0.0), 1.0, (0.4, 0.2, 0.1))
    scene.add_metal_sphere((4.0, 1.0, 0.0), 1.0, (0.7, 0.6, 0.5), 0.0)

    camera = ThinLensCamera(
        lookfrom=(13.0, 2.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=0.1,
        focus_dist=10.0,
    )

    logger.info(
        "Created random spheres scene (seed=%d) with %d spheres",
        seed,
        scene.get_sphere_count(),
    )
    return scene, camera
