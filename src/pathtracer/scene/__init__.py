"""Scene module for scene management and hit records.

Components:
    intersection: Sphere storage and closest-hit queries
    manager: Unified scene manager coordinating spheres and materials
    presets: Ready-made scenes (material showcase, random spheres field)

Scene data is organized for efficient kernel access:
    - Structure-of-Arrays layout for sphere data
    - Contiguous material ID arrays
"""

from .intersection import (
    MAX_SPHERES,
    SceneHitRecord,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneConfig,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
)
from .presets import (
    RandomSpheresParams,
    ShowcaseCameraParams,
    create_material_showcase_scene,
    create_random_spheres_scene,
)

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    # Presets
    "create_material_showcase_scene",
    "create_random_spheres_scene",
    "ShowcaseCameraParams",
    "RandomSpheresParams",
]
