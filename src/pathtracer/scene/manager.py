"""Unified scene manager for coordinating spheres and materials.

This module provides a high-level scene management API that coordinates
sphere storage with material assignment. It tracks which material type
(Lambertian, Metal, Dielectric) each material ID corresponds to, enabling
material dispatch in the path tracer.

The SceneManager maintains:
- A unified material_id space across all material types
- Mapping from material_id to (material_type, type_local_index)
- High-level methods for adding spheres with materials in one call
- Scene serialization/configuration support

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> mat_id = scene.add_lambertian_material(albedo=(0.8, 0.3, 0.3))
    >>> scene.add_sphere(center=(0, 0, -1), radius=0.5, material_id=mat_id)
    >>> # Use get_material_type(mat_id) in the path tracer for dispatch
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

import taichi as ti

from pathtracer.core.vector import vec3
from pathtracer.materials.dielectric import (
    add_dielectric_material,
    clear_dielectric_materials,
)
from pathtracer.materials.lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
)
from pathtracer.materials.metal import (
    add_metal_material,
    clear_metal_materials,
)
from pathtracer.scene.intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
)

logger = logging.getLogger(__name__)


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Used for material dispatch in the path tracer to determine which
    scattering function to call.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


# Maximum number of materials across all types
MAX_MATERIALS = 3072  # 1024 per type * 3 types

# material_types[i] stores the MaterialType for material_id i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[i] stores the type-local index for material_id i
# (e.g., if material_id 5 is the 2nd metal material, material_type_indices[5] = 1)
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def _clear_material_tracking() -> None:
    """Clear the material tracking fields."""
    num_materials[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material type for a given material ID.

    Args:
        material_id: The unified material ID.

    Returns:
        The material type as an integer (see MaterialType enum).
        Returns -1 for invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the type-local index for a given material ID.

    This is used to look up material properties in the type-specific
    material arrays (e.g., lambertian_albedos[type_index]).

    Returns:
        The index into the type-specific material array, or -1 for
        invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


def _as_triple(values: Any, name: str) -> tuple[float, float, float]:
    """Convert a 3-element sequence from a config into a float tuple."""
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(values)}: {values!r}")
    return (float(values[0]), float(values[1]), float(values[2]))


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The unified material ID.
        material_type: The type of material (Lambertian, Metal, Dielectric).
        type_index: The index within the type-specific material array.
        params: The material parameters as provided during creation.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: The center of the sphere.
        radius: The signed radius of the sphere.
        material_id: The material ID assigned to the sphere.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material configurations.
        spheres: List of sphere configurations.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


class SceneManager:
    """Unified scene manager coordinating spheres and materials.

    The SceneManager provides a high-level API for building scenes with
    automatic material tracking. It maintains a unified material_id space
    that maps to type-specific material registries, enabling the path tracer
    to dispatch to the correct scattering function.

    The underlying storage lives in module-level Taichi fields, so only one
    scene is active at a time. Creating a SceneManager clears it.

    Attributes:
        materials: List of MaterialInfo for all registered materials.
        spheres: List of SphereInfo for all spheres in the scene.

    Example:
        >>> scene = SceneManager()
        >>> red_diffuse = scene.add_lambertian_material(albedo=(0.8, 0.1, 0.1))
        >>> gold_metal = scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.3)
        >>> glass = scene.add_dielectric_material(ior=1.5)
        >>> scene.add_sphere((0, 0, -1), 0.5, red_diffuse)
        >>> scene.add_sphere((1, 0, -1), 0.5, gold_metal)
        >>> scene.add_sphere((-1, 0, -1), 0.5, glass)
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        _clear_material_tracking()
        self.materials.clear()
        self.spheres.clear()

    def clear(self) -> None:
        """Clear the entire scene (spheres and materials)."""
        self._clear_all()
        logger.debug("Scene cleared")

    # =========================================================================
    # Material Management
    # =========================================================================

    def _register_material(
        self,
        material_type: MaterialType,
        type_index: int,
        params: dict[str, Any],
    ) -> int:
        """Assign a unified material ID to a type-local registry entry."""
        material_id = num_materials[None]
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        material_types[material_id] = int(material_type)
        material_type_indices[material_id] = type_index
        num_materials[None] = material_id + 1

        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=material_type,
                type_index=type_index,
                params=params,
            )
        )
        return material_id

    def add_lambertian_material(
        self,
        albedo: tuple[float, float, float],
    ) -> int:
        """Add a Lambertian (diffuse) material to the scene.

        Args:
            albedo: The diffuse reflectance color as (R, G, B) tuple.
                Each component must be in [0, 1].

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component is outside [0, 1].
        """
        type_index = add_lambertian_material(albedo)
        return self._register_material(
            MaterialType.LAMBERTIAN, type_index, {"albedo": tuple(albedo)}
        )

    def add_metal_material(
        self,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> int:
        """Add a metal (specular reflective) material to the scene.

        Args:
            albedo: The reflective color as (R, G, B) tuple.
                Each component must be in [0, 1].
            fuzz: The surface roughness in [0, 1]. Default is 0 (perfect mirror).

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component or the fuzz is outside [0, 1].
        """
        type_index = add_metal_material(albedo, fuzz)
        return self._register_material(
            MaterialType.METAL, type_index, {"albedo": tuple(albedo), "fuzz": fuzz}
        )

    def add_dielectric_material(
        self,
        ior: float = 1.5,
    ) -> int:
        """Add a dielectric (glass/water) material to the scene.

        Args:
            ior: Index of refraction. Default is 1.5 (typical glass).
                Common values: Air=1.0, Water=1.33, Glass=1.5, Diamond=2.4

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If the IOR is not positive.
        """
        type_index = add_dielectric_material(ior)
        return self._register_material(MaterialType.DIELECTRIC, type_index, {"ior": ior})

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return int(num_materials[None])

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material by ID, or None if not found."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def get_material_type_python(self, material_id: int) -> MaterialType | None:
        """Get the material type for a given material ID (Python side).

        For kernel-side lookup, use the get_material_type() Taichi function.

        Args:
            material_id: The unified material ID.

        Returns:
            The MaterialType, or None for invalid material IDs.
        """
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id].material_type
        return None

    # =========================================================================
    # Sphere Management
    # =========================================================================

    @staticmethod
    def _check_sphere_slot(radius: float) -> None:
        """Reject a sphere before anything is registered for it."""
        if radius == 0.0:
            raise ValueError("Sphere radius must be non-zero")
        if get_sphere_count() >= MAX_SPHERES:
            raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The signed radius of the sphere. A negative radius turns
                the surface inside out, which is how hollow glass is built.
            material_id: The unified material ID to assign to the sphere.

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If material_id is invalid or the radius is zero.
        """
        self._check_sphere_slot(radius)
        if material_id < 0 or material_id >= num_materials[None]:
            raise ValueError(f"Invalid material_id: {material_id}")

        center_vec = vec3(center[0], center[1], center[2])
        sphere_index = add_sphere(center_vec, radius, material_id)

        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=tuple(center),
                radius=radius,
                material_id=material_id,
            )
        )
        return sphere_index

    def add_lambertian_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
    ) -> tuple[int, int]:
        """Add a sphere with a new Lambertian material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        self._check_sphere_slot(radius)
        material_id = self.add_lambertian_material(albedo)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    def add_metal_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> tuple[int, int]:
        """Add a sphere with a new metal material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        self._check_sphere_slot(radius)
        material_id = self.add_metal_material(albedo, fuzz)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    def add_dielectric_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        ior: float = 1.5,
    ) -> tuple[int, int]:
        """Add a sphere with a new dielectric material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        self._check_sphere_slot(radius)
        material_id = self.add_dielectric_material(ior)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object.

        Returns:
            A SceneConfig containing all materials and spheres.
        """
        config = SceneConfig()

        for mat in self.materials:
            mat_config: dict[str, Any] = {"type": mat.material_type.name.lower()}
            for key, value in mat.params.items():
                mat_config[key] = list(value) if isinstance(value, tuple) else value
            config.materials.append(mat_config)

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene and loads the configuration. Materials are
        loaded first so spheres can refer to them by position.

        Args:
            config: The scene configuration to load.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()

        for mat_config in config.materials:
            mat_type = str(mat_config.get("type", "")).lower()
            if mat_type == "lambertian":
                albedo = _as_triple(mat_config.get("albedo", [0.5, 0.5, 0.5]), "albedo")
                self.add_lambertian_material(albedo)
            elif mat_type == "metal":
                albedo = _as_triple(mat_config.get("albedo", [0.8, 0.8, 0.8]), "albedo")
                self.add_metal_material(albedo, float(mat_config.get("fuzz", 0.0)))
            elif mat_type == "dielectric":
                self.add_dielectric_material(float(mat_config.get("ior", 1.5)))
            else:
                raise ValueError(f"Unknown material type: {mat_type!r}")

        for sphere_config in config.spheres:
            center = _as_triple(sphere_config.get("center", [0.0, 0.0, 0.0]), "center")
            radius = float(sphere_config.get("radius", 1.0))
            material_id = int(sphere_config.get("material_id", 0))
            self.add_sphere(center, radius, material_id)

        logger.info(
            "Loaded scene with %d materials and %d spheres",
            len(self.materials),
            len(self.spheres),
        )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {
            "materials": config.materials,
            "spheres": config.spheres,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary.

        Args:
            data: Dictionary with 'materials' and 'spheres' keys.
        """
        config = SceneConfig(
            materials=data.get("materials", []),
            spheres=data.get("spheres", []),
        )
        self.from_config(config)

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of spheres supported."""
        return MAX_SPHERES

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_MATERIALS
