"""Scene manager coordinating spheres and their materials.

The SceneManager is the host-side builder for a scene. It registers
materials in the per-type tables, hands out unified material ids and adds
spheres that reference those ids. It also keeps a Python-side record of
everything added, so a scene can be exported to and rebuilt from a plain
configuration.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from mcray.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> glass = scene.add_dielectric_material(ir=1.5)
    >>> scene.add_sphere((-1.0, 0.0, -1.0), 0.5, glass)
    0
    >>> scene.add_sphere((-1.0, 0.0, -1.0), -0.45, glass)  # hollow shell
    1
"""

from dataclasses import dataclass, field
from typing import Any

from mcray.materials.dielectric import add_dielectric_material, clear_dielectric_materials
from mcray.materials.lambertian import add_lambertian_material, clear_lambertian_materials
from mcray.materials.material import (
    MAX_MATERIALS,
    MaterialType,
    clear_material_tracking,
    get_material_count,
    register_material,
)
from mcray.materials.metal import add_metal_material, clamp_fuzz, clear_metal_materials
from mcray.scene.intersection import MAX_SPHERES, add_sphere, clear_scene, get_sphere_count


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The unified material ID.
        material_type: The material variant.
        type_index: The index within the variant's parameter table.
        params: The material parameters as stored.
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
        radius: The radius of the sphere (negative for a hollow shell).
        material_id: The material ID assigned to the sphere.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class SceneConfig:
    """Plain-data description of a scene.

    Sphere entries refer to materials by their position in `materials`.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


def _as_vec3(values: Any) -> tuple[float, float, float]:
    return (float(values[0]), float(values[1]), float(values[2]))


class SceneManager:
    """Host-side builder for a sphere scene.

    Creating a SceneManager clears any scene and material state left in the
    Taichi fields, so only one scene is active at a time.

    Attributes:
        materials: MaterialInfo for every registered material, indexed by id.
        spheres: SphereInfo for every sphere, in insertion order.

    Example:
        >>> scene = SceneManager()
        >>> ground = scene.add_lambertian_material(albedo=(0.8, 0.8, 0.0))
        >>> scene.add_sphere((0.0, -100.5, -1.0), 100.0, ground)
        0
        >>> scene.add_metal_sphere((1.0, 0.0, -1.0), 0.5, albedo=(0.8, 0.6, 0.2))
        (1, 1)
    """

    def __init__(self) -> None:
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        clear_material_tracking()
        self.materials.clear()
        self.spheres.clear()

    def clear(self) -> None:
        """Remove every sphere and material."""
        self._clear_all()

    # =========================================================================
    # Material Management
    # =========================================================================

    def _register(
        self, material_type: MaterialType, type_index: int, params: dict[str, Any]
    ) -> int:
        material_id = register_material(material_type, type_index)
        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=material_type,
                type_index=type_index,
                params=params,
            )
        )
        return material_id

    def add_lambertian_material(self, albedo: tuple[float, float, float]) -> int:
        """Add a Lambertian (diffuse) material.

        Args:
            albedo: The diffuse reflectance as (R, G, B), each in [0, 1].

        Returns:
            The unified material ID.

        Raises:
            RuntimeError: If a material table is full.
            ValueError: If any albedo component is outside [0, 1].
        """
        type_index = add_lambertian_material(albedo)
        return self._register(
            MaterialType.LAMBERTIAN, type_index, {"albedo": _as_vec3(albedo)}
        )

    def add_metal_material(
        self,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> int:
        """Add a metal (specular reflective) material.

        Args:
            albedo: The reflective color as (R, G, B), each in [0, 1].
            fuzz: Reflection perturbation, clamped to [0, 1]. 0 is a mirror.

        Returns:
            The unified material ID.

        Raises:
            RuntimeError: If a material table is full.
            ValueError: If any albedo component is outside [0, 1].
        """
        type_index = add_metal_material(albedo, fuzz)
        return self._register(
            MaterialType.METAL,
            type_index,
            {"albedo": _as_vec3(albedo), "fuzz": clamp_fuzz(fuzz)},
        )

    def add_dielectric_material(self, ir: float = 1.5) -> int:
        """Add a dielectric (glass/water) material.

        Args:
            ir: Index of refraction. Default is 1.5 (typical glass).

        Returns:
            The unified material ID.

        Raises:
            RuntimeError: If a material table is full.
            ValueError: If ir is not positive.
        """
        type_index = add_dielectric_material(ir)
        return self._register(MaterialType.DIELECTRIC, type_index, {"ir": float(ir)})

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return get_material_count()

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material by ID, or None if unknown."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    # =========================================================================
    # Sphere Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere that uses an existing material.

        Any number of spheres may share one material ID.

        Args:
            center: The center point as (x, y, z).
            radius: The radius. A negative radius flips the normals inward.
            material_id: A unified material ID from add_*_material().

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If material_id is unknown.
        """
        if material_id < 0 or material_id >= get_material_count():
            raise ValueError(f"Invalid material_id: {material_id}")

        center_tuple = _as_vec3(center)
        sphere_index = add_sphere(center_tuple, radius, material_id)
        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=center_tuple,
                radius=float(radius),
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
        material_id = self.add_lambertian_material(albedo)
        return self.add_sphere(center, radius, material_id), material_id

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
        material_id = self.add_metal_material(albedo, fuzz)
        return self.add_sphere(center, radius, material_id), material_id

    def add_dielectric_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        ir: float = 1.5,
    ) -> tuple[int, int]:
        """Add a sphere with a new dielectric material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_dielectric_material(ir)
        return self.add_sphere(center, radius, material_id), material_id

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
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
        """Replace the current scene with the one described by config.

        Materials are added first, in order, so their ids match the
        material_id values of the sphere entries.

        Raises:
            ValueError: If a material type is unknown or any value is invalid.
        """
        self.clear()

        for mat_config in config.materials:
            mat_type = str(mat_config.get("type", "")).lower()
            if mat_type == "lambertian":
                self.add_lambertian_material(_as_vec3(mat_config.get("albedo", [0.5, 0.5, 0.5])))
            elif mat_type == "metal":
                self.add_metal_material(
                    _as_vec3(mat_config.get("albedo", [0.8, 0.8, 0.8])),
                    mat_config.get("fuzz", 0.0),
                )
            elif mat_type == "dielectric":
                self.add_dielectric_material(mat_config.get("ir", 1.5))
            else:
                raise ValueError(f"Unknown material type: {mat_type}")

        for sphere_config in config.spheres:
            self.add_sphere(
                _as_vec3(sphere_config.get("center", [0.0, 0.0, 0.0])),
                sphere_config.get("radius", 1.0),
                sphere_config.get("material_id", 0),
            )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {"materials": config.materials, "spheres": config.spheres}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary with 'materials' and 'spheres' keys."""
        self.from_config(
            SceneConfig(
                materials=data.get("materials", []),
                spheres=data.get("spheres", []),
            )
        )

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
