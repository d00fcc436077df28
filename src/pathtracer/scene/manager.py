"""Scene manager for building sphere scenes from Python.

The SceneManager is the scene-construction interface: it keeps an ordered,
Python-side list of (center, radius, material) entries in step with the
Taichi sphere storage that kernels read, and converts scenes to and from
plain dictionaries and JSON files.

Scene dictionaries have the form::

    {
        "spheres": [
            {"center": [0, 0, -1], "radius": 0.5,
             "material": {"type": "diffuse", "albedo": [0.5, 0.5, 0.5]}},
            ...
        ],
        "camera": {"lookfrom": [...], "lookat": [...], ...}   # optional
    }

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.materials.material import Diffuse, Metal
    >>> from pathtracer.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> scene.add_sphere((0, 0, -1), 0.5, Diffuse(albedo=(0.8, 0.3, 0.3)))
    0
    >>> scene.add_sphere((1, 0, -1), 0.5, Metal(albedo=(0.8, 0.6, 0.2), fuzz=0.3))
    1
    >>> scene.save_json("scene.json")
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from pathtracer.camera.thin_lens import ThinLensCamera
from pathtracer.materials.material import (
    MaterialSpec,
    material_from_dict,
    material_to_dict,
)
from pathtracer.scene.world import MAX_SPHERES, add_sphere, clear_scene, get_sphere_count

logger = logging.getLogger(__name__)


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: The center of the sphere.
        radius: The radius of the sphere.
        material: The material owned by the sphere.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material: MaterialSpec


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        spheres: List of sphere configurations.
        camera: Optional camera configuration (ThinLensCamera fields).
    """

    spheres: list[dict[str, Any]] = field(default_factory=list)
    camera: dict[str, Any] | None = None


def _vec3(values: Any, name: str) -> tuple[float, float, float]:
    if not isinstance(values, (list, tuple)):
        raise ValueError(f"{name} must be a list of 3 numbers, got {values!r}")
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(values)}")
    return (float(values[0]), float(values[1]), float(values[2]))


def camera_to_dict(camera: ThinLensCamera) -> dict[str, Any]:
    """Serialize a camera to a dictionary of JSON-friendly values."""
    data = asdict(camera)
    for key in ("lookfrom", "lookat", "vup"):
        data[key] = list(data[key])
    return data


def camera_from_dict(data: dict[str, Any]) -> ThinLensCamera:
    """Create a camera from a dictionary.

    Missing optional keys take the ThinLensCamera defaults.

    Raises:
        ValueError: If lookfrom or lookat is missing or the camera is invalid.
    """
    if not isinstance(data, dict):
        raise ValueError("Camera configuration must be a dictionary")
    if "lookfrom" not in data or "lookat" not in data:
        raise ValueError("Camera configuration requires 'lookfrom' and 'lookat'")
    kwargs: dict[str, Any] = {
        "lookfrom": _vec3(data["lookfrom"], "lookfrom"),
        "lookat": _vec3(data["lookat"], "lookat"),
    }
    if "vup" in data:
        kwargs["vup"] = _vec3(data["vup"], "vup")
    for key in ("vfov", "aspect_ratio", "aperture", "focus_distance"):
        if key in data:
            kwargs[key] = float(data[key])
    camera = ThinLensCamera(**kwargs)
    camera.validate()
    return camera


class SceneManager:
    """Ordered collection of spheres, each owning its material.

    Creating a SceneManager clears the Taichi sphere storage, so only one
    scene is live at a time.

    Attributes:
        spheres: List of SphereInfo for all spheres in the scene.
        camera: Camera loaded with the scene, if any.

    Example:
        >>> scene = SceneManager()
        >>> scene.add_sphere((0, -100.5, -1), 100, Diffuse(albedo=(0.5, 0.5, 0.5)))
        >>> scene.add_sphere((0, 0, -1), 0.5, Dielectric(refractive_index=1.5))
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.spheres: list[SphereInfo] = []
        self.camera: ThinLensCamera | None = None
        self._clear_all()

    def _clear_all(self) -> None:
        clear_scene()
        self.spheres.clear()
        self.camera = None

    def clear(self) -> None:
        """Clear the entire scene, resetting the Taichi sphere storage."""
        self._clear_all()

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material: MaterialSpec,
    ) -> int:
        """Add a sphere with its material to the scene.

        Args:
            center: The center of the sphere.
            radius: The radius of the sphere. Must be positive.
            material: The sphere's material.

        Returns:
            The sphere index.

        Raises:
            ValueError: If the radius is not positive.
            TypeError: If material is not a supported material kind.
            RuntimeError: If the maximum number of spheres is exceeded.
        """
        center = _vec3(center, "center")
        sphere_index = add_sphere(center, radius, material)
        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=center,
                radius=float(radius),
                material=material,
            )
        )
        return sphere_index

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    def get_sphere_info(self, sphere_index: int) -> SphereInfo | None:
        """Get information about a sphere, or None if the index is invalid."""
        if 0 <= sphere_index < len(self.spheres):
            return self.spheres[sphere_index]
        return None

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        config = SceneConfig()
        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material": material_to_dict(sphere.material),
                }
            )
        if self.camera is not None:
            config.camera = camera_to_dict(self.camera)
        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene and loads the configuration.

        Args:
            config: The scene configuration to load.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()

        if not isinstance(config.spheres, list):
            raise ValueError("Scene 'spheres' must be a list")
        for i, sphere_config in enumerate(config.spheres):
            if not isinstance(sphere_config, dict):
                raise ValueError(f"Sphere {i} must be a dictionary")
            if "material" not in sphere_config:
                raise ValueError(f"Sphere {i} has no material")
            center = _vec3(sphere_config.get("center", [0.0, 0.0, 0.0]), "center")
            radius = float(sphere_config.get("radius", 1.0))
            material = material_from_dict(sphere_config["material"])
            self.add_sphere(center, radius, material)

        if config.camera is not None:
            self.camera = camera_from_dict(config.camera)

        logger.debug("Loaded scene with %d spheres", len(self.spheres))

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        data: dict[str, Any] = {"spheres": config.spheres}
        if config.camera is not None:
            data["camera"] = config.camera
        return data

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary.

        Args:
            data: Dictionary with a 'spheres' key and an optional 'camera' key.

        Raises:
            ValueError: If the data is not a scene dictionary or describes an
                invalid scene.
        """
        if not isinstance(data, dict):
            raise ValueError(
                f"Scene data must be a dictionary, got {type(data).__name__}"
            )
        config = SceneConfig(
            spheres=data.get("spheres", []),
            camera=data.get("camera"),
        )
        self.from_config(config)

    def save_json(self, filepath: str | Path) -> None:
        """Write the scene to a JSON file."""
        path = Path(filepath)
        path.write_text(json.dumps(self.to_dict(), indent=2))
        logger.info("Saved scene with %d spheres to %s", len(self.spheres), path)

    @classmethod
    def load_json(cls, filepath: str | Path) -> "SceneManager":
        """Create a scene from a JSON file.

        Raises:
            ValueError: If the file is not valid JSON or describes an invalid
                scene.
        """
        path = Path(filepath)
        try:
            data = json.loads(path.read_text())
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid scene file {path}: {e}") from e
        scene = cls()
        scene.from_dict(data)
        logger.info("Loaded scene with %d spheres from %s", len(scene.spheres), path)
        return scene

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of spheres supported."""
        return MAX_SPHERES

    def __repr__(self) -> str:
        return f"SceneManager(spheres={len(self.spheres)})"
