"""Closed material sum type and scattering dispatch.

Four material kinds exist and no others can be added at runtime:

    Diffuse(albedo)              matte surfaces
    Metal(albedo, fuzz)          mirrors and brushed metal
    Dielectric(refractive_index) glass, water
    Light(color)                 emitters

On the Python side each kind is a frozen dataclass; together they form the
``MaterialSpec`` union used for scene construction. On the Taichi side a
material is a single tagged struct: ``kind`` selects the variant and the
remaining members hold its parameters. ``scatter`` switches over every tag, so
dispatch is total.

Example:
    >>> from pathtracer.materials.material import Diffuse, Metal, pack_material
    >>> pack_material(Metal(albedo=(0.8, 0.6, 0.2), fuzz=0.3))
    (1, (0.8, 0.6, 0.2), 0.3, 0.0)
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Union

import taichi as ti

from pathtracer.core.ray import Ray
from pathtracer.core.vector import real, vec3
from pathtracer.geometry.sphere import HitRecord
from pathtracer.materials.dielectric import scatter_dielectric
from pathtracer.materials.diffuse import scatter_diffuse
from pathtracer.materials.light import scatter_light
from pathtracer.materials.metal import scatter_metal
from pathtracer.materials.scatter import ScatterResult, make_absorb

Color = tuple[float, float, float]


class MaterialKind(IntEnum):
    """Tag of the material variant stored in a Material struct."""

    DIFFUSE = 0
    METAL = 1
    DIELECTRIC = 2
    LIGHT = 3


@ti.dataclass
class Material:
    """Tagged material parameters for use inside kernels.

    Attributes:
        kind: The variant tag (see MaterialKind).
        color: Albedo for DIFFUSE and METAL, emitted radiance for LIGHT.
        fuzz: Reflection blur for METAL.
        refractive_index: Index of refraction for DIELECTRIC.
    """

    kind: ti.i32
    color: vec3
    fuzz: real
    refractive_index: real


# =============================================================================
# Python-side Material Specs
# =============================================================================


def _check_color(name: str, color: Color) -> None:
    if len(color) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(color)}")
    for c in color:
        if c < 0.0:
            raise ValueError(f"{name} components must be non-negative, got {color}")


@dataclass(frozen=True)
class Diffuse:
    """Lambertian diffuse material.

    Attributes:
        albedo: Reflectance per channel, typically in [0, 1].
    """

    albedo: Color

    def __post_init__(self) -> None:
        _check_color("albedo", self.albedo)


@dataclass(frozen=True)
class Metal:
    """Specular metal material.

    Attributes:
        albedo: Reflectance per channel.
        fuzz: Reflection blur in [0, 1]; 0 is a perfect mirror.
    """

    albedo: Color
    fuzz: float = 0.0

    def __post_init__(self) -> None:
        _check_color("albedo", self.albedo)
        if not 0.0 <= self.fuzz <= 1.0:
            raise ValueError(f"fuzz = {self.fuzz} is outside [0, 1]")


@dataclass(frozen=True)
class Dielectric:
    """Transparent refractive material.

    Attributes:
        refractive_index: Index of refraction. Common values are 1.33 for
            water, 1.5 for glass and 2.4 for diamond.
    """

    refractive_index: float = 1.5

    def __post_init__(self) -> None:
        if self.refractive_index <= 0.0:
            raise ValueError(
                f"refractive_index = {self.refractive_index} must be positive"
            )


@dataclass(frozen=True)
class Light:
    """Emissive material.

    Attributes:
        color: Emitted radiance per channel; may exceed 1.
    """

    color: Color

    def __post_init__(self) -> None:
        _check_color("color", self.color)


MaterialSpec = Union[Diffuse, Metal, Dielectric, Light]


def pack_material(material: MaterialSpec) -> tuple[int, Color, float, float]:
    """Flatten a material spec into the members of the Material struct.

    Args:
        material: One of Diffuse, Metal, Dielectric or Light.

    Returns:
        Tuple of (kind, color, fuzz, refractive_index).

    Raises:
        TypeError: If material is not one of the four material kinds.
    """
    if isinstance(material, Diffuse):
        return int(MaterialKind.DIFFUSE), tuple(material.albedo), 0.0, 0.0
    if isinstance(material, Metal):
        return int(MaterialKind.METAL), tuple(material.albedo), float(material.fuzz), 0.0
    if isinstance(material, Dielectric):
        return (
            int(MaterialKind.DIELECTRIC),
            (0.0, 0.0, 0.0),
            0.0,
            float(material.refractive_index),
        )
    if isinstance(material, Light):
        return int(MaterialKind.LIGHT), tuple(material.color), 0.0, 0.0
    raise TypeError(f"Unsupported material type: {type(material).__name__}")


def material_to_dict(material: MaterialSpec) -> dict[str, Any]:
    """Serialize a material spec to a plain dictionary."""
    if isinstance(material, Diffuse):
        return {"type": "diffuse", "albedo": list(material.albedo)}
    if isinstance(material, Metal):
        return {"type": "metal", "albedo": list(material.albedo), "fuzz": material.fuzz}
    if isinstance(material, Dielectric):
        return {"type": "dielectric", "refractive_index": material.refractive_index}
    if isinstance(material, Light):
        return {"type": "light", "color": list(material.color)}
    raise TypeError(f"Unsupported material type: {type(material).__name__}")


def _color_param(data: dict[str, Any], kind: str, key: str) -> Color:
    if key not in data:
        raise ValueError(f"{kind} material requires '{key}'")
    values = data[key]
    if not isinstance(values, (list, tuple)):
        raise ValueError(f"{kind} material '{key}' must be a list of 3 numbers")
    return tuple(float(c) for c in values)


def material_from_dict(data: dict[str, Any]) -> MaterialSpec:
    """Create a material spec from a dictionary.

    Args:
        data: Dictionary with a "type" key ("diffuse", "metal", "dielectric"
            or "light") and that kind's parameters.

    Returns:
        The material spec.

    Raises:
        ValueError: If the type is unknown, a required parameter is missing or
            a parameter is invalid.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Material must be a dictionary, got {type(data).__name__}")
    kind = data.get("type")
    if kind == "diffuse":
        return Diffuse(albedo=_color_param(data, kind, "albedo"))
    if kind == "metal":
        return Metal(
            albedo=_color_param(data, kind, "albedo"),
            fuzz=float(data.get("fuzz", 0.0)),
        )
    if kind == "dielectric":
        return Dielectric(refractive_index=float(data.get("refractive_index", 1.5)))
    if kind == "light":
        return Light(color=_color_param(data, kind, "color"))
    raise ValueError(f"Unknown material type: {kind!r}")


# =============================================================================
# Scattering Dispatch
# =============================================================================


@ti.func
def scatter(stream: ti.i32, material: Material, ray_in: Ray, rec: HitRecord) -> ScatterResult:
    """Scatter an incoming ray according to the material kind.

    Args:
        stream: Random stream index.
        material: The material of the hit sphere.
        ray_in: The incoming ray.
        rec: The hit record for the intersection.

    Returns:
        The ScatterResult for the material's variant.
    """
    result = make_absorb()

    if material.kind == int(MaterialKind.DIFFUSE):
        result = scatter_diffuse(stream, material.color, ray_in, rec)
    elif material.kind == int(MaterialKind.METAL):
        result = scatter_metal(stream, material.color, material.fuzz, ray_in, rec)
    elif material.kind == int(MaterialKind.DIELECTRIC):
        result = scatter_dielectric(stream, material.refractive_index, ray_in, rec)
    elif material.kind == int(MaterialKind.LIGHT):
        result = scatter_light(material.color, ray_in, rec)

    return result
