"""Scattering outcome shared by all materials.

A material's response to an incoming ray is one of three outcomes:

    REFLECT: the path continues along ``scattered`` and its throughput is
             multiplied by ``attenuation``.
    ABSORB:  the path ends and contributes nothing.
    EMIT:    the path ends at a light source that contributes ``emitted``.
"""

from enum import IntEnum

import taichi as ti

from pathtracer.core.ray import Ray
from pathtracer.core.vector import UnitVec3, vec3


class ScatterKind(IntEnum):
    """Tag for the active variant of a ScatterResult."""

    REFLECT = 0
    ABSORB = 1
    EMIT = 2


@ti.dataclass
class ScatterResult:
    """Result of scattering a ray off a material.

    Attributes:
        kind: The outcome tag (see ScatterKind).
        attenuation: Throughput multiplier. Only valid for REFLECT.
        scattered: The outgoing ray. Only valid for REFLECT.
        emitted: The emitted radiance. Only valid for EMIT.
    """

    kind: ti.i32
    attenuation: vec3
    scattered: Ray
    emitted: vec3


@ti.func
def make_reflect(attenuation: vec3, scattered: Ray) -> ScatterResult:
    """Create a REFLECT result continuing the path along ``scattered``."""
    return ScatterResult(
        kind=int(ScatterKind.REFLECT),
        attenuation=attenuation,
        scattered=scattered,
        emitted=vec3(0.0, 0.0, 0.0),
    )


@ti.func
def make_emit(color: vec3) -> ScatterResult:
    """Create an EMIT result terminating the path with radiance ``color``."""
    zero = vec3(0.0, 0.0, 0.0)
    return ScatterResult(
        kind=int(ScatterKind.EMIT),
        attenuation=zero,
        scattered=Ray(origin=zero, direction=UnitVec3(v=zero)),
        emitted=color,
    )


@ti.func
def make_absorb() -> ScatterResult:
    """Create an ABSORB result terminating the path with no contribution."""
    zero = vec3(0.0, 0.0, 0.0)
    return ScatterResult(
        kind=int(ScatterKind.ABSORB),
        attenuation=zero,
        scattered=Ray(origin=zero, direction=UnitVec3(v=zero)),
        emitted=zero,
    )
