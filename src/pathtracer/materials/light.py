"""Emissive light material.

A light ignores the incoming ray and the hit geometry and ends the path with
its own radiance. The color may exceed 1 in any channel.
"""

import taichi as ti

from pathtracer.core.ray import Ray
from pathtracer.core.vector import vec3
from pathtracer.geometry.sphere import HitRecord
from pathtracer.materials.scatter import ScatterResult, make_emit


@ti.func
def scatter_light(color: vec3, ray_in: Ray, rec: HitRecord) -> ScatterResult:
    """Return an EMIT result carrying the light's color."""
    return make_emit(color)
