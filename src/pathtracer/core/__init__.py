"""Core rendering module.

Components:
    vector: 3-vectors, the UnitVec3 type and reflection/refraction
    ray: Ray data structure
    rng: Per-row random number streams and samplers
    integrator: Radiance estimator, background policy and render target
    progressive: Progressive sample accumulation
    settings: Render settings and limits
"""

from .ray import Ray, make_ray, ray_at
from .vector import (
    UnitVec3,
    assume_unit,
    cos_theta,
    cross,
    dot,
    length,
    length_squared,
    near_zero,
    negate,
    real,
    reflect,
    refract,
    sin_theta,
    unit_vector,
    vec3,
)

# Note: rng, integrator and progressive declare Taichi fields and are NOT
# imported here. Import them directly after ti.init(), e.g.:
#   from pathtracer.core.progressive import ProgressiveRenderer

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "real",
    "vec3",
    "UnitVec3",
    "dot",
    "cross",
    "length",
    "length_squared",
    "near_zero",
    "unit_vector",
    "assume_unit",
    "negate",
    "cos_theta",
    "sin_theta",
    "reflect",
    "refract",
]
