"""Ray data structure.

A ray is an origin point and a unit direction. Because the direction is a
``UnitVec3``, the parameter t of ``ray_at`` is a true distance along the ray,
which the sphere intersection relies on (its quadratic has a = 1).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.core.ray import make_ray, ray_at
    >>> from pathtracer.core.vector import unit_vector, vec3
    >>> @ti.kernel
    ... def point() -> vec3:
    ...     ray = make_ray(vec3(0.0, 0.0, 0.0), unit_vector(vec3(0.0, 0.0, -2.0)))
    ...     return ray_at(ray, 5.0)  # (0, 0, -5)
"""

import taichi as ti

from pathtracer.core.vector import UnitVec3, real, vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and a unit direction.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of the ray (UnitVec3).
    """

    origin: vec3
    direction: UnitVec3


@ti.func
def ray_at(ray: Ray, t: real) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + ray.direction * t.
    """
    return ray.origin + ray.direction.v * t


@ti.func
def make_ray(origin: vec3, direction: UnitVec3) -> Ray:
    """Create a ray from an origin and a unit direction."""
    return Ray(origin=origin, direction=direction)
