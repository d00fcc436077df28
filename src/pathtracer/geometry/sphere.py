"""Sphere primitive and ray-sphere intersection.

The intersection solves |O + tD - C|^2 = r^2 for t. Since every ray direction
is unit length the quadratic coefficient a is 1, and the half-b form keeps the
discriminant free of the factor-of-4 cancellation:

    half_b = (O - C) . D
    c = |O - C|^2 - r^2
    discriminant = half_b^2 - c
    t = -half_b -/+ sqrt(discriminant)

The nearer root is preferred; the farther root is used when the nearer one
falls outside [t_min, t_max] (for example when the ray starts inside the
sphere).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

from enum import IntEnum

import taichi as ti

from pathtracer.core.ray import Ray, ray_at
from pathtracer.core.vector import (
    UnitVec3,
    assume_unit,
    cos_theta,
    dot,
    length_squared,
    negate,
    real,
    vec3,
)


class Face(IntEnum):
    """Side of a surface a ray arrived from.

    FRONT means the ray hit from the side the outward normal points to;
    BACK means it hit from inside the sphere.
    """

    BACK = 0
    FRONT = 1


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive).
    """

    center: vec3
    radius: real


@ti.dataclass
class HitRecord:
    """Record of a ray-sphere intersection.

    Attributes:
        hit: Whether the ray intersected the sphere (1 if hit, 0 if miss).
        t: The ray parameter of the intersection. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
        normal: The oriented surface normal. It always opposes the incoming
            ray: the outward normal for a FRONT hit, its negation for a BACK
            hit. Only valid if hit == 1.
        face: Face.FRONT or Face.BACK. Only valid if hit == 1.
    """

    hit: ti.i32
    t: real
    point: vec3
    normal: UnitVec3
    face: ti.i32


@ti.func
def make_hit_record(ray: Ray, t: real, outward_normal: UnitVec3) -> HitRecord:
    """Build a hit record, resolving the face and orienting the normal.

    Args:
        ray: The incoming ray.
        t: The accepted ray parameter.
        outward_normal: The geometric normal pointing out of the surface.

    Returns:
        A HitRecord with hit == 1 whose normal opposes the ray direction.
    """
    face = int(Face.FRONT)
    normal = outward_normal
    if cos_theta(ray.direction, outward_normal) >= 0.0:
        face = int(Face.BACK)
        normal = negate(outward_normal)
    return HitRecord(hit=1, t=t, point=ray_at(ray, t), normal=normal, face=face)


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=UnitVec3(v=vec3(0.0, 0.0, 0.0)),
        face=int(Face.BACK),
    )


@ti.func
def hit_sphere(sphere: Sphere, ray: Ray, t_min: real, t_max: real) -> HitRecord:
    """Test for ray-sphere intersection within [t_min, t_max].

    A negative discriminant is the well-defined miss outcome, not an error.

    Args:
        sphere: The sphere to test against.
        ray: The ray, with unit direction.
        t_min: Smallest accepted ray parameter.
        t_max: Largest accepted ray parameter.

    Returns:
        A HitRecord; check its hit field to determine if an intersection
        was accepted.
    """
    result = make_miss_record()

    oc = ray.origin - sphere.center
    half_b = dot(oc, ray.direction.v)
    c = length_squared(oc) - sphere.radius * sphere.radius
    discriminant = half_b * half_b - c

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        root = -half_b - sqrt_d
        valid = t_min <= root and root <= t_max
        if not valid:
            root = -half_b + sqrt_d
            valid = t_min <= root and root <= t_max

        if valid:
            point = ray_at(ray, root)
            # Dividing by the radius yields unit length without a sqrt
            outward_normal = assume_unit((point - sphere.center) / sphere.radius)
            result = make_hit_record(ray, root, outward_normal)

    return result
