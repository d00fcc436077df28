"""Diffuse (Lambertian) material.

The scattered direction is the surface normal plus a random unit vector drawn
uniformly from the sphere. The sum is distributed as cos(theta) over the
hemisphere around the normal, so no explicit cosine or pdf weighting is
needed: the attenuation is simply the albedo.

When the random unit vector is almost exactly opposite the normal the sum is
nearly zero and cannot be normalized; the normal itself is used instead.

Example:
    >>> # Within a Taichi kernel:
    >>> # result = scatter_diffuse(stream, albedo, ray_in, rec)
"""

import taichi as ti

from pathtracer.core.ray import Ray, make_ray
from pathtracer.core.rng import random_unit_vector
from pathtracer.core.vector import near_zero, unit_vector, vec3
from pathtracer.geometry.sphere import HitRecord
from pathtracer.materials.scatter import ScatterResult, make_reflect


@ti.func
def diffuse_direction(stream: ti.i32, rec: HitRecord) -> vec3:
    """Sample an unnormalized cosine-distributed direction around the normal.

    Args:
        stream: Random stream index.
        rec: The hit being shaded.

    Returns:
        normal + random unit vector, or the normal when that sum is
        degenerate.
    """
    direction = rec.normal.v + random_unit_vector(stream).v
    if near_zero(direction):
        direction = rec.normal.v
    return direction


@ti.func
def scatter_diffuse(stream: ti.i32, albedo: vec3, ray_in: Ray, rec: HitRecord) -> ScatterResult:
    """Scatter a ray off a diffuse surface.

    Args:
        stream: Random stream index.
        albedo: The diffuse reflectance per color channel.
        ray_in: The incoming ray (unused, diffuse reflection is view independent).
        rec: The hit being shaded.

    Returns:
        A REFLECT result with attenuation equal to the albedo.
    """
    direction = diffuse_direction(stream, rec)
    return make_reflect(albedo, make_ray(rec.point, unit_vector(direction)))
