"""Metal (specular reflective) material.

Mirror reflection about the surface normal, optionally blurred by adding a
random offset of size ``fuzz`` inside the unit sphere before renormalizing.
fuzz = 0 is a perfect mirror; fuzz close to 1 looks nearly diffuse.

The fuzzed direction is not checked against the surface. With large fuzz at
grazing angles it can point below the surface, and the path then continues
into the sphere. This is accepted behavior.

Example:
    >>> # Within a Taichi kernel:
    >>> # result = scatter_metal(stream, albedo, fuzz, ray_in, rec)
"""

import taichi as ti

from pathtracer.core.ray import Ray, make_ray
from pathtracer.core.rng import random_in_unit_sphere
from pathtracer.core.vector import real, reflect, unit_vector, vec3
from pathtracer.geometry.sphere import HitRecord
from pathtracer.materials.scatter import ScatterResult, make_reflect


@ti.func
def scatter_metal(
    stream: ti.i32,
    albedo: vec3,
    fuzz: real,
    ray_in: Ray,
    rec: HitRecord,
) -> ScatterResult:
    """Scatter a ray off a metal surface.

    Args:
        stream: Random stream index.
        albedo: The reflective color per channel.
        fuzz: Blur radius in [0, 1].
        ray_in: The incoming ray.
        rec: The hit being shaded.

    Returns:
        A REFLECT result with attenuation equal to the albedo.
    """
    reflected = reflect(ray_in.direction, rec.normal)
    direction = reflected + fuzz * random_in_unit_sphere(stream)
    return make_reflect(albedo, make_ray(rec.point, unit_vector(direction)))
