"""Dielectric (glass/water) material.

Transparent materials both reflect and refract. At every hit one of the two is
chosen at random:

    - Snell's law gives sin(theta_t) = ratio * sin(theta_i). When that exceeds
      1 no refracted ray exists (total internal reflection) and the ray
      always reflects.
    - Otherwise the ray reflects with probability equal to the Fresnel
      reflectance (Schlick's approximation) and refracts otherwise.

The refraction ratio is 1 / ior when the ray enters through the front face
and ior when it leaves through the back face. Glass absorbs nothing, so the
attenuation is always white.

Example:
    >>> # Within a Taichi kernel:
    >>> # result = scatter_dielectric(stream, 1.5, ray_in, rec)
"""

import taichi as ti

from pathtracer.core.ray import Ray, make_ray
from pathtracer.core.rng import random_real
from pathtracer.core.vector import (
    cos_theta,
    negate,
    real,
    reflect,
    refract,
    sin_theta,
    unit_vector,
    vec3,
)
from pathtracer.geometry.sphere import Face, HitRecord
from pathtracer.materials.scatter import ScatterResult, make_reflect


@ti.func
def schlick_reflectance(cosine: real, refractive_index: real) -> real:
    """Fresnel reflectance using Schlick's approximation.

    r0 = ((1 - n) / (1 + n))^2; R = r0 + (1 - r0)(1 - cos)^5

    Args:
        cosine: Cosine of the incidence angle.
        refractive_index: The material's index of refraction.

    Returns:
        The approximate probability of reflection, in [0, 1].
    """
    r0 = (1.0 - refractive_index) / (1.0 + refractive_index)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


@ti.func
def refraction_ratio_for(refractive_index: real, face: ti.i32) -> real:
    """Ratio eta_incident / eta_transmitted for a hit on the given face."""
    ratio = refractive_index
    if face == int(Face.FRONT):
        ratio = 1.0 / refractive_index
    return ratio


@ti.func
def cannot_refract(refractive_index: real, ray_in: Ray, rec: HitRecord) -> ti.i32:
    """Check whether the hit is beyond the critical angle.

    Returns:
        1 if total internal reflection occurs, 0 otherwise.
    """
    ratio = refraction_ratio_for(refractive_index, rec.face)
    return 1 if ratio * sin_theta(ray_in.direction, rec.normal) > 1.0 else 0


@ti.func
def scatter_dielectric(
    stream: ti.i32,
    refractive_index: real,
    ray_in: Ray,
    rec: HitRecord,
) -> ScatterResult:
    """Scatter a ray off a dielectric surface.

    Args:
        stream: Random stream index.
        refractive_index: The material's index of refraction (> 0).
        ray_in: The incoming ray.
        rec: The hit being shaded.

    Returns:
        A REFLECT result with white attenuation whose ray is either the
        mirror reflection or the refracted ray.
    """
    ratio = refraction_ratio_for(refractive_index, rec.face)
    direction = ray_in.direction

    cosine = ti.min(cos_theta(negate(direction), rec.normal), 1.0)
    reflectance = schlick_reflectance(cosine, refractive_index)

    outgoing = vec3(0.0, 0.0, 0.0)
    # Exactly one draw per scatter, including under total internal reflection
    draw = random_real(stream)
    if cannot_refract(refractive_index, ray_in, rec) == 1 or draw < reflectance:
        outgoing = reflect(direction, rec.normal)
    else:
        outgoing = refract(direction, rec.normal, ratio)

    attenuation = vec3(1.0, 1.0, 1.0)
    return make_reflect(attenuation, make_ray(rec.point, unit_vector(outgoing)))
