"""Scene storage and closest-hit ray queries.

The world is an ordered list of spheres, each owning its material. Sphere data
lives in Taichi fields in structure-of-arrays layout so kernels can read it
directly. Queries are a linear scan: every sphere is tested against an
interval whose upper bound shrinks to the closest accepted t found so far, so
the result is the nearest surface regardless of sphere order.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.materials.material import Diffuse
    >>> from pathtracer.scene.world import add_sphere, clear_scene, query_scene
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, -1.0), 0.5, Diffuse(albedo=(0.5, 0.5, 0.5)))
    0
    >>> query_scene((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)).t
    0.5
"""

import math
from dataclasses import dataclass

import taichi as ti

from pathtracer.core.ray import Ray, make_ray
from pathtracer.core.vector import real, unit_vector, vec3
from pathtracer.geometry.sphere import (
    Face,
    HitRecord,
    Sphere,
    hit_sphere,
    make_miss_record,
)
from pathtracer.materials.material import Material, MaterialSpec, pack_material

Point = tuple[float, float, float]


@ti.dataclass
class SceneHitRecord:
    """Closest intersection of a ray with the world.

    Attributes:
        record: The hit record. record.hit is 0 if nothing was hit.
        sphere_id: Index of the sphere that produced the hit, -1 on a miss.
    """

    record: HitRecord
    sphere_id: ti.i32


# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=real, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=real, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Material storage, one entry per sphere
material_kinds = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
material_colors = ti.Vector.field(3, dtype=real, shape=MAX_SPHERES)
material_fuzz = ti.field(dtype=real, shape=MAX_SPHERES)
material_refractive_indices = ti.field(dtype=real, shape=MAX_SPHERES)


def clear_scene() -> None:
    """Remove all spheres from the scene.

    Resets the sphere count to zero. Field data is overwritten when new
    spheres are added.
    """
    num_spheres[None] = 0


def add_sphere(center: Point, radius: float, material: MaterialSpec) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere. Must be positive.
        material: The sphere's material (Diffuse, Metal, Dielectric or Light).

    Returns:
        The index of the added sphere.

    Raises:
        ValueError: If the radius is not positive.
        TypeError: If the material is not a supported material kind.
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    if not radius > 0.0:
        raise ValueError(f"Sphere radius must be positive, got {radius}")
    kind, color, fuzz, refractive_index = pack_material(material)

    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")

    sphere_centers[idx] = [float(c) for c in center]
    sphere_radii[idx] = radius
    material_kinds[idx] = kind
    material_colors[idx] = [float(c) for c in color]
    material_fuzz[idx] = fuzz
    material_refractive_indices[idx] = refractive_index
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def get_sphere(sphere_id: ti.i32) -> Sphere:
    """Get the geometry of a sphere by index."""
    return Sphere(center=sphere_centers[sphere_id], radius=sphere_radii[sphere_id])


@ti.func
def get_sphere_material(sphere_id: ti.i32) -> Material:
    """Get the material of a sphere by index."""
    return Material(
        kind=material_kinds[sphere_id],
        color=material_colors[sphere_id],
        fuzz=material_fuzz[sphere_id],
        refractive_index=material_refractive_indices[sphere_id],
    )


@ti.func
def hit_scene(ray: Ray, t_min: real, t_max: real) -> SceneHitRecord:
    """Find the closest sphere hit by a ray within [t_min, t_max].

    Args:
        ray: The ray to test.
        t_min: Smallest accepted ray parameter.
        t_max: Largest accepted ray parameter.

    Returns:
        A SceneHitRecord for the nearest intersection, or one whose
        record.hit is 0 if no sphere intersects within range.
    """
    closest_so_far = t_max
    result = SceneHitRecord(record=make_miss_record(), sphere_id=-1)

    for i in range(num_spheres[None]):
        rec = hit_sphere(get_sphere(i), ray, t_min, closest_so_far)
        if rec.hit == 1:
            closest_so_far = rec.t
            result = SceneHitRecord(record=rec, sphere_id=i)

    return result


# =============================================================================
# Python-scope Queries
# =============================================================================


@dataclass
class SceneHit:
    """Python-side copy of a scene intersection.

    Attributes:
        t: The ray parameter of the hit.
        point: The intersection point.
        normal: The oriented unit normal (opposes the ray).
        face: Which side of the surface was hit.
        sphere_id: Index of the sphere that was hit.
    """

    t: float
    point: Point
    normal: Point
    face: Face
    sphere_id: int


_query_hit = ti.field(dtype=ti.i32, shape=())
_query_t = ti.field(dtype=real, shape=())
_query_point = ti.Vector.field(3, dtype=real, shape=())
_query_normal = ti.Vector.field(3, dtype=real, shape=())
_query_face = ti.field(dtype=ti.i32, shape=())
_query_sphere_id = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _query_kernel(
    ox: real, oy: real, oz: real, dx: real, dy: real, dz: real, t_min: real, t_max: real
):
    # Single iteration outer loop keeps the sphere scan serial
    for _ in range(1):
        ray = make_ray(vec3(ox, oy, oz), unit_vector(vec3(dx, dy, dz)))
        result = hit_scene(ray, t_min, t_max)
        _query_hit[None] = result.record.hit
        _query_t[None] = result.record.t
        _query_point[None] = result.record.point
        _query_normal[None] = result.record.normal.v
        _query_face[None] = result.record.face
        _query_sphere_id[None] = result.sphere_id


def query_scene(
    origin: Point,
    direction: Point,
    t_min: float = 0.0,
    t_max: float = math.inf,
) -> SceneHit | None:
    """Find the closest sphere hit by a ray, from Python.

    Args:
        origin: Ray origin.
        direction: Ray direction. Normalized before the query; must be nonzero.
        t_min: Smallest accepted ray parameter.
        t_max: Largest accepted ray parameter.

    Returns:
        The closest SceneHit, or None if nothing is hit within range.
    """
    _query_kernel(*origin, *direction, t_min, t_max)
    if _query_hit[None] == 0:
        return None
    point = _query_point[None]
    normal = _query_normal[None]
    return SceneHit(
        t=float(_query_t[None]),
        point=(float(point[0]), float(point[1]), float(point[2])),
        normal=(float(normal[0]), float(normal[1]), float(normal[2])),
        face=Face(int(_query_face[None])),
        sphere_id=int(_query_sphere_id[None]),
    )
