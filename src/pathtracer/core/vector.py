"""Vector algebra for the path tracer.

Two value types are used throughout the renderer:

    vec3:     A plain 3-component double precision vector. Used as a point,
              as a direction that has not been normalized, and as a linear
              RGB color (channels are unbounded until the output stage).
    UnitVec3: A direction known to have length 1. It wraps a vec3 and is
              only produced by ``unit_vector`` (normalization) or
              ``assume_unit`` (vectors that are unit length by construction).

Operations that are only meaningful for unit vectors (angle cosines and sines,
reflection and refraction) take ``UnitVec3`` arguments, so a caller cannot pass
an un-normalized vector where unit length is assumed.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.core.vector import unit_vector, reflect, vec3
    >>> @ti.kernel
    ... def mirror() -> vec3:
    ...     d = unit_vector(vec3(1.0, -1.0, 0.0))
    ...     n = unit_vector(vec3(0.0, 1.0, 0.0))
    ...     return reflect(d, n)
"""

import taichi as ti
import taichi.math as tm

# Scalar type for all geometry and radiance computations
real = ti.f64

# Type alias for 3D vectors (points, directions and colors)
vec3 = ti.types.vector(3, real)

# Componentwise threshold below which a vector counts as zero
NEAR_ZERO_EPSILON = 1e-8


@ti.dataclass
class UnitVec3:
    """A direction vector of length 1.

    Construct with ``unit_vector`` or ``assume_unit`` rather than directly.

    Attributes:
        v: The underlying unit-length components.
    """

    v: vec3


# =============================================================================
# vec3 Operations
# =============================================================================


@ti.func
def dot(a: vec3, b: vec3) -> real:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def length_squared(v: vec3) -> real:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def length(v: vec3) -> real:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(length_squared(v))


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check whether every component of v is below NEAR_ZERO_EPSILON.

    Used to detect degenerate scatter directions.

    Returns:
        1 if all components are near zero, 0 otherwise.
    """
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


# =============================================================================
# UnitVec3 Construction
# =============================================================================


@ti.func
def unit_vector(v: vec3) -> UnitVec3:
    """Normalize a vector to unit length.

    The result for a zero-length input is not finite. Callers must never
    pass a vector that is zero or numerically indistinguishable from zero.

    Args:
        v: The vector to normalize.

    Returns:
        The unit vector v / |v|.
    """
    return UnitVec3(v=v / length(v))


@ti.func
def assume_unit(v: vec3) -> UnitVec3:
    """Wrap a vector that is already unit length by construction.

    Only for vectors whose length is 1 by an algebraic argument, such as a
    sphere's outward normal (point - center) / radius. No normalization is
    performed.
    """
    return UnitVec3(v=v)


@ti.func
def negate(u: UnitVec3) -> UnitVec3:
    """Return the opposite direction -u."""
    return UnitVec3(v=-u.v)


# =============================================================================
# UnitVec3 Operations
# =============================================================================


@ti.func
def cos_theta(a: UnitVec3, b: UnitVec3) -> real:
    """Cosine of the angle between two unit vectors."""
    return tm.dot(a.v, b.v)


@ti.func
def sin_theta(a: UnitVec3, b: UnitVec3) -> real:
    """Sine of the angle between two unit vectors.

    Derived from the cosine as sqrt(1 - cos^2). The cosine is clamped to at
    most 1 so rounding never produces the square root of a negative number.
    """
    cosine = ti.min(cos_theta(a, b), 1.0)
    return ti.sqrt(1.0 - cosine * cosine)


@ti.func
def reflect(direction: UnitVec3, normal: UnitVec3) -> vec3:
    """Reflect a direction about a unit normal.

    Computes d - 2 (d . n) n. For unit inputs the result has unit length,
    but it is returned as a vec3 so callers can perturb it before
    normalizing.

    Args:
        direction: The incoming direction (pointing toward the surface).
        normal: The surface normal.

    Returns:
        The reflected direction.
    """
    return direction.v - 2.0 * cos_theta(direction, normal) * normal.v


@ti.func
def refract(direction: UnitVec3, normal: UnitVec3, refraction_ratio: real) -> vec3:
    """Refract a direction through a surface using Snell's law.

    The outgoing direction is split into the component perpendicular to the
    normal, which scales by the refraction ratio, and the component parallel
    to the normal, which is recovered from the unit-length constraint.
    The caller is responsible for ruling out total internal reflection.

    Args:
        direction: The incoming direction.
        normal: The surface normal, opposing the incoming direction.
        refraction_ratio: Ratio of refractive indices eta_incident / eta_transmitted.

    Returns:
        The refracted direction.
    """
    cosine = ti.min(cos_theta(negate(direction), normal), 1.0)
    r_out_perp = refraction_ratio * (direction.v + cosine * normal.v)
    r_out_parallel = -ti.sqrt(ti.abs(1.0 - length_squared(r_out_perp))) * normal.v
    return r_out_perp + r_out_parallel
