"""Independent random number streams for Monte Carlo sampling.

Each unit of parallel work owns a private generator. The generators are
xorshift32 states stored in a Taichi field; a "stream" is an index into that
field. The render driver gives every image row its own stream, so rows never
share generator state and a render is reproducible from a single seed no
matter how the rows are scheduled across threads.

Stream states are derived on the Python side from one integer seed using
NumPy's SeedSequence, which spreads nearby seeds over well separated states.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.core.rng import random_unit_vector, seed_streams
    >>> seed_streams(42)
    >>> @ti.kernel
    ... def sample() -> ti.f64:
    ...     return random_unit_vector(0).v.x
"""

import numpy as np
import taichi as ti

from pathtracer.core.vector import (
    UnitVec3,
    length_squared,
    real,
    unit_vector,
    vec3,
)

# One stream per image row of the largest supported render target
MAX_STREAMS = 1024

# Upper bound on rejection sampling attempts. Every attempt is rejected with
# probability below 0.48^64 for the sphere; the samplers then return a fixed
# fallback point instead of looping on.
MAX_REJECTION_ATTEMPTS = 64

# Returned by sample_in_unit_sphere when every attempt is rejected; normalizes to +z
SPHERE_FALLBACK = (0.0, 0.0, 0.5)

# 2^-24: maps the top 24 bits of a state to [0, 1)
_INV_2_24 = 1.0 / 16777216.0

_rng_states = ti.field(dtype=ti.u32, shape=MAX_STREAMS)
_seeded = False


def seed_streams(seed: int) -> None:
    """Seed every random stream from a single integer seed.

    Args:
        seed: Non-negative integer seed. Equal seeds give identical streams.

    Raises:
        ValueError: If seed is negative.
    """
    if seed < 0:
        raise ValueError(f"Seed must be non-negative, got {seed}")
    states = np.random.SeedSequence(seed).generate_state(MAX_STREAMS, dtype=np.uint32)
    # Zero is a fixed point of xorshift
    states[states == 0] = 0x9E3779B9
    _rng_states.from_numpy(states)

    global _seeded
    _seeded = True


def ensure_seeded(default_seed: int = 0) -> None:
    """Seed the streams with default_seed unless they have been seeded already."""
    if not _seeded:
        seed_streams(default_seed)


def get_stream_state(stream: int) -> int:
    """Get the raw generator state of a stream (for inspection and tests)."""
    return int(_rng_states[stream])


@ti.func
def _next_u32(stream: ti.i32) -> ti.u32:
    """Advance a stream's xorshift32 state and return the new state."""
    x = _rng_states[stream]
    x ^= x << ti.u32(13)
    x ^= x >> ti.u32(17)
    x ^= x << ti.u32(5)
    _rng_states[stream] = x
    return x


@ti.func
def random_real(stream: ti.i32) -> real:
    """Draw a uniform random real in [0, 1)."""
    return ti.cast(_next_u32(stream) >> ti.u32(8), real) * _INV_2_24


@ti.func
def random_range(stream: ti.i32, lo: real, hi: real) -> real:
    """Draw a uniform random real in [lo, hi)."""
    return lo + (hi - lo) * random_real(stream)


@ti.func
def random_vec3(stream: ti.i32) -> vec3:
    """Draw a random point in the cube [-1, 1)^3."""
    return vec3(
        random_range(stream, -1.0, 1.0),
        random_range(stream, -1.0, 1.0),
        random_range(stream, -1.0, 1.0),
    )


@ti.func
def sample_in_unit_sphere(stream: ti.i32, max_attempts: ti.template()) -> vec3:
    """Rejection-sample a nonzero point inside the unit sphere.

    Args:
        stream: Random stream index.
        max_attempts: Number of cube samples to try.

    Returns:
        The first accepted point, or SPHERE_FALLBACK if all were rejected.
    """
    p = vec3(*SPHERE_FALLBACK)
    found = False
    for _ in range(max_attempts):
        if not found:
            candidate = random_vec3(stream)
            if length_squared(candidate) < 1.0 and length_squared(candidate) > 0.0:
                p = candidate
                found = True
    return p


@ti.func
def random_in_unit_sphere(stream: ti.i32) -> vec3:
    """Generate a random point inside the unit sphere.

    Uses rejection sampling from the enclosing cube.

    Returns:
        A random point with 0 < length < 1.
    """
    return sample_in_unit_sphere(stream, MAX_REJECTION_ATTEMPTS)


@ti.func
def random_unit_vector(stream: ti.i32) -> UnitVec3:
    """Generate a random unit vector uniformly distributed on the sphere."""
    return unit_vector(random_in_unit_sphere(stream))


@ti.func
def random_in_unit_disk(stream: ti.i32) -> vec3:
    """Generate a random point inside the unit disk in the xy-plane.

    Used for thin-lens depth of field.

    Returns:
        A random point (x, y, 0) with x^2 + y^2 < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if not found:
            candidate = vec3(
                random_range(stream, -1.0, 1.0),
                random_range(stream, -1.0, 1.0),
                0.0,
            )
            if length_squared(candidate) < 1.0:
                p = candidate
                found = True
    return p
