"""Path tracing integrator for Monte Carlo light transport.

This module implements the radiance estimator and the rendering kernel that
drives it. For one ray the estimator is defined recursively:

    ray_color(ray, depth) = 0                                   if depth <= 0
                          = background(ray)                     on a miss
                          = emitted                             on a light
                          = 0                                   if absorbed
                          = attenuation * ray_color(out, depth - 1)

Taichi functions cannot recurse, so ``ray_color`` evaluates the same
definition as a loop that carries the product of attenuations (the path
throughput) and stops at the first terminating event. Paths that are still
bouncing when the depth budget runs out contribute black.

Rendering runs one jittered sample per pixel per pass and keeps a running
average per pixel. Image rows are the unit of parallel work: the outermost
kernel loop is over rows, and row j draws every random number from stream j.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.camera.thin_lens import setup_camera
    >>> from pathtracer.core.integrator import render_image, setup_render_target
    >>> from pathtracer.core.rng import seed_streams
    >>> from pathtracer.scene.presets import two_spheres
    >>>
    >>> scene, camera = two_spheres(aspect_ratio=2.0)
    >>> setup_camera(camera)
    >>> setup_render_target(200, 100)
    >>> seed_streams(42)
    >>> render_image(num_samples=10, max_depth=50)
"""

import math
from enum import IntEnum

import numpy as np
import numpy.typing as npt
import taichi as ti

from pathtracer.camera.thin_lens import get_ray
from pathtracer.core.ray import Ray, make_ray
from pathtracer.core.rng import MAX_STREAMS, ensure_seeded, random_real
from pathtracer.core.settings import (
    DEFAULT_BACKGROUND,
    MAX_DEPTH,
    MAX_IMAGE_HEIGHT,
    MAX_IMAGE_WIDTH,
)
from pathtracer.core.vector import real, unit_vector, vec3
from pathtracer.materials.material import scatter
from pathtracer.materials.scatter import ScatterKind
from pathtracer.scene.world import get_sphere_material, hit_scene

# =============================================================================
# Rendering Constants
# =============================================================================

# Lower bound of accepted hits; keeps a scattered ray from re-hitting its origin
T_MIN = 0.001
T_MAX = math.inf

# Sky gradient end points (horizon to zenith)
SKY_HORIZON = (1.0, 1.0, 1.0)
SKY_ZENITH = (0.5, 0.7, 1.0)

# =============================================================================
# Background Configuration
# =============================================================================


class BackgroundMode(IntEnum):
    """How escaping rays are shaded."""

    DEFAULT = 0  # Flat DEFAULT_BACKGROUND
    FLAT = 1  # Flat color set with set_background
    SKY_GRADIENT = 2


_background = ti.Vector.field(3, dtype=real, shape=())
_background_mode = ti.field(dtype=ti.i32, shape=())


def set_background(color: tuple[float, float, float]) -> None:
    """Use a flat ambient background of the given radiance.

    Args:
        color: Radiance of escaping rays; channels must be non-negative.

    Raises:
        ValueError: If any channel is negative.
    """
    if len(color) != 3 or any(c < 0.0 for c in color):
        raise ValueError(f"Background must be 3 non-negative values, got {color}")
    _background[None] = [float(c) for c in color]
    _background_mode[None] = int(BackgroundMode.FLAT)


def use_sky_gradient() -> None:
    """Use a vertical white-to-blue gradient as the background instead."""
    _background_mode[None] = int(BackgroundMode.SKY_GRADIENT)


def reset_background() -> None:
    """Return to the default flat background."""
    _background_mode[None] = int(BackgroundMode.DEFAULT)


def get_background_mode() -> BackgroundMode:
    """Get the active background policy."""
    return BackgroundMode(int(_background_mode[None]))


def get_background() -> tuple[float, float, float] | None:
    """Get the flat background radiance.

    Returns:
        The flat background colour, or None while the sky gradient is active.
    """
    mode = get_background_mode()
    if mode == BackgroundMode.SKY_GRADIENT:
        return None
    if mode == BackgroundMode.DEFAULT:
        return DEFAULT_BACKGROUND
    bg = _background[None]
    return (float(bg[0]), float(bg[1]), float(bg[2]))


@ti.func
def background_color(ray: Ray) -> vec3:
    """Radiance carried by a ray that leaves the scene."""
    mode = _background_mode[None]
    color = vec3(*DEFAULT_BACKGROUND)
    if mode == int(BackgroundMode.FLAT):
        color = _background[None]
    elif mode == int(BackgroundMode.SKY_GRADIENT):
        a = 0.5 * (ray.direction.v.y + 1.0)
        color = (1.0 - a) * vec3(*SKY_HORIZON) + a * vec3(*SKY_ZENITH)
    return color


# =============================================================================
# Radiance Estimator
# =============================================================================


@ti.func
def ray_color(stream: ti.i32, ray: Ray, depth_budget: ti.i32) -> vec3:
    """Estimate the radiance arriving along a ray.

    Args:
        stream: Random stream index.
        ray: The ray to trace.
        depth_budget: Maximum number of surface interactions. 0 or less
            returns black.

    Returns:
        The estimated radiance (RGB).
    """
    radiance = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    current = ray

    # Active flag for path continuation
    active = 1

    for _ in range(depth_budget):
        if active == 1:
            scene_hit = hit_scene(current, T_MIN, T_MAX)

            if scene_hit.record.hit == 0:
                radiance = throughput * background_color(current)
                active = 0
            else:
                material = get_sphere_material(scene_hit.sphere_id)
                result = scatter(stream, material, current, scene_hit.record)

                if result.kind == int(ScatterKind.EMIT):
                    radiance = throughput * result.emitted
                    active = 0
                elif result.kind == int(ScatterKind.ABSORB):
                    active = 0
                else:
                    throughput *= result.attenuation
                    current = result.scattered

    return radiance


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Running average of samples, indexed [i, j] with j = 0 at the bottom row
_color_buffer = ti.Vector.field(3, dtype=real, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))
_sample_count = ti.field(dtype=ti.i32, shape=())

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers.

    Args:
        width: Image width in pixels, in [2, MAX_IMAGE_WIDTH].
        height: Image height in pixels, in [2, MAX_IMAGE_HEIGHT].

    Raises:
        ValueError: If dimensions are out of the supported range.
    """
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )
    if width < 2 or height < 2:
        raise ValueError(f"Image dimensions ({width}x{height}) must be at least 2x2")

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the accumulated image and sample count."""
    _color_buffer.fill(0.0)
    _sample_count[None] = 0


def reset_render_target() -> None:
    """Clear the buffers and mark the render target as not set up."""
    clear_render_target()
    _render_target_initialized[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def get_total_samples() -> int:
    """Get the number of samples accumulated per pixel.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return int(_sample_count[None])


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_one_spp(width: ti.i32, height: ti.i32, max_depth: ti.i32, n: ti.i32):
    """Trace one jittered sample per pixel and fold it into the running average.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: Depth budget per path.
        n: Index of this sample, starting at 1.
    """
    for j in range(height):
        for i in range(width):
            s = (ti.cast(i, real) + random_real(j)) / ti.cast(width - 1, real)
            t = (ti.cast(j, real) + random_real(j)) / ti.cast(height - 1, real)
            color = ray_color(j, get_ray(j, s, t), max_depth)

            # Running average: avg_n = avg_{n-1} + (x_n - avg_{n-1}) / n
            _color_buffer[i, j] += (color - _color_buffer[i, j]) / ti.cast(n, real)


@ti.kernel
def _trace_ray_kernel(
    ox: real, oy: real, oz: real, dx: real, dy: real, dz: real, depth: ti.i32, stream: ti.i32
) -> vec3:
    color = vec3(0.0, 0.0, 0.0)
    # Single iteration outer loop keeps the path loop serial
    for _ in range(1):
        ray = make_ray(vec3(ox, oy, oz), unit_vector(vec3(dx, dy, dz)))
        color = ray_color(stream, ray, depth)
    return color


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int = MAX_DEPTH,
    stream: int = 0,
) -> tuple[float, float, float]:
    """Estimate the radiance along a single ray, from Python.

    Args:
        origin: Ray origin.
        direction: Ray direction; normalized before tracing, must be nonzero.
        depth: Depth budget.
        stream: Random stream index to draw from.

    Returns:
        Tuple of (R, G, B) radiance values.
    """
    if not 0 <= stream < MAX_STREAMS:
        raise ValueError(f"stream = {stream} is outside [0, {MAX_STREAMS})")
    ensure_seeded()
    color = _trace_ray_kernel(*origin, *direction, depth, stream)
    return (float(color[0]), float(color[1]), float(color[2]))


def render_image(num_samples: int = 1, max_depth: int = MAX_DEPTH) -> None:
    """Render samples and accumulate them into the color buffer.

    Can be called repeatedly; every call adds num_samples samples per pixel.

    Args:
        num_samples: Number of samples to render per pixel.
        max_depth: Depth budget per path.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If max_depth is negative.
    """
    _check_render_target_initialized()
    if max_depth < 0:
        raise ValueError(f"max_depth = {max_depth} must be non-negative")

    ensure_seeded()
    width, height = get_image_dimensions()

    for _ in range(num_samples):
        _sample_count[None] += 1
        _render_one_spp(width, height, max_depth, _sample_count[None])


def get_image_numpy() -> npt.NDArray[np.float64]:
    """Get the accumulated linear image as a NumPy array.

    Values are the averaged radiance, not clamped. Rows are ordered top to
    bottom, as image files expect.

    Returns:
        NumPy array of shape (height, width, 3) with dtype float64.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    full_image = _color_buffer.to_numpy()
    image = full_image[:width, :height, :]

    # (width, height, 3) -> (height, width, 3), then bottom-up rows -> top-down
    image = np.transpose(image, (1, 0, 2))
    image = np.flipud(image)

    return np.ascontiguousarray(image, dtype=np.float64)
