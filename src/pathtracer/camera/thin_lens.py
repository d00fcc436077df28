"""Thin-lens camera model for primary ray generation.

The camera supports:
- Look-at positioning (lookfrom, lookat, vup)
- Vertical field of view specification
- Arbitrary aspect ratios
- Depth of field through a finite circular aperture

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The viewport is placed on the focus plane, focus_distance in front of the
camera. Each primary ray starts at a random point on the lens disk and passes
through its target point on the viewport, so geometry on the focus plane is
sharp and everything else blurs in proportion to the aperture. An aperture of
0 is a pinhole camera.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.camera.thin_lens import ThinLensCamera, setup_camera, get_ray
    >>> camera = ThinLensCamera(
    ...     lookfrom=(3.0, 3.0, 2.0),
    ...     lookat=(0.0, 0.0, -1.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     vfov=20.0,
    ...     aspect_ratio=16.0 / 9.0,
    ...     aperture=2.0,
    ...     focus_distance=5.2,
    ... )
    >>> setup_camera(camera)
    >>> # Within a Taichi kernel: ray = get_ray(stream, 0.5, 0.5)
"""

import math
from dataclasses import dataclass
from typing import Any

import numpy as np
import taichi as ti

from pathtracer.core.ray import Ray, make_ray
from pathtracer.core.rng import random_in_unit_disk
from pathtracer.core.vector import real, unit_vector

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class ThinLensCamera:
    """Configuration for a thin-lens (perspective) camera.

    Attributes:
        lookfrom: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Up direction vector for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees, in (0, 180).
        aspect_ratio: Width divided by height of the output image.
        aperture: Lens diameter. 0 disables depth of field.
        focus_distance: Distance from lookfrom to the plane in perfect focus.
    """

    lookfrom: tuple[float, float, float]
    lookat: tuple[float, float, float]
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    vfov: float = 90.0
    aspect_ratio: float = 16.0 / 9.0
    aperture: float = 0.0
    focus_distance: float = 1.0

    def validate(self) -> None:
        """Check the configuration for degenerate values.

        Raises:
            ValueError: If any parameter would produce a degenerate basis or
                viewport.
        """
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov = {self.vfov} must be in (0, 180) degrees")
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio = {self.aspect_ratio} must be positive")
        if self.aperture < 0.0:
            raise ValueError(f"aperture = {self.aperture} must be non-negative")
        if self.focus_distance <= 0.0:
            raise ValueError(f"focus_distance = {self.focus_distance} must be positive")
        view = np.subtract(self.lookfrom, self.lookat)
        if np.linalg.norm(view) == 0.0:
            raise ValueError("lookfrom and lookat must be different points")
        if np.linalg.norm(np.cross(self.vup, view)) == 0.0:
            raise ValueError("vup must not be parallel to the view direction")

    @classmethod
    def focused_on_lookat(cls, **kwargs) -> "ThinLensCamera":
        """Create a camera whose focus plane passes through lookat.

        Raises:
            ValueError: If lookfrom or lookat is missing, or focus_distance is
                given.
        """
        if "focus_distance" in kwargs:
            raise ValueError("focused_on_lookat derives focus_distance; do not pass it")
        if "lookfrom" not in kwargs or "lookat" not in kwargs:
            raise ValueError("focused_on_lookat requires lookfrom and lookat")
        distance = float(np.linalg.norm(np.subtract(kwargs["lookfrom"], kwargs["lookat"])))
        return cls(focus_distance=distance, **kwargs)


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=real, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=real, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=real, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=real, shape=())  # Backward (opposite view)

# Viewport on the focus plane
_viewport_horizontal = ti.Vector.field(3, dtype=real, shape=())  # Full width
_viewport_vertical = ti.Vector.field(3, dtype=real, shape=())  # Full height
_lower_left_corner = ti.Vector.field(3, dtype=real, shape=())

_lens_radius = ti.field(dtype=real, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def setup_camera(camera: ThinLensCamera) -> None:
    """Initialize camera state from configuration.

    Computes the orthonormal basis (u, v, w), the viewport on the focus
    plane and the lens radius, and stores them in Taichi fields. Must be
    called before rendering.

    Args:
        camera: Camera configuration.

    Raises:
        ValueError: If the configuration is degenerate.
    """
    camera.validate()

    theta = math.radians(camera.vfov)
    h = math.tan(theta / 2.0)

    viewport_height = 2.0 * h
    viewport_width = camera.aspect_ratio * viewport_height

    lookfrom = np.array(camera.lookfrom, dtype=np.float64)
    lookat = np.array(camera.lookat, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)

    w = lookfrom - lookat
    w = w / np.linalg.norm(w)

    u = np.cross(vup, w)
    u = u / np.linalg.norm(u)

    v = np.cross(w, u)

    horizontal = camera.focus_distance * viewport_width * u
    vertical = camera.focus_distance * viewport_height * v
    lower_left = lookfrom - horizontal / 2.0 - vertical / 2.0 - camera.focus_distance * w

    _camera_origin[None] = lookfrom.tolist()
    _camera_u[None] = u.tolist()
    _camera_v[None] = v.tolist()
    _camera_w[None] = w.tolist()
    _viewport_horizontal[None] = horizontal.tolist()
    _viewport_vertical[None] = vertical.tolist()
    _lower_left_corner[None] = lower_left.tolist()
    _lens_radius[None] = camera.aperture / 2.0


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_ray(stream: ti.i32, s: real, t: real) -> Ray:
    """Generate a primary ray through normalized viewport coordinates (s, t).

    - s = 0: left edge, s = 1: right edge
    - t = 0: bottom edge, t = 1: top edge

    Args:
        stream: Random stream index used to sample the lens.
        s: Horizontal coordinate in [0, 1].
        t: Vertical coordinate in [0, 1].

    Returns:
        A ray leaving a random point on the lens toward the viewport point
        at (s, t).
    """
    rd = _lens_radius[None] * random_in_unit_disk(stream)
    offset = _camera_u[None] * rd.x + _camera_v[None] * rd.y

    origin = _camera_origin[None] + offset
    target = (
        _lower_left_corner[None] + s * _viewport_horizontal[None] + t * _viewport_vertical[None]
    )
    return make_ray(origin, unit_vector(target - origin))


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, Any]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, u, v, w, horizontal, vertical, lower_left
        as 3-tuples, and lens_radius as a float.
    """

    def _tuple(field) -> tuple[float, float, float]:
        vec = field[None]
        return (float(vec[0]), float(vec[1]), float(vec[2]))

    return {
        "origin": _tuple(_camera_origin),
        "u": _tuple(_camera_u),
        "v": _tuple(_camera_v),
        "w": _tuple(_camera_w),
        "horizontal": _tuple(_viewport_horizontal),
        "vertical": _tuple(_viewport_vertical),
        "lower_left": _tuple(_lower_left_corner),
        "lens_radius": float(_lens_radius[None]),
    }
