"""Render settings.

RenderSettings collects every knob of a render in one dataclass. The image
height is derived from the width and aspect ratio the same way for every
caller, so a settings object fully determines the render target size.

Example:
    >>> from pathtracer.core.settings import RenderSettings
    >>> settings = RenderSettings(width=400, aspect_ratio=16 / 9, samples_per_pixel=100)
    >>> settings.height
    225
"""

from dataclasses import dataclass

# Default maximum path length
MAX_DEPTH = 50

# Flat ambient radiance returned by rays that escape the scene
DEFAULT_BACKGROUND = (0.7, 0.8, 1.0)

# Render target capacity; one random stream per row
MAX_IMAGE_WIDTH = 1024
MAX_IMAGE_HEIGHT = 1024

ARCHES = ("cpu", "gpu", "cuda", "vulkan", "metal")


@dataclass
class RenderSettings:
    """Configuration for one render.

    Attributes:
        width: Image width in pixels.
        aspect_ratio: Width divided by height.
        samples_per_pixel: Number of jittered samples averaged per pixel.
        max_depth: Depth budget per path.
        seed: Seed for the random streams.
        background: Flat background radiance.
        sky_gradient: Use the white-to-blue sky gradient instead of the flat
            background.
        arch: Taichi backend name.
        threads: CPU thread count for the Taichi CPU backend; None lets
            Taichi decide.
    """

    width: int = 400
    aspect_ratio: float = 16.0 / 9.0
    samples_per_pixel: int = 100
    max_depth: int = MAX_DEPTH
    seed: int = 0
    background: tuple[float, float, float] = DEFAULT_BACKGROUND
    sky_gradient: bool = False
    arch: str = "cpu"
    threads: int | None = None

    @property
    def height(self) -> int:
        """Image height in pixels, truncated from width / aspect_ratio."""
        return int(self.width / self.aspect_ratio)

    def validate(self) -> None:
        """Check that the settings describe a renderable image.

        Raises:
            ValueError: If any setting is out of range.
        """
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio = {self.aspect_ratio} must be positive")
        if not 2 <= self.width <= MAX_IMAGE_WIDTH:
            raise ValueError(f"width = {self.width} must be in [2, {MAX_IMAGE_WIDTH}]")
        if not 2 <= self.height <= MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"height = {self.height} (from width {self.width} and aspect ratio "
                f"{self.aspect_ratio}) must be in [2, {MAX_IMAGE_HEIGHT}]"
            )
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel = {self.samples_per_pixel} must be at least 1")
        if self.max_depth < 0:
            raise ValueError(f"max_depth = {self.max_depth} must be non-negative")
        if self.seed < 0:
            raise ValueError(f"seed = {self.seed} must be non-negative")
        if len(self.background) != 3 or any(c < 0.0 for c in self.background):
            raise ValueError(f"background = {self.background} must be 3 non-negative values")
        if self.arch not in ARCHES:
            raise ValueError(f"arch = {self.arch!r} must be one of {ARCHES}")
        if self.threads is not None and self.threads < 1:
            raise ValueError(f"threads = {self.threads} must be at least 1")
