"""Progressive renderer for iterative sample accumulation.

This module provides a convenient wrapper around the core integrator that supports:
- Progressive rendering that refines over time
- Batch rendering (multiple SPP in one call)
- Progress callbacks and a generator interface
- Easy reset and re-render functionality

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.camera.thin_lens import setup_camera
    >>> from pathtracer.core.progressive import ProgressiveRenderer
    >>> from pathtracer.scene.presets import two_spheres
    >>>
    >>> scene, camera = two_spheres()
    >>> setup_camera(camera)
    >>>
    >>> renderer = ProgressiveRenderer(400, 225, max_depth=50, seed=42)
    >>> renderer.render(100)  # Render 100 SPP
    >>> image = renderer.get_image_numpy()
"""

import logging
from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt

from pathtracer.core.integrator import (
    MAX_DEPTH,
    clear_render_target,
    get_image_numpy,
    get_total_samples,
    render_image,
    setup_render_target,
)
from pathtracer.core.rng import seed_streams

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (current_samples, total_target_samples)
ProgressCallback = Callable[[int, int], None]


class ProgressiveRenderer:
    """A progressive renderer that accumulates samples over time.

    The renderer keeps the image dimensions, depth budget and seed, and
    delegates to the global integrator buffers (which are Taichi fields).
    Creating or resetting a renderer reseeds the random streams, so a render
    of N samples is reproducible regardless of how it is split into batches.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: Depth budget per path.
        seed: Seed for the per-row random streams.
    """

    def __init__(
        self, width: int, height: int, max_depth: int = MAX_DEPTH, seed: int = 0
    ) -> None:
        """Initialize the progressive renderer.

        Args:
            width: Image width in pixels.
            height: Image height in pixels.
            max_depth: Depth budget per path.
            seed: Seed for the random streams.

        Raises:
            ValueError: If dimensions are outside the supported range, or
                max_depth or seed is negative.
        """
        if max_depth < 0:
            raise ValueError(f"max_depth = {max_depth} must be non-negative")
        self._width = width
        self._height = height
        self.max_depth = max_depth
        self.seed = seed
        setup_render_target(width, height)
        seed_streams(seed)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def sample_count(self) -> int:
        """Get the current number of accumulated samples per pixel."""
        return get_total_samples()

    def reset(self) -> None:
        """Clear the accumulator and reseed the random streams."""
        clear_render_target()
        seed_streams(self.seed)

    def resize(self, width: int, height: int) -> None:
        """Resize the render target and reset the accumulator.

        Raises:
            ValueError: If dimensions are outside the supported range.
        """
        setup_render_target(width, height)
        self._width = width
        self._height = height
        seed_streams(self.seed)

    def render(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render samples progressively with optional progress callback.

        Accumulates the specified number of samples into the existing buffer.
        Can be called multiple times to continue refining the image.

        Args:
            num_samples: Total number of samples to add.
            batch_size: Number of samples to render before each callback.
            callback: Optional callback function called after each batch.
                Receives (current_total_samples, target_total_samples).

        Example:
            >>> def progress(current, target):
            ...     print(f"Progress: {current}/{target} samples")
            >>> renderer.render(100, batch_size=10, callback=progress)
        """
        for current, target in self.render_progressive(num_samples, batch_size):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Render samples progressively, yielding progress after each batch.

        Args:
            num_samples: Total number of samples to add.
            batch_size: Number of samples to render before each yield.

        Yields:
            Tuple of (current_total_samples, target_total_samples).

        Raises:
            ValueError: If batch_size is not positive.
        """
        if num_samples <= 0:
            return
        if batch_size <= 0:
            raise ValueError(f"batch_size = {batch_size} must be positive")

        target_samples = self.sample_count + num_samples
        logger.debug(
            "Rendering %d samples (%dx%d, depth %d)",
            num_samples,
            self._width,
            self._height,
            self.max_depth,
        )

        remaining = num_samples
        while remaining > 0:
            batch = min(batch_size, remaining)
            render_image(batch, self.max_depth)
            remaining -= batch
            yield (self.sample_count, target_samples)

    def get_image_numpy(self) -> npt.NDArray[np.float64]:
        """Get the averaged linear image, shape (height, width, 3), top row first."""
        return get_image_numpy()

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"samples={self.sample_count})"
        )
