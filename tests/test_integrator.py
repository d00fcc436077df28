"""Unit tests for the path integrator and render driver.

Tests cover:
- Depth budget and background behavior of ray_color
- Emission, absorption and attenuation along a path
- Render target setup and validation
- Deterministic end-to-end rendering
"""

import numpy as np
import pytest


class TestRayColor:
    """Tests for single-ray radiance estimates."""

    def test_zero_depth_is_black(self):
        """Test that a zero depth budget returns black even facing a light."""
        from pathtracer.core.integrator import trace_ray
        from pathtracer.materials.material import Light
        from pathtracer.scene.world import add_sphere

        add_sphere((0.0, 0.0, -1.0), 0.5, Light(color=(4.0, 4.0, 4.0)))
        assert trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=0) == (0.0, 0.0, 0.0)
        assert trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), depth=0) == (0.0, 0.0, 0.0)

    def test_miss_returns_default_background_exactly(self):
        """Test that an escaping ray returns the flat background unchanged."""
        from pathtracer.core.integrator import trace_ray
        from pathtracer.core.settings import DEFAULT_BACKGROUND
        from pathtracer.materials.material import Diffuse
        from pathtracer.scene.world import add_sphere

        add_sphere((0.0, 0.0, -1.0), 0.5, Diffuse(albedo=(0.5, 0.5, 0.5)))
        assert trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), depth=5) == DEFAULT_BACKGROUND

    def test_custom_background(self):
        """Test set_background changes the miss radiance."""
        from pathtracer.core.integrator import get_background, set_background, trace_ray

        set_background((0.2, 0.3, 0.4))
        assert get_background() == (0.2, 0.3, 0.4)
        assert trace_ray((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), depth=1) == (0.2, 0.3, 0.4)

    def test_negative_background_rejected(self):
        """Test that negative background radiance raises ValueError."""
        from pathtracer.core.integrator import set_background

        with pytest.raises(ValueError):
            set_background((0.2, -0.3, 0.4))

    def test_sky_gradient(self):
        """Test the gradient background at the zenith and the horizon."""
        from pathtracer.core.integrator import (
            BackgroundMode,
            get_background,
            get_background_mode,
            reset_background,
            trace_ray,
            use_sky_gradient,
        )
        from pathtracer.core.settings import DEFAULT_BACKGROUND

        use_sky_gradient()
        assert get_background_mode() == BackgroundMode.SKY_GRADIENT
        assert get_background() is None
        assert trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), depth=1) == pytest.approx(
            (0.5, 0.7, 1.0)
        )
        assert trace_ray((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), depth=1) == pytest.approx(
            (0.75, 0.85, 1.0)
        )

        reset_background()
        assert get_background() == DEFAULT_BACKGROUND

    def test_light_returns_emission(self):
        """Test that hitting a light returns its exact color."""
        from pathtracer.core.integrator import trace_ray
        from pathtracer.materials.material import Light
        from pathtracer.scene.world import add_sphere

        add_sphere((0.0, 0.0, -1.0), 0.5, Light(color=(2.0, 3.0, 4.0)))
        assert trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=1) == (2.0, 3.0, 4.0)

    def test_budget_exhausted_is_black(self):
        """Test that a path still bouncing at the end of its budget is black."""
        from pathtracer.core.integrator import trace_ray
        from pathtracer.materials.material import Diffuse
        from pathtracer.scene.world import add_sphere

        add_sphere((0.0, 0.0, -1.0), 0.5, Diffuse(albedo=(0.5, 0.5, 0.5)))
        assert trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=1) == (0.0, 0.0, 0.0)

    def test_mirror_attenuates_background(self):
        """Test that a mirror bounce multiplies the background by the albedo."""
        from pathtracer.core.integrator import trace_ray
        from pathtracer.materials.material import Metal
        from pathtracer.scene.world import add_sphere

        add_sphere((0.0, 0.0, -2.0), 1.0, Metal(albedo=(0.5, 0.5, 0.5), fuzz=0.0))
        color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=2)
        assert color == pytest.approx((0.35, 0.4, 0.5), abs=1e-12)

    def test_inside_light_sphere(self):
        """Test that an enclosed scene is lit by the sphere surrounding it."""
        from pathtracer.core.integrator import trace_ray
        from pathtracer.materials.material import Light
        from pathtracer.scene.world import add_sphere

        add_sphere((0.0, 0.0, 0.0), 10.0, Light(color=(1.0, 0.5, 0.25)))
        assert trace_ray((0.0, 0.0, 0.0), (0.3, -0.2, 0.9), depth=3) == (1.0, 0.5, 0.25)

    def test_invalid_stream_rejected(self):
        """Test that a stream index outside the stream table raises ValueError."""
        from pathtracer.core.integrator import trace_ray
        from pathtracer.core.rng import MAX_STREAMS

        with pytest.raises(ValueError):
            trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), stream=MAX_STREAMS)


class TestRenderTarget:
    """Tests for render target management."""

    def test_render_before_setup_raises(self):
        """Test that rendering without a render target raises RuntimeError."""
        from pathtracer.core.integrator import get_image_numpy, render_image

        with pytest.raises(RuntimeError):
            render_image(1)
        with pytest.raises(RuntimeError):
            get_image_numpy()

    @pytest.mark.parametrize("size", [(1, 10), (10, 1), (2048, 10), (10, 2048)])
    def test_invalid_dimensions(self, size):
        """Test that dimensions outside [2, MAX] raise ValueError."""
        from pathtracer.core.integrator import setup_render_target

        with pytest.raises(ValueError):
            setup_render_target(*size)

    def test_negative_depth_rejected(self):
        """Test that a negative depth budget raises ValueError."""
        from pathtracer.core.integrator import render_image, setup_render_target

        setup_render_target(4, 4)
        with pytest.raises(ValueError):
            render_image(1, max_depth=-1)

    def test_sample_count_and_shape(self):
        """Test that samples accumulate and the image has (H, W, 3) shape."""
        from pathtracer.camera.thin_lens import setup_camera
        from pathtracer.core.integrator import (
            get_image_dimensions,
            get_image_numpy,
            get_total_samples,
            render_image,
            setup_render_target,
        )
        from pathtracer.scene.presets import two_spheres

        _, camera = two_spheres(aspect_ratio=2.0)
        setup_camera(camera)
        setup_render_target(8, 4)
        render_image(3, max_depth=2)

        assert get_image_dimensions() == (8, 4)
        assert get_total_samples() == 3
        image = get_image_numpy()
        assert image.shape == (4, 8, 3)
        assert image.dtype == np.float64


class TestEndToEnd:
    """End-to-end rendering of the two-sphere scene."""

    def _render(self, seed, width=20, height=10, samples=1, depth=1):
        from pathtracer.camera.thin_lens import setup_camera
        from pathtracer.core.integrator import get_image_numpy, render_image, setup_render_target
        from pathtracer.core.rng import seed_streams
        from pathtracer.scene.presets import two_spheres

        _, camera = two_spheres(aspect_ratio=width / height)
        setup_camera(camera)
        setup_render_target(width, height)
        seed_streams(seed)
        render_image(samples, max_depth=depth)
        return get_image_numpy()

    def test_single_bounce_render_is_deterministic(self):
        """Test that equal seeds give bit-identical images."""
        first = self._render(seed=42)
        second = self._render(seed=42)
        assert np.array_equal(first, second)

    def test_single_bounce_pixels(self):
        """Test the depth-1 image: spheres are black, sky is the background."""
        from pathtracer.core.settings import DEFAULT_BACKGROUND

        image = self._render(seed=42)
        background = np.array(DEFAULT_BACKGROUND)

        is_black = np.all(image == 0.0, axis=2)
        is_background = np.all(image == background, axis=2)
        assert np.all(is_black | is_background)

        # Top row looks up into the sky, bottom row down onto the ground
        assert np.all(is_background[0])
        assert np.all(is_black[-1])
        # The image center looks straight at the small sphere
        assert is_black[5, 10]

    def test_deeper_render_is_finite_and_bounded(self):
        """Test that multi-bounce estimates stay within [0, background]."""
        from pathtracer.core.settings import DEFAULT_BACKGROUND

        image = self._render(seed=3, samples=4, depth=10)
        assert np.all(np.isfinite(image))
        assert image.min() >= 0.0
        assert np.all(image <= np.array(DEFAULT_BACKGROUND) + 1e-12)
        # Light bounced off the grey spheres reaches some sphere pixels
        assert np.any((image > 0.0) & (image < np.array(DEFAULT_BACKGROUND) - 1e-6))
