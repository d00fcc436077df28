"""Unit tests for the progressive renderer."""

import numpy as np
import pytest


@pytest.fixture
def scene_camera():
    """Set up the two-sphere scene and its camera."""
    from pathtracer.camera.thin_lens import setup_camera
    from pathtracer.scene.presets import two_spheres

    scene, camera = two_spheres(aspect_ratio=2.0)
    setup_camera(camera)
    return scene, camera


class TestProgressiveRenderer:
    """Tests for ProgressiveRenderer."""

    def test_init(self, scene_camera):
        """Test construction sets dimensions and starts at zero samples."""
        from pathtracer.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(16, 8, max_depth=5, seed=1)
        assert renderer.width == 16
        assert renderer.height == 8
        assert renderer.sample_count == 0
        assert "samples=0" in repr(renderer)

    def test_negative_depth_rejected(self):
        """Test that a negative depth budget raises ValueError."""
        from pathtracer.core.progressive import ProgressiveRenderer

        with pytest.raises(ValueError):
            ProgressiveRenderer(16, 8, max_depth=-1)

    def test_render_with_callback(self, scene_camera):
        """Test that the callback sees each batch's progress."""
        from pathtracer.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(8, 4, max_depth=3)
        progress = []
        renderer.render(5, batch_size=2, callback=lambda cur, tgt: progress.append((cur, tgt)))
        assert progress == [(2, 5), (4, 5), (5, 5)]
        assert renderer.sample_count == 5

    def test_render_progressive_generator(self, scene_camera):
        """Test the generator interface continues from existing samples."""
        from pathtracer.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(8, 4, max_depth=3)
        renderer.render(2)
        assert list(renderer.render_progressive(3, batch_size=3)) == [(5, 5)]

    def test_zero_samples_is_noop(self, scene_camera):
        """Test that rendering zero samples changes nothing."""
        from pathtracer.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(8, 4)
        renderer.render(0)
        assert renderer.sample_count == 0

    def test_invalid_batch_size(self, scene_camera):
        """Test that a non-positive batch size raises ValueError."""
        from pathtracer.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(8, 4)
        with pytest.raises(ValueError):
            renderer.render(4, batch_size=0)

    def test_reset(self, scene_camera):
        """Test that reset clears the accumulated samples."""
        from pathtracer.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(8, 4, max_depth=3)
        renderer.render(3)
        renderer.reset()
        assert renderer.sample_count == 0
        assert np.all(renderer.get_image_numpy() == 0.0)

    def test_batching_does_not_change_result(self, scene_camera):
        """Test that one batch of 4 equals four batches of 1 for the same seed."""
        from pathtracer.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(12, 6, max_depth=4, seed=9)
        renderer.render(4, batch_size=4)
        single_batch = renderer.get_image_numpy()

        renderer.reset()
        renderer.render(4, batch_size=1)
        many_batches = renderer.get_image_numpy()

        assert np.array_equal(single_batch, many_batches)

    def test_resize(self, scene_camera):
        """Test resize changes dimensions and resets samples."""
        from pathtracer.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(8, 4)
        renderer.render(1)
        renderer.resize(6, 3)
        assert (renderer.width, renderer.height) == (6, 3)
        assert renderer.sample_count == 0
        assert renderer.get_image_numpy().shape == (3, 6, 3)
