"""Unit tests for the thin-lens camera.

Tests cover:
- Camera basis and viewport computation
- Primary rays through the viewport
- Depth of field: rays from the lens converge on the focus plane
- Configuration validation
"""

import numpy as np
import pytest
import taichi as ti


def _generate_rays(coords):
    """Generate one primary ray per (s, t) pair; returns (origins, directions)."""
    from pathtracer.camera.thin_lens import get_ray

    n = len(coords)
    s_field = ti.field(dtype=ti.f64, shape=n)
    t_field = ti.field(dtype=ti.f64, shape=n)
    origins = ti.Vector.field(3, dtype=ti.f64, shape=n)
    directions = ti.Vector.field(3, dtype=ti.f64, shape=n)
    s_field.from_numpy(np.array([c[0] for c in coords], dtype=np.float64))
    t_field.from_numpy(np.array([c[1] for c in coords], dtype=np.float64))

    @ti.kernel
    def test_kernel():
        for _ in range(1):
            for k in range(n):
                ray = get_ray(0, s_field[k], t_field[k])
                origins[k] = ray.origin
                directions[k] = ray.direction.v

    test_kernel()
    return origins.to_numpy(), directions.to_numpy()


class TestCameraSetup:
    """Tests for setup_camera and get_camera_info."""

    def test_axis_aligned_camera_basis(self):
        """Test the basis and viewport of a camera looking down -z."""
        from pathtracer.camera.thin_lens import ThinLensCamera, get_camera_info, setup_camera

        setup_camera(
            ThinLensCamera(
                lookfrom=(0.0, 0.0, 0.0),
                lookat=(0.0, 0.0, -1.0),
                vfov=90.0,
                aspect_ratio=2.0,
            )
        )
        info = get_camera_info()
        assert info["origin"] == (0.0, 0.0, 0.0)
        assert info["u"] == pytest.approx((1.0, 0.0, 0.0))
        assert info["v"] == pytest.approx((0.0, 1.0, 0.0))
        assert info["w"] == pytest.approx((0.0, 0.0, 1.0))
        assert info["horizontal"] == pytest.approx((4.0, 0.0, 0.0))
        assert info["vertical"] == pytest.approx((0.0, 2.0, 0.0))
        assert info["lower_left"] == pytest.approx((-2.0, -1.0, -1.0))
        assert info["lens_radius"] == 0.0

    def test_lens_radius_is_half_aperture(self):
        """Test that the lens radius is aperture / 2."""
        from pathtracer.camera.thin_lens import ThinLensCamera, get_camera_info, setup_camera

        setup_camera(
            ThinLensCamera(
                lookfrom=(3.0, 3.0, 2.0),
                lookat=(0.0, 0.0, -1.0),
                vfov=20.0,
                aperture=2.0,
                focus_distance=5.2,
            )
        )
        assert get_camera_info()["lens_radius"] == 1.0


class TestRayGeneration:
    """Tests for get_ray."""

    def test_pinhole_rays(self):
        """Test pinhole rays start at the origin and aim at the viewport."""
        from pathtracer.camera.thin_lens import ThinLensCamera, setup_camera

        setup_camera(
            ThinLensCamera(
                lookfrom=(0.0, 0.0, 0.0),
                lookat=(0.0, 0.0, -1.0),
                vfov=90.0,
                aspect_ratio=2.0,
            )
        )
        origins, directions = _generate_rays([(0.5, 0.5), (0.0, 0.0), (1.0, 1.0)])

        np.testing.assert_array_equal(origins, np.zeros((3, 3)))
        np.testing.assert_allclose(directions[0], [0.0, 0.0, -1.0], atol=1e-12)
        expected_ll = np.array([-2.0, -1.0, -1.0]) / np.sqrt(6.0)
        expected_ur = np.array([2.0, 1.0, -1.0]) / np.sqrt(6.0)
        np.testing.assert_allclose(directions[1], expected_ll, atol=1e-12)
        np.testing.assert_allclose(directions[2], expected_ur, atol=1e-12)
        np.testing.assert_allclose(np.linalg.norm(directions, axis=1), 1.0, atol=1e-12)

    def test_depth_of_field_rays_converge_on_focus_plane(self):
        """Test that lens-jittered rays all pass through the same focus point."""
        from pathtracer.camera.thin_lens import ThinLensCamera, setup_camera

        focus = 3.0
        setup_camera(
            ThinLensCamera(
                lookfrom=(0.0, 0.0, 0.0),
                lookat=(0.0, 0.0, -1.0),
                vfov=60.0,
                aspect_ratio=1.0,
                aperture=1.0,
                focus_distance=focus,
            )
        )
        origins, directions = _generate_rays([(0.5, 0.5)] * 64)

        # Origins are spread over the lens disk in the z = 0 plane
        assert np.all(origins[:, 2] == 0.0)
        assert np.all(np.hypot(origins[:, 0], origins[:, 1]) < 0.5)
        assert np.unique(origins[:, 0]).size > 1

        # Every ray reaches (0, 0, -focus) on the focus plane
        t = (-focus - origins[:, 2]) / directions[:, 2]
        points = origins + t[:, None] * directions
        np.testing.assert_allclose(points, np.tile([0.0, 0.0, -focus], (64, 1)), atol=1e-9)


class TestCameraValidation:
    """Tests for ThinLensCamera.validate."""

    @pytest.mark.parametrize(
        "overrides",
        [
            {"vfov": 0.0},
            {"vfov": 180.0},
            {"aspect_ratio": 0.0},
            {"aperture": -0.1},
            {"focus_distance": 0.0},
            {"lookat": (0.0, 0.0, 0.0)},
            {"vup": (0.0, 0.0, 1.0)},
        ],
    )
    def test_degenerate_configurations(self, overrides):
        """Test that degenerate cameras raise ValueError."""
        from pathtracer.camera.thin_lens import ThinLensCamera, setup_camera

        params = {"lookfrom": (0.0, 0.0, 0.0), "lookat": (0.0, 0.0, -1.0)}
        params.update(overrides)
        camera = ThinLensCamera(**params)
        with pytest.raises(ValueError):
            camera.validate()
        with pytest.raises(ValueError):
            setup_camera(camera)

    def test_focused_on_lookat(self):
        """Test the focus distance defaults to the lookfrom-lookat distance."""
        from pathtracer.camera.thin_lens import ThinLensCamera

        camera = ThinLensCamera.focused_on_lookat(
            lookfrom=(3.0, 4.0, 0.0), lookat=(0.0, 0.0, 0.0), aperture=0.5
        )
        assert camera.focus_distance == pytest.approx(5.0)
        camera.validate()

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"lookfrom": (3.0, 4.0, 0.0), "lookat": (0.0, 0.0, 0.0), "focus_distance": 2.0},
            {"lookat": (0.0, 0.0, 0.0)},
        ],
    )
    def test_focused_on_lookat_rejects_bad_arguments(self, kwargs):
        """Test that an explicit focus distance or a missing point raises ValueError."""
        from pathtracer.camera.thin_lens import ThinLensCamera

        with pytest.raises(ValueError, match="focused_on_lookat"):
            ThinLensCamera.focused_on_lookat(**kwargs)
