"""Unit tests for the Ray type."""

import taichi as ti


class TestRay:
    """Tests for ray construction and evaluation."""

    def test_ray_at(self):
        """Test that ray_at walks t units along the unit direction."""
        from pathtracer.core.ray import make_ray, ray_at
        from pathtracer.core.vector import unit_vector, vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(1.0, 2.0, 3.0), unit_vector(vec3(0.0, 0.0, -2.0)))
            result[None] = ray_at(ray, 5.0)

        test_kernel()
        p = result[None]
        assert (p[0], p[1], p[2]) == (1.0, 2.0, -2.0)

    def test_ray_at_zero_is_origin(self):
        """Test that t = 0 gives the origin."""
        from pathtracer.core.ray import make_ray, ray_at
        from pathtracer.core.vector import unit_vector, vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(-1.0, 0.5, 4.0), unit_vector(vec3(1.0, 1.0, 1.0)))
            result[None] = ray_at(ray, 0.0)

        test_kernel()
        p = result[None]
        assert (p[0], p[1], p[2]) == (-1.0, 0.5, 4.0)
