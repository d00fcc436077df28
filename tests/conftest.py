"""Pytest configuration for path tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls, which would
    invalidate every field declared by the modules under test.
    """
    ti.init(arch=ti.cpu, default_fp=ti.f64, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_render_state():
    """Reset scene, background, render target and random streams around each test.

    This ensures tests are isolated from each other.
    """
    # Import here so the field modules are loaded after ti.init()
    from pathtracer.core.integrator import reset_background, reset_render_target
    from pathtracer.core.rng import seed_streams
    from pathtracer.scene.world import clear_scene

    def _clear_all():
        clear_scene()
        reset_background()
        reset_render_target()
        seed_streams(42)

    _clear_all()
    yield
    _clear_all()
