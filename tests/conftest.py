"""Pytest configuration for path tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear device scene data before and after each test."""
    # Import here so Taichi is initialized before fields are allocated
    from pathtracer.core.integrator import reset_background
    from pathtracer.core.renderer import forget_uploads
    from pathtracer.materials.registry import clear_materials
    from pathtracer.scene.intersection import clear_scene

    def _clear_all():
        clear_scene()
        clear_materials()
        reset_background()
        forget_uploads()

    _clear_all()
    yield
    _clear_all()


@pytest.fixture
def single_sphere_scene():
    """The red sphere at (0, 0, -1) and a camera at the origin."""
    from pathtracer.scene.presets import create_single_sphere_scene

    return create_single_sphere_scene(aspect_ratio=1.0)
