"""Pytest configuration for ray tracer tests.

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
    ti.init(arch=ti.cpu, random_seed=42, default_fp=ti.f64)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene, material and render target state around each test."""
    # Import here so the Taichi fields are created after ti.init()
    from mcray.core.integrator import release_render_target
    from mcray.materials.dielectric import clear_dielectric_materials
    from mcray.materials.lambertian import clear_lambertian_materials
    from mcray.materials.material import clear_material_tracking
    from mcray.materials.metal import clear_metal_materials
    from mcray.scene.intersection import clear_scene

    def _clear_all():
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        clear_material_tracking()

        release_render_target()

    _clear_all()

    yield

    _clear_all()
