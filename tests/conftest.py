"""Pytest configuration for spheretrace tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls, which would
    invalidate every Taichi field allocated by the modules under test.
    """
    ti.init(arch=ti.cpu, cpu_max_num_threads=4)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here so the fields are allocated after ti.init
    from src.spheretrace.core.integrator import clear_render_target, reset_render_target
    from src.spheretrace.materials.dielectric import clear_dielectric_materials
    from src.spheretrace.materials.lambertian import clear_lambertian_materials
    from src.spheretrace.materials.metal import clear_metal_materials
    from src.spheretrace.scene.intersection import clear_scene
    from src.spheretrace.scene.manager import _clear_material_tracking

    def _clear_all():
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        _clear_material_tracking()
        clear_render_target()
        reset_render_target()

    _clear_all()

    yield

    _clear_all()
