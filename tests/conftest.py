"""Pytest configuration for path tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti

# Seed applied to the per-worker sampler before every test
TEST_SEED = 42


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=TEST_SEED)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data and reseed the sampler around each test."""
    # Import here so the package allocates its fields after ti.init()
    from weekend_raytracer.core.sampler import seed_sampler
    from weekend_raytracer.materials.dielectric import clear_dielectric_materials
    from weekend_raytracer.materials.lambertian import clear_lambertian_materials
    from weekend_raytracer.materials.metal import clear_metal_materials
    from weekend_raytracer.scene.intersection import clear_scene
    from weekend_raytracer.scene.manager import _clear_material_tracking

    def _clear_all():
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        _clear_material_tracking()

    _clear_all()
    seed_sampler(TEST_SEED)

    yield

    _clear_all()
