"""Pytest configuration for skytrace tests.

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
    ti.init(arch=ti.cpu)
    yield


@pytest.fixture(autouse=True)
def clear_scene_data():
    """Clear device scene storage before and after each test."""
    # Import here so that the scene fields are declared after ti.init()
    from skytrace.scene.intersection import clear_scene

    clear_scene()
    yield
    clear_scene()


@pytest.fixture
def upload():
    """Upload a scene built from spheres and return the sphere count."""
    from skytrace.scene.description import Scene
    from skytrace.scene.intersection import upload_scene

    def _upload(*spheres):
        return upload_scene(Scene(spheres))

    return _upload
