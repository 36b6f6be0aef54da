"""Pytest configuration for sphere field tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import numpy as np
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
    # Note: We don't call ti.reset() here as it can cause issues
    # with subsequent tests if any cleanup happens after


@pytest.fixture
def rng():
    """A seeded random generator for deterministic scene generation."""
    return np.random.default_rng(1234)


@pytest.fixture
def small_skybox():
    """A small procedural skybox shared by kernel tests."""
    from spherefield.scene.skybox import Skybox

    return Skybox.gradient(32, 16)
