"""Pytest configuration and shared fixtures for spherefluid tests."""
import sys
from pathlib import Path

import numpy as np
import pytest


def pytest_configure(config):
    """Make the workspace root importable when running from a source checkout."""
    workspace_root = Path(__file__).parent.parent.parent
    if str(workspace_root) not in sys.path:
        sys.path.insert(0, str(workspace_root))


@pytest.fixture
def h():
    """Reference support radius."""
    return 12.0


@pytest.fixture
def rng():
    return np.random.default_rng(12345)


@pytest.fixture
def particle_pair():
    """Two unit-mass particles at rest, one unit apart along x."""
    from spherefluid.scenarios import create_particle_set
    return create_particle_set([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]])


@pytest.fixture
def small_cluster(rng):
    """Four particles well inside one support radius with random velocities."""
    from spherefluid.scenarios import create_particle_set
    positions = rng.normal(0.0, 2.0, size=(4, 3))
    velocities = rng.normal(0.0, 1.0, size=(4, 3))
    return create_particle_set(positions, velocities)
