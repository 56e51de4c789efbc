import os
import sys

import numpy as np
import pytest

# Get the path to the project root (one level up from 'tests')
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
src_path = os.path.join(project_root, 'src')

# Add 'src' to sys.path
sys.path.insert(0, src_path)

from flutterlab.dynamics.body import BodyProperties, RigidBodyState  # noqa: E402
from flutterlab.dynamics.environment import Environment  # noqa: E402


@pytest.fixture
def a4_sheet():
    """A4 paper: 210 x 297 mm, 80 g/m²."""
    return BodyProperties(width=0.21, height=0.297, thickness=1e-4, mass=0.005)


@pytest.fixture
def still_air():
    """Sea-level air, no wind."""
    return Environment()


@pytest.fixture
def vacuum():
    """No air: only gravity acts."""
    return Environment(air_density=0.0, drag_coefficient=0.0, lift_coefficient=0.0)


@pytest.fixture
def released_state():
    """Sheet at rest 2 m above ground, lying flat."""
    return RigidBodyState(np.array([0.0, 0.0, 2.0]))
