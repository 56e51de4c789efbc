"""
Verification Test Suite for FlutterLab.

These tests compare simulation results against analytical solutions
to validate the falling-sheet model and the fixed-step driver.

Test Categories:
- Kinematic: Vacuum free fall, ground-impact timing
- Energy: Discrete energy drift of semi-implicit Euler
- Aerodynamic: Broadside terminal velocity, edge-on vs broadside fall,
  lift-driven glide
- Rotational: Torque-free spin about a principal axis
"""

import numpy as np
import pytest

from flutterlab.core.simulation import SimulationDriver
from flutterlab.dynamics.body import BodyProperties, RigidBodyState


# -----------------------------------------------------------------------------
# Common Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def sheet():
    """A4 paper."""
    return BodyProperties(width=0.21, height=0.297, thickness=1e-4, mass=0.005)


# -----------------------------------------------------------------------------
# Helper Functions
# -----------------------------------------------------------------------------

def _drop(body, environment, altitude, dt=1e-3, duration=None, max_steps=None, **state_kwargs):
    """Release a sheet and run it to termination."""
    state = RigidBodyState(np.array([0.0, 0.0, altitude]), **state_kwargs)
    driver = SimulationDriver(body, environment, state, dt=dt,
                              duration=duration, max_steps=max_steps)
    return driver.run(log_interval=0)


@pytest.fixture
def drop():
    """Run helper: drop(body, environment, altitude, dt=..., duration=..., **state)."""
    return _drop
