from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from flutterlab.dynamics.body import RigidBodyState

# Body rate component driving each entry of [yaw, pitch, roll]
EULER_RATE_AXES = (2, 1, 0)


class SemiImplicitEulerIntegrator:
    """
    Fixed-step semi-implicit (symplectic) Euler integrator.

    Integration order:
    1. v_{n+1} = v_n + a * dt
    2. p_{n+1} = p_n + v_{n+1} * dt
    3. w_{n+1} = w_n + alpha * dt
    4. euler_{n+1} = euler_n + w_{n+1} * dt

    Euler angles are advanced directly from the body rates (roll from w_x,
    pitch from w_y, yaw from w_z). This is the small-angle kinematic
    approximation, not a rotation composition.
    """

    def step(
        self,
        state: RigidBodyState,
        acceleration: NDArray[np.float64],
        angular_acceleration: NDArray[np.float64],
        dt: float,
    ) -> RigidBodyState:
        # Momentum level first
        state.velocity += acceleration * dt
        state.position += state.velocity * dt

        state.angular_velocity += angular_acceleration * dt
        state.orientation += state.angular_velocity[list(EULER_RATE_AXES)] * dt
        return state
