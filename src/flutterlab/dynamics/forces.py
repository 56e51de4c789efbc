"""
Aerodynamic force and torque model for a thin flat sheet.

Given the current state, the body properties, the environment and the
body-to-world rotation matrix, computes the loads acting on the sheet and the
resulting linear and angular accelerations.

Physical units:
- Forces: Newtons [N]
- Torques: Newton-meters [N·m]
- Velocities: meters per second [m/s]
- Areas: square meters [m²]
- Densities: kilograms per cubic meter [kg/m³]
"""
from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from flutterlab.dynamics.body import BodyProperties, RigidBodyState
from flutterlab.dynamics.environment import Environment
from flutterlab.dynamics.rotation import body_to_world, sheet_normal
from flutterlab.utils.validation import validate_finite, validate_positive

# Guard added to speeds and norms that appear in denominators
EPSILON_VELOCITY = 1e-6

# Lift application point along the body normal [m]
DEFAULT_LIFT_OFFSET = 0.001


@dataclass
class AeroLoads:
    """
    Loads on the sheet for one evaluation.

    Vectors are in the world frame except ``angular_acceleration``, which is in
    the body frame like the angular velocity it updates.
    """

    acceleration: NDArray[np.float64]
    angular_acceleration: NDArray[np.float64]
    drag: NDArray[np.float64]
    lift: NDArray[np.float64]
    buoyancy: NDArray[np.float64]
    gravity: NDArray[np.float64]
    torque: NDArray[np.float64]
    projected_area: float
    relative_speed: float
    reynolds: float

    @property
    def net_force(self) -> NDArray[np.float64]:
        return self.drag + self.lift + self.buoyancy + self.gravity

    @property
    def drag_magnitude(self) -> float:
        return float(np.linalg.norm(self.drag))

    @property
    def lift_magnitude(self) -> float:
        return float(np.linalg.norm(self.lift))


class AeroForceModel:
    """
    Quasi-steady flat-plate aerodynamics.

    Drag opposes the relative wind and scales with the projected area; lift
    acts perpendicular to the relative wind in the plane spanned by the
    relative wind and the sheet normal. Lift is applied at a small offset
    along the body normal, which is the only source of aerodynamic torque.

    Parameters
    ----------
    lift_offset : float
        Distance of the lift application point along the body z-axis [m].
        Default: 0.001 m
    epsilon : float
        Additive guard for zero relative speed and zero lift direction.
        Default: 1e-6

    Notes
    -----
    With ``v_rel = v - wind`` and ``|v_rel|`` guarded by ``epsilon``:

        A_proj = w h |n · v_rel / |v_rel||
        F_drag = -½ ρ Cd A_proj |v_rel| v_rel
        F_lift =  ½ ρ Cl A_proj |v_rel|² (v_rel × n) × v_rel / |...|
        F_buoy =  (0, 0, ρ V g)
        α      =  I⁻¹ (τ - ω × (I ω))

    A sheet at rest relative to the wind sees zero projected area and therefore
    no drag, lift or torque; this is an accepted approximation, not an error.

    Examples
    --------
    >>> model = AeroForceModel()
    >>> R = rotation_from_orientation(state.orientation)
    >>> loads = model.evaluate(state, body, environment, R)
    >>> loads.acceleration
    """

    def __init__(
        self,
        lift_offset: float = DEFAULT_LIFT_OFFSET,
        epsilon: float = EPSILON_VELOCITY,
    ) -> None:
        validate_finite(lift_offset, "Lift offset")
        validate_positive(epsilon, "Epsilon")
        self.lift_offset = float(lift_offset)
        self.epsilon = float(epsilon)

    def evaluate(
        self,
        state: RigidBodyState,
        body: BodyProperties,
        environment: Environment,
        rotation: NDArray[np.float64],
    ) -> AeroLoads:
        """
        Compute forces, torque and accelerations for the current state.

        Parameters
        ----------
        state : RigidBodyState
            Current state (not modified)
        body : BodyProperties
            Sheet geometry and inertia
        environment : Environment
            Air properties, gravity and wind
        rotation : NDArray[np.float64]
            Body-to-world rotation matrix for ``state.orientation`` (3,3)

        Returns
        -------
        AeroLoads
        """
        rho = environment.air_density
        g = environment.gravity

        v_rel = state.velocity - environment.wind_velocity
        v_mag = float(np.linalg.norm(v_rel)) + self.epsilon
        n = sheet_normal(rotation)

        A_proj = body.planform_area * abs(float(np.dot(n, v_rel / v_mag)))

        # F = -0.5 * ρ * Cd * A * |v| * v
        drag = -0.5 * rho * environment.drag_coefficient * A_proj * v_mag * v_rel

        lift_dir = np.cross(np.cross(v_rel, n), v_rel)
        lift_dir = lift_dir / (np.linalg.norm(lift_dir) + self.epsilon)
        lift = 0.5 * rho * environment.lift_coefficient * A_proj * v_mag**2 * lift_dir

        buoyancy = np.array([0.0, 0.0, rho * body.volume * g])
        gravity = np.array([0.0, 0.0, -body.mass * g])

        acceleration = (drag + lift + buoyancy + gravity) / body.mass

        r_lift = body_to_world(rotation, np.array([0.0, 0.0, self.lift_offset]))
        torque = np.cross(r_lift, lift)

        I = body.inertia_tensor
        w = state.angular_velocity
        angular_acceleration = body.inertia_inverse @ (torque - np.cross(w, I @ w))

        reynolds = rho * v_mag * body.width / environment.dynamic_viscosity

        return AeroLoads(
            acceleration=acceleration,
            angular_acceleration=angular_acceleration,
            drag=drag,
            lift=lift,
            buoyancy=buoyancy,
            gravity=gravity,
            torque=torque,
            projected_area=float(A_proj),
            relative_speed=v_mag,
            reynolds=float(reynolds),
        )
