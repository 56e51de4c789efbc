"""
Rigid sheet: fixed body properties and the mutable 6-DOF state.

All physical quantities use SI units:
- Position: meters [m]
- Velocity: meters per second [m/s]
- Orientation: ZYX Euler angles [yaw, pitch, roll] [rad]
- Angular velocity: radians per second [rad/s], body frame
- Mass: kilograms [kg]
- Inertia: kilogram-meter-squared [kg·m²]
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property

import numpy as np
from numpy.typing import NDArray

from flutterlab.utils.validation import (
    ConfigurationError,
    validate_positive,
    validate_vector3,
)


@dataclass(frozen=True)
class BodyProperties:
    """
    Geometry and mass of a thin rectangular sheet.

    The sheet lies in the body x-y plane: ``width`` along body x, ``height``
    along body y and ``thickness`` along body z, which is the sheet normal.

    Attributes
    ----------
    width : float
        Extent along body x [m]
    height : float
        Extent along body y [m]
    thickness : float
        Extent along body z [m]
    mass : float
        Sheet mass [kg]

    Notes
    -----
    The inertia tensor uses the thin-plate formula (thickness neglected):

        I_xx = m h² / 12,  I_yy = m w² / 12,  I_zz = m (w² + h²) / 12

    Examples
    --------
    >>> a4 = BodyProperties(width=0.21, height=0.297, thickness=1e-4, mass=0.005)
    >>> a4.inertia_tensor.shape
    (3, 3)
    """

    width: float
    height: float
    thickness: float
    mass: float

    def __post_init__(self):
        validate_positive(self.width, "Sheet width")
        validate_positive(self.height, "Sheet height")
        validate_positive(self.thickness, "Sheet thickness")
        validate_positive(self.mass, "Sheet mass")
        # Dimensions can pass individually yet underflow in m·h²/12
        _ = self.inertia_inverse

    @property
    def planform_area(self) -> float:
        """Full face area w·h [m²]."""
        return self.width * self.height

    @property
    def volume(self) -> float:
        """Geometric volume w·h·t [m³]."""
        return self.width * self.height * self.thickness

    @cached_property
    def inertia_tensor(self) -> NDArray[np.float64]:
        """Diagonal body-frame inertia tensor [kg·m²] (3,3)."""
        m, w, h = self.mass, self.width, self.height
        I = np.diag([m * h**2 / 12.0, m * w**2 / 12.0, m * (w**2 + h**2) / 12.0])
        if np.any(np.diag(I) <= 0):
            raise ConfigurationError(f"Inertia tensor must be positive, got {np.diag(I)}")
        return I

    @cached_property
    def inertia_inverse(self) -> NDArray[np.float64]:
        """Inverse of the diagonal inertia tensor (3,3)."""
        with np.errstate(over="ignore"):
            inv = 1.0 / np.diag(self.inertia_tensor)
        if not np.all(np.isfinite(inv)):
            raise ConfigurationError(f"Inertia tensor is not invertible: {np.diag(self.inertia_tensor)}")
        return np.diag(inv)


# Named sheets used by the scenario API and the CLI
SHEET_PRESETS: dict[str, dict[str, float]] = {
    "a4_paper": {"width": 0.210, "height": 0.297, "thickness": 1.0e-4, "mass": 0.005},
    "letter_paper": {"width": 0.216, "height": 0.279, "thickness": 1.0e-4, "mass": 0.0045},
    "cardstock": {"width": 0.148, "height": 0.210, "thickness": 3.0e-4, "mass": 0.0078},
    "aluminium_foil": {"width": 0.300, "height": 0.300, "thickness": 1.6e-5, "mass": 0.0039},
}


def sheet_from_preset(name: str) -> BodyProperties:
    """Build BodyProperties from a SHEET_PRESETS entry."""
    try:
        params = SHEET_PRESETS[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown sheet preset '{name}'. Available: {sorted(SHEET_PRESETS)}"
        ) from None
    return BodyProperties(**params)


class RigidBodyState:
    """
    Mutable translational and rotational state of the sheet.

    State Variables
    ---------------
    - position : NDArray[np.float64]
        Position of the sheet centre in world frame [m] (3,)
    - velocity : NDArray[np.float64]
        Linear velocity in world frame [m/s] (3,)
    - orientation : NDArray[np.float64]
        ZYX Euler angles [yaw, pitch, roll] [rad] (3,)
    - angular_velocity : NDArray[np.float64]
        Angular velocity in body frame [rad/s] (3,)

    Notes
    -----
    Uses __slots__ to keep per-instance overhead low; a run creates one state
    and mutates it in place once per step.
    """
    __slots__ = ("position", "velocity", "orientation", "angular_velocity")

    def __init__(
        self,
        position: NDArray[np.float64],
        velocity: NDArray[np.float64] | None = None,
        orientation: NDArray[np.float64] | None = None,
        angular_velocity: NDArray[np.float64] | None = None,
    ) -> None:
        self.position = validate_vector3(position, "Position")
        self.velocity = (np.zeros(3, dtype=np.float64) if velocity is None
                         else validate_vector3(velocity, "Velocity"))
        self.orientation = (np.zeros(3, dtype=np.float64) if orientation is None
                            else validate_vector3(orientation, "Orientation"))
        self.angular_velocity = (np.zeros(3, dtype=np.float64) if angular_velocity is None
                                 else validate_vector3(angular_velocity, "Angular velocity"))

    def __repr__(self) -> str:
        return (
            f"RigidBodyState(position={self.position.tolist()}, "
            f"velocity={self.velocity.tolist()}, "
            f"orientation={self.orientation.tolist()}, "
            f"angular_velocity={self.angular_velocity.tolist()})"
        )

    @property
    def yaw(self) -> float:
        return float(self.orientation[0])

    @property
    def pitch(self) -> float:
        return float(self.orientation[1])

    @property
    def roll(self) -> float:
        return float(self.orientation[2])

    def copy(self) -> RigidBodyState:
        """Independent deep copy of the state."""
        return RigidBodyState(
            self.position.copy(),
            self.velocity.copy(),
            self.orientation.copy(),
            self.angular_velocity.copy(),
        )

    def as_vector(self) -> NDArray[np.float64]:
        """Concatenated state [p, v, euler, w] (12,)."""
        return np.concatenate(
            [self.position, self.velocity, self.orientation, self.angular_velocity]
        )

    def first_non_finite(self) -> str | None:
        """Name of the first non-finite field, or None if the state is finite."""
        for name in self.__slots__:
            if not np.all(np.isfinite(getattr(self, name))):
                return name
        return None

    def is_finite(self) -> bool:
        return self.first_non_finite() is None


def angular_momentum(state: RigidBodyState, body: BodyProperties) -> NDArray[np.float64]:
    """Body-frame angular momentum L = I·ω [kg·m²/s] (3,)."""
    return body.inertia_tensor @ state.angular_velocity


def kinetic_energy(state: RigidBodyState, body: BodyProperties) -> float:
    """
    Total kinetic energy.

    Returns
    -------
    float
        Kinetic energy [J] = 0.5 * m * |v|² + 0.5 * ω^T * I * ω
    """
    T_trans = 0.5 * body.mass * np.dot(state.velocity, state.velocity)
    w = state.angular_velocity
    T_rot = 0.5 * np.dot(w, body.inertia_tensor @ w)
    return float(T_trans + T_rot)
