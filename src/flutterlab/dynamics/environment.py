"""
Ambient air and gravity seen by the falling sheet.

Physical units:
- Densities: kilograms per cubic meter [kg/m³]
- Gravity: meters per second squared [m/s²], magnitude, acting along -Z
- Velocities: meters per second [m/s]
- Dynamic viscosity: pascal-seconds [Pa·s]
"""
from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from flutterlab.utils.validation import (
    ConfigurationError,
    validate_finite,
    validate_non_negative,
    validate_positive,
    validate_vector3,
)

# Standard sea-level air
SEA_LEVEL_DENSITY = 1.225
STANDARD_GRAVITY = 9.81
AIR_VISCOSITY = 1.81e-5

# Flat plate normal to the flow
FLAT_PLATE_CD = 1.28


@dataclass(frozen=True)
class Environment:
    """
    Air properties and aerodynamic coefficients, fixed for a run.

    Attributes
    ----------
    air_density : float
        ρ [kg/m³]. Zero disables drag, lift and buoyancy.
    gravity : float
        Magnitude of gravitational acceleration [m/s²]
    drag_coefficient : float
        Cd [-], referenced to projected area
    lift_coefficient : float
        Cl [-], referenced to projected area
    wind_velocity : NDArray[np.float64]
        Uniform wind in world frame [m/s] (3,)
    dynamic_viscosity : float
        μ [Pa·s], used only for the Reynolds number diagnostic

    Notes
    -----
    Instances are immutable, including the wind vector, so a driver can
    share the caller's Environment for the whole run.
    """

    air_density: float = SEA_LEVEL_DENSITY
    gravity: float = STANDARD_GRAVITY
    drag_coefficient: float = FLAT_PLATE_CD
    lift_coefficient: float = 0.5
    wind_velocity: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))
    dynamic_viscosity: float = AIR_VISCOSITY

    def __post_init__(self):
        validate_non_negative(self.air_density, "Air density")
        validate_non_negative(self.gravity, "Gravity")
        validate_non_negative(self.drag_coefficient, "Drag coefficient")
        validate_finite(self.lift_coefficient, "Lift coefficient")
        validate_positive(self.dynamic_viscosity, "Dynamic viscosity")
        wind = validate_vector3(self.wind_velocity, "Wind velocity")
        wind.setflags(write=False)
        object.__setattr__(self, "wind_velocity", wind)

    @property
    def gravity_vector(self) -> NDArray[np.float64]:
        """Gravitational acceleration vector [m/s²] (3,)."""
        return np.array([0.0, 0.0, -self.gravity])


ENVIRONMENT_PRESETS: dict[str, dict] = {
    "sea_level": {},
    "vacuum": {"air_density": 0.0, "drag_coefficient": 0.0, "lift_coefficient": 0.0},
    "breezy": {"wind_velocity": [2.0, 0.0, 0.0]},
}


def environment_from_preset(name: str, **overrides) -> Environment:
    """
    Build an Environment from an ENVIRONMENT_PRESETS entry.

    Keyword overrides replace individual preset values.
    """
    if name not in ENVIRONMENT_PRESETS:
        raise ConfigurationError(
            f"Unknown environment preset '{name}'. Available: {sorted(ENVIRONMENT_PRESETS)}"
        )
    params = dict(ENVIRONMENT_PRESETS[name])
    params.update(overrides)
    try:
        return Environment(**params)
    except TypeError as e:
        raise ConfigurationError(f"Invalid environment parameters: {e}") from e
