"""Utility functions for FlutterLab simulations."""

from .orientation import (
    BROADSIDE,
    EDGE_ON,
    orientation_from_euler,
    orientation_from_normal,
)
from .validation import (
    ConfigurationError,
    NumericalInstabilityError,
    validate_finite,
    validate_non_negative,
    validate_positive,
    validate_timestep,
    validate_vector3,
)

__all__ = [
    "BROADSIDE",
    "EDGE_ON",
    "orientation_from_euler",
    "orientation_from_normal",
    "ConfigurationError",
    "NumericalInstabilityError",
    "validate_positive",
    "validate_non_negative",
    "validate_finite",
    "validate_vector3",
    "validate_timestep",
]
