"""
Validation utilities for physical parameters and state variables.

Provides functions to validate inputs for the sheet simulation,
ensuring physical consistency before any integration step runs.
"""
from __future__ import annotations

import warnings

import numpy as np
from numpy.typing import NDArray

# Time steps above this are accepted but flagged
MAX_RECOMMENDED_DT = 0.05


class ConfigurationError(ValueError):
    """Invalid body, environment or run parameters."""


class NumericalInstabilityError(RuntimeError):
    """
    Raised when the integrated state stops being finite.

    Attributes
    ----------
    step : int
        Index of the step that produced the non-finite state.
    time : float
        Simulation time at the end of that step [s].
    """

    def __init__(self, step: int, time: float, field: str = "state") -> None:
        self.step = int(step)
        self.time = float(time)
        self.field = field
        super().__init__(
            f"Non-finite {field} at step {self.step} (t={self.time:.6f}s). "
            "Reduce the time step or check body/environment parameters."
        )


def validate_positive(value: float, name: str, strict: bool = True) -> None:
    """
    Validate that a scalar value is positive and finite.

    Parameters
    ----------
    value : float
        Value to validate
    name : str
        Parameter name for error messages
    strict : bool
        If True, raise ConfigurationError. If False, issue warning.

    Raises
    ------
    ConfigurationError
        If strict=True and value <= 0 or value is not finite
    """
    validate_finite(value, name)
    if value <= 0:
        msg = f"{name} must be positive, got {value}"
        if strict:
            raise ConfigurationError(msg)
        warnings.warn(msg, RuntimeWarning, stacklevel=2)


def validate_non_negative(value: float, name: str) -> None:
    """Validate that a value is finite and non-negative."""
    validate_finite(value, name)
    if value < 0:
        raise ConfigurationError(f"{name} must be non-negative, got {value}")


def validate_finite(value: float, name: str) -> None:
    """Validate that a scalar is a finite real number."""
    if isinstance(value, (str, bytes, bool)):
        raise ConfigurationError(f"{name} must be a real number, got {value!r}")
    try:
        ok = bool(np.isfinite(float(value)))
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} must be a real number, got {value!r}") from e
    if not ok:
        raise ConfigurationError(f"{name} must be finite, got {value}")


def validate_vector3(value, name: str) -> NDArray[np.float64]:
    """
    Convert value to a finite float64 vector of shape (3,).

    Returns
    -------
    NDArray[np.float64]
        A fresh copy of the vector.
    """
    try:
        vec = np.array(value, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} must be a 3-vector, got {value!r}") from e
    if vec.shape != (3,):
        raise ConfigurationError(f"{name} must have shape (3,), got {vec.shape}")
    if not np.all(np.isfinite(vec)):
        raise ConfigurationError(f"{name} must be finite, got {vec}")
    return vec


def validate_timestep(dt: float, max_dt: float = MAX_RECOMMENDED_DT) -> None:
    """
    Validate timestep is positive and reasonable.

    Parameters
    ----------
    dt : float
        Time step [s]
    max_dt : float
        Largest time step that does not trigger a warning [s]

    Raises
    ------
    ConfigurationError
        If timestep is not positive
    """
    validate_positive(dt, "Time step dt")
    if dt > max_dt:
        warnings.warn(
            f"Large timestep {dt}s may cause instability. "
            f"Consider using dt < {max_dt}s.",
            RuntimeWarning,
            stacklevel=2,
        )
