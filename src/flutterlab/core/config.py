"""
Run configuration: body, environment, initial state and time stepping.

Configurations can be built in code or loaded from a JSON file:

.. code-block:: json

    {
        "sheet": "a4_paper",
        "environment": {"preset": "sea_level", "wind_velocity": [1.0, 0.0, 0.0]},
        "initial": {"altitude": 3.0, "pitch": 20.0, "roll": 5.0},
        "dt": 0.001,
        "duration": 10.0
    }

Angles in the ``initial`` block are in degrees.
"""
from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import numpy as np

from flutterlab.dynamics.body import BodyProperties, RigidBodyState, sheet_from_preset
from flutterlab.dynamics.environment import Environment, environment_from_preset
from flutterlab.dynamics.forces import DEFAULT_LIFT_OFFSET
from flutterlab.utils.orientation import orientation_from_euler
from flutterlab.utils.validation import (
    ConfigurationError,
    validate_finite,
    validate_positive,
    validate_timestep,
)

# Guards floor(duration / dt) against 0.3 / 0.1 = 2.9999999999999996
STEP_BUDGET_TOLERANCE = 1e-9
DEFAULT_DURATION = 10.0

_TOP_LEVEL_KEYS = {"sheet", "environment", "initial", "dt", "duration", "max_steps", "lift_offset"}
_INITIAL_KEYS = {"altitude", "position", "velocity", "yaw", "pitch", "roll", "angular_velocity"}


def _number(value: Any, name: str) -> float:
    """Convert a setting to float, raising ConfigurationError for non-numbers."""
    validate_finite(value, name)
    return float(value)


def _integer(value: Any, name: str) -> int:
    n = _number(value, name)
    if n != int(n):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    return int(n)


def step_budget(dt: float, duration: float | None = None, max_steps: int | None = None) -> int:
    """
    Number of steps a run may take.

    Exactly one of ``duration`` and ``max_steps`` must be given.
    ``floor(duration / dt)`` is used for a duration.

    Raises
    ------
    ConfigurationError
        If both or neither are given, or the budget is smaller than one step
    """
    if (duration is None) == (max_steps is None):
        raise ConfigurationError("Specify exactly one of duration or max_steps")
    dt = _number(dt, "Time step dt")
    validate_positive(dt, "Time step dt")
    if duration is not None:
        duration = _number(duration, "Duration")
        validate_positive(duration, "Duration")
        n = int(math.floor(duration / dt + STEP_BUDGET_TOLERANCE))
    else:
        n = _integer(max_steps, "max_steps")
    if n < 1:
        raise ConfigurationError(
            f"Step budget must be at least 1, got {n} "
            f"(dt={dt}, duration={duration}, max_steps={max_steps})"
        )
    return n


@dataclass
class SimulationConfig:
    """
    Everything needed to construct a SimulationDriver.

    Attributes
    ----------
    body : BodyProperties
        Sheet geometry and mass
    environment : Environment
        Air, gravity and wind
    initial_state : RigidBodyState
        State at t = 0
    dt : float
        Fixed time step [s]
    duration : float | None
        Total simulated time T [s]; budget N = floor(T / dt)
    max_steps : int | None
        Explicit step budget N, alternative to ``duration``
    lift_offset : float
        Lift application offset along the body normal [m]
    """

    body: BodyProperties
    environment: Environment = field(default_factory=Environment)
    initial_state: RigidBodyState = field(
        default_factory=lambda: RigidBodyState(np.array([0.0, 0.0, 2.0]))
    )
    dt: float = 1e-3
    duration: float | None = None
    max_steps: int | None = None
    lift_offset: float = DEFAULT_LIFT_OFFSET

    def __post_init__(self):
        if self.duration is None and self.max_steps is None:
            self.duration = DEFAULT_DURATION
        self.dt = _number(self.dt, "Time step dt")
        self.lift_offset = _number(self.lift_offset, "Lift offset")
        validate_timestep(self.dt)
        step_budget(self.dt, self.duration, self.max_steps)

    @property
    def n_steps(self) -> int:
        return step_budget(self.dt, self.duration, self.max_steps)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SimulationConfig:
        """
        Build a configuration from plain data (as parsed from JSON).

        Raises
        ------
        ConfigurationError
            On unknown keys, unknown presets or invalid values
        """
        unknown = set(data) - _TOP_LEVEL_KEYS
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration keys: {sorted(unknown)}. Valid keys: {sorted(_TOP_LEVEL_KEYS)}"
            )

        body = _parse_sheet(data.get("sheet", "a4_paper"))
        environment = _parse_environment(data.get("environment", "sea_level"))
        initial_state = _parse_initial(data.get("initial", {}))

        duration = data.get("duration")
        max_steps = data.get("max_steps")

        return cls(
            body=body,
            environment=environment,
            initial_state=initial_state,
            dt=_number(data.get("dt", 1e-3), "Time step dt"),
            duration=None if duration is None else _number(duration, "Duration"),
            max_steps=None if max_steps is None else _integer(max_steps, "max_steps"),
            lift_offset=_number(data.get("lift_offset", DEFAULT_LIFT_OFFSET), "Lift offset"),
        )


def _parse_sheet(entry: str | dict) -> BodyProperties:
    if isinstance(entry, str):
        return sheet_from_preset(entry)
    if isinstance(entry, dict):
        params = dict(entry)
        preset = params.pop("preset", None)
        base = {} if preset is None else _preset_dims(preset)
        base.update(params)
        try:
            return BodyProperties(**base)
        except TypeError as e:
            raise ConfigurationError(f"Invalid sheet parameters: {e}") from e
    raise ConfigurationError(f"sheet must be a preset name or a mapping, got {entry!r}")


def _preset_dims(name: str) -> dict[str, float]:
    body = sheet_from_preset(name)
    return {"width": body.width, "height": body.height,
            "thickness": body.thickness, "mass": body.mass}


def _parse_environment(entry: str | dict) -> Environment:
    if isinstance(entry, str):
        return environment_from_preset(entry)
    if isinstance(entry, dict):
        params = dict(entry)
        preset = params.pop("preset", "sea_level")
        return environment_from_preset(preset, **params)
    raise ConfigurationError(f"environment must be a preset name or a mapping, got {entry!r}")


def _parse_initial(entry: dict) -> RigidBodyState:
    if not isinstance(entry, dict):
        raise ConfigurationError(f"initial must be a mapping, got {entry!r}")
    unknown = set(entry) - _INITIAL_KEYS
    if unknown:
        raise ConfigurationError(
            f"Unknown initial-state keys: {sorted(unknown)}. Valid keys: {sorted(_INITIAL_KEYS)}"
        )
    if "altitude" in entry and "position" in entry:
        raise ConfigurationError("Specify either altitude or position, not both")

    if "position" in entry:
        position = entry["position"]
    else:
        position = [0.0, 0.0, _number(entry.get("altitude", 2.0), "Altitude")]

    orientation = orientation_from_euler(
        yaw=entry.get("yaw", 0.0),
        pitch=entry.get("pitch", 0.0),
        roll=entry.get("roll", 0.0),
        degrees=True,
    )
    return RigidBodyState(
        position=position,
        velocity=entry.get("velocity"),
        orientation=orientation,
        angular_velocity=entry.get("angular_velocity"),
    )


def load_simulation_config(filepath: str | Path) -> SimulationConfig:
    """
    Load a SimulationConfig from a JSON file.

    Raises
    ------
    ConfigurationError
        If the file is missing, is not valid JSON, or holds invalid settings
    """
    path = Path(filepath)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(f"Configuration file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Top level of {path} must be a JSON object")
    return SimulationConfig.from_dict(data)
