"""
Per-step records and the result of a complete run.

A run produces one StepRecord per accepted step, in time order. The export
column layout defined here is shared by the CSV logger, the pandas exporter
and the plotting helpers.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Sequence

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    import pandas as pd

EXPORT_COLUMNS: tuple[str, ...] = (
    "t",
    "x", "y", "z",
    "vx", "vy", "vz",
    "yaw", "pitch", "roll",
    "wx", "wy", "wz",
    "Lx", "Ly", "Lz",
    "projected_area",
    "kinetic_energy",
    "drag",
    "lift",
    "reynolds",
)

# Default spacing of exported rows [s]
DEFAULT_EXPORT_INTERVAL = 0.1


class TerminationReason(Enum):
    """Why a run stopped."""

    GROUND_IMPACT = "ground_impact"
    STEP_BUDGET = "step_budget"


@dataclass(frozen=True)
class StepRecord:
    """
    Snapshot of the sheet after one integration step.

    Attributes
    ----------
    step : int
        Zero-based step index; equals the record's index in the run
    time : float
        Simulation time at the end of the step [s]
    position, velocity : NDArray[np.float64]
        World-frame position [m] and velocity [m/s] (3,)
    orientation : NDArray[np.float64]
        [yaw, pitch, roll] [rad] (3,)
    angular_velocity : NDArray[np.float64]
        Body-frame angular velocity [rad/s] (3,)
    angular_momentum : NDArray[np.float64]
        I·ω, body frame [kg·m²/s] (3,)
    projected_area : float
        Frontal area along the relative wind [m²]
    kinetic_energy : float
        Translational plus rotational kinetic energy [J]
    drag_magnitude, lift_magnitude : float
        |F_drag|, |F_lift| [N]
    reynolds : float
        ρ |v_rel| w / μ [-]
    """

    step: int
    time: float
    position: NDArray[np.float64]
    velocity: NDArray[np.float64]
    orientation: NDArray[np.float64]
    angular_velocity: NDArray[np.float64]
    angular_momentum: NDArray[np.float64]
    projected_area: float
    kinetic_energy: float
    drag_magnitude: float
    lift_magnitude: float
    reynolds: float

    @property
    def yaw(self) -> float:
        return float(self.orientation[0])

    @property
    def pitch(self) -> float:
        return float(self.orientation[1])

    @property
    def roll(self) -> float:
        return float(self.orientation[2])

    def as_row(self) -> list[float]:
        """Values in EXPORT_COLUMNS order."""
        return [
            self.time,
            *self.position,
            *self.velocity,
            *self.orientation,
            *self.angular_velocity,
            *self.angular_momentum,
            self.projected_area,
            self.kinetic_energy,
            self.drag_magnitude,
            self.lift_magnitude,
            self.reynolds,
        ]

    def to_dict(self) -> dict[str, float]:
        return {k: float(v) for k, v in zip(EXPORT_COLUMNS, self.as_row())}


def downsample_records(
    records: Sequence[StepRecord],
    interval: float,
    dt: float,
) -> list[StepRecord]:
    """
    Select records at a fixed time spacing.

    Parameters
    ----------
    records : Sequence[StepRecord]
        Full, time-ordered run
    interval : float
        Desired spacing between selected records [s]
    dt : float
        Integration time step of the run [s]

    Returns
    -------
    list[StepRecord]
        Every ``stride``-th record starting with the first, where ``stride`` is
        ``interval / dt`` rounded to the nearest integer (halves round up).
        The final record is always included.
    """
    if not records:
        return []
    if interval <= 0 or dt <= 0:
        raise ValueError(f"interval and dt must be positive, got {interval} and {dt}")

    stride = max(1, int(math.floor(interval / dt + 0.5)))
    selected = list(records[::stride])
    if selected[-1] is not records[-1]:
        selected.append(records[-1])
    return selected


@dataclass
class SimulationResult:
    """
    Outcome of a complete run.

    Attributes
    ----------
    records : list[StepRecord]
        All records in step order
    reason : TerminationReason
        Ground impact or step-budget exhaustion
    terminal_time : float
        Time of the last record [s]
    dt : float
        Time step used [s]
    touchdown_time : float | None
        Linear interpolation of the instant z crossed 0 [s]; ground impact only
    """

    records: list[StepRecord]
    reason: TerminationReason
    terminal_time: float
    dt: float
    touchdown_time: float | None = None
    metadata: dict = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.records)

    @property
    def final(self) -> StepRecord:
        return self.records[-1]

    @property
    def hit_ground(self) -> bool:
        return self.reason is TerminationReason.GROUND_IMPACT

    def times(self) -> NDArray[np.float64]:
        return np.array([r.time for r in self.records])

    def positions(self) -> NDArray[np.float64]:
        """Positions stacked as (N, 3)."""
        return np.array([r.position for r in self.records]).reshape(-1, 3)

    def downsample(self, interval: float = DEFAULT_EXPORT_INTERVAL) -> list[StepRecord]:
        return downsample_records(self.records, interval, self.dt)

    def to_dataframe(self, interval: float | None = None) -> pd.DataFrame:
        """Records (optionally downsampled) as a DataFrame with EXPORT_COLUMNS."""
        from flutterlab.utils.io import records_to_dataframe

        records = self.records if interval is None else self.downsample(interval)
        return records_to_dataframe(records)

    def summary(self) -> dict[str, float | str | None]:
        """Scalar overview of the run."""
        final = self.final
        return {
            "reason": self.reason.value,
            "steps": len(self.records),
            "terminal_time": self.terminal_time,
            "touchdown_time": self.touchdown_time,
            "final_x": float(final.position[0]),
            "final_y": float(final.position[1]),
            "final_z": float(final.position[2]),
            "max_reynolds": max(r.reynolds for r in self.records),
            "mean_projected_area": float(np.mean([r.projected_area for r in self.records])),
        }
