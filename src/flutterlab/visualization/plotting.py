from __future__ import annotations

import os
from typing import Sequence

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from matplotlib.figure import Figure
from mpl_toolkits.mplot3d import Axes3D  # noqa: F401  (registers 3D projection)
from mpl_toolkits.mplot3d.art3d import Poly3DCollection

from flutterlab.core.records import SimulationResult, StepRecord
from flutterlab.dynamics.body import BodyProperties, RigidBodyState
from flutterlab.dynamics.rotation import rotation_from_orientation

SHEET_COLOR = "#1a73e8"
TRAIL_COLOR = "#5f6368"


def _as_records(data: SimulationResult | Sequence[StepRecord]) -> list[StepRecord]:
    records = data.records if isinstance(data, SimulationResult) else list(data)
    if not records:
        raise ValueError("No records to plot.")
    return records


def _save_and_show(fig: Figure, save_path: str | None, show: bool) -> None:
    fig.tight_layout()
    if save_path:
        os.makedirs(os.path.dirname(save_path) or ".", exist_ok=True)
        fig.savefig(save_path, dpi=180, bbox_inches="tight")
    if show:
        plt.show()


def sheet_corners(
    item: StepRecord | RigidBodyState,
    body: BodyProperties,
) -> np.ndarray:
    """
    World coordinates of the four sheet corners.

    Parameters
    ----------
    item : StepRecord | RigidBodyState
        Anything with ``position`` and ``orientation``
    body : BodyProperties
        Supplies width and height

    Returns
    -------
    (4, 3) array, corners in cyclic order
    """
    hw, hh = 0.5 * body.width, 0.5 * body.height
    local = np.array([
        [-hw, -hh, 0.0],
        [hw, -hh, 0.0],
        [hw, hh, 0.0],
        [-hw, hh, 0.0],
    ])
    R = rotation_from_orientation(item.orientation)
    return item.position + local @ R.T


def _set_equal_3d(ax, points: np.ndarray, margin: float) -> None:
    """Equal aspect ratio around a point cloud."""
    lo = points.min(axis=0) - margin
    hi = points.max(axis=0) + margin
    centre = 0.5 * (lo + hi)
    half = 0.5 * float(np.max(hi - lo))
    ax.set_xlim(centre[0] - half, centre[0] + half)
    ax.set_ylim(centre[1] - half, centre[1] + half)
    ax.set_zlim(max(0.0, centre[2] - half), centre[2] + half)


def plot_trajectory_3d(
    data: SimulationResult | Sequence[StepRecord],
    body: BodyProperties,
    n_sheets: int = 12,
    save_path: str | None = None,
    show: bool = True,
) -> Figure:
    """
    Plot the 3D trail of the sheet centre with sheet patches along it, plus z(t).

    Parameters
    ----------
    data : SimulationResult | Sequence[StepRecord]
        Run to plot
    body : BodyProperties
        Sheet dimensions for the patches
    n_sheets : int
        Number of sheet patches drawn, evenly spaced in record index
        (first and last always drawn). 0 draws only the trail.
    save_path : str | None
        If given, save the figure to this path (png/svg).
    show : bool
        Whether to call plt.show().

    Returns
    -------
    fig : Figure
    """
    records = _as_records(data)
    t = np.array([r.time for r in records])
    P = np.array([r.position for r in records])

    fig = plt.figure(figsize=(10, 8))
    gs = fig.add_gridspec(2, 1, height_ratios=[2.5, 1.0])
    ax3d = fig.add_subplot(gs[0], projection="3d")
    axz = fig.add_subplot(gs[1])

    ax3d.plot(P[:, 0], P[:, 1], P[:, 2], lw=1.5, color=TRAIL_COLOR, alpha=0.8)
    ax3d.scatter(*P[0], color="#34a853", s=30, label="release")
    ax3d.scatter(*P[-1], color="#ea4335", s=30, label="end")

    if n_sheets > 0:
        idx = np.unique(np.linspace(0, len(records) - 1, n_sheets).round().astype(int))
        patches = [sheet_corners(records[i], body) for i in idx]
        ax3d.add_collection3d(Poly3DCollection(
            patches, facecolors=SHEET_COLOR, edgecolors="k", linewidths=0.5, alpha=0.35
        ))
        corners = np.vstack(patches + [P])
    else:
        corners = P

    _set_equal_3d(ax3d, corners, margin=max(body.width, body.height))
    ax3d.set_xlabel("x [m]"); ax3d.set_ylabel("y [m]"); ax3d.set_zlabel("z [m]")
    ax3d.set_title("Sheet trajectory")
    ax3d.legend(loc="best")

    axz.plot(t, P[:, 2], color=SHEET_COLOR, lw=2)
    axz.set_xlabel("t [s]"); axz.set_ylabel("z [m]")
    axz.grid(True, alpha=0.3)
    axz.set_title("Altitude vs time")

    _save_and_show(fig, save_path, show)
    return fig


def _diagnostics_figure(
    t: np.ndarray,
    area: np.ndarray,
    ke: np.ndarray,
    drag: np.ndarray,
    lift: np.ndarray,
    re: np.ndarray,
    euler: np.ndarray,
) -> Figure:
    fig, axes = plt.subplots(3, 2, figsize=(12, 9), sharex=True)

    axes[0, 0].plot(t, area, color=SHEET_COLOR)
    axes[0, 0].set_ylabel("projected area [m²]")
    axes[0, 0].set_title("Projected area")

    axes[0, 1].plot(t, ke, color="#ea4335")
    axes[0, 1].set_ylabel("kinetic energy [J]")
    axes[0, 1].set_title("Kinetic energy")

    axes[1, 0].plot(t, drag, label="|drag|", color="#1a73e8")
    axes[1, 0].plot(t, lift, label="|lift|", color="#34a853")
    axes[1, 0].set_ylabel("force [N]")
    axes[1, 0].legend(loc="best")
    axes[1, 0].set_title("Aerodynamic forces")

    axes[1, 1].plot(t, re, color="#fbbc05")
    axes[1, 1].set_ylabel("Re [-]")
    axes[1, 1].set_title("Reynolds number")

    for k, name in enumerate(("yaw", "pitch", "roll")):
        axes[2, 0].plot(t, np.rad2deg(euler[:, k]), label=name)
    axes[2, 0].set_ylabel("angle [deg]")
    axes[2, 0].legend(loc="best")
    axes[2, 0].set_title("Euler angles (unwrapped)")
    axes[2, 0].set_xlabel("t [s]")

    axes[2, 1].axis("off")
    for ax in axes.flat:
        ax.grid(True, alpha=0.3)
    axes[2, 1].grid(False)
    return fig


def plot_diagnostics(
    data: SimulationResult | Sequence[StepRecord],
    save_path: str | None = None,
    show: bool = True,
) -> Figure:
    """
    Plot derived scalars vs time: projected area, kinetic energy,
    drag/lift magnitudes, Reynolds number and Euler angles.

    Returns
    -------
    fig : Figure
    """
    records = _as_records(data)
    fig = _diagnostics_figure(
        t=np.array([r.time for r in records]),
        area=np.array([r.projected_area for r in records]),
        ke=np.array([r.kinetic_energy for r in records]),
        drag=np.array([r.drag_magnitude for r in records]),
        lift=np.array([r.lift_magnitude for r in records]),
        re=np.array([r.reynolds for r in records]),
        euler=np.array([r.orientation for r in records]),
    )
    _save_and_show(fig, save_path, show)
    return fig


def plot_from_csv(
    csv_path: str,
    save_path: str | None = None,
    show: bool = True,
) -> Figure:
    """
    Diagnostics plot from an exported CSV (see flutterlab.utils.io).

    Raises
    ------
    KeyError
        If a required column is missing
    """
    df = pd.read_csv(csv_path)
    for col in ("t", "projected_area", "kinetic_energy", "drag", "lift", "reynolds",
                "yaw", "pitch", "roll"):
        if col not in df.columns:
            raise KeyError(f"Column '{col}' not found in CSV.")
    fig = _diagnostics_figure(
        t=df["t"].to_numpy(),
        area=df["projected_area"].to_numpy(),
        ke=df["kinetic_energy"].to_numpy(),
        drag=df["drag"].to_numpy(),
        lift=df["lift"].to_numpy(),
        re=df["reynolds"].to_numpy(),
        euler=df[["yaw", "pitch", "roll"]].to_numpy(),
    )
    _save_and_show(fig, save_path, show)
    return fig


class LivePlotter:
    """
    Redraws the sheet and its trail while a driver runs.

    Subscribe it to a SimulationDriver; every ``every``-th record triggers a
    redraw. Rendering never touches the driver state.

    Parameters
    ----------
    body : BodyProperties
        Sheet dimensions
    every : int
        Redraw interval in records
    pause : float
        Seconds passed to plt.pause() after each redraw

    Examples
    --------
    >>> live = LivePlotter(body, every=20)
    >>> driver.subscribe(live)
    >>> driver.run()
    >>> live.close()
    """

    def __init__(self, body: BodyProperties, every: int = 10, pause: float = 1e-3) -> None:
        if every < 1:
            raise ValueError(f"every must be at least 1, got {every}")
        self.body = body
        self.every = int(every)
        self.pause = float(pause)
        self.trail: list[np.ndarray] = []
        self.frames_drawn = 0

        self.fig = plt.figure(figsize=(8, 7))
        self.ax = self.fig.add_subplot(111, projection="3d")
        self.ax.set_xlabel("x [m]"); self.ax.set_ylabel("y [m]"); self.ax.set_zlabel("z [m]")
        self._trail_line, = self.ax.plot([], [], [], lw=1.5, color=TRAIL_COLOR)
        self._patch: Poly3DCollection | None = None

    def __call__(self, record: StepRecord) -> None:
        self.trail.append(record.position.copy())
        if record.step % self.every != 0:
            return
        self.draw(record)

    def draw(self, record: StepRecord) -> None:
        P = np.array(self.trail)
        self._trail_line.set_data(P[:, 0], P[:, 1])
        self._trail_line.set_3d_properties(P[:, 2])

        corners = sheet_corners(record, self.body)
        if self._patch is not None:
            self._patch.remove()
        self._patch = Poly3DCollection(
            [corners], facecolors=SHEET_COLOR, edgecolors="k", linewidths=0.5, alpha=0.6
        )
        self.ax.add_collection3d(self._patch)

        _set_equal_3d(self.ax, np.vstack([P, corners]),
                      margin=max(self.body.width, self.body.height))
        self.ax.set_title(f"t = {record.time:.3f} s   z = {record.position[2]:.3f} m")
        self.fig.canvas.draw_idle()
        plt.pause(self.pause)
        self.frames_drawn += 1

    def close(self) -> None:
        plt.close(self.fig)
