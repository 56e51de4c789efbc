"""
Engineer-friendly orientation utilities.

All functions return the orientation triple used by RigidBodyState:
``[yaw, pitch, roll]`` in radians (ZYX convention).

Common Use Cases
----------------
- Specify yaw/pitch/roll in degrees: use `orientation_from_euler()`
- Point the sheet normal in a direction: use `orientation_from_normal()`
- Release flat or edge-on: use `BROADSIDE` / `EDGE_ON`

Examples
--------
>>> from flutterlab.utils.orientation import orientation_from_euler, EDGE_ON

# Tip the sheet 30° about its y axis
>>> euler = orientation_from_euler(pitch=30)

# Sheet normal along world +X (edge-on to a vertical fall)
>>> euler = orientation_from_normal([1, 0, 0])
"""
from __future__ import annotations

import warnings

import numpy as np
from numpy.typing import NDArray
from scipy.spatial.transform import Rotation as R


# =============================================================================
# Reference orientations
# =============================================================================

BROADSIDE: NDArray[np.float64] = np.zeros(3, dtype=np.float64)
"""Sheet normal along world Z: maximal projected area in a vertical fall."""

EDGE_ON: NDArray[np.float64] = np.array([0.0, 0.0, np.pi / 2.0], dtype=np.float64)
"""Rolled 90°: sheet normal horizontal, minimal projected area in a vertical fall."""


# =============================================================================
# Euler Angles
# =============================================================================

def orientation_from_euler(
    yaw: float = 0.0,
    pitch: float = 0.0,
    roll: float = 0.0,
    degrees: bool = True,
) -> NDArray[np.float64]:
    """
    Create an orientation triple from yaw, pitch and roll.

    Parameters
    ----------
    yaw : float
        Rotation about world Z (heading) [degrees or radians]
    pitch : float
        Rotation about the yawed Y axis [degrees or radians]
    roll : float
        Rotation about the resulting X axis [degrees or radians]
    degrees : bool
        If True (default), angles are in degrees. If False, radians.

    Returns
    -------
    NDArray[np.float64]
        [yaw, pitch, roll] in radians. Angles are not wrapped.
    """
    angles = np.array([yaw, pitch, roll], dtype=np.float64)
    if degrees:
        angles = np.deg2rad(angles)
    return angles


# =============================================================================
# Normal direction
# =============================================================================

def orientation_from_normal(
    direction: tuple[float, float, float] | list[float] | NDArray,
) -> NDArray[np.float64]:
    """
    Orientation whose sheet normal (body z-axis) points along ``direction``.

    Uses the smallest rotation that takes world Z onto ``direction``.

    Parameters
    ----------
    direction : array-like
        Target direction of the sheet normal in world frame. Will be normalized.

    Returns
    -------
    NDArray[np.float64]
        [yaw, pitch, roll] in radians

    Examples
    --------
    >>> # Normal along +Y
    >>> euler = orientation_from_normal([0, 1, 0])
    """
    d = np.asarray(direction, dtype=np.float64)
    norm = np.linalg.norm(d)
    if d.shape != (3,) or norm == 0.0:
        raise ValueError(f"direction must be a non-zero 3-vector, got {direction!r}")
    d = d / norm

    with warnings.catch_warnings():
        # Single-vector alignment is under-determined and a horizontal normal
        # sits at gimbal lock; both are fine for a normal direction.
        warnings.simplefilter("ignore", UserWarning)
        rot, _ = R.align_vectors([d], [[0.0, 0.0, 1.0]])
        # Intrinsic ZYX: returns [yaw, pitch, roll]
        return rot.as_euler("ZYX")
