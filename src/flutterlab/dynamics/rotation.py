"""
Euler-angle rotation model (ZYX convention).

The orientation of the sheet is stored as ``[yaw, pitch, roll]`` in radians.
Angles are never wrapped; any finite triple is accepted.

Every rotation matrix in the package is built here.
"""
from __future__ import annotations

import numpy as np
from numpy.typing import NDArray


def rotation_matrix_zyx(yaw: float, pitch: float, roll: float) -> NDArray[np.float64]:
    """
    Body-to-world rotation matrix for ZYX Euler angles.

    R = Rz(yaw) @ Ry(pitch) @ Rx(roll): yaw about world Z, then pitch about the
    new Y, then roll about the new X.

    Parameters
    ----------
    yaw, pitch, roll : float
        Euler angles [rad]

    Returns
    -------
    NDArray[np.float64]
        3x3 orthonormal matrix R such that v_world = R @ v_body
    """
    cy, sy = np.cos(yaw), np.sin(yaw)
    cp, sp = np.cos(pitch), np.sin(pitch)
    cr, sr = np.cos(roll), np.sin(roll)

    return np.array([
        [cy * cp, cy * sp * sr - sy * cr, cy * sp * cr + sy * sr],
        [sy * cp, sy * sp * sr + cy * cr, sy * sp * cr - cy * sr],
        [-sp,     cp * sr,                cp * cr],
    ], dtype=np.float64)


def rotation_from_orientation(orientation: NDArray[np.float64]) -> NDArray[np.float64]:
    """Rotation matrix for an orientation array ``[yaw, pitch, roll]``."""
    yaw, pitch, roll = orientation
    return rotation_matrix_zyx(yaw, pitch, roll)


def sheet_normal(R: NDArray[np.float64]) -> NDArray[np.float64]:
    """Body z-axis (sheet normal) expressed in the world frame."""
    return R[:, 2].copy()


def body_to_world(R: NDArray[np.float64], v_body: NDArray[np.float64]) -> NDArray[np.float64]:
    """Map a body-frame vector to the world frame."""
    return R @ np.asarray(v_body, dtype=np.float64)
