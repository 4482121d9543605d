"""Simplified rigid-body dynamics and their condensed QP prediction matrices.

The state has 13 entries: roll, pitch, yaw, position, angular velocity,
linear velocity and a constant gravity term.  The input has 12 entries:
forces of both feet followed by moments of both feet.
"""

from __future__ import annotations

import math

import numpy as np

from .orientation import vector_to_skew_mat

STATE_SIZE = 13
INPUT_SIZE = 12
MAX_HORIZON = 19


def euler_to_rotation(roll, pitch, yaw) -> np.ndarray:
    """Map from world angular velocity to Euler-angle rates."""
    cp, sp = math.cos(pitch), math.sin(pitch)
    cy, sy = math.cos(yaw), math.sin(yaw)
    rb = np.array(
        [
            [cy * cp, -sy, 0.0],
            [sy * cp, cy, 0.0],
            [-sp, 0.0, 1.0],
        ]
    )
    return np.linalg.inv(rb)


def quat_to_rpy(q) -> np.ndarray:
    """Roll, pitch and yaw of a ``(w, x, y, z)`` quaternion, pitch kept off the pole."""
    w, x, y, z = np.asarray(q, dtype=float).reshape(-1)
    sin_pitch = min(2.0 * (w * y - x * z), 0.99999)
    roll = math.atan2(2.0 * (w * x + y * z), 1.0 - 2.0 * (x * x + y * y))
    with np.errstate(invalid="ignore"):
        pitch = float(np.arcsin(sin_pitch))
    yaw = math.atan2(2.0 * (w * z + x * y), 1.0 - 2.0 * (y * y + z * z))
    return np.array([roll, pitch, yaw])


def cross_mat(i_inv, r) -> np.ndarray:
    """``i_inv`` times the cross-product matrix of ``r``."""
    return np.asarray(i_inv, dtype=float) @ vector_to_skew_mat(r)


def ct_ss_mats(i_world, m, r_feet, r_yaw) -> tuple[np.ndarray, np.ndarray]:
    """Continuous-time state-space matrices ``(A, B)``."""
    i_world = np.asarray(i_world, dtype=float)
    r_feet = np.asarray(r_feet, dtype=float)
    if r_feet.shape != (3, 2):
        raise ValueError(f"r_feet must be 3x2, got {r_feet.shape}")
    a = np.zeros((STATE_SIZE, STATE_SIZE))
    a[0:3, 6:9] = r_yaw
    a[3:6, 9:12] = np.eye(3)
    a[9:12, 12] = (0.0, 0.0, -1.0)

    b = np.zeros((STATE_SIZE, INPUT_SIZE))
    i_inv = np.linalg.inv(i_world)
    for leg in range(2):
        b[6:9, 3 * leg:3 * leg + 3] = cross_mat(i_inv, r_feet[:, leg])
    b[6:9, 6:9] = i_inv
    b[6:9, 9:12] = i_inv
    b[9:12, 0:3] = np.eye(3) / m
    b[9:12, 3:6] = np.eye(3) / m
    return a, b


def c2qp(ac, bc, dt, horizon) -> tuple[np.ndarray, np.ndarray]:
    """Condensed prediction matrices ``(A_qp, B_qp)`` for a forward-Euler model.

    Stacked states over the horizon equal ``A_qp @ x0 + B_qp @ U``.
    """
    if horizon > MAX_HORIZON:
        raise ValueError("horizon is too long!")
    if horizon < 1:
        raise ValueError(f"horizon must be positive, got {horizon}")
    acd = np.eye(STATE_SIZE) + dt * np.asarray(ac, dtype=float)
    bcd = dt * np.asarray(bc, dtype=float)

    powers = [np.eye(STATE_SIZE)]
    for _ in range(horizon):
        powers.append(powers[-1] @ acd)

    a_qp = np.vstack(powers[1:horizon + 1])
    b_qp = np.zeros((STATE_SIZE * horizon, INPUT_SIZE * horizon))
    for i in range(horizon):
        for j in range(i + 1):
            b_qp[
                i * STATE_SIZE:(i + 1) * STATE_SIZE, j * INPUT_SIZE:(j + 1) * INPUT_SIZE
            ] = powers[i - j] @ bcd
    return a_qp, b_qp


def near_zero(a) -> bool:
    """True when ``a`` lies strictly within 1e-4 of zero."""
    return -0.0001 < a < 0.0001


def near_two(a) -> bool:
    """True when ``a`` lies strictly within 1e-4 of two."""
    return near_zero(a - 2)