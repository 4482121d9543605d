"""Rotation utilities using coordinate-transformation conventions.

Rotation matrices transform vectors from world to body coordinates.
Quaternions are stored as ``(w, x, y, z)``.
"""

from __future__ import annotations

import math
from enum import Enum

import numpy as np

QUATERNION_DERIVATIVE_STABILIZATION = 0.1


class CoordinateAxis(Enum):
    """Axis for an elementary coordinate rotation."""

    X = "x"
    Y = "y"
    Z = "z"


def _vec(v, size: int, what: str) -> np.ndarray:
    arr = np.asarray(v, dtype=float).reshape(-1)
    if arr.shape != (size,):
        raise ValueError(f"{what} must have {size} elements, got shape {np.shape(v)}")
    return arr


def _mat3(m) -> np.ndarray:
    arr = np.asarray(m, dtype=float)
    if arr.shape != (3, 3):
        raise ValueError(f"expected a 3x3 matrix, got shape {arr.shape}")
    return arr


def rad2deg(rad):
    """Convert radians to degrees."""
    return rad * 180.0 / math.pi


def deg2rad(deg):
    """Convert degrees to radians."""
    return deg * math.pi / 180.0


def coordinate_rotation(axis: CoordinateAxis, theta: float) -> np.ndarray:
    """Coordinate transformation into a frame rotated by ``theta`` about ``axis``."""
    s = math.sin(theta)
    c = math.cos(theta)
    if axis is CoordinateAxis.X:
        rows = [[1, 0, 0], [0, c, s], [0, -s, c]]
    elif axis is CoordinateAxis.Y:
        rows = [[c, 0, -s], [0, 1, 0], [s, 0, c]]
    elif axis is CoordinateAxis.Z:
        rows = [[c, s, 0], [-s, c, 0], [0, 0, 1]]
    else:
        raise ValueError(f"unknown axis: {axis!r}")
    return np.array(rows, dtype=float)


def rpy_to_rot_mat(v) -> np.ndarray:
    """Rotation matrix from roll, pitch and yaw."""
    roll, pitch, yaw = _vec(v, 3, "rpy")
    return (
        coordinate_rotation(CoordinateAxis.X, roll)
        @ coordinate_rotation(CoordinateAxis.Y, pitch)
        @ coordinate_rotation(CoordinateAxis.Z, yaw)
    )


def vector_to_skew_mat(v) -> np.ndarray:
    """Skew-symmetric matrix of a 3-vector."""
    x, y, z = _vec(v, 3, "vector")
    return np.array([[0.0, -z, y], [z, 0.0, -x], [-y, x, 0.0]])


def mat_to_skew_vec(m) -> np.ndarray:
    """The skew-symmetric part of a 3x3 matrix as a 3-vector."""
    m = _mat3(m)
    return 0.5 * np.array([m[2, 1] - m[1, 2], m[0, 2] - m[2, 0], m[1, 0] - m[0, 1]])


def rotation_matrix_to_quaternion(r1) -> np.ndarray:
    """Orientation quaternion of a coordinate transformation matrix."""
    r = _mat3(r1).T
    q = np.empty(4)
    tr = float(r[0, 0] + r[1, 1] + r[2, 2])
    if tr > 0.0:
        s = math.sqrt(tr + 1.0) * 2.0
        q[:] = (0.25 * s, (r[2, 1] - r[1, 2]) / s, (r[0, 2] - r[2, 0]) / s, (r[1, 0] - r[0, 1]) / s)
    elif r[0, 0] > r[1, 1] and r[0, 0] > r[2, 2]:
        s = math.sqrt(1.0 + r[0, 0] - r[1, 1] - r[2, 2]) * 2.0
        q[:] = ((r[2, 1] - r[1, 2]) / s, 0.25 * s, (r[0, 1] + r[1, 0]) / s, (r[0, 2] + r[2, 0]) / s)
    elif r[1, 1] > r[2, 2]:
        s = math.sqrt(1.0 + r[1, 1] - r[0, 0] - r[2, 2]) * 2.0
        q[:] = ((r[0, 2] - r[2, 0]) / s, (r[0, 1] + r[1, 0]) / s, 0.25 * s, (r[1, 2] + r[2, 1]) / s)
    else:
        s = math.sqrt(1.0 + r[2, 2] - r[0, 0] - r[1, 1]) * 2.0
        q[:] = ((r[1, 0] - r[0, 1]) / s, (r[0, 2] + r[2, 0]) / s, (r[1, 2] + r[2, 1]) / s, 0.25 * s)
    return q


def quaternion_to_rotation_matrix(q) -> np.ndarray:
    """Coordinate transformation into the frame oriented by quaternion ``q``."""
    e0, e1, e2, e3 = _vec(q, 4, "quaternion")
    r = np.array(
        [
            [1 - 2 * (e2 * e2 + e3 * e3), 2 * (e1 * e2 - e0 * e3), 2 * (e1 * e3 + e0 * e2)],
            [2 * (e1 * e2 + e0 * e3), 1 - 2 * (e1 * e1 + e3 * e3), 2 * (e2 * e3 - e0 * e1)],
            [2 * (e1 * e3 - e0 * e2), 2 * (e2 * e3 + e0 * e1), 1 - 2 * (e1 * e1 + e2 * e2)],
        ]
    )
    return r.T


def quat_to_rpy(q) -> np.ndarray:
    """Roll, pitch and yaw (ZYX order) of a quaternion."""
    q0, q1, q2, q3 = _vec(q, 4, "quaternion")
    sin_pitch = min(2.0 * (q2 * q0 - q1 * q3), 1.00001)
    with np.errstate(invalid="ignore"):
        pitch = float(np.arcsin(sin_pitch))
    roll = math.atan2(2 * (q0 * q1 + q2 * q3), 1.0 - 2.0 * (q1 * q1 + q2 * q2))
    yaw = math.atan2(2.0 * (q0 * q3 + q1 * q2), 1.0 - 2.0 * (q2 * q2 + q3 * q3))
    return np.array([roll, pitch, yaw])


def rpy_to_quat(rpy) -> np.ndarray:
    """Quaternion from roll, pitch and yaw."""
    return rotation_matrix_to_quaternion(rpy_to_rot_mat(rpy))


def quat_to_so3(q) -> np.ndarray:
    """Rotation vector of a quaternion (undefined for the identity)."""
    q = _vec(q, 4, "quaternion")
    with np.errstate(invalid="ignore", divide="ignore"):
        theta = 2.0 * np.arccos(q[0])
        return theta * q[1:] / np.sin(theta / 2.0)


def rotation_matrix_to_rpy(r) -> np.ndarray:
    """Roll, pitch and yaw of a rotation matrix."""
    return quat_to_rpy(rotation_matrix_to_quaternion(r))


def quat_derivative(q, omega) -> np.ndarray:
    """Quaternion time derivative for body-frame angular velocity ``omega``."""
    q = _vec(q, 4, "quaternion")
    omega = _vec(omega, 3, "omega")
    big_q = np.array(
        [
            [q[0], -q[1], -q[2], -q[3]],
            [q[1], q[0], -q[3], q[2]],
            [q[2], q[3], q[0], -q[1]],
            [q[3], -q[2], q[1], q[0]],
        ]
    )
    stab = QUATERNION_DERIVATIVE_STABILIZATION * np.linalg.norm(omega) * (1 - np.linalg.norm(q))
    qq = np.concatenate(([stab], omega))
    return 0.5 * big_q @ qq


def quat_product(q1, q2) -> np.ndarray:
    """Hamilton product of two quaternions."""
    q1 = _vec(q1, 4, "quaternion")
    q2 = _vec(q2, 4, "quaternion")
    r1, v1 = q1[0], q1[1:]
    r2, v2 = q2[0], q2[1:]
    r = r1 * r2 - float(v1 @ v2)
    v = r1 * v2 + r2 * v1 + np.cross(v1, v2)
    return np.concatenate(([r], v))


def _step_quaternion(omega, dt) -> np.ndarray:
    omega = _vec(omega, 3, "omega")
    ang = float(np.linalg.norm(omega))
    axis = omega / ang if ang > 0 else np.array([1.0, 0.0, 0.0])
    ang *= dt
    return np.concatenate(([math.cos(ang / 2)], math.sin(ang / 2) * axis))


def integrate_quat(quat, omega, dt) -> np.ndarray:
    """Integrate a quaternion with inertial-frame angular velocity over ``dt``."""
    new = quat_product(_step_quaternion(omega, dt), quat)
    return new / np.linalg.norm(new)


def integrate_quat_implicit(quat, omega, dt) -> np.ndarray:
    """Integrate a quaternion, applying the step rotation on the right."""
    new = quat_product(quat, _step_quaternion(omega, dt))
    return new / np.linalg.norm(new)


def quaternion_to_so3(quat) -> np.ndarray:
    """Rotation vector of a quaternion; zero for near-identity rotations."""
    quat = _vec(quat, 4, "quaternion")
    so3 = quat[1:].copy()
    with np.errstate(invalid="ignore"):
        theta = 2.0 * float(np.arcsin(np.linalg.norm(so3)))
    if abs(theta) < 1e-7:
        return np.zeros(3)
    return so3 / math.sin(theta / 2.0) * theta


def so3_to_quat(so3) -> np.ndarray:
    """Quaternion of a rotation vector."""
    so3 = _vec(so3, 3, "so3")
    theta = float(np.linalg.norm(so3))
    if abs(theta) < 1e-6:
        return np.array([1.0, 0.0, 0.0, 0.0])
    return np.concatenate(([math.cos(theta / 2.0)], so3 / theta * math.sin(theta / 2.0)))