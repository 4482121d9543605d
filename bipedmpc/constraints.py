"""Friction-cone, line-contact and force-limit constraints for the biped MPC.

The decision variables of one horizon step are the ground reaction forces of
the left and right foot followed by the moments of the left and right foot.
Each foot contributes eight constraint rows: four friction-pyramid rows, one
roll-moment row, two line-contact rows and one normal-force row.
"""

from __future__ import annotations

import math

import numpy as np

from .orientation import CoordinateAxis, coordinate_rotation

NUM_VARIABLES = 12
ROWS_PER_STEP = 16
JOINTS_PER_LEG = 5
JOINT_COUNT = 2 * JOINTS_PER_LEG

TOE_LENGTH = 0.09
HEEL_LENGTH = 0.06
CONSTRAINT_FRICTION = 5.0
MAX_MOMENT_X = 0.01

_PI = 3.14159265359
_JOINT_OFFSETS = np.array(
    [0.0, 0.0, 0.3 * _PI, -0.6 * _PI, 0.3 * _PI, 0.0, 0.0, 0.3 * _PI, -0.6 * _PI, 0.3 * _PI]
)


def _joint_vector(q) -> np.ndarray:
    arr = np.asarray(q, dtype=float).reshape(-1)
    if arr.size < JOINT_COUNT:
        raise ValueError(f"expected {JOINT_COUNT} joint angles, got {arr.size}")
    return arr[:JOINT_COUNT]


def correct_joint_angles(q) -> np.ndarray:
    """Apply the hip/knee/ankle offsets and wrap each angle with ``fmod(., 2*pi)``."""
    arr = np.asarray(q, dtype=float).reshape(-1)
    if arr.size != JOINT_COUNT:
        raise ValueError(f"expected {JOINT_COUNT} joint angles, got {arr.size}")
    shifted = arr + _JOINT_OFFSETS
    return np.array([math.fmod(angle, 2 * _PI) for angle in shifted])


def _leg_rotation(yaw: float, roll: float, pitch_sum: float) -> np.ndarray:
    # Coordinate rotations are transposes of the displacement rotations.
    rz = coordinate_rotation(CoordinateAxis.Z, yaw).T
    rx = coordinate_rotation(CoordinateAxis.X, roll).T
    ry = coordinate_rotation(CoordinateAxis.Y, pitch_sum).T
    return rz @ rx @ ry


def foot_rotation_matrices(q) -> tuple[np.ndarray, np.ndarray]:
    """Rotation of the left and right foot relative to the body.

    ``q`` holds five joint angles per leg (hip yaw, hip roll, thigh, knee,
    ankle), left leg first.
    """
    joints = _joint_vector(q)
    left, right = joints[:JOINTS_PER_LEG], joints[JOINTS_PER_LEG:]
    return tuple(
        _leg_rotation(leg[0], leg[1], leg[2] + leg[3] + leg[4]) for leg in (left, right)
    )


def constraint_matrix(left_rotation, right_rotation, body_rotation, mu) -> np.ndarray:
    """The 16x12 per-step constraint matrix for the given foot and body rotations."""
    body = np.asarray(body_rotation, dtype=float)
    a = np.zeros((ROWS_PER_STEP, NUM_VARIABLES))
    selection = np.array([1.0, 0.0, 0.0])
    toe = np.array([0.0, 0.0, TOE_LENGTH])
    heel = np.array([0.0, 0.0, HEEL_LENGTH])
    line = np.array([0.0, 1.0, 0.0])

    for leg, foot_rotation in enumerate((left_rotation, right_rotation)):
        to_foot = np.asarray(foot_rotation, dtype=float).T @ body.T
        row = 8 * leg
        force = slice(3 * leg, 3 * leg + 3)
        moment = slice(6 + 3 * leg, 9 + 3 * leg)
        fx, fy, fz = 3 * leg, 3 * leg + 1, 3 * leg + 2

        for offset, (column, sign) in enumerate(((fx, -1), (fx, 1), (fy, -1), (fy, 1))):
            a[row + offset, column] = sign * mu
            a[row + offset, fz] = 1.0

        a[row + 4, moment] = selection @ to_foot
        a[row + 5, force] = -toe @ to_foot
        a[row + 5, moment] = line @ to_foot
        a[row + 6, force] = -heel @ to_foot
        # The left heel row uses the negated line vector, the right one does not.
        a[row + 6, moment] = (-line if leg == 0 else line) @ to_foot
        a[row + 7, fz] = 2.0
    return a


class Constraints:
    """Bounds and constraint matrix of the MPC quadratic program."""

    def __init__(
        self,
        robot_state,
        joint_angles,
        horizon,
        num_constraints,
        motor_torque_limit,
        big_number,
        f_max,
        gait,
    ):
        horizon = int(horizon)
        num_constraints = int(num_constraints)
        if horizon < 1:
            raise ValueError(f"horizon must be positive, got {horizon}")
        if num_constraints < ROWS_PER_STEP:
            raise ValueError(
                f"num_constraints must be at least {ROWS_PER_STEP}, got {num_constraints}"
            )
        gait_flags = np.asarray(gait, dtype=float).reshape(-1)
        if gait_flags.size < 2 * horizon:
            raise ValueError(
                f"gait needs {2 * horizon} entries for horizon {horizon}, got {gait_flags.size}"
            )

        self.robot_state = robot_state
        self.joint_angles = _joint_vector(joint_angles).copy()
        self.horizon = horizon
        self.num_constraints = num_constraints
        self.num_variables = NUM_VARIABLES
        self.motor_torque_limit = float(motor_torque_limit)
        self.big_number = float(big_number)
        self.f_max = float(f_max)
        self.gait = gait_flags

        self.upper_bound, self.lower_bound = self._bounds()
        self.left_foot_rotation, self.right_foot_rotation = foot_rotation_matrices(
            self.joint_angles
        )
        self.constraint_matrix = np.zeros((num_constraints, NUM_VARIABLES))
        self.constraint_matrix[:ROWS_PER_STEP] = constraint_matrix(
            self.left_foot_rotation,
            self.right_foot_rotation,
            robot_state.R,
            CONSTRAINT_FRICTION,
        )

    def _bounds(self) -> tuple[np.ndarray, np.ndarray]:
        size = self.horizon * self.num_constraints
        upper = np.zeros(size)
        lower = np.zeros(size)
        big = self.big_number
        for i in range(self.horizon):
            # Both legs take their force limit from the first gait entry of the step.
            normal_limit = self.f_max * self.gait[2 * i]
            for leg in range(2):
                base = 8 * leg + ROWS_PER_STEP * i
                upper[base:base + 4] = big
                lower[base:base + 4] = 0.0
                upper[base + 4:base + 8] = (MAX_MOMENT_X, 0.0, 0.0, normal_limit)
                lower[base + 4:base + 8] = (0.0, -big, -big, 0.0)
        return upper, lower