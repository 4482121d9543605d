"""Rigid-body state of the robot used to build the MPC problem."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

from .orientation import quaternion_to_rotation_matrix

BODY_INERTIA_DIAGONAL = (0.5413, 0.5200, 0.0691)


def _vector(values, size: int, what: str) -> np.ndarray:
    arr = np.asarray(values, dtype=float).reshape(-1)
    if arr.shape != (size,):
        raise ValueError(f"{what} must have {size} elements, got {arr.size}")
    return arr


@dataclass
class RobotState:
    """Body position, velocity, orientation and foot positions.

    ``R`` rotates body-frame vectors into the world frame; ``r_feet`` holds one
    column per foot, relative to the body position.
    """

    p: np.ndarray
    v: np.ndarray
    w: np.ndarray
    q: np.ndarray
    r_feet: np.ndarray
    R: np.ndarray
    R_yaw: np.ndarray
    yaw: float
    I_body: np.ndarray = field(default_factory=lambda: np.diag(BODY_INERTIA_DIAGONAL))
    m: float = 13.0

    @classmethod
    def from_measurements(cls, p, v, q, w, r, yaw):
        """Build a state; ``q`` is ``(w, x, y, z)`` and ``r`` is row-major 3x2."""
        quat = _vector(q, 4, "quaternion")
        feet = _vector(r, 6, "foot positions").reshape(3, 2)
        c, s = math.cos(yaw), math.sin(yaw)
        r_yaw = np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])
        return cls(
            p=_vector(p, 3, "position"),
            v=_vector(v, 3, "velocity"),
            w=_vector(w, 3, "angular velocity"),
            q=quat,
            r_feet=feet,
            R=quaternion_to_rotation_matrix(quat).T,
            R_yaw=r_yaw,
            yaw=float(yaw),
        )

    def describe(self) -> str:
        """Readable summary of the state."""
        with np.printoptions(precision=4, suppress=True):
            return (
                "Robot State:\n"
                f"Position\n{self.p}\n"
                f"Velocity\n{self.v}\n"
                f"Angular Velocity\n{self.w}\n"
                f"Rotation\n{self.R}\n"
                f"Yaw Rotation\n{self.R_yaw}\n"
                f"Foot Locations\n{self.r_feet}\n"
                f"Inertia\n{self.I_body}"
            )