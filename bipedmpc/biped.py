"""Geometry and mass of the two-legged robot."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

LEG_COUNT = 2


@dataclass(frozen=True)
class Biped:
    """Fixed kinematic parameters of the biped; leg 0 is left, leg 1 is right."""

    mass: float = 13.856
    leg_yaw_offset_x: float = -0.005
    leg_yaw_offset_y: float = -0.057
    leg_yaw_offset_z: float = -0.126
    leg_roll_offset_x: float = 0.0465
    leg_roll_offset_y: float = 0.015
    leg_roll_offset_z: float = -0.0705
    hip_link_length: float = 0.038
    thigh_link_length: float = 0.22
    calf_link_length: float = 0.22

    @staticmethod
    def _check_leg(leg: int) -> None:
        if leg not in range(LEG_COUNT):
            raise ValueError(f"invalid leg index: {leg}")

    def hip_yaw_location(self, leg: int) -> np.ndarray:
        """Position of the hip yaw joint in the body frame."""
        self._check_leg(leg)
        y = self.leg_yaw_offset_y if leg == 0 else -self.leg_yaw_offset_y
        return np.array([self.leg_yaw_offset_x, y, self.leg_yaw_offset_z])

    def hip_roll_location(self, leg: int) -> np.ndarray:
        """Position of the hip roll joint in the body frame."""
        self._check_leg(leg)
        y = self.leg_roll_offset_y if leg == 0 else -self.leg_roll_offset_y
        return np.array([self.leg_roll_offset_x, y, self.leg_roll_offset_z])