"""Convex MPC, gait scheduling, rigid-body model, curves and rotation utilities for a bipedal robot."""

__version__ = "0.1.0"