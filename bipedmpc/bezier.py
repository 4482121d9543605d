"""Bezier curve over a fixed duration."""

from __future__ import annotations

from math import comb

import numpy as np


class BezierCurve:
    """Bezier curve through its first and last control points over ``end_time``.

    ``control_points`` has one row per control point; a flat sequence is taken
    as scalar control points.
    """

    def __init__(self, control_points, end_time):
        points = np.asarray(control_points, dtype=float)
        if points.ndim == 1:
            points = points.reshape(-1, 1)
        if points.ndim != 2 or points.shape[0] < 2:
            raise ValueError("a Bezier curve needs at least two control points")
        if end_time <= 0:
            raise ValueError(f"end_time must be positive, got {end_time}")
        self.control_points = points
        self.end_time = float(end_time)
        n = points.shape[0] - 1
        self._coeff = np.array([float(comb(n, j)) for j in range(n + 1)])

    @property
    def order(self) -> int:
        return self.control_points.shape[0] - 1

    def point(self, u) -> np.ndarray:
        """Position at time ``u``; before 0 or after the end it is held."""
        if u > self.end_time:
            return self.control_points[-1].copy()
        if u < 0.0:
            return self.control_points[0].copy()
        s = u / self.end_time
        n = self.order
        weights = np.array(
            [self._coeff[j] * s**j * (1 - s) ** (n - j) for j in range(n + 1)]
        )
        return weights @ self.control_points

    def velocity(self, u) -> np.ndarray:
        """Time derivative at ``u``; zero outside the curve's duration."""
        dim = self.control_points.shape[1]
        if u > self.end_time or u < 0.0:
            return np.zeros(dim)
        s = u / self.end_time
        n = self.order
        weights = np.zeros(n + 1)
        weights[0] = self._coeff[0] * (-n * (1 - s) ** (n - 1))
        for j in range(1, n):
            weights[j] = self._coeff[j] * (
                j * s ** (j - 1) * (1 - s) ** (n - j)
                - (n - j) * s**j * (1 - s) ** (n - j - 1)
            )
        weights[n] = self._coeff[n] * n * s ** (n - 1)
        return (weights @ self.control_points) / self.end_time