"""Clamped uniform B-spline with position/derivative end constraints."""

from __future__ import annotations

import numpy as np


def _is_equal(x: float, y: float) -> bool:
    return (x - y) * (x - y) < 1.0e-10


class BSpline:
    """Uniform clamped B-spline through constrained end points.

    ``const_level_ini`` and ``const_level_fin`` give how many derivatives are
    fixed at each end: 0 for position only, 1 adds velocity, 2 adds
    acceleration, and so on.  The ``num_middle`` middle points are used
    directly as control points.
    """

    def __init__(self, dim, degree, num_middle, const_level_ini, const_level_fin):
        for name, value in (
            ("degree", degree),
            ("num_middle", num_middle),
            ("const_level_ini", const_level_ini),
            ("const_level_fin", const_level_fin),
        ):
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")
        if dim < 1:
            raise ValueError(f"dim must be positive, got {dim}")
        if const_level_ini > degree or const_level_fin > degree:
            raise ValueError("constraint levels may not exceed the spline degree")

        self.dim = dim
        self.degree = degree
        self.num_middle = num_middle
        self.const_level_ini = const_level_ini
        self.const_level_fin = const_level_fin
        self._num_knots = degree + num_middle + 2 + const_level_ini + const_level_fin + 1
        self._num_cps = num_middle + 2 + const_level_ini + const_level_fin
        if self._num_knots < 2 * (degree + 1):
            raise ValueError(
                f"invalid setup (num_knots, degree): {self._num_knots}, {degree}"
            )
        self._knots = [0.0] * self._num_knots
        self._cps = np.zeros((self._num_cps, dim))
        self._configured = False

    @property
    def knots(self) -> np.ndarray:
        return np.array(self._knots)

    @property
    def control_points(self) -> np.ndarray:
        return self._cps.copy()

    def set_param(self, init, fin, middle_pt, fin_time) -> None:
        """Fix the end conditions, the middle control points and the duration.

        ``init`` holds position, velocity, ... at the start, ``dim`` values per
        level; ``fin`` the same at the end.
        """
        init = np.asarray(init, dtype=float).reshape(-1)
        fin = np.asarray(fin, dtype=float).reshape(-1)
        if init.size != self.dim * (self.const_level_ini + 1):
            raise ValueError(
                f"init must hold {self.dim * (self.const_level_ini + 1)} values, got {init.size}"
            )
        if fin.size != self.dim * (self.const_level_fin + 1):
            raise ValueError(
                f"fin must hold {self.dim * (self.const_level_fin + 1)} values, got {fin.size}"
            )
        middle = np.asarray(middle_pt, dtype=float).reshape(-1, self.dim) if self.num_middle else np.zeros((0, self.dim))
        if middle.shape != (self.num_middle, self.dim):
            raise ValueError(
                f"middle points must have shape {(self.num_middle, self.dim)}, got {middle.shape}"
            )
        if fin_time <= 0:
            raise ValueError(f"fin_time must be positive, got {fin_time}")

        self._calc_knots(float(fin_time))
        self._calc_constrained_cps(init, fin, float(fin_time))
        start = self.const_level_ini + 1
        self._cps[start:start + self.num_middle] = middle
        self._configured = True

    def curve_point(self, u) -> np.ndarray:
        """Position at time ``u``, clamped to the spline's time range."""
        self._require_configured()
        u = self._clamp(float(u))
        span = self._find_span(u)
        basis = self._basis_funs(span, u)
        rows = self._cps[span - self.degree:span + 1]
        return np.asarray(basis) @ rows

    def curve_derivative(self, u, d) -> np.ndarray:
        """Derivative of order ``d`` at time ``u``, clamped to the time range."""
        self._require_configured()
        if d < 0 or d > self.degree:
            raise ValueError(f"derivative order must be in [0, {self.degree}], got {d}")
        u = self._clamp(float(u))
        span = self._find_span(u)
        ders = self._basis_funs_ders(span, u, d, self.degree + 1)
        rows = self._cps[span - self.degree:span + 1]
        return np.asarray(ders[d][: self.degree + 1]) @ rows

    def _require_configured(self) -> None:
        if not self._configured:
            raise RuntimeError("set_param must be called before evaluating the spline")

    def _clamp(self, u: float) -> float:
        return min(max(u, self._knots[0]), self._knots[-1])

    def _calc_knots(self, tf: float) -> None:
        p = self.degree
        num_mid = self._num_knots - 2 * p - 2
        step = tf / (num_mid + 1)
        middle = [step * (i + 1) for i in range(num_mid)]
        self._knots = [0.0] * (p + 1) + middle + [tf] * (p + 1)

    def _left(self, i: int, j: int, u: float) -> float:
        return u - self._knots[i + 1 - j]

    def _right(self, i: int, j: int, u: float) -> float:
        return self._knots[i + j] - u

    def _find_span(self, u: float) -> int:
        knots = self._knots
        if u < knots[0] or knots[-1] < u:
            raise ValueError(f"parameter {u} lies outside the knot range")
        if _is_equal(u, knots[-1]):
            for i in range(self._num_knots - 2, -1, -1):
                if knots[i] < u <= knots[i + 1]:
                    return i
            raise ValueError(f"no knot span contains {u}")
        low, high = 0, self._num_knots - 1
        mid = (low + high) >> 1
        while u < knots[mid] or u >= knots[mid + 1]:
            if u < knots[mid]:
                high = mid
            else:
                low = mid
            mid = (low + high) >> 1
        return mid

    def _basis_funs(self, span: int, u: float) -> list[float]:
        p = self.degree
        n = [0.0] * (p + 1)
        n[0] = 1.0
        temp = 0.0
        for j in range(1, p + 1):
            saved = 0.0
            for r in range(j):
                left = self._left(span, j - r, u)
                right = self._right(span, r + 1, u)
                if right + left != 0:
                    temp = n[r] / (right + left)
                n[r] = saved + right * temp
                saved = left * temp
            n[j] = saved
        return n

    def _basis_funs_ders(self, span: int, u: float, n: int, width: int) -> list[list[float]]:
        p = self.degree
        ndu = [[0.0] * (p + 1) for _ in range(p + 1)]
        ndu[0][0] = 1.0
        for j in range(1, p + 1):
            saved = 0.0
            for r in range(j):
                left = self._left(span, j - r, u)
                right = self._right(span, r + 1, u)
                ndu[j][r] = right + left
                temp = ndu[r][j - 1] / ndu[j][r]
                ndu[r][j] = saved + right * temp
                saved = left * temp
            ndu[j][j] = saved

        ders = [[0.0] * width for _ in range(n + 1)]
        for j in range(p + 1):
            ders[0][j] = ndu[j][p]

        a = [[0.0] * (p + 1) for _ in range(2)]
        for r in range(p + 1):
            s1, s2 = 0, 1
            a[0][0] = 1.0
            for k in range(1, n + 1):
                d = 0.0
                rk = r - k
                pk = p - k
                if r >= k:
                    a[s2][0] = a[s1][0] / ndu[pk + 1][rk]
                    d = a[s2][0] * ndu[rk][pk]
                j1 = 1 if rk >= -1 else -rk
                j2 = k - 1 if r - 1 <= pk else p - r
                for j in range(j1, j2 + 1):
                    a[s2][j] = (a[s1][j] - a[s1][j - 1]) / ndu[pk + 1][rk + j]
                    d += a[s2][j] * ndu[rk + j][pk]
                if r <= pk:
                    a[s2][k] = -a[s1][k - 1] / ndu[pk + 1][r]
                    d += a[s2][k] * ndu[r][pk]
                ders[k][r] = d
                s1, s2 = s2, s1

        factor = p
        for k in range(1, n + 1):
            for j in range(p + 1):
                ders[k][j] *= factor
            factor *= p - k
        return ders

    def _calc_constrained_cps(self, init: np.ndarray, fin: np.ndarray, tf: float) -> None:
        dim = self.dim
        cps = self._cps
        last = self._num_cps - 1
        cps[0] = init[:dim]
        cps[last] = fin[:dim]

        ini_level = self.const_level_ini
        d_mat = self._basis_funs_ders(
            self._find_span(0.0), 0.0, ini_level, max(self.degree + 1, ini_level + 2)
        )
        for j in range(1, ini_level + 1):
            value = init[j * dim:(j + 1) * dim].copy()
            for h in range(j, 0, -1):
                value -= d_mat[j][h - 1] * cps[h - 1]
            cps[j] = value / d_mat[j][j]

        fin_level = self.const_level_fin
        c_mat = self._basis_funs_ders(
            self._find_span(tf), tf, fin_level, max(self.degree + 1, fin_level + 2)
        )
        for idx in range(1, fin_level + 1):
            j = self._num_cps - 1 - idx
            value = fin[idx * dim:(idx + 1) * dim].copy()
            for h in range(idx, 0, -1):
                value -= c_mat[idx][fin_level + 2 - h] * cps[self._num_cps - h]
            cps[j] = value / c_mat[idx][fin_level + 1 - idx]