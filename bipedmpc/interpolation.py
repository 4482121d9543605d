"""Interpolation between two values for a parameter in [0, 1]."""

from __future__ import annotations


def _check(x) -> None:
    if not 0 <= x <= 1:
        raise ValueError(f"interpolation parameter must be in [0, 1], got {x}")


def lerp(y0, yf, x):
    """Linear interpolation between ``y0`` and ``yf``."""
    _check(x)
    return y0 + (yf - y0) * x


def cubic_bezier(y0, yf, x):
    """Cubic Bezier interpolation between ``y0`` and ``yf``."""
    _check(x)
    bezier = x * x * x + 3.0 * (x * x * (1.0 - x))
    return y0 + bezier * (yf - y0)


def cubic_bezier_first_derivative(y0, yf, x):
    """First derivative of :func:`cubic_bezier` with respect to ``x``."""
    _check(x)
    return 6.0 * x * (1.0 - x) * (yf - y0)


def cubic_bezier_second_derivative(y0, yf, x):
    """Second-derivative term used for the cubic Bezier profile."""
    _check(x)
    return -12.0 * x * (yf - y0)