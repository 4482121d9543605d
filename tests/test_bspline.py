import numpy as np
import pytest
from hypothesis import given, strategies as st

from bipedmpc.bspline import BSpline

INIT = [0.0, 1.0, -1.0, 0.5, 0.0, 0.2, 0.0, 0.1, 0.0]
FIN = [2.0, 0.5, 1.0, 0.0, -0.3, 0.0, 0.0, 0.0, 0.4]
MIDDLE = [[1.0, 1.5, 0.0]]
DURATION = 2.0


@pytest.fixture
def spline():
    s = BSpline(3, 3, 1, 2, 2)
    s.set_param(INIT, FIN, MIDDLE, DURATION)
    return s


def test_start_position(spline):
    np.testing.assert_allclose(spline.curve_point(0.0), INIT[0:3], atol=1e-9)


def test_end_position(spline):
    np.testing.assert_allclose(spline.curve_point(DURATION), FIN[0:3], atol=1e-9)


def test_start_velocity_and_acceleration(spline):
    np.testing.assert_allclose(spline.curve_derivative(0.0, 1), INIT[3:6], atol=1e-9)
    np.testing.assert_allclose(spline.curve_derivative(0.0, 2), INIT[6:9], atol=1e-9)


def test_end_velocity_and_acceleration(spline):
    np.testing.assert_allclose(spline.curve_derivative(DURATION, 1), FIN[3:6], atol=1e-9)
    np.testing.assert_allclose(spline.curve_derivative(DURATION, 2), FIN[6:9], atol=1e-9)


def test_time_is_clamped(spline):
    np.testing.assert_allclose(spline.curve_point(-5.0), spline.curve_point(0.0))
    np.testing.assert_allclose(spline.curve_point(10.0), spline.curve_point(DURATION))


def test_zeroth_derivative_is_position(spline):
    for u in (0.3, 0.9, 1.7):
        np.testing.assert_allclose(spline.curve_derivative(u, 0), spline.curve_point(u), atol=1e-12)


def test_velocity_matches_finite_difference(spline):
    u, h = 0.7, 1e-6
    numeric = (spline.curve_point(u + h) - spline.curve_point(u - h)) / (2 * h)
    np.testing.assert_allclose(spline.curve_derivative(0.7, 1), numeric, atol=1e-5)


def test_knots_are_clamped_and_uniform(spline):
    knots = spline.knots
    assert len(knots) == 11
    np.testing.assert_allclose(knots[:4], 0.0)
    np.testing.assert_allclose(knots[-4:], DURATION)
    np.testing.assert_allclose(np.diff(knots[3:8]), DURATION / 4)


@given(st.floats(min_value=0.0, max_value=3.0))
def test_constant_conditions_give_constant_curve(u):
    s = BSpline(1, 3, 1, 2, 2)
    s.set_param([4.0, 0.0, 0.0], [4.0, 0.0, 0.0], [[4.0]], 3.0)
    np.testing.assert_allclose(s.curve_point(u), [4.0], atol=1e-9)
    np.testing.assert_allclose(s.curve_derivative(u, 1), [0.0], atol=1e-8)


def test_derivative_order_above_degree_rejected(spline):
    with pytest.raises(ValueError):
        spline.curve_derivative(0.5, 4)


def test_invalid_setup_rejected():
    with pytest.raises(ValueError):
        BSpline(1, 3, 0, 0, 0)


def test_wrong_init_length_rejected():
    s = BSpline(3, 3, 1, 2, 2)
    with pytest.raises(ValueError):
        s.set_param(INIT[:6], FIN, MIDDLE, DURATION)


def test_unconfigured_spline_cannot_be_evaluated():
    s = BSpline(3, 3, 1, 2, 2)
    with pytest.raises(RuntimeError):
        s.curve_point(0.0)