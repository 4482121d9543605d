import math

import numpy as np
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from bipedmpc.orientation import (
    CoordinateAxis,
    coordinate_rotation,
    deg2rad,
    integrate_quat,
    integrate_quat_implicit,
    mat_to_skew_vec,
    quat_derivative,
    quat_product,
    quat_to_rpy,
    quat_to_so3,
    quaternion_to_rotation_matrix,
    quaternion_to_so3,
    rad2deg,
    rotation_matrix_to_quaternion,
    rotation_matrix_to_rpy,
    rpy_to_quat,
    rpy_to_rot_mat,
    so3_to_quat,
    vector_to_skew_mat,
)

angle = st.floats(min_value=-3.0, max_value=3.0)
pitch = st.floats(min_value=-1.4, max_value=1.4)
small = st.floats(min_value=-1.0, max_value=1.0)


def test_rad_deg():
    assert rad2deg(math.pi) == pytest.approx(180.0)
    assert deg2rad(rad2deg(0.7)) == pytest.approx(0.7)


@pytest.mark.parametrize("axis", list(CoordinateAxis))
def test_coordinate_rotation_orthonormal(axis):
    r = coordinate_rotation(axis, 0.3)
    assert np.allclose(r @ r.T, np.eye(3))
    assert np.linalg.det(r) == pytest.approx(1.0)
    assert np.allclose(r, coordinate_rotation(axis, -0.3).T)


def test_coordinate_rotation_bad_axis():
    with pytest.raises(ValueError):
        coordinate_rotation("x", 0.1)


@settings(max_examples=50)
@given(angle, pitch, angle)
def test_rpy_quat_roundtrip(r, p, y):
    rpy = np.array([r, p, y])
    assert np.allclose(quat_to_rpy(rpy_to_quat(rpy)), rpy, atol=1e-7)
    assert np.allclose(rotation_matrix_to_rpy(rpy_to_rot_mat(rpy)), rpy, atol=1e-7)


@pytest.mark.parametrize(
    "rpy",
    [(0.2, 0.1, -0.3), (math.pi, 0.0, 0.0), (0.0, math.pi, 0.0), (0.0, 0.0, math.pi)],
)
def test_matrix_quaternion_roundtrip(rpy):
    r = rpy_to_rot_mat(rpy)
    q = rotation_matrix_to_quaternion(r)
    assert np.linalg.norm(q) == pytest.approx(1.0)
    assert np.allclose(quaternion_to_rotation_matrix(q), r, atol=1e-9)


@given(small, small, small, small, small, small)
def test_skew(a, b, c, d, e, f):
    v = np.array([a, b, c])
    w = np.array([d, e, f])
    s = vector_to_skew_mat(v)
    assert np.allclose(s @ w, np.cross(v, w))
    assert np.allclose(mat_to_skew_vec(s), v)


def test_skew_rejects_wrong_size():
    with pytest.raises(ValueError):
        vector_to_skew_mat([1.0, 2.0])


def test_quat_product_identity_and_norm():
    ident = np.array([1.0, 0.0, 0.0, 0.0])
    q1 = rpy_to_quat([0.1, 0.2, 0.3])
    q2 = rpy_to_quat([-0.4, 0.5, 0.1]) * 2.0
    assert np.allclose(quat_product(ident, q1), q1)
    assert np.linalg.norm(quat_product(q1, q2)) == pytest.approx(np.linalg.norm(q2))


def test_quat_derivative_zero_omega():
    q = rpy_to_quat([0.1, 0.2, 0.3])
    assert np.allclose(quat_derivative(q, [0, 0, 0]), 0.0)
    ident = np.array([1.0, 0.0, 0.0, 0.0])
    omega = np.array([0.3, -0.2, 0.5])
    assert np.allclose(quat_derivative(ident, omega), np.concatenate(([0.0], 0.5 * omega)))


def test_integrate_quat_matches_so3():
    ident = np.array([1.0, 0.0, 0.0, 0.0])
    omega = np.array([0.0, 0.4, 1.2])
    dt = 0.25
    expected = so3_to_quat(omega * dt)
    assert np.allclose(integrate_quat(ident, omega, dt), expected)
    assert np.allclose(integrate_quat_implicit(ident, omega, dt), expected)


def test_integrate_quat_zero_omega_normalizes():
    q = np.array([2.0, 0.0, 0.0, 0.0])
    out = integrate_quat(q, [0, 0, 0], 0.1)
    assert np.allclose(out, [1.0, 0.0, 0.0, 0.0])


@given(small, small, small)
def test_so3_roundtrip(a, b, c):
    v = np.array([a, b, c])
    q = so3_to_quat(v)
    assert np.linalg.norm(q) == pytest.approx(1.0)
    assert np.allclose(quaternion_to_so3(q), v, atol=1e-6)
    if np.linalg.norm(v) > 1e-3:
        assert np.allclose(quat_to_so3(q), v, atol=1e-6)


def test_so3_identity():
    assert np.allclose(so3_to_quat([0, 0, 0]), [1.0, 0.0, 0.0, 0.0])
    assert np.allclose(quaternion_to_so3([1.0, 0.0, 0.0, 0.0]), np.zeros(3))