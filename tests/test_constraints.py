import math

import numpy as np
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from bipedmpc.constraints import (
    Constraints,
    constraint_matrix,
    correct_joint_angles,
    foot_rotation_matrices,
)
from bipedmpc.orientation import rpy_to_rot_mat
from bipedmpc.robot_state import RobotState

BIG = 5e10

angles = st.floats(min_value=-math.pi, max_value=math.pi, allow_nan=False)


def _state():
    return RobotState.from_measurements(
        p=[0, 0, 0.55], v=[0, 0, 0], q=[1, 0, 0, 0], w=[0, 0, 0], r=[0.0] * 6, yaw=0.0
    )


def _constraints(horizon=2, gait=(1, 0, 0, 1), joints=None, f_max=500.0, num=16):
    return Constraints(
        _state(),
        np.zeros(10) if joints is None else joints,
        horizon,
        num,
        33.5,
        BIG,
        f_max,
        list(gait),
    )


def test_correct_joint_angles_offsets_at_zero():
    result = correct_joint_angles(np.zeros(10))
    expected = [0, 0, 0.3 * math.pi, -0.6 * math.pi, 0.3 * math.pi] * 2
    assert result == pytest.approx(expected, abs=1e-9)


@given(st.lists(st.floats(min_value=-30, max_value=30, allow_nan=False), min_size=10, max_size=10))
def test_correct_joint_angles_wraps_congruently(values):
    result = correct_joint_angles(values)
    corrected = correct_joint_angles(np.zeros(10))
    two_pi = 2 * 3.14159265359
    assert np.all(np.abs(result) < two_pi)
    turns = (result - corrected - np.asarray(values)) / two_pi
    assert np.allclose(turns, np.round(turns), atol=1e-6)


def test_correct_joint_angles_wrong_length():
    with pytest.raises(ValueError):
        correct_joint_angles([0.0] * 9)


def test_foot_rotations_identity_at_zero():
    left, right = foot_rotation_matrices(np.zeros(10))
    assert np.allclose(left, np.eye(3))
    assert np.allclose(right, np.eye(3))


@settings(max_examples=50)
@given(st.lists(angles, min_size=10, max_size=10))
def test_foot_rotations_are_proper_rotations(q):
    for rot in foot_rotation_matrices(q):
        assert np.allclose(rot @ rot.T, np.eye(3), atol=1e-9)
        assert np.linalg.det(rot) == pytest.approx(1.0)


@given(angles)
def test_foot_rotation_hip_yaw_entries(q0):
    left, right = foot_rotation_matrices([q0, 0, 0, 0, 0, 0, 0, 0, 0, 0])
    assert left[0, 1] == pytest.approx(-math.sin(q0), abs=1e-12)
    assert left[1, 1] == pytest.approx(math.cos(q0), abs=1e-12)
    assert left[2] == pytest.approx([0, 0, 1], abs=1e-12)
    assert np.allclose(right, np.eye(3))


def test_foot_rotation_depends_on_pitch_sum_only():
    a, _ = foot_rotation_matrices([0.2, 0.1, 0.3, -0.5, 0.4, 0, 0, 0, 0, 0])
    b, _ = foot_rotation_matrices([0.2, 0.1, 0.0, 0.2, 0.0, 0, 0, 0, 0, 0])
    assert np.allclose(a, b)


def test_foot_rotation_too_few_angles():
    with pytest.raises(ValueError):
        foot_rotation_matrices([0.0] * 5)


def test_constraint_matrix_identity_rows():
    a = constraint_matrix(np.eye(3), np.eye(3), np.eye(3), 5.0)
    assert a.shape == (16, 12)
    assert list(a[0, :3]) == [-5.0, 0.0, 1.0]
    assert list(a[1, :3]) == [5.0, 0.0, 1.0]
    assert list(a[2, :3]) == [0.0, -5.0, 1.0]
    assert list(a[3, :3]) == [0.0, 5.0, 1.0]
    assert list(a[8, 3:6]) == [-5.0, 0.0, 1.0]
    assert list(a[11, 3:6]) == [0.0, 5.0, 1.0]
    assert a[7, 2] == 2.0 and a[15, 5] == 2.0
    assert np.count_nonzero(a[7]) == 1 and np.count_nonzero(a[15]) == 1
    assert list(a[4, 6:9]) == [1.0, 0.0, 0.0]
    assert list(a[12, 9:12]) == [1.0, 0.0, 0.0]
    assert a[5, 0:3] == pytest.approx([0, 0, -0.09])
    assert a[6, 0:3] == pytest.approx([0, 0, -0.06])
    assert a[13, 3:6] == pytest.approx([0, 0, -0.09])
    assert a[14, 3:6] == pytest.approx([0, 0, -0.06])
    assert list(a[5, 6:9]) == [0.0, 1.0, 0.0]
    assert list(a[6, 6:9]) == [0.0, -1.0, 0.0]
    assert list(a[13, 9:12]) == [0.0, 1.0, 0.0]
    assert list(a[14, 9:12]) == [0.0, 1.0, 0.0]


def test_constraint_matrix_uses_mu():
    a = constraint_matrix(np.eye(3), np.eye(3), np.eye(3), 2.0)
    assert a[0, 0] == -2.0 and a[9, 3] == 2.0 and a[10, 4] == -2.0


@settings(max_examples=40)
@given(st.lists(angles, min_size=3, max_size=3), st.lists(angles, min_size=10, max_size=10))
def test_constraint_matrix_rotated_rows_keep_norm(rpy, q):
    left, right = foot_rotation_matrices(q)
    a = constraint_matrix(left, right, rpy_to_rot_mat(rpy), 5.0)
    assert np.linalg.norm(a[4, 6:9]) == pytest.approx(1.0)
    assert np.linalg.norm(a[12, 9:12]) == pytest.approx(1.0)
    assert np.linalg.norm(a[5, 0:3]) == pytest.approx(0.09)
    assert np.linalg.norm(a[14, 3:6]) == pytest.approx(0.06)
    assert np.allclose(a[6, 6:9], -a[5, 6:9])
    assert np.allclose(a[14, 9:12], a[13, 9:12])


def test_bounds_layout():
    c = _constraints(horizon=2, gait=(1, 0, 0, 1), f_max=500.0)
    assert c.upper_bound.shape == (32,) and c.lower_bound.shape == (32,)
    for step in range(2):
        for leg in range(2):
            base = 16 * step + 8 * leg
            assert list(c.upper_bound[base:base + 4]) == [BIG] * 4
            assert list(c.lower_bound[base:base + 4]) == [0.0] * 4
            assert c.upper_bound[base + 4] == pytest.approx(0.01)
            assert c.upper_bound[base + 5] == 0.0 and c.upper_bound[base + 6] == 0.0
            assert c.lower_bound[base + 5] == -BIG and c.lower_bound[base + 6] == -BIG
            assert c.lower_bound[base + 7] == 0.0
    assert c.upper_bound[7] == 500.0 and c.upper_bound[15] == 500.0
    assert c.upper_bound[23] == 0.0 and c.upper_bound[31] == 0.0


def test_constraint_matrix_matches_joint_angles_and_body():
    joints = [0.1, -0.2, 0.3, 0.4, -0.5, 0.05, 0.1, -0.3, 0.2, 0.1]
    c = _constraints(joints=joints)
    left, right = foot_rotation_matrices(joints)
    assert np.allclose(c.left_foot_rotation, left)
    assert np.allclose(c.right_foot_rotation, right)
    assert np.allclose(c.constraint_matrix, constraint_matrix(left, right, _state().R, 5.0))


def test_extra_constraint_rows_are_zero():
    c = _constraints(horizon=1, gait=(1, 1), num=20)
    assert c.constraint_matrix.shape == (20, 12)
    assert not np.any(c.constraint_matrix[16:])
    assert c.upper_bound.shape == (20,)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"num": 8},
        {"horizon": 3, "gait": (1, 1, 1, 1)},
        {"joints": np.zeros(4)},
        {"horizon": 0, "gait": ()},
    ],
)
def test_invalid_arguments(kwargs):
    with pytest.raises(ValueError):
        _constraints(**kwargs)