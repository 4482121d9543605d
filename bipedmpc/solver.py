"""Condensed convex MPC for the biped, solved as a quadratic program.

The decision variables of each horizon step are the forces of the left and
right foot followed by the moments of the left and right foot.  Feet that are
scheduled to swing are removed from the problem before it is solved, and
their entries in the solution are zero.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from scipy.optimize import minimize

from .constraints import (
    MAX_MOMENT_X,
    NUM_VARIABLES,
    ROWS_PER_STEP,
    constraint_matrix,
    correct_joint_angles,
    foot_rotation_matrices,
)
from .dynamics import c2qp, ct_ss_mats, euler_to_rotation, near_two, near_zero, quat_to_rpy
from .robot_state import RobotState
from .timer import Timer

logger = logging.getLogger(__name__)

K_MAX_GAIT_SEGMENTS = 36
BIG_NUMBER = 5e10
LINE_CONTACT_FRICTION = 2.0
GRAVITY = 9.81
MODEL_MASS = 9.0
MAX_WORKING_SET_RECALCULATIONS = 500
STATE_WITH_GRAVITY = 13

# Bounds at or beyond this magnitude are treated as absent by the solver.
_UNBOUNDED = 1e10


def _array(values, size: int, what: str) -> np.ndarray:
    arr = np.asarray(values, dtype=float).reshape(-1)
    if arr.size != size:
        raise ValueError(f"{what} must have {size} elements, got {arr.size}")
    return arr


@dataclass
class ProblemSetup:
    """Time step, friction, force limit and horizon of the MPC problem."""

    dt: float
    mu: float
    f_max: float
    horizon: int

    def __post_init__(self) -> None:
        self.horizon = int(self.horizon)
        if not 1 <= self.horizon <= K_MAX_GAIT_SEGMENTS:
            raise ValueError(
                f"horizon must be between 1 and {K_MAX_GAIT_SEGMENTS}, got {self.horizon}"
            )
        if self.dt <= 0:
            raise ValueError(f"dt must be positive, got {self.dt}")


@dataclass
class UpdateData:
    """Measured state, references and weights for one MPC solve.

    ``q`` is a ``(w, x, y, z)`` quaternion, ``r`` the row-major 3x2 matrix of
    foot positions relative to the body, ``traj`` twelve reference values per
    horizon step and ``gait`` one contact flag per leg per step.
    """

    p: np.ndarray
    v: np.ndarray
    q: np.ndarray
    w: np.ndarray
    r: np.ndarray
    joint_angles: np.ndarray
    yaw: float
    weights: np.ndarray
    traj: np.ndarray
    alpha_k: np.ndarray
    gait: np.ndarray
    max_iterations: int = 0
    rho: float = 0.0
    sigma: float = 0.0
    solver_alpha: float = 0.0
    terminate: float = 0.0

    def __post_init__(self) -> None:
        self.p = _array(self.p, 3, "p")
        self.v = _array(self.v, 3, "v")
        self.q = _array(self.q, 4, "q")
        self.w = _array(self.w, 3, "w")
        self.r = _array(self.r, 6, "r")
        self.joint_angles = _array(self.joint_angles, 10, "joint_angles")
        self.yaw = float(self.yaw)
        self.weights = _array(self.weights, 12, "weights")
        self.alpha_k = _array(self.alpha_k, 12, "alpha_k")
        self.traj = np.asarray(self.traj, dtype=float).reshape(-1)
        if self.traj.size > 12 * K_MAX_GAIT_SEGMENTS:
            raise ValueError("trajectory is longer than the largest horizon")
        self.gait = np.asarray(self.gait, dtype=int).reshape(-1)
        if self.gait.size > 2 * K_MAX_GAIT_SEGMENTS:
            raise ValueError("gait table is longer than the largest horizon")


@dataclass
class QuadraticProgram:
    """``min 0.5 x'Hx + g'x`` subject to ``lower <= A x <= upper``."""

    hessian: np.ndarray
    gradient: np.ndarray
    constraints: np.ndarray
    lower: np.ndarray
    upper: np.ndarray

    @property
    def num_variables(self) -> int:
        return self.gradient.size

    @property
    def num_constraints(self) -> int:
        return self.lower.size


def _bounds(setup: ProblemSetup, gait: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    size = ROWS_PER_STEP * setup.horizon
    upper = np.zeros(size)
    lower = np.zeros(size)
    for i in range(setup.horizon):
        for leg in range(2):
            base = ROWS_PER_STEP * i + 8 * leg
            upper[base:base + 4] = BIG_NUMBER
            lower[base:base + 4] = 0.0
            upper[base + 4:base + 8] = (MAX_MOMENT_X, 0.0, 0.0, setup.f_max * gait[2 * i + leg])
            lower[base + 4:base + 8] = (0.0, -BIG_NUMBER, -BIG_NUMBER, 0.0)
    return lower, upper


def build_qp(update: UpdateData, setup: ProblemSetup) -> QuadraticProgram:
    """Assemble the condensed quadratic program for one MPC solve."""
    h = setup.horizon
    if update.traj.size < 12 * h:
        raise ValueError(f"trajectory needs {12 * h} values, got {update.traj.size}")
    if update.gait.size < 2 * h:
        raise ValueError(f"gait needs {2 * h} entries, got {update.gait.size}")

    joints = correct_joint_angles(update.joint_angles)
    rs = RobotState.from_measurements(update.p, update.v, update.q, update.w, update.r, update.yaw)

    rpy = quat_to_rpy(rs.q)
    rb = euler_to_rotation(*rpy)
    x0 = np.concatenate((rpy, rs.p, rs.w, rs.v, [GRAVITY]))
    i_world = rs.R @ rs.I_body @ rs.R.T
    a_ct, b_ct = ct_ss_mats(i_world, MODEL_MASS, rs.r_feet, rb)
    a_qp, b_qp = c2qp(a_ct, b_ct, setup.dt, h)

    s = np.diag(np.tile(np.append(update.weights, 0.0), h))
    reference = update.traj[:12 * h].reshape(h, 12)
    x_d = np.hstack((reference, np.zeros((h, 1)))).reshape(-1)

    lower, upper = _bounds(setup, update.gait)

    left, right = foot_rotation_matrices(joints)
    f_control = constraint_matrix(left, right, rs.R, LINE_CONTACT_FRICTION)
    fmat = np.kron(np.eye(h), f_control)
    alpha_rep = np.kron(np.eye(h), np.diag(update.alpha_k))

    bts = b_qp.T @ s
    hessian = 2.0 * (bts @ b_qp + alpha_rep)
    gradient = 2.0 * bts @ (a_qp @ x0 - x_d)
    return QuadraticProgram(hessian, gradient, fmat, lower, upper)


def reduce_qp(qp: QuadraticProgram) -> tuple[QuadraticProgram, np.ndarray, np.ndarray]:
    """Remove the variables and constraint rows of feet forced to carry no load.

    A foot whose normal-force row has both bounds at zero is in swing: its
    force and moment variables and its eight constraint rows are dropped.
    Returns the reduced program with the kept variable and constraint indices.
    """
    n = qp.num_variables
    m = qp.num_constraints
    var_elim = np.zeros(n, dtype=bool)
    con_elim = np.zeros(m, dtype=bool)

    for i in range(m):
        if not (near_zero(qp.lower[i]) and near_zero(qp.upper[i])):
            continue
        for j, coefficient in enumerate(qp.constraints[i]):
            if not near_two(coefficient):
                continue
            cs = (j + 4) // 6 * 8 - 1 if j % 2 == 0 else (j + 1) // 6 * 8 + 7
            if j - 2 < 0 or j + 6 >= n or cs - 7 < 0 or cs >= m:
                raise ValueError(f"unexpected constraint layout at row {i}, column {j}")
            var_elim[[j - 2, j - 1, j, j + 4, j + 5, j + 6]] = True
            con_elim[cs - 7:cs + 1] = True

    var_ind = np.flatnonzero(~var_elim)
    con_ind = np.flatnonzero(~con_elim)
    reduced = QuadraticProgram(
        hessian=qp.hessian[np.ix_(var_ind, var_ind)],
        gradient=qp.gradient[var_ind],
        constraints=qp.constraints[np.ix_(con_ind, var_ind)],
        lower=qp.lower[con_ind],
        upper=qp.upper[con_ind],
    )
    return reduced, var_ind, con_ind


def _solve_qp(qp: QuadraticProgram, max_iterations: int = MAX_WORKING_SET_RECALCULATIONS) -> np.ndarray:
    a = qp.constraints
    has_lower = qp.lower > -_UNBOUNDED
    has_upper = qp.upper < _UNBOUNDED
    equal = has_lower & has_upper & (qp.upper - qp.lower <= 0.0)
    only_lower = has_lower & ~equal
    only_upper = has_upper & ~equal

    constraints = []
    if equal.any():
        a_eq, b_eq = a[equal], qp.lower[equal]
        constraints.append(
            {"type": "eq", "fun": lambda x, m=a_eq, b=b_eq: m @ x - b, "jac": lambda x, m=a_eq: m}
        )
    if only_lower.any():
        a_lo, b_lo = a[only_lower], qp.lower[only_lower]
        constraints.append(
            {"type": "ineq", "fun": lambda x, m=a_lo, b=b_lo: m @ x - b, "jac": lambda x, m=a_lo: m}
        )
    if only_upper.any():
        a_hi, b_hi = a[only_upper], qp.upper[only_upper]
        constraints.append(
            {"type": "ineq", "fun": lambda x, m=a_hi, b=b_hi: b - m @ x, "jac": lambda x, m=a_hi: -m}
        )

    hessian, gradient = qp.hessian, qp.gradient
    result = minimize(
        lambda x: 0.5 * x @ hessian @ x + gradient @ x,
        np.zeros(qp.num_variables),
        jac=lambda x: hessian @ x + gradient,
        method="SLSQP",
        constraints=constraints,
        options={"maxiter": max_iterations, "ftol": 1e-10},
    )
    if not result.success:
        logger.warning("failed to solve! %s", result.message)
    return np.asarray(result.x, dtype=float)


def solve_mpc(update: UpdateData, setup: ProblemSetup) -> np.ndarray:
    """Solve the MPC problem; returns the stacked inputs over the horizon."""
    qp = build_qp(update, setup)
    reduced, var_ind, con_ind = reduce_qp(qp)
    solution = np.zeros(qp.num_variables)
    timer = Timer()
    if var_ind.size:
        solution[var_ind] = _solve_qp(reduced)
    logger.debug(
        "solve time: %.3f ms, size %d, %d", timer.elapsed_ms(), var_ind.size, con_ind.size
    )
    return solution


class ConvexMPC:
    """Stateful front end: configure once, then feed measurements and read forces."""

    def __init__(self) -> None:
        self.setup: ProblemSetup | None = None
        self.update: UpdateData | None = None
        self._solution: np.ndarray | None = None
        self.max_iterations = 0
        self.rho = 0.0
        self.sigma = 0.0
        self.solver_alpha = 0.0
        self.terminate = 0.0

    @property
    def has_solved(self) -> bool:
        return self._solution is not None

    def setup_problem(self, dt, horizon, mu, f_max) -> None:
        """Set the time step, horizon, friction coefficient and force limit."""
        self.setup = ProblemSetup(dt=float(dt), mu=float(mu), f_max=float(f_max), horizon=horizon)

    def update_problem_data(
        self, p, v, q, w, r, joint_angles, yaw, weights, state_trajectory, alpha_k, gait
    ) -> np.ndarray:
        """Store new measurements and references and solve the problem."""
        if self.setup is None:
            raise RuntimeError("setup_problem must be called before update_problem_data")
        h = self.setup.horizon
        self.update = UpdateData(
            p=p,
            v=v,
            q=q,
            w=w,
            r=r,
            joint_angles=joint_angles,
            yaw=yaw,
            weights=weights,
            traj=np.asarray(state_trajectory, dtype=float).reshape(-1)[:12 * h],
            alpha_k=alpha_k,
            gait=np.asarray(gait, dtype=int).reshape(-1)[:2 * h],
            max_iterations=self.max_iterations,
            rho=self.rho,
            sigma=self.sigma,
            solver_alpha=self.solver_alpha,
            terminate=self.terminate,
        )
        self._solution = solve_mpc(self.update, self.setup)
        return self._solution.copy()

    def solution(self, index) -> float:
        """Entry of the last solution, or 0.0 before anything was solved."""
        if self._solution is None:
            return 0.0
        return float(self._solution[index])

    def update_solver_settings(self, max_iter, rho, sigma, solver_alpha, terminate) -> None:
        """Record solver settings; they travel with later problem data."""
        self.max_iterations = int(max_iter)
        self.rho = float(rho)
        self.sigma = float(sigma)
        self.solver_alpha = float(solver_alpha)
        self.terminate = float(terminate)