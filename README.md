# bipedmpc

Building blocks for force-and-moment based convex model predictive control
of a two-legged robot with line-contact feet: rotation maths, curves and
filters, a gait scheduler, a single rigid body model, the contact
constraints, and a quadratic-program MPC solver built on NumPy and SciPy.

## Modules

- `bipedmpc.orientation` — `CoordinateAxis`, `coordinate_rotation`,
  `rpy_to_rot_mat`, `rotation_matrix_to_quaternion`,
  `quaternion_to_rotation_matrix`, `quat_to_rpy`, `rpy_to_quat`,
  `rotation_matrix_to_rpy`, skew-matrix helpers, so(3) conversions
  (`quat_to_so3`, `quaternion_to_so3`, `so3_to_quat`), `quat_product`,
  `quat_derivative`, `integrate_quat` and `integrate_quat_implicit`.
  Quaternions are `(w, x, y, z)`; rotation matrices transform world
  coordinates into body coordinates.
- `bipedmpc.interpolation` — `lerp`, `cubic_bezier`,
  `cubic_bezier_first_derivative` and `cubic_bezier_second_derivative` for a
  parameter in `[0, 1]` (anything outside raises `ValueError`).
- `bipedmpc.mathutil` — `square`, `almost_equal` and an SVD-based
  `pseudo_inverse` that drops singular values at or below a threshold.
- `bipedmpc.bspline` — `BSpline`, a clamped uniform B-spline whose ends can
  be constrained in position and in derivatives up to the spline degree;
  `curve_point` and `curve_derivative` clamp time to the spline's range.
- `bipedmpc.bezier` — `BezierCurve` with `point` and `velocity`; outside its
  duration the position is held and the velocity is zero.
- `bipedmpc.iir_filter` — `FirstOrderIIRFilter`, built from a gain or with
  `from_frequencies`, for scalars or NumPy arrays.
- `bipedmpc.timer` — `Timer` on the monotonic clock.
- `bipedmpc.biped` — `Biped`, the robot's mass, link lengths and hip
  yaw/roll locations per leg (0 left, 1 right).
- `bipedmpc.gait` — `Gait`: contact and swing sub-phases for each leg and
  the flattened contact table over the horizon (`mpc_table`).
- `bipedmpc.robot_state` — `RobotState.from_measurements` and `describe`.
- `bipedmpc.dynamics` — the 13-state continuous-time model (`ct_ss_mats`),
  its forward-Euler condensation over the horizon (`c2qp`, horizon at most
  19), `euler_to_rotation`, `quat_to_rpy` and `cross_mat`.
- `bipedmpc.constraints` — `correct_joint_angles`,
  `foot_rotation_matrices`, the 16x12 per-step `constraint_matrix`, and
  `Constraints`, which holds the bounds and constraint matrix for a horizon.
- `bipedmpc.solver` — `ProblemSetup`, `UpdateData`, `QuadraticProgram`,
  `build_qp`, `reduce_qp` (drops the variables and rows of feet scheduled to
  swing), `solve_mpc`, and the stateful `ConvexMPC` front end. The reduced
  program is solved with SciPy's SLSQP.

## Installing

```
pip install .
pip install ".[test]"   # with the test tools
```

## Examples

Gait scheduling:

```python
from bipedmpc.gait import Gait

walking = Gait(10, (0, 5), (5, 5), "Walking")
walking.set_iterations(iterations_per_mpc=40, current_iteration=120)
print(walking.contact_subphase())
print(walking.mpc_table())
```

One MPC solve for a robot standing upright on both feet:

```python
from bipedmpc.solver import ConvexMPC

horizon = 10
mpc = ConvexMPC()
mpc.setup_problem(dt=0.04, horizon=horizon, mu=0.25, f_max=500)

p = [0.0, 0.0, 0.55]
v = [0.0, 0.0, 0.0]
q = [1.0, 0.0, 0.0, 0.0]
w = [0.0, 0.0, 0.0]
# Foot positions relative to the body, a row-major 3x2 matrix (one column per foot).
r = [-0.005, -0.005, 0.057, -0.057, -0.55, -0.55]
joint_angles = [0.0] * 10
weights = [100, 100, 250, 200, 200, 300, 1, 1, 1, 1, 1, 1]
alpha_k = [1e-4, 1e-4, 5e-4, 1e-4, 1e-4, 5e-4] + [1e-2] * 6
trajectory = [0, 0, 0, 0, 0, 0.55, 0, 0, 0, 0, 0, 0] * horizon
gait_table = [1, 1] * horizon

mpc.update_problem_data(p, v, q, w, r, joint_angles, 0.0,
                        weights, trajectory, alpha_k, gait_table)
left_force = [mpc.solution(i) for i in range(3)]
right_force = [mpc.solution(i) for i in range(3, 6)]
```

`solution(index)` returns 0.0 until a problem has been solved.

## Limits

- The friction coefficient given to `setup_problem` is stored in
  `ProblemSetup` but the constraint rows use a fixed coefficient of 2.0;
  `Constraints` uses 5.0.
- `update_solver_settings` only records its values on `ConvexMPC` and in
  later `UpdateData`; they do not change how the program is solved.
- The package computes foot forces and moments only. It has no state
  estimator, leg or swing-leg controller, joint-level command output,
  controller state machine, or connection to a simulator or robot; the
  caller supplies the measured state and applies the results.

## Running the tests

```
pytest
```