[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bipedmpc"
version = "0.1.0"
description = "Convex model predictive control, gait scheduling and rotation utilities for a bipedal robot"
requires-python = ">=3.10"
keywords = [
    "robotics",
    "biped",
    "mpc",
    "model predictive control",
    "locomotion",
    "quadratic programming",
    "quaternion",
    "spline",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering",
    "Topic :: Scientific/Engineering :: Mathematics",
]
dependencies = [
    "numpy",
    "scipy",
]

[project.optional-dependencies]
test = [
    "pytest",
    "hypothesis",
]

[tool.hatch.build.targets.wheel]
packages = ["bipedmpc"]

[tool.pytest.ini_options]
addopts = "-ra"
