"""Small numeric helpers: squaring, approximate equality and pseudo-inverse."""

from __future__ import annotations

import numpy as np


def square(a):
    """Square a number."""
    return a * a


def almost_equal(a, b, tol) -> bool:
    """True when every element of ``a`` and ``b`` differs by less than ``tol``."""
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    if a.shape != b.shape:
        raise ValueError(f"shape mismatch: {a.shape} vs {b.shape}")
    return bool(np.all(np.abs(a - b) < tol))


def pseudo_inverse(matrix, sigma_threshold: float) -> np.ndarray:
    """Pseudo-inverse, treating singular values not above the threshold as zero."""
    m = np.atleast_2d(np.asarray(matrix, dtype=float))
    if m.ndim != 2:
        raise ValueError("matrix must be two-dimensional")
    if m.shape == (1, 1):
        value = m[0, 0]
        return np.array([[1.0 / value if value > sigma_threshold else 0.0]])
    u, s, vt = np.linalg.svd(m, full_matrices=False)
    keep = s > sigma_threshold
    inv_s = np.zeros_like(s)
    inv_s[keep] = 1.0 / s[keep]
    return vt.T @ np.diag(inv_s) @ u.T