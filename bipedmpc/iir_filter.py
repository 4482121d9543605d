"""First-order low-pass IIR filter."""

from __future__ import annotations

import math

import numpy as np


class FirstOrderIIRFilter:
    """Exponential smoothing: ``state = alpha * x + (1 - alpha) * state``.

    Works on scalars and numpy arrays alike.
    """

    def __init__(self, alpha, initial_value):
        self.alpha = float(alpha)
        self.value = np.array(initial_value, dtype=float) if isinstance(initial_value, np.ndarray) else initial_value

    @classmethod
    def from_frequencies(cls, cutoff_frequency, sample_frequency, initial_value):
        """Filter with the given cutoff for samples arriving at ``sample_frequency``."""
        if sample_frequency <= 0:
            raise ValueError(f"sample_frequency must be positive, got {sample_frequency}")
        alpha = 1.0 - math.exp(-2.0 * math.pi * cutoff_frequency / sample_frequency)
        return cls(alpha, initial_value)

    def update(self, x):
        """Feed a new sample and return the new filter state."""
        self.value = self.alpha * x + (1.0 - self.alpha) * self.value
        return self.value

    def reset(self) -> None:
        """Set the state to zero."""
        self.value = self.value * 0.0