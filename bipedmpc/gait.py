"""Periodic gait schedule for two legs over an MPC horizon."""

from __future__ import annotations

import numpy as np


class Gait:
    """Contact schedule described by per-leg offsets and stance durations.

    Offsets and durations are counted in MPC segments out of ``n_segments``.
    """

    def __init__(self, n_segments, offsets, durations, name=""):
        n_segments = int(n_segments)
        if n_segments <= 0:
            raise ValueError(f"n_segments must be positive, got {n_segments}")
        offsets = np.asarray(offsets, dtype=int).reshape(-1)
        durations = np.asarray(durations, dtype=int).reshape(-1)
        if offsets.shape != (2,) or durations.shape != (2,):
            raise ValueError("offsets and durations need one entry per leg")
        self.name = name
        self.n_segments = n_segments
        self.offsets = offsets
        self.durations = durations
        self.offsets_phase = offsets.astype(float) / n_segments
        self.durations_phase = durations.astype(float) / n_segments
        self.stance = int(durations[0])
        self.swing = n_segments - int(durations[0])
        self.iteration = 0
        self.phase = 0.0

    def contact_subphase(self) -> np.ndarray:
        """Progress through stance for each leg, 0 when the leg is not in stance."""
        progress = self.phase - self.offsets_phase
        progress = np.where(progress < 0, progress + 1.0, progress)
        with np.errstate(invalid="ignore", divide="ignore"):
            scaled = progress / self.durations_phase
        return np.where(progress > self.durations_phase, 0.0, scaled)

    def swing_subphase(self) -> np.ndarray:
        """Progress through swing for each leg, 0 when the leg is not swinging."""
        swing_offset = self.offsets_phase + self.durations_phase
        swing_offset = np.where(swing_offset > 1, swing_offset - 1.0, swing_offset)
        swing_duration = 1.0 - self.durations_phase
        progress = self.phase - swing_offset
        progress = np.where(progress < 0, progress + 1.0, progress)
        with np.errstate(invalid="ignore", divide="ignore"):
            scaled = progress / swing_duration
        return np.where(progress > swing_duration, 0.0, scaled)

    def mpc_table(self) -> list[int]:
        """Contact flags over the horizon, flattened as ``[segment * 2 + leg]``."""
        n = self.n_segments
        table: list[int] = []
        for i in range(n):
            step = (i + self.iteration) % n
            for offset, duration in zip(self.offsets, self.durations):
                progress = step - int(offset)
                if progress < 0:
                    progress += n
                table.append(1 if progress < duration else 0)
        return table

    def set_iterations(self, iterations_per_mpc, current_iteration) -> None:
        """Update the segment index and phase from the controller's iteration count."""
        if iterations_per_mpc <= 0:
            raise ValueError(f"iterations_per_mpc must be positive, got {iterations_per_mpc}")
        if current_iteration < 0:
            raise ValueError(f"current_iteration must be non-negative, got {current_iteration}")
        cycle = iterations_per_mpc * self.n_segments
        self.iteration = (current_iteration // iterations_per_mpc) % self.n_segments
        self.phase = (current_iteration % cycle) / cycle