"""
timeline.py
Phase Timeline

Maps global time onto (phase id, local phase time) through a cumulative
duration table. Shared by the trajectory sampler and the phase bookkeeping
of the optimization variables.
"""

import numpy as np


class PhaseTimeline:
    """
    Monotonic cumulative-duration table over a sequence of phases

    Attributes:
        durations: (n_phases,) phase durations (s)
        t_start: global time at which the first phase begins
    """

    def __init__(self, durations, t_start=0.0):
        durations = np.asarray(durations, dtype=float)
        if durations.ndim != 1 or durations.size == 0:
            raise ValueError("Phase timeline needs at least one phase duration")
        if np.any(durations <= 0.0):
            raise ValueError(f"Phase durations must be positive, got {durations}")

        self.durations = durations
        self.t_start = float(t_start)
        self._ends = self.t_start + np.cumsum(durations)

    @property
    def n_phases(self):
        return int(self.durations.size)

    @property
    def t_end(self):
        return float(self._ends[-1])

    @property
    def total_time(self):
        return self.t_end - self.t_start

    def phase_start(self, phase):
        return self.t_start if phase == 0 else float(self._ends[phase - 1])

    def phase_end(self, phase):
        return float(self._ends[phase])

    def phase_id(self, t_global):
        """
        Index of the phase active at t_global

        A time exactly on a boundary belongs to the later phase, times past
        the end clamp to the last phase.
        """
        if t_global < self.t_start:
            raise ValueError(f"Time {t_global} lies before trajectory start {self.t_start}")
        idx = int(np.searchsorted(self._ends, t_global, side='right'))
        return min(idx, self.n_phases - 1)

    def local_time(self, t_global):
        phase = self.phase_id(t_global)
        t_local = t_global - self.phase_start(phase)
        return min(t_local, float(self.durations[phase]))

    def percent_of_phase(self, t_global):
        phase = self.phase_id(t_global)
        return self.local_time(t_global) / float(self.durations[phase])

    def sample_times(self, dt):
        """
        Sample instants t_start + k*dt up to and including the final time

        Args:
            dt: sampling period (s)

        Returns:
            times: (N,) array, the last entry equal to t_end
        """
        if not dt > 0.0:
            raise ValueError(f"Sampling period must be positive, got {dt}")

        n = int(np.floor(self.total_time / dt + 1e-9))
        times = self.t_start + dt * np.arange(n + 1)
        if self.t_end - times[-1] > 1e-9:
            times = np.append(times, self.t_end)
        else:
            times[-1] = min(times[-1], self.t_end)
        return times
