"""
com_motion.py
Center-of-Mass Motion Providers

Reduced-order motion of the robot as produced by a trajectory optimizer.
The whole-body generator only queries it through get_base(t) and
get_orientation(t).
"""

import numpy as np
from scipy.interpolate import CubicSpline
from scipy.spatial.transform import Rotation

from .state import StateLin3d


class ComMotion:
    """Interface of a center-of-mass motion"""

    def get_base(self, t):
        """
        Args:
            t: global time (s)

        Returns:
            StateLin3d with CoM position, velocity and acceleration. Only the
            horizontal components are used by the whole-body generator.
        """
        raise NotImplementedError

    def get_orientation(self, t):
        """Base orientation as quaternion [x, y, z, w], or None if not modeled"""
        return None

    @property
    def total_time(self):
        raise NotImplementedError


class LinearComMotion(ComMotion):
    """CoM moving with constant velocity from p0"""

    def __init__(self, p0, v, duration=np.inf):
        self.p0 = np.asarray(p0, dtype=float)
        self.v = np.asarray(v, dtype=float)
        self._duration = float(duration)

    def get_base(self, t):
        return StateLin3d(self.p0 + self.v*t, self.v.copy(), np.zeros(3))

    @property
    def total_time(self):
        return self._duration


class SplineComMotion(ComMotion):
    """
    CoM through waypoints, clamped cubic spline (zero end velocities)

    Args:
        times: (N,) increasing waypoint times (s)
        positions: (N, 3) CoM waypoints
        yaw: optional (N,) heading waypoints (rad), interpolated the same way
    """

    def __init__(self, times, positions, yaw=None):
        times = np.asarray(times, dtype=float)
        positions = np.asarray(positions, dtype=float)
        if positions.shape != (times.size, 3):
            raise ValueError(f"positions shape {positions.shape} != ({times.size}, 3)")

        self.times = times
        self._pos = CubicSpline(times, positions, axis=0, bc_type='clamped')
        self._yaw = None
        if yaw is not None:
            self._yaw = CubicSpline(times, np.asarray(yaw, dtype=float), bc_type='clamped')

    def get_base(self, t):
        t = float(np.clip(t, self.times[0], self.times[-1]))
        return StateLin3d(self._pos(t), self._pos(t, 1), self._pos(t, 2))

    def get_orientation(self, t):
        if self._yaw is None:
            return None
        t = float(np.clip(t, self.times[0], self.times[-1]))
        return Rotation.from_euler('z', float(self._yaw(t))).as_quat()

    @property
    def total_time(self):
        return float(self.times[-1] - self.times[0])
