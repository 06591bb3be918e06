"""
polynomial.py
Boundary-Value Polynomials

Per-phase polynomials used to fill in body height, orientation and the
end-effector motion between two boundary nodes. All polynomials are
evaluated in local phase time t in [0, T].
"""

import numpy as np

from .state import StateLin3d


def _cubic_coeffs(p0, v0, p1, v1, T):
    """
    Solve for cubic coefficients c0..c3 (ascending powers) such that:
      p(0)=p0, p'(0)=v0, p(T)=p1, p'(T)=v1
    Works on arrays; returns shape (4, n_dim).
    """
    A = np.array([
        [1, 0, 0,    0],          # p(0)
        [0, 1, 0,    0],          # p'(0)
        [1, T, T**2, T**3],       # p(T)
        [0, 1, 2*T,  3*T**2],     # p'(T)
    ], dtype=float)
    b = np.vstack([p0, v0, p1, v1])
    return np.linalg.solve(A, b)


class CubicHermitePolynomial:
    """
    Cubic matching position and velocity at both ends of [0, T]

    Acceleration follows from the fit and is not constrained.
    """

    def __init__(self, n_dim=3):
        self.n_dim = n_dim
        self.T = 0.0
        self.coeffs = np.zeros((4, n_dim))

    def set_boundary(self, T, start, end):
        """
        Args:
            T: duration of the polynomial (s)
            start: StateLin3d-like object with p, v at t=0
            end: StateLin3d-like object with p, v at t=T
        """
        if not T > 0.0:
            raise ValueError(f"Polynomial duration must be positive, got {T}")
        self.T = float(T)
        self.coeffs = _cubic_coeffs(
            np.atleast_1d(start.p), np.atleast_1d(start.v),
            np.atleast_1d(end.p), np.atleast_1d(end.v),
            self.T
        )
        return self

    def get_point(self, t):
        t = float(np.clip(t, 0.0, self.T))
        c = self.coeffs
        p = c[0] + c[1]*t + c[2]*t**2 + c[3]*t**3
        v = c[1] + 2*c[2]*t + 3*c[3]*t**2
        a = 2*c[2] + 6*c[3]*t
        return StateLin3d(p, v, a)

    def get_duration(self):
        return self.T


class ConstantPolynomial:
    """Holds a fixed position with zero velocity and acceleration"""

    def __init__(self, p, T):
        self.p = np.asarray(p, dtype=float).copy()
        self.T = float(T)

    def get_point(self, t):
        zeros = np.zeros_like(self.p)
        return StateLin3d(self.p.copy(), zeros, zeros.copy())

    def get_duration(self):
        return self.T


class SwingPolynomial:
    """
    Lift-and-place arc of a swinging end-effector

    The horizontal components interpolate the boundary positions and
    velocities with a single cubic. The vertical component is split at the
    phase midpoint into two cubics: it rises from the start height to the
    apex max(z_start, z_end) + lift_height, where its velocity is zero, and
    descends to the end height.
    """

    def __init__(self, lift_height):
        self.lift_height = float(lift_height)
        self.T = 0.0
        self.xy = CubicHermitePolynomial(n_dim=2)
        self.z_up = CubicHermitePolynomial(n_dim=1)
        self.z_down = CubicHermitePolynomial(n_dim=1)

    def set_boundary(self, T, start, end):
        self.T = float(T)
        self.xy.set_boundary(T, StateLin3d(start.p[:2], start.v[:2], np.zeros(2)),
                             StateLin3d(end.p[:2], end.v[:2], np.zeros(2)))

        apex = StateLin3d([self.get_apex_height(start.p[2], end.p[2])], [0.0], [0.0])
        self.z_up.set_boundary(T/2, StateLin3d([start.p[2]], [start.v[2]], [0.0]), apex)
        self.z_down.set_boundary(T/2, apex, StateLin3d([end.p[2]], [end.v[2]], [0.0]))
        return self

    def get_apex_height(self, z_start, z_end):
        return max(z_start, z_end) + self.lift_height

    def get_point(self, t):
        t = float(np.clip(t, 0.0, self.T))
        xy = self.xy.get_point(t)
        if t < self.T/2:
            z = self.z_up.get_point(t)
        else:
            z = self.z_down.get_point(t - self.T/2)

        return StateLin3d(
            np.append(xy.p, z.p),
            np.append(xy.v, z.v),
            np.append(xy.a, z.a)
        )

    def get_duration(self):
        return self.T
