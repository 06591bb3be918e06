"""
state.py
Robot State Containers

Cartesian snapshots of the floating base and the end-effectors, plus the
motion phase record that drives trajectory generation.
"""

from dataclasses import dataclass, field
from typing import Tuple

import numpy as np
from scipy.spatial.transform import Rotation


def _zeros3():
    return np.zeros(3)


@dataclass
class StateLin3d:
    """Position, velocity and acceleration of a point"""
    p: np.ndarray = field(default_factory=_zeros3)
    v: np.ndarray = field(default_factory=_zeros3)
    a: np.ndarray = field(default_factory=_zeros3)

    def __post_init__(self):
        self.p = np.asarray(self.p, dtype=float)
        self.v = np.asarray(self.v, dtype=float)
        self.a = np.asarray(self.a, dtype=float)

    def copy(self):
        return StateLin3d(self.p.copy(), self.v.copy(), self.a.copy())


@dataclass
class StateAng3d:
    """
    Orientation as roll-pitch-yaw

    w and wd are the first and second time derivatives of the Euler angles,
    not the body angular velocity.
    """
    rpy: np.ndarray = field(default_factory=_zeros3)
    w: np.ndarray = field(default_factory=_zeros3)
    wd: np.ndarray = field(default_factory=_zeros3)

    def __post_init__(self):
        self.rpy = np.asarray(self.rpy, dtype=float)
        self.w = np.asarray(self.w, dtype=float)
        self.wd = np.asarray(self.wd, dtype=float)

    def copy(self):
        return StateAng3d(self.rpy.copy(), self.w.copy(), self.wd.copy())


@dataclass
class BaseState:
    lin: StateLin3d = field(default_factory=StateLin3d)
    ang: StateAng3d = field(default_factory=StateAng3d)

    def copy(self):
        return BaseState(self.lin.copy(), self.ang.copy())


@dataclass(frozen=True)
class MotionPhase:
    """
    A time interval with fixed per-end-effector contact state

    Attributes:
        duration: length of the phase (s), strictly positive
        mode: contact-mode tag selecting the force constraint row policy
        contacts: one flag per end-effector, True if in contact
    """
    duration: float
    mode: int
    contacts: Tuple[bool, ...]

    def __post_init__(self):
        if not self.duration > 0.0:
            raise ValueError(f"Phase duration must be positive, got {self.duration}")
        object.__setattr__(self, 'contacts', tuple(bool(c) for c in self.contacts))

    @property
    def n_ee(self):
        return len(self.contacts)

    def swing_legs(self):
        """Indices of the end-effectors that are not in contact"""
        return [ee for ee, c in enumerate(self.contacts) if not c]


@dataclass
class RobotStateCartesian:
    """
    Full-body state: base, end-effector motion and contact flags

    Used both for the boundary nodes between phases and for every sample of
    the discretized whole-body trajectory.
    """
    base: BaseState
    ee_motion: list
    ee_contact: list
    t_global: float = 0.0

    @property
    def n_ee(self):
        return len(self.ee_motion)

    def copy(self):
        return RobotStateCartesian(
            base=self.base.copy(),
            ee_motion=[ee.copy() for ee in self.ee_motion],
            ee_contact=list(self.ee_contact),
            t_global=self.t_global
        )

    def get_ee_pos(self):
        """(n_ee, 3) array of end-effector positions"""
        return np.array([ee.p for ee in self.ee_motion])


def quaternion_to_rpy(q):
    """
    Convert a quaternion [x, y, z, w] to roll-pitch-yaw (extrinsic xyz)
    """
    return Rotation.from_quat(np.asarray(q, dtype=float)).as_euler('xyz')


def rpy_to_rotation_matrix(rpy):
    """Rotation matrix mapping base-frame vectors into the world frame"""
    return Rotation.from_euler('xyz', np.asarray(rpy, dtype=float)).as_matrix()
