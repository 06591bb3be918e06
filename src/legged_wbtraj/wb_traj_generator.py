"""
wb_traj_generator.py
Whole-Body Trajectory Generator

Takes the optimized reduced-order motion (center of mass + footholds) and
fills in the remaining degrees of freedom to produce a discretized
whole-body trajectory:
    - body height
    - body orientation (pos/vel/acc)
    - swing-leg trajectories
"""

import logging

import numpy as np

from .polynomial import CubicHermitePolynomial, ConstantPolynomial, SwingPolynomial
from .state import (
    BaseState,
    RobotStateCartesian,
    StateAng3d,
    StateLin3d,
    quaternion_to_rpy,
    rpy_to_rotation_matrix,
)
from .timeline import PhaseTimeline

logger = logging.getLogger(__name__)


def _wrap_to(angles, reference):
    """Shift angles by multiples of 2*pi to lie within pi of reference"""
    return reference + (angles - reference + np.pi) % (2*np.pi) - np.pi


class WholeBodyTrajectoryGenerator:
    """
    Whole-body trajectory generator

    One node (full robot state) is built at every phase boundary, then per
    phase a height polynomial, an orientation polynomial and one polynomial
    per end-effector connect consecutive nodes. Sampling evaluates those
    polynomials on top of the center-of-mass motion.
    """

    def __init__(self):
        self.phases = []
        self.nodes = []
        self.z_spliner = []
        self.ori_spliner = []
        self.ee_spliner = []
        self.timeline = None
        self.com_motion = None
        self.leg_lift_height = 0.0
        self.offset_geom_to_com = np.zeros(3)

    def init(self, phases, com_motion, footholds, curr_state, lift_height, com_offset):
        """
        Build nodes and splines for a new set of inputs

        Args:
            phases: sequence of MotionPhase
            com_motion: ComMotion queried for the base motion
            footholds: (x, y) or (x, y, z) landing positions, consumed in
                phase order and, within a phase, in end-effector order
            curr_state: RobotStateCartesian at the start of the first phase
            lift_height: swing apex above the higher of the two footholds (m)
            com_offset: vector from geometric center to CoM, base frame
        """
        phases = list(phases)
        if len(phases) == 0:
            raise ValueError("At least one motion phase is required")
        for k, phase in enumerate(phases):
            if phase.n_ee != curr_state.n_ee:
                raise ValueError(
                    f"Phase {k} has {phase.n_ee} contact flags, robot has {curr_state.n_ee} end-effectors")
        n_swings = sum(len(p.swing_legs()) for p in phases)
        if len(footholds) != n_swings:
            raise ValueError(f"Got {len(footholds)} footholds for {n_swings} swing phases")
        footholds = [np.asarray(f, dtype=float) for f in footholds]
        for i, foothold in enumerate(footholds):
            if foothold.ndim != 1 or foothold.size not in (2, 3):
                raise ValueError(f"Foothold {i} must be (x, y) or (x, y, z), got shape {foothold.shape}")
        com_offset = np.asarray(com_offset, dtype=float)
        if com_offset.shape != (3,):
            raise ValueError(f"com_offset must have shape (3,), got {com_offset.shape}")
        lift_height = float(lift_height)

        # attributes change only once every stage has been built
        timeline = PhaseTimeline([p.duration for p in phases], t_start=curr_state.t_global)
        nodes = self.build_node_sequence(phases, footholds, curr_state, com_motion, timeline, com_offset)
        z_spliner, ori_spliner, ee_spliner = self.create_all_splines(phases, nodes, lift_height)

        self.phases = phases
        self.com_motion = com_motion
        self.leg_lift_height = lift_height
        self.offset_geom_to_com = com_offset
        self.timeline = timeline
        self.nodes = nodes
        self.z_spliner = z_spliner
        self.ori_spliner = ori_spliner
        self.ee_spliner = ee_spliner

        logger.debug("Initialized %d phases, %d nodes, total time %.3f s",
                     len(self.phases), len(self.nodes), self.get_total_time())

    def build_node_sequence(self, phases, footholds, curr_state, com_motion, timeline, com_offset):
        """
        Returns:
            nodes: one RobotStateCartesian per phase boundary, len(phases) + 1
        """
        first = curr_state.copy()
        first.ee_contact = list(phases[0].contacts)
        nodes = [first]

        foothold_iter = iter(footholds)
        for k, phase in enumerate(phases):
            prev = nodes[-1]
            t = timeline.phase_end(k)

            ang = self._get_node_orientation(com_motion, t, prev.base.ang)
            lin = self._get_horizontal_base(com_motion, com_offset, t, ang.rpy)
            lin.p[2] = curr_state.base.lin.p[2]

            feet = []
            for ee in range(prev.n_ee):
                if phase.contacts[ee]:
                    p = prev.ee_motion[ee].p.copy()
                else:
                    p = self._foothold_to_pos(next(foothold_iter), prev.ee_motion[ee].p)
                feet.append(StateLin3d(p))

            next_phase = phases[k+1] if k+1 < len(phases) else phase
            nodes.append(RobotStateCartesian(
                base=BaseState(lin, ang),
                ee_motion=feet,
                ee_contact=list(next_phase.contacts),
                t_global=t
            ))
        return nodes

    def create_all_splines(self, phases, nodes, lift_height):
        z_spliner, ori_spliner, ee_spliner = [], [], []

        for k, phase in enumerate(phases):
            z_poly, ori, feet = self.build_phase(nodes[k], nodes[k+1], phase, lift_height)
            z_spliner.append(z_poly)
            ori_spliner.append(ori)
            ee_spliner.append(feet)

        return z_spliner, ori_spliner, ee_spliner

    def build_phase(self, from_node, to_node, phase, lift_height):
        T = phase.duration

        from_lin, to_lin = from_node.base.lin, to_node.base.lin
        z_poly = CubicHermitePolynomial(n_dim=1).set_boundary(
            T,
            StateLin3d([from_lin.p[2]], [from_lin.v[2]], [0.0]),
            StateLin3d([to_lin.p[2]], [to_lin.v[2]], [0.0])
        )

        from_ang, to_ang = from_node.base.ang, to_node.base.ang
        ori = CubicHermitePolynomial(n_dim=3).set_boundary(
            T,
            StateLin3d(from_ang.rpy, from_ang.w),
            StateLin3d(to_ang.rpy, to_ang.w)
        )

        feet = []
        for ee in range(from_node.n_ee):
            if phase.contacts[ee]:
                feet.append(ConstantPolynomial(from_node.ee_motion[ee].p, T))
            else:
                swing = SwingPolynomial(lift_height)
                feet.append(swing.set_boundary(T, from_node.ee_motion[ee], to_node.ee_motion[ee]))

        return z_poly, ori, feet

    def build_whole_body_trajectory(self, dt):
        """
        Discretize the whole-body motion

        Args:
            dt: sampling period (s)

        Returns:
            list of RobotStateCartesian, one every dt from the start time up
            to and including the end of the last phase
        """
        trajectory = list(self.iter_whole_body_trajectory(dt))
        logger.debug("Sampled %d states at dt=%.4f", len(trajectory), dt)
        return trajectory

    def iter_whole_body_trajectory(self, dt):
        self._check_initialized()
        for t in self.timeline.sample_times(dt):
            yield self.get_robot_state(float(t))

    def get_robot_state(self, t_global):
        self._check_initialized()
        phase = self.get_phase_id(t_global)
        t_local = self.get_local_phase_time(t_global)

        ori = self.ori_spliner[phase].get_point(t_local)
        ang = StateAng3d(ori.p, ori.v, ori.a)

        lin = self._get_horizontal_base(self.com_motion, self.offset_geom_to_com,
                                        min(t_global, self.timeline.t_end), ang.rpy)
        z = self.z_spliner[phase].get_point(t_local)
        lin.p[2], lin.v[2], lin.a[2] = z.p[0], z.v[0], z.a[0]

        feet = [spliner.get_point(t_local) for spliner in self.ee_spliner[phase]]

        return RobotStateCartesian(
            base=BaseState(lin, ang),
            ee_motion=feet,
            ee_contact=list(self.phases[phase].contacts),
            t_global=t_global
        )

    def get_node_second_phase(self):
        return self.nodes[1]

    def get_total_time(self):
        return self.timeline.total_time

    def get_phase_id(self, t_global):
        return self.timeline.phase_id(t_global)

    def get_local_phase_time(self, t_global):
        return self.timeline.local_time(t_global)

    def get_percent_of_phase(self, t_global):
        return self.timeline.percent_of_phase(t_global)

    @staticmethod
    def _get_horizontal_base(com_motion, com_offset, t_global, rpy):
        """Geometric-center motion in the horizontal plane, zero vertical part"""
        com = com_motion.get_base(t_global)
        offset_w = rpy_to_rotation_matrix(rpy) @ com_offset

        p = com.p - offset_w
        v = com.v.copy()
        a = com.a.copy()
        p[2] = v[2] = a[2] = 0.0
        return StateLin3d(p, v, a)

    @staticmethod
    def _get_node_orientation(com_motion, t_global, prev_ang):
        q = com_motion.get_orientation(t_global)
        if q is None:
            return StateAng3d(prev_ang.rpy.copy())
        return StateAng3d(_wrap_to(quaternion_to_rpy(q), prev_ang.rpy))

    @staticmethod
    def _foothold_to_pos(foothold, prev_pos):
        foothold = np.asarray(foothold, dtype=float)
        if foothold.size == 2:
            return np.array([foothold[0], foothold[1], prev_pos[2]])
        return foothold[:3].copy()

    def _check_initialized(self):
        if self.timeline is None:
            raise RuntimeError("WholeBodyTrajectoryGenerator.init() has not been called")
