"""
Legged Robot Whole-Body Trajectory Package
"""

__version__ = "1.0.0"

from .params import RobotParams
from .state import (
    BaseState,
    MotionPhase,
    RobotStateCartesian,
    StateAng3d,
    StateLin3d,
)
from .timeline import PhaseTimeline
from .com_motion import ComMotion, LinearComMotion, SplineComMotion
from .wb_traj_generator import WholeBodyTrajectoryGenerator
from .terrain import Direction, HeightMap, FlatGround, Slope, Sinusoid, create_terrain
from .variables import Composite, NodesVariablesPhaseBased, ee_force_nodes, ee_motion_nodes
from .contact_policy import ContactModeTable, EndEffectorClass, PYRAMID, DRIFT
from .force_constraint import ForceConstraint, RowCountMismatchError
from .analysis import TrajectoryValidator, ConstraintValidator

__all__ = [
    'RobotParams',
    'BaseState',
    'MotionPhase',
    'RobotStateCartesian',
    'StateAng3d',
    'StateLin3d',
    'PhaseTimeline',
    'ComMotion',
    'LinearComMotion',
    'SplineComMotion',
    'WholeBodyTrajectoryGenerator',
    'Direction',
    'HeightMap',
    'FlatGround',
    'Slope',
    'Sinusoid',
    'create_terrain',
    'Composite',
    'NodesVariablesPhaseBased',
    'ee_force_nodes',
    'ee_motion_nodes',
    'ContactModeTable',
    'EndEffectorClass',
    'PYRAMID',
    'DRIFT',
    'ForceConstraint',
    'RowCountMismatchError',
    'TrajectoryValidator',
    'ConstraintValidator',
]
