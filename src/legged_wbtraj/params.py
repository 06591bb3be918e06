"""
params.py
Robot and Contact Parameters

Loads the quadruped description, swing and force-limit settings and the
contact-mode/end-effector-class policy records from a YAML file.
"""

import logging
from pathlib import Path

import numpy as np
import yaml

from .contact_policy import ContactModeTable, EndEffectorClass
from .state import BaseState, RobotStateCartesian, StateLin3d
from .terrain import create_terrain

logger = logging.getLogger(__name__)

REQUIRED_KEYS = (
    'n_ee', 'nominal_stance', 'base_height', 'lift_height', 'com_offset',
    'friction_coefficient', 'max_normal_force',
    'force_polynomials_per_stance_phase', 'ee_classes',
)


class RobotParams:
    """
    Quadruped parameters

    Attributes:
        n_ee: number of end-effectors
        ee_names: end-effector names
        nominal_stance: (n_ee, 3) nominal foot positions, base frame (m)
        base_height: nominal base height above ground (m)
        lift_height: swing apex above the higher foothold (m)
        com_offset: geometric center to CoM, base frame (m)
        friction_coef: ground friction coefficient
        max_normal_force: upper bound on the contact normal force (N)
        force_polys_per_stance_phase: force polynomials in one stance phase
    """

    def __init__(self, config_path=None):
        """Initialize from a config file, the packaged default if None"""

        if config_path is None:
            config_path = Path(__file__).parent / "config" / "robot_params.yaml"

        with open(config_path, 'r') as f:
            params = yaml.safe_load(f)

        missing = [k for k in REQUIRED_KEYS if k not in params]
        if missing:
            raise ValueError(f"Config {config_path} is missing keys: {missing}")

        # Geometry
        self.n_ee = int(params['n_ee'])
        self.ee_names = params.get('ee_names', [f"ee{i}" for i in range(self.n_ee)])
        self.nominal_stance = np.asarray(params['nominal_stance'], dtype=float)
        self.base_height = float(params['base_height'])
        self.com_offset = np.asarray(params['com_offset'], dtype=float)

        if self.nominal_stance.shape != (self.n_ee, 3):
            raise ValueError(f"nominal_stance shape {self.nominal_stance.shape} != ({self.n_ee}, 3)")

        # Swing
        self.lift_height = float(params['lift_height'])

        # Contact properties
        self.friction_coef = float(params['friction_coefficient'])
        self.max_normal_force = float(params['max_normal_force'])
        self.force_polys_per_stance_phase = int(params['force_polynomials_per_stance_phase'])

        self.terrain_params = dict(params.get('terrain', {'name': 'flat'}))
        self.mode_table = ContactModeTable.from_config(params.get('contact_modes'))

        # End-effector classes, every end-effector in exactly one
        self.ee_classes = []
        for name, cls in params['ee_classes'].items():
            self.ee_classes.append(EndEffectorClass(
                name=name,
                ee_ids=tuple(int(ee) for ee in cls['ee']),
                row_formula=cls['row_formula'],
                enabled_modes=tuple(int(m) for m in cls['enabled_modes'])
            ))

        assigned = sorted(ee for cls in self.ee_classes for ee in cls.ee_ids)
        if assigned != list(range(self.n_ee)):
            raise ValueError(f"ee_classes must assign each of {self.n_ee} end-effectors once, got {assigned}")

        logger.debug("Loaded %r from %s", self, config_path)

    @property
    def nodes_per_phase(self):
        """Force nodes in the first stance phase"""
        return self.force_polys_per_stance_phase + 1

    def get_ee_class(self, ee):
        for cls in self.ee_classes:
            if ee in cls.ee_ids:
                return cls
        raise ValueError(f"No end-effector class contains ee {ee}")

    def create_terrain(self):
        kwargs = dict(self.terrain_params)
        name = kwargs.pop('name')
        return create_terrain(name, friction_coeff=self.friction_coef, **kwargs)

    def initial_state(self, base_xy=(0.0, 0.0), t_global=0.0):
        """Robot standing still at the nominal stance, feet on z=0"""
        base = BaseState(StateLin3d([base_xy[0], base_xy[1], self.base_height]))

        feet = []
        for ee in range(self.n_ee):
            p = base.lin.p + self.nominal_stance[ee]
            p[2] = 0.0
            feet.append(StateLin3d(p))

        return RobotStateCartesian(base, feet, [True] * self.n_ee, t_global=t_global)

    def __repr__(self):
        return (f"RobotParams(n_ee={self.n_ee}, mu={self.friction_coef}, "
                f"fn_max={self.max_normal_force}N, lift_height={self.lift_height}m)")
