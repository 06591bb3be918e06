"""
contact_policy.py
Contact-Mode Row Policies

Each contact-mode tag maps to a row policy: an ordered list of rows, every
row describing its value direction, its bounds and (through the same
record) its Jacobian. Values, bounds and Jacobians of the force constraint
are all generated by iterating these rows.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .terrain import Direction

INF = np.inf


@dataclass(frozen=True)
class Bounds:
    lower: float
    upper: float


BOUND_ZERO = Bounds(0.0, 0.0)
BOUND_SMALLER_ZERO = Bounds(-INF, 0.0)
BOUND_GREATER_ZERO = Bounds(0.0, INF)
NO_BOUND = Bounds(-INF, INF)


@dataclass(frozen=True)
class FrictionRow:
    """
    One constraint row: value = f . (b + mu_sign * mu * n)

    b is the terrain normal if tangent is None (then mu_sign is 0), else the
    given tangent. bound is one of 'normal', 'smaller_zero',
    'greater_zero', 'zero'.
    """
    tangent: Optional[Direction]
    mu_sign: int
    bound: str

    def combine(self, vectors, mu):
        """
        Linear combination of basis vectors (or of their derivatives)

        Args:
            vectors: dict Direction -> (3,) vector
            mu: friction coefficient

        Returns:
            (3,) direction whose dot product with the force is the row value
        """
        n = vectors[Direction.NORMAL]
        if self.tangent is None:
            return n
        return vectors[self.tangent] + self.mu_sign * mu * n

    def bounds(self, fn_max):
        if self.bound == 'normal':
            return Bounds(0.0, fn_max)
        if self.bound == 'smaller_zero':
            return BOUND_SMALLER_ZERO
        if self.bound == 'greater_zero':
            return BOUND_GREATER_ZERO
        if self.bound == 'zero':
            return BOUND_ZERO
        raise ValueError(f"Unknown bound kind '{self.bound}'")


@dataclass(frozen=True)
class RowPolicy:
    name: str
    rows: Tuple[FrictionRow, ...]

    @property
    def n_rows(self):
        return len(self.rows)


UNILATERAL_ROW = FrictionRow(None, 0, 'normal')

# linearized Coulomb cone: |f_t1|, |f_t2| <= mu * f_n
PYRAMID = RowPolicy('pyramid', (
    UNILATERAL_ROW,
    FrictionRow(Direction.TANGENT1, -1, 'smaller_zero'),
    FrictionRow(Direction.TANGENT1, +1, 'greater_zero'),
    FrictionRow(Direction.TANGENT2, -1, 'smaller_zero'),
    FrictionRow(Direction.TANGENT2, +1, 'greater_zero'),
))

# directed slip: f_t1 = f_t2 = mu * f_n
DRIFT = RowPolicy('drift', (
    UNILATERAL_ROW,
    FrictionRow(Direction.TANGENT1, -1, 'zero'),
    FrictionRow(Direction.TANGENT2, -1, 'zero'),
))

POLICIES = {p.name: p for p in (PYRAMID, DRIFT)}

DEFAULT_CONTACT_MODES = {
    'pyramid': [0, 1, 2, 3, 5],
    'drift': [4],
}


class ContactModeTable:
    """Contact-mode tag -> RowPolicy"""

    def __init__(self, mapping):
        self._mapping = dict(mapping)

    @classmethod
    def from_config(cls, modes=None):
        """
        Args:
            modes: dict policy name -> list of tags, e.g. {'drift': [4]}
        """
        if modes is None:
            modes = DEFAULT_CONTACT_MODES
        mapping = {}
        for policy_name, tags in modes.items():
            if policy_name not in POLICIES:
                raise ValueError(f"Unknown row policy '{policy_name}', expected one of {sorted(POLICIES)}")
            for tag in tags:
                if tag in mapping:
                    raise ValueError(f"Contact mode {tag} assigned to more than one policy")
                mapping[int(tag)] = POLICIES[policy_name]
        return cls(mapping)

    def get_policy(self, tag):
        if tag not in self._mapping:
            raise ValueError(f"Unknown contact mode tag {tag}")
        return self._mapping[tag]

    def tags(self):
        return sorted(self._mapping)


def _rows_per_node(n_nodes, nodes_per_phase):
    return n_nodes * PYRAMID.n_rows


def _rows_with_drift(n_nodes, nodes_per_phase):
    # two pyramid phases sharing a boundary node, then a drift phase
    return (2*nodes_per_phase - 1) * PYRAMID.n_rows + (nodes_per_phase - 1) * DRIFT.n_rows


ROW_FORMULAS = {
    'per_node': _rows_per_node,
    'drift': _rows_with_drift,
}


@dataclass(frozen=True)
class EndEffectorClass:
    """
    Constraint policy shared by a group of end-effectors

    Attributes:
        name: class name, e.g. 'front'
        ee_ids: end-effectors belonging to the class
        row_formula: key of ROW_FORMULAS giving the expected row count
        enabled_modes: contact-mode tags the class may be scheduled with
    """
    name: str
    ee_ids: Tuple[int, ...]
    row_formula: str
    enabled_modes: Tuple[int, ...]

    def __post_init__(self):
        if self.row_formula not in ROW_FORMULAS:
            raise ValueError(f"Unknown row formula '{self.row_formula}', expected one of {sorted(ROW_FORMULAS)}")

    def expected_rows(self, n_nodes, nodes_per_phase):
        return ROW_FORMULAS[self.row_formula](n_nodes, nodes_per_phase)

    def allows(self, tag):
        return tag in self.enabled_modes
