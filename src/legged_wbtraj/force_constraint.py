"""
force_constraint.py
Contact Force and Friction Constraint

Constrains the contact force of one end-effector at every force node:
    - unilateral, bounded normal force
    - friction pyramid (regular stance) or directed slip (drift)
Values, bounds and the sparse Jacobian w.r.t. the force and foot-motion
node variables are produced for an external NLP solver.
"""

import logging

import numpy as np
from scipy.sparse import lil_matrix

from .contact_policy import ContactModeTable
from .terrain import Direction, X, Y
from .variables import POS, NodeValueInfo, ee_force_nodes, ee_motion_nodes

logger = logging.getLogger(__name__)


class RowCountMismatchError(RuntimeError):
    """Declared constraint rows differ from the rows actually produced"""


class ForceConstraint:
    """
    Force and friction constraint of one end-effector

    Args:
        terrain: HeightMap providing basis vectors and friction coefficient
        force_limit: maximum normal force (N)
        ee: end-effector id
        ee_class: EndEffectorClass the end-effector belongs to
        nodes_per_phase: force nodes in the first stance phase
        mode_table: ContactModeTable, defaults to the standard tag mapping
    """

    def __init__(self, terrain, force_limit, ee, ee_class, nodes_per_phase, mode_table=None):
        if ee not in ee_class.ee_ids:
            raise ValueError(f"End-effector {ee} is not part of class '{ee_class.name}'")

        self.name = "force-" + ee_force_nodes(ee)
        self.terrain = terrain
        self.fn_max = float(force_limit)
        self.mu = terrain.get_friction_coeff()
        self.ee = ee
        self.ee_class = ee_class
        self.nodes_per_phase = int(nodes_per_phase)
        self.mode_table = mode_table if mode_table is not None else ContactModeTable.from_config()

        self._variables = None
        self._n_rows = None

    def init_variable_depended_quantities(self, variables):
        """
        Bind the variable collection and declare the number of rows

        Args:
            variables: Composite holding ee_force_nodes(ee) and ee_motion_nodes(ee)
        """
        self._variables = variables
        ee_force, ee_motion = self._get_components()

        node_ids = ee_force.get_indices_of_all_nodes()
        if len(ee_motion.get_nodes()) < len(node_ids):
            raise ValueError(
                f"{ee_motion.get_name()} has fewer nodes than {ee_force.get_name()}")

        constraint_count = 0
        for node_id in node_ids:
            tag = ee_force.get_phase(node_id)
            if not self.ee_class.allows(tag):
                raise ValueError(
                    f"Contact mode {tag} not enabled for end-effector class '{self.ee_class.name}'")
            constraint_count += self.mode_table.get_policy(tag).n_rows

        expected = self.ee_class.expected_rows(len(node_ids), self.nodes_per_phase)
        if constraint_count != expected:
            raise RowCountMismatchError(
                f"{self.name}: node schedule yields {constraint_count} rows, "
                f"class '{self.ee_class.name}' declares {expected}")

        self.set_rows(constraint_count)
        logger.debug("%s: %d nodes, %d rows", self.name, len(node_ids), constraint_count)

    def set_rows(self, n_rows):
        self._n_rows = int(n_rows)

    def get_rows(self):
        if self._n_rows is None:
            raise RuntimeError(f"{self.name}: init_variable_depended_quantities() has not been called")
        return self._n_rows

    def get_values(self):
        ee_force, ee_motion = self._get_components()
        force_nodes = ee_force.get_nodes()
        nodes = ee_motion.get_nodes()

        g = []
        for f_node_id, policy in self._iter_policies(ee_force):
            p = nodes[f_node_id].p
            f = force_nodes[f_node_id].p
            basis = self._get_basis(p)
            for row in policy.rows:
                g.append(f @ row.combine(basis, self.mu))

        self._check_row_count(len(g), 'values')
        return np.array(g)

    def get_bounds(self):
        ee_force, _ = self._get_components()

        bounds = []
        for _, policy in self._iter_policies(ee_force):
            bounds += [row.bounds(self.fn_max) for row in policy.rows]

        self._check_row_count(len(bounds), 'bounds')
        return bounds

    def fill_jacobian_block(self, var_set, jac):
        """
        Write the derivatives w.r.t. the variable set var_set into jac

        Variable sets the constraint does not depend on are ignored.
        """
        ee_force, ee_motion = self._get_components()

        if var_set == ee_force.get_name():
            nodes = ee_motion.get_nodes()
            row = 0
            for f_node_id, policy in self._iter_policies(ee_force):
                basis = self._get_basis(nodes[f_node_id].p)
                for dim in range(3):
                    idx = ee_force.get_opt_index(NodeValueInfo(f_node_id, POS, dim))
                    for i, r in enumerate(policy.rows):
                        jac[row + i, idx] = r.combine(basis, self.mu)[dim]
                row += policy.n_rows
            self._check_row_count(row, 'force jacobian')

        if var_set == ee_motion.get_name():
            force_nodes = ee_force.get_nodes()
            nodes = ee_motion.get_nodes()
            row = 0
            for f_node_id, policy in self._iter_policies(ee_force):
                p = nodes[f_node_id].p
                f = force_nodes[f_node_id].p
                # vertical foot position does not move the terrain basis
                for dim in (X, Y):
                    dbasis = {d: self.terrain.get_derivative_of_normalized_basis_wrt(d, dim, p[0], p[1])
                              for d in Direction}
                    idx = ee_motion.get_opt_index(NodeValueInfo(f_node_id, POS, dim))
                    for i, r in enumerate(policy.rows):
                        jac[row + i, idx] = f @ r.combine(dbasis, self.mu)
                row += policy.n_rows
            self._check_row_count(row, 'motion jacobian')

    def get_jacobian(self, var_set):
        """
        Sparse Jacobian block w.r.t. one variable set

        Returns:
            csr_matrix of shape (rows, size of var_set); zero block for
            variable sets this constraint does not depend on
        """
        n_rows = self.get_rows()
        try:
            n_cols = self._variables.get_component(var_set).get_rows()
        except KeyError:
            n_cols = 0
        jac = lil_matrix((n_rows, n_cols))
        self.fill_jacobian_block(var_set, jac)
        return jac.tocsr()

    def _get_components(self):
        if self._variables is None:
            raise RuntimeError(f"{self.name}: init_variable_depended_quantities() has not been called")
        return (self._variables.get_component(ee_force_nodes(self.ee)),
                self._variables.get_component(ee_motion_nodes(self.ee)))

    def _iter_policies(self, ee_force):
        for f_node_id in ee_force.get_indices_of_all_nodes():
            yield f_node_id, self.mode_table.get_policy(ee_force.get_phase(f_node_id))

    def _get_basis(self, p):
        return {d: self.terrain.get_normalized_basis(d, p[0], p[1]) for d in Direction}

    def _check_row_count(self, n_written, what):
        if n_written != self.get_rows():
            raise RowCountMismatchError(
                f"{self.name}: wrote {n_written} {what} rows, declared {self.get_rows()}")
