"""
variables.py
Phase-Based Node Variables

Knot values of the piecewise-polynomial optimization variables (contact
force, foot motion). Every node stores a position and a velocity and is
tagged with the contact-mode of the phase it belongs to. The optimizer owns
the values; constraints only read them through this interface.
"""

import logging
from dataclasses import dataclass, field

import numpy as np

logger = logging.getLogger(__name__)

# derivative kinds stored per node
POS = 0
VEL = 1
N_DERIVATIVES = 2


def ee_force_nodes(ee):
    return f"ee-force_{ee}"


def ee_motion_nodes(ee):
    return f"ee-motion_{ee}"


@dataclass
class Node:
    p: np.ndarray = field(default_factory=lambda: np.zeros(3))
    v: np.ndarray = field(default_factory=lambda: np.zeros(3))


@dataclass(frozen=True)
class NodeValueInfo:
    id: int
    deriv: int
    dim: int


class NodesVariablesPhaseBased:
    """
    Nodes of one end-effector variable, laid out phase by phase

    The first phase contributes nodes_per_phase nodes, every later phase
    nodes_per_phase - 1: consecutive phases share their boundary node, which
    keeps the tag of the earlier phase.

    Args:
        name: variable set name, e.g. ee_force_nodes(0)
        phase_tags: contact-mode tag of every phase
        nodes_per_phase: nodes in the first phase (polynomials per phase + 1)
        n_dim: spatial dimension of each node
    """

    def __init__(self, name, phase_tags, nodes_per_phase, n_dim=3):
        if nodes_per_phase < 2:
            raise ValueError(f"Need at least 2 nodes per phase, got {nodes_per_phase}")
        if len(phase_tags) == 0:
            raise ValueError("Need at least one phase")

        self.name = name
        self.n_dim = n_dim
        self.nodes_per_phase = int(nodes_per_phase)
        self.phase_tags = [int(tag) for tag in phase_tags]

        self._node_tags = []
        for k, tag in enumerate(self.phase_tags):
            n_new = self.nodes_per_phase if k == 0 else self.nodes_per_phase - 1
            self._node_tags += [tag] * n_new

        self.nodes = [Node(np.zeros(n_dim), np.zeros(n_dim)) for _ in self._node_tags]
        logger.debug("%s: %d phases, %d nodes", name, len(self.phase_tags), len(self.nodes))

    def get_name(self):
        return self.name

    def get_nodes(self):
        return self.nodes

    def get_indices_of_all_nodes(self):
        return list(range(len(self.nodes)))

    def get_phase(self, node_id):
        """Contact-mode tag of the phase the node belongs to"""
        return self._node_tags[node_id]

    def get_opt_index(self, info):
        return info.id * N_DERIVATIVES * self.n_dim + info.deriv * self.n_dim + info.dim

    def get_rows(self):
        return len(self.nodes) * N_DERIVATIVES * self.n_dim

    def get_values(self):
        x = np.zeros(self.get_rows())
        for node_id, node in enumerate(self.nodes):
            for dim in range(self.n_dim):
                x[self.get_opt_index(NodeValueInfo(node_id, POS, dim))] = node.p[dim]
                x[self.get_opt_index(NodeValueInfo(node_id, VEL, dim))] = node.v[dim]
        return x

    def set_variables(self, x):
        x = np.asarray(x, dtype=float)
        if x.size != self.get_rows():
            raise ValueError(f"{self.name}: expected {self.get_rows()} values, got {x.size}")
        for node_id, node in enumerate(self.nodes):
            for dim in range(self.n_dim):
                node.p[dim] = x[self.get_opt_index(NodeValueInfo(node_id, POS, dim))]
                node.v[dim] = x[self.get_opt_index(NodeValueInfo(node_id, VEL, dim))]

    def set_node_position(self, node_id, p):
        self.nodes[node_id].p = np.asarray(p, dtype=float).copy()

    def set_all_positions(self, p):
        for node_id in self.get_indices_of_all_nodes():
            self.set_node_position(node_id, p)


class Composite:
    """Named collection of variable sets"""

    def __init__(self, components=()):
        self._components = {}
        for c in components:
            self.add_component(c)

    def add_component(self, component):
        self._components[component.get_name()] = component

    def get_component(self, name):
        if name not in self._components:
            raise KeyError(f"No variable set named '{name}'")
        return self._components[name]

    def get_names(self):
        return list(self._components)
