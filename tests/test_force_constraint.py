import numpy as np
import pytest

from legged_wbtraj.analysis import ConstraintValidator
from legged_wbtraj.contact_policy import BOUND_ZERO, EndEffectorClass
from legged_wbtraj.force_constraint import ForceConstraint, RowCountMismatchError
from legged_wbtraj.terrain import FlatGround, Sinusoid
from legged_wbtraj.variables import Composite, NodesVariablesPhaseBased, ee_force_nodes, ee_motion_nodes

NODES_PER_PHASE = 4
FRONT = EndEffectorClass('front', (0, 1), 'per_node', (0, 1, 2, 3, 5))
HIND = EndEffectorClass('hind', (2, 3), 'drift', (0, 1, 2, 3, 4, 5))


def build(ee, ee_class, tags, force=(0.0, 0.0, 100.0), foot=(0.3, 0.2, 0.0), terrain=None):
    terrain = terrain if terrain is not None else FlatGround(friction_coeff=0.5)

    force_nodes = NodesVariablesPhaseBased(ee_force_nodes(ee), tags, NODES_PER_PHASE)
    motion_nodes = NodesVariablesPhaseBased(ee_motion_nodes(ee), tags, NODES_PER_PHASE)
    force_nodes.set_all_positions(force)
    motion_nodes.set_all_positions(foot)
    variables = Composite([force_nodes, motion_nodes])

    constraint = ForceConstraint(terrain, 1000.0, ee, ee_class, NODES_PER_PHASE)
    constraint.init_variable_depended_quantities(variables)
    return constraint, variables


def test_row_count_matches_values_and_bounds():
    constraint, _ = build(0, FRONT, [0, 2])
    assert constraint.get_rows() == 7 * 5
    assert len(constraint.get_values()) == constraint.get_rows()
    assert len(constraint.get_bounds()) == constraint.get_rows()

    constraint, _ = build(2, HIND, [0, 2, 4])
    assert constraint.get_rows() == (2*NODES_PER_PHASE - 1)*5 + (NODES_PER_PHASE - 1)*3
    assert len(constraint.get_values()) == constraint.get_rows()
    assert len(constraint.get_bounds()) == constraint.get_rows()
    assert constraint.name == "force-ee-force_2"


def test_schedule_disagreeing_with_class_formula():
    with pytest.raises(RowCountMismatchError):
        build(2, HIND, [0, 4])


def test_mode_not_enabled_for_class():
    with pytest.raises(ValueError):
        build(0, FRONT, [0, 4])


def test_end_effector_outside_class():
    with pytest.raises(ValueError):
        ForceConstraint(FlatGround(), 1000.0, 2, FRONT, NODES_PER_PHASE)


def test_evaluation_before_init():
    constraint = ForceConstraint(FlatGround(), 1000.0, 0, FRONT, NODES_PER_PHASE)
    with pytest.raises(RuntimeError):
        constraint.get_rows()
    with pytest.raises(RuntimeError):
        constraint.get_values()
    with pytest.raises(RuntimeError):
        constraint.get_bounds()
    with pytest.raises(RuntimeError):
        constraint.get_jacobian(ee_force_nodes(0))


def test_negative_normal_force_violates_bound():
    constraint, _ = build(0, FRONT, [0, 2], force=(0.0, 0.0, -10.0))

    values = constraint.get_values()
    bounds = constraint.get_bounds()
    assert values[0] == pytest.approx(-10.0)
    assert bounds[0].lower == 0.0
    assert bounds[0].upper == 1000.0
    assert 0 in ConstraintValidator.check_bounds(constraint)


def test_force_inside_cone_satisfies_bounds():
    constraint, _ = build(0, FRONT, [0, 2], force=(10.0, -20.0, 100.0))
    assert ConstraintValidator.check_bounds(constraint) == []


def test_force_on_cone_boundary():
    constraint, _ = build(0, FRONT, [0, 2], force=(5.0, 5.0, 10.0))
    values = constraint.get_values()
    assert values[1] == 0.0
    assert values[3] == 0.0
    assert values[2] == pytest.approx(10.0)
    assert ConstraintValidator.check_bounds(constraint) == []

    constraint, _ = build(0, FRONT, [0, 2], force=(-5.0, -5.0, 10.0))
    values = constraint.get_values()
    assert values[2] == 0.0
    assert values[4] == 0.0

    # outside the cone along tangent 1
    constraint, _ = build(0, FRONT, [0, 2], force=(6.0, 0.0, 10.0))
    assert 1 in ConstraintValidator.check_bounds(constraint)


def test_drift_rows_are_equalities():
    first_drift_row = (2*NODES_PER_PHASE - 1) * 5

    constraint, _ = build(2, HIND, [0, 2, 4], force=(5.0, 5.0, 10.0))
    values = constraint.get_values()
    bounds = constraint.get_bounds()
    assert values[first_drift_row + 1] == 0.0
    assert values[first_drift_row + 2] == 0.0
    assert bounds[first_drift_row + 1] == BOUND_ZERO
    assert bounds[first_drift_row + 2] == BOUND_ZERO
    assert ConstraintValidator.check_bounds(constraint) == []

    # any tangential force inside the cone breaks the equality
    constraint, _ = build(2, HIND, [0, 2, 4], force=(4.0, 5.0, 10.0))
    values = constraint.get_values()
    assert values[first_drift_row + 1] == pytest.approx(-1.0)
    assert values[first_drift_row + 2] == pytest.approx(0.0)
    assert first_drift_row + 1 in ConstraintValidator.check_bounds(constraint)


def test_force_jacobian_on_flat_ground():
    constraint, variables = build(0, FRONT, [0, 2])
    jac = constraint.get_jacobian(ee_force_nodes(0)).toarray()

    assert jac.shape == (35, variables.get_component(ee_force_nodes(0)).get_rows())
    # first node, x/y/z columns of the position
    np.testing.assert_allclose(jac[0:5, 0], [0.0, 1.0, 1.0, 0.0, 0.0])
    np.testing.assert_allclose(jac[0:5, 1], [0.0, 0.0, 0.0, 1.0, 1.0])
    np.testing.assert_allclose(jac[0:5, 2], [1.0, -0.5, 0.5, -0.5, 0.5])
    # velocity columns and other nodes' columns stay empty
    np.testing.assert_allclose(jac[0:5, 3:], 0.0)

    motion_jac = constraint.get_jacobian(ee_motion_nodes(0)).toarray()
    np.testing.assert_allclose(motion_jac, 0.0)


def test_jacobians_match_finite_differences_on_rough_terrain():
    terrain = Sinusoid(amplitude=0.08, wavelength=0.9, friction_coeff=0.6)
    constraint, variables = build(3, HIND, [0, 1, 4], terrain=terrain)

    rng = np.random.default_rng(0)
    force = variables.get_component(ee_force_nodes(3))
    motion = variables.get_component(ee_motion_nodes(3))
    for node_id in force.get_indices_of_all_nodes():
        force.set_node_position(node_id, rng.uniform([-30, -30, 50], [30, 30, 200]))
        motion.set_node_position(node_id, rng.uniform([-0.5, -0.5, 0.0], [0.5, 0.5, 0.1]))

    assert ConstraintValidator.check_jacobian(constraint, variables, ee_force_nodes(3)) < 1e-5
    assert ConstraintValidator.check_jacobian(constraint, variables, ee_motion_nodes(3)) < 1e-5

    # vertical foot position and velocities do not enter the constraint
    motion_jac = constraint.get_jacobian(ee_motion_nodes(3)).toarray()
    assert motion_jac.any()
    np.testing.assert_allclose(motion_jac[:, 2::3], 0.0)


def test_unrelated_variable_sets_are_ignored():
    constraint, variables = build(0, FRONT, [0, 2])

    jac = constraint.get_jacobian("base-lin")
    assert jac.shape == (35, 0)
    assert jac.nnz == 0

    other = NodesVariablesPhaseBased(ee_force_nodes(1), [0, 2], NODES_PER_PHASE)
    variables.add_component(other)
    jac = constraint.get_jacobian(ee_force_nodes(1))
    assert jac.shape == (35, other.get_rows())
    assert jac.nnz == 0


def test_values_follow_replaced_variable_sets():
    constraint, variables = build(0, FRONT, [0, 2], force=(0.0, 0.0, 100.0))
    assert constraint.get_values()[0] == pytest.approx(100.0)

    replacement = NodesVariablesPhaseBased(ee_force_nodes(0), [0, 2], NODES_PER_PHASE)
    replacement.set_all_positions([0.0, 0.0, 42.0])
    variables.add_component(replacement)

    assert constraint.get_values()[0] == pytest.approx(42.0)
