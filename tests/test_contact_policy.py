import numpy as np
import pytest

from legged_wbtraj.contact_policy import (
    BOUND_GREATER_ZERO,
    BOUND_SMALLER_ZERO,
    BOUND_ZERO,
    DRIFT,
    PYRAMID,
    Bounds,
    ContactModeTable,
    EndEffectorClass,
)
from legged_wbtraj.terrain import Direction


def test_default_mode_table():
    table = ContactModeTable.from_config()

    for tag in (0, 1, 2, 3, 5):
        assert table.get_policy(tag) is PYRAMID
    assert table.get_policy(4) is DRIFT
    assert table.tags() == [0, 1, 2, 3, 4, 5]

    with pytest.raises(ValueError):
        table.get_policy(7)


def test_invalid_mode_config():
    with pytest.raises(ValueError):
        ContactModeTable.from_config({'pyramid': [0, 1], 'drift': [1]})
    with pytest.raises(ValueError):
        ContactModeTable.from_config({'rolling': [0]})


def test_policy_bounds():
    assert PYRAMID.n_rows == 5
    assert DRIFT.n_rows == 3

    assert [r.bounds(100.0) for r in PYRAMID.rows] == [
        Bounds(0.0, 100.0), BOUND_SMALLER_ZERO, BOUND_GREATER_ZERO, BOUND_SMALLER_ZERO, BOUND_GREATER_ZERO]
    assert [r.bounds(100.0) for r in DRIFT.rows] == [Bounds(0.0, 100.0), BOUND_ZERO, BOUND_ZERO]


def test_row_directions():
    n = np.array([0.0, 0.0, 1.0])
    t1 = np.array([1.0, 0.0, 0.0])
    t2 = np.array([0.0, 1.0, 0.0])
    basis = {Direction.NORMAL: n, Direction.TANGENT1: t1, Direction.TANGENT2: t2}

    directions = [r.combine(basis, 0.5) for r in PYRAMID.rows]
    np.testing.assert_allclose(directions, [n, t1 - 0.5*n, t1 + 0.5*n, t2 - 0.5*n, t2 + 0.5*n])

    directions = [r.combine(basis, 0.5) for r in DRIFT.rows]
    np.testing.assert_allclose(directions, [n, t1 - 0.5*n, t2 - 0.5*n])


def test_end_effector_class_row_formulas():
    front = EndEffectorClass('front', (0, 1), 'per_node', (0, 1, 2, 3, 5))
    hind = EndEffectorClass('hind', (2, 3), 'drift', (0, 1, 2, 3, 4, 5))

    assert front.expected_rows(7, 4) == 35
    # two pyramid phases share a node: 7 pyramid nodes, 3 drift nodes
    assert hind.expected_rows(10, 4) == 7*5 + 3*3
    assert not front.allows(4)
    assert hind.allows(4)

    with pytest.raises(ValueError):
        EndEffectorClass('odd', (0,), 'quadratic', (0,))
