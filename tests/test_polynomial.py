import numpy as np
import pytest

from legged_wbtraj.polynomial import CubicHermitePolynomial, ConstantPolynomial, SwingPolynomial
from legged_wbtraj.state import StateLin3d


def test_cubic_matches_boundary_values():
    start = StateLin3d([0.0, 1.0, 2.0], [1.0, 0.0, -1.0])
    end = StateLin3d([1.0, 1.0, 0.0], [0.0, 0.0, 0.0])
    poly = CubicHermitePolynomial().set_boundary(2.0, start, end)

    p0 = poly.get_point(0.0)
    p1 = poly.get_point(2.0)
    np.testing.assert_allclose(p0.p, start.p)
    np.testing.assert_allclose(p0.v, start.v)
    np.testing.assert_allclose(p1.p, end.p, atol=1e-12)
    np.testing.assert_allclose(p1.v, end.v, atol=1e-12)

    # evaluation is clamped to the duration
    np.testing.assert_allclose(poly.get_point(3.0).p, end.p, atol=1e-12)


def test_cubic_rejects_zero_duration():
    with pytest.raises(ValueError):
        CubicHermitePolynomial().set_boundary(0.0, StateLin3d(), StateLin3d())


def test_constant_polynomial_holds_position():
    poly = ConstantPolynomial([0.3, 0.2, 0.0], 1.0)
    point = poly.get_point(0.7)

    np.testing.assert_allclose(point.p, [0.3, 0.2, 0.0])
    np.testing.assert_allclose(point.v, 0.0)
    np.testing.assert_allclose(point.a, 0.0)


def test_swing_reaches_lift_height_at_midpoint():
    start = StateLin3d([0.0, 0.0, 0.0])
    end = StateLin3d([0.2, 0.1, 0.0])
    swing = SwingPolynomial(lift_height=0.1).set_boundary(1.0, start, end)

    mid = swing.get_point(0.5)
    assert mid.p[2] == pytest.approx(0.1)
    assert mid.v[2] == pytest.approx(0.0, abs=1e-12)
    np.testing.assert_allclose(mid.p[:2], [0.1, 0.05])

    np.testing.assert_allclose(swing.get_point(0.0).p, start.p, atol=1e-12)
    np.testing.assert_allclose(swing.get_point(1.0).p, end.p, atol=1e-12)
    np.testing.assert_allclose(swing.get_point(1.0).v, 0.0, atol=1e-12)


def test_swing_apex_above_higher_foothold():
    start = StateLin3d([0.0, 0.0, 0.0])
    end = StateLin3d([0.2, 0.0, 0.05])
    swing = SwingPolynomial(lift_height=0.1).set_boundary(0.8, start, end)

    assert swing.get_point(0.4).p[2] == pytest.approx(0.15)
    assert swing.get_point(0.8).p[2] == pytest.approx(0.05)
