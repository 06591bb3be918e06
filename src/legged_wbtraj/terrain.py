"""
terrain.py
Terrain Height Maps

Terrain is described by a height h(x, y) written as a CasADi expression.
The terrain basis (normal and two tangents) and its exact derivatives with
respect to the horizontal foot position are generated symbolically and
compiled once per instance.
"""

import logging
from enum import IntEnum

import numpy as np
import casadi as ca

logger = logging.getLogger(__name__)


class Direction(IntEnum):
    NORMAL = 0
    TANGENT1 = 1
    TANGENT2 = 2


# horizontal dimensions the basis can be differentiated by
X = 0
Y = 1


class HeightMap:
    """
    Terrain model with terrain-aligned basis vectors

    Basis (unnormalized, then normalized):
        n  = (-h_x, -h_y, 1)
        t1 = (1, 0, h_x)
        t2 = (0, 1, h_y)
    """

    def __init__(self, friction_coeff=0.5):
        self.friction_coeff = float(friction_coeff)

        x = ca.SX.sym('x')
        y = ca.SX.sym('y')
        h = self.height_expression(x, y)
        h_x = ca.jacobian(h, x)
        h_y = ca.jacobian(h, y)

        basis = {
            Direction.NORMAL: ca.vertcat(-h_x, -h_y, 1),
            Direction.TANGENT1: ca.vertcat(1, 0, h_x),
            Direction.TANGENT2: ca.vertcat(0, 1, h_y),
        }

        self._height_fn = ca.Function('height', [x, y], [h])
        self._basis_fn = {}
        self._basis_derivative_fn = {}
        for direction, vec in basis.items():
            unit = vec / ca.norm_2(vec)
            self._basis_fn[direction] = ca.Function(f'basis_{direction.name.lower()}', [x, y], [unit])
            self._basis_derivative_fn[direction] = ca.Function(
                f'dbasis_{direction.name.lower()}', [x, y],
                [ca.jacobian(unit, x), ca.jacobian(unit, y)]
            )

    def height_expression(self, x, y):
        """Terrain height as a CasADi expression in the symbols x, y"""
        raise NotImplementedError

    def get_height(self, x, y):
        return float(self._height_fn(x, y))

    def get_normalized_basis(self, direction, x, y):
        """Unit basis vector at the horizontal position (x, y)"""
        return self._basis_fn[direction](x, y).full().ravel()

    def get_derivative_of_normalized_basis_wrt(self, direction, dim, x, y):
        """
        Derivative of a unit basis vector w.r.t. a horizontal coordinate

        Args:
            direction: Direction of the basis vector
            dim: X or Y
            x, y: horizontal position

        Returns:
            (3,) derivative of the basis vector
        """
        if dim not in (X, Y):
            raise ValueError(f"Basis can only be differentiated by X or Y, got {dim}")
        d_dx, d_dy = self._basis_derivative_fn[direction](x, y)
        return (d_dx if dim == X else d_dy).full().ravel()

    def get_friction_coeff(self):
        return self.friction_coeff


class FlatGround(HeightMap):

    def __init__(self, height=0.0, friction_coeff=0.5):
        self.height = float(height)
        super().__init__(friction_coeff)

    def height_expression(self, x, y):
        return self.height + 0*x + 0*y


class Slope(HeightMap):
    """Flat until x_start, then rising with the given slope in x"""

    def __init__(self, slope=0.3, x_start=0.5, friction_coeff=0.5):
        self.slope = float(slope)
        self.x_start = float(x_start)
        super().__init__(friction_coeff)

    def height_expression(self, x, y):
        return ca.if_else(x > self.x_start, self.slope*(x - self.x_start), 0*x) + 0*y


class Sinusoid(HeightMap):
    """Smooth rolling terrain varying in both horizontal directions"""

    def __init__(self, amplitude=0.05, wavelength=1.0, friction_coeff=0.5):
        self.amplitude = float(amplitude)
        self.wavelength = float(wavelength)
        super().__init__(friction_coeff)

    def height_expression(self, x, y):
        k = 2*np.pi/self.wavelength
        return self.amplitude*ca.sin(k*x)*ca.cos(k*y)


_TERRAINS = {
    'flat': FlatGround,
    'slope': Slope,
    'sinusoid': Sinusoid,
}


def create_terrain(name, friction_coeff=0.5, **kwargs):
    """Build a terrain by name ('flat', 'slope', 'sinusoid')"""
    if name not in _TERRAINS:
        raise ValueError(f"Unknown terrain '{name}', expected one of {sorted(_TERRAINS)}")
    logger.debug("Creating terrain %s with mu=%.3f", name, friction_coeff)
    return _TERRAINS[name](friction_coeff=friction_coeff, **kwargs)
