#!/usr/bin/env python
"""Random bath geometries and dipolar couplings.

The central spin sits at the origin. Bath spins are scattered around
it with a number density `density * concentration`, never closer than
the host-site spacing `a = density ** (-1 / dim)` (except for the
`UNIFORM` geometry, which has no exclusion).

Geometries:
        - `Geometry.SPHERICAL`: uniform in the shell `a < r < R`.
        - `Geometry.CUBIC`: uniform in a cube of side `L` with the
          central cube of side `a` removed.
        - `Geometry.UNIFORM`: uniform in a cube, no exclusion.

`R` and `L` are chosen such that the sampling region holds `count`
spins at the bath density.

The coupling of bath spin `j` to the central spin is the secular
dipolar term in natural units

.. math::
    D_j = \\frac{3 \\cos^2 \\theta_j - 1}{r_j^3},

where :math:`\\theta_j` is the angle between :math:`\\vec{r}_j` and the
quantisation axis `z0`.
"""

import enum

import numpy as np
from scipy.special import gamma

from .utils import normalize, spherical_to_cartesian


class Geometry(enum.Enum):
    SPHERICAL = "spherical"
    CUBIC = "cubic"
    UNIFORM = "uniform"


def _check_parameters(dim: int, count: int, density: float, concentration: float):
    if dim not in (1, 2, 3):
        raise ValueError("Dimension `dim` needs to be 1, 2 or 3!")
    if count < 1:
        raise ValueError("Number of bath spins `count` needs to be positive!")
    if density <= 0:
        raise ValueError("Value of `density` needs to be positive!")
    if not 0 < concentration <= 1:
        raise ValueError("Value of `concentration` needs to be in (0, 1]!")


def _unit_ball_volume(dim: int) -> float:
    return np.pi ** (dim / 2) / gamma(dim / 2 + 1)


def _random_directions(dim: int, count: int, rng: np.random.Generator) -> np.ndarray:
    if dim == 1:
        return rng.choice([-1.0, 1.0], size=(count, 1))
    phi = 2 * np.pi * rng.random(count)
    if dim == 2:
        return spherical_to_cartesian(np.full(count, np.pi / 2), phi)[:2].T
    theta = np.arccos(1 - 2 * rng.random(count))
    return spherical_to_cartesian(theta, phi).T


def _spherical_shell(dim, count, a, n_bath, rng):
    volume = count / n_bath
    R_dim = a**dim + volume / _unit_ball_volume(dim)
    u = rng.random(count)
    r = (a**dim + u * (R_dim - a**dim)) ** (1 / dim)
    return r[:, None] * _random_directions(dim, count, rng)


def _cubic_shell(dim, count, a, n_bath, rng):
    L = (a**dim + count / n_bath) ** (1 / dim)
    positions = np.empty((0, dim))
    while len(positions) < count:
        trial = rng.uniform(-L / 2, L / 2, size=(count, dim))
        outside = np.max(np.abs(trial), axis=1) > a / 2
        positions = np.vstack([positions, trial[outside]])
    return positions[:count]


def _uniform_box(dim, count, n_bath, rng):
    L = (count / n_bath) ** (1 / dim)
    return rng.uniform(-L / 2, L / 2, size=(count, dim))


def random_positions(
    geometry: Geometry,
    dim: int,
    count: int,
    density: float,
    concentration: float = 1.0,
    rng=None,
) -> np.ndarray:
    """Sample bath spin locations around the central spin.

    Args:
            geometry (Geometry): Shape of the sampling region.
            dim (int): Spatial dimension (1, 2 or 3).
            count (int): Number of bath spins.
            density (float): Number density of host sites.
            concentration (float): Fraction of host sites carrying a
                bath spin.
            rng: Seed or `np.random.Generator`.

    Returns:
            np.ndarray: Positions with shape `(count, 3)`; coordinates
            beyond `dim` are zero.

    >>> pos = random_positions(Geometry.SPHERICAL, 3, 50, 1.0, rng=1)
    >>> pos.shape
    (50, 3)
    >>> bool(np.linalg.norm(pos, axis=1).min() > 1.0)
    True
    """
    _check_parameters(dim, count, density, concentration)
    rng = np.random.default_rng(rng)
    geometry = Geometry(geometry)
    a = density ** (-1 / dim)
    n_bath = density * concentration
    if geometry == Geometry.SPHERICAL:
        pos = _spherical_shell(dim, count, a, n_bath, rng)
    elif geometry == Geometry.CUBIC:
        pos = _cubic_shell(dim, count, a, n_bath, rng)
    else:
        pos = _uniform_box(dim, count, n_bath, rng)
    result = np.zeros((count, 3))
    result[:, :dim] = pos
    return result


def dipolar_couplings(positions: np.ndarray, z0=(0, 0, 1)) -> np.ndarray:
    """Dipolar coupling strengths of bath spins to the central spin.

    Args:
            positions (np.ndarray): Bath spin locations, shape `(n, 3)`.
            z0 (array-like): Quantisation axis (normalised internally).

    Returns:
            np.ndarray: The couplings `D_j`, shape `(n,)`.

    >>> dipolar_couplings(np.array([[0.0, 0.0, 2.0], [1.0, 0.0, 0.0]]))
    array([ 0.25, -1.  ])
    """
    positions = np.atleast_2d(np.asarray(positions, dtype=float))
    z0 = normalize(z0)
    r = np.linalg.norm(positions, axis=1)
    if np.any(r == 0):
        raise ValueError("Bath spin located on the central spin (r = 0)!")
    cos_theta = positions @ z0 / r
    return (3 * cos_theta**2 - 1) / r**3
