#!/usr/bin/env python
"""
Utilities shared by the ensemble and control modules.

Main contents:

    CLI/testing
        - ``is_fast_run()``: Check ``--fast`` CLI flag to run lighter examples.

    Random streams
        - ``spawn_streams(seed, num_streams)``: Independent
        ``numpy.random.Generator`` streams for parallel workers.

    Linear algebra
        - ``normalize(v)``: Unit vector (rejects the zero vector).
        - ``rotation(vector, t)``: SU(2) propagator of a static field.
        - ``isunitary(U)``: Unitarity check.
        - ``purity(rho)``, ``state_fidelity(rho, sigma)``: State measures.

    Geometry
        - ``spherical_to_cartesian(theta, phi)``: Unit vector from angles.

    Fitting
        - ``fit_linear(x, y, p0)``: Least-squares straight line.

Notes:

    - Fields are angular frequencies; a field vector ``n`` applied for a
    time ``t`` rotates the spin by the angle ``|n| t`` about ``n``.
"""

from __future__ import annotations

import argparse
import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np
from scipy import linalg
from scipy.optimize import curve_fit
from sklearn.metrics import r2_score

from .pauli_matrices import SIGMA

logger = logging.getLogger(__name__)


def is_fast_run():
    """Is the `--fast` parameter set at execution.

    This function helps examples to be used as tests.  By running the
    example with the `--fast` option, a faster version of main can be
    called (e.g., by setting fewer disorder realisations).
    """
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--fast",
        default=False,
        action="store_true",
        help="If set, the example should use fewer Monte-Carlo samples.",
    )
    args = parser.parse_args()
    return args.fast


def spawn_streams(
    seed: Optional[int], num_streams: int, run_salt: Optional[int] = None
) -> List[np.random.Generator]:
    """Independent random generators derived from one seed.

    Args:
            seed (int or None): Root seed; `None` draws fresh entropy.
            num_streams (int): Number of generators.
            run_salt (int or None): Optional salt to decorrelate runs
                sharing a seed.

    Returns:
            list[np.random.Generator]: `num_streams` independent streams.

    >>> a, b = spawn_streams(7, 2)
    >>> bool(a.random() != b.random())
    True
    """
    if seed is None:
        ss = np.random.SeedSequence()
    elif run_salt is None:
        ss = np.random.SeedSequence(int(seed))
    else:
        ss = np.random.SeedSequence(int(seed), spawn_key=[int(run_salt) & 0xFFFFFFFF])
    return [np.random.default_rng(cs) for cs in ss.spawn(num_streams)]


def normalize(v: Sequence[float]) -> np.ndarray:
    """Return `v` scaled to unit length (as a new float array).

    >>> normalize([3, 0, 4])
    array([0.6, 0. , 0.8])
    """
    v = np.asarray(v, dtype=float)
    norm = np.linalg.norm(v)
    if norm == 0:
        raise ValueError("Cannot normalize the zero vector!")
    return v / norm


def rotation(vector: Sequence[float], t: float) -> np.ndarray:
    r"""Propagator of a spin-1/2 in a static field.

    .. math::
        U = \exp(-i t \, \vec{n} \cdot \vec{\sigma} / 2)
          = \cos(\theta/2) I - i \sin(\theta/2) \, \hat{n} \cdot \vec{\sigma},
        \quad \theta = |\vec{n}| t

    A vanishing field gives the identity.

    Args:
            vector (array-like): Field (angular frequency) vector, length 3.
            t (float): Duration.

    Returns:
            np.ndarray: The `(2, 2)` unitary.

    >>> bool(np.allclose(rotation([0, 0, 0], 3.0), np.eye(2)))
    True
    """
    vector = np.asarray(vector, dtype=float)
    omega = np.linalg.norm(vector)
    if omega == 0:
        return SIGMA["u"].copy()
    nx, ny, nz = vector / omega
    theta = omega * t
    generator = nx * SIGMA["x"] + ny * SIGMA["y"] + nz * SIGMA["z"]
    return np.cos(theta / 2) * SIGMA["u"] - 1j * np.sin(theta / 2) * generator


def isunitary(U: np.ndarray, atol: float = 1e-5) -> bool:
    """Check `U U^dagger = I` within `atol`."""
    U = np.asarray(U)
    return bool(np.allclose(U @ U.conj().T, np.eye(U.shape[0]), atol=atol))


def purity(rho):
    """
    Calculate the purity of a density matrix.

    The purity is defined as :math:`P(\\rho) = \\operatorname{Tr}(\\rho^2)`.
    Pure states have :math:`P = 1`, the maximally mixed qubit has
    :math:`P = 1/2`.

    Args:

            rho (ndarray of shape (N, N)): Density matrix.

    Returns:

            float: Purity of the state, computed as ``real(trace(rho @ rho))``.
    """
    return np.real(np.trace(rho @ rho))


def state_fidelity(rho: np.ndarray, sigma: np.ndarray) -> float:
    r"""Uhlmann fidelity of two density matrices.

    .. math::
        F(\rho, \sigma) = \left(\operatorname{Tr}
        \sqrt{\sqrt{\rho} \, \sigma \sqrt{\rho}}\right)^2

    State vectors are accepted and converted to projectors.

    >>> psi = np.array([1, 0])
    >>> round(state_fidelity(psi, np.eye(2) / 2), 6)
    0.5
    """
    rho, sigma = (
        np.outer(s, np.conj(s)) if np.ndim(s) == 1 else np.asarray(s)
        for s in (rho, sigma)
    )
    sqrt_rho = linalg.sqrtm(rho)
    inner = linalg.sqrtm(sqrt_rho @ sigma @ sqrt_rho)
    return float(np.real(np.trace(inner)) ** 2)


def fit_linear(
    x: np.ndarray, y: np.ndarray, p0: Sequence[float]
) -> Tuple[float, float]:
    """Least-squares straight line `y = k x + b`.

    Failures of the optimiser (`RuntimeError`) are not caught.

    Args:
            x (np.ndarray): Abscissa.
            y (np.ndarray): Data.
            p0 (sequence): Initial guess `(k, b)`.

    Returns:
            (float, float): The slope `k` and the intercept `b`.

    >>> k, b = fit_linear(np.arange(5.0), 2 * np.arange(5.0) + 1, [1, 0])
    >>> round(k, 6), round(b, 6)
    (2.0, 1.0)
    """
    popt, _ = curve_fit(lambda t, k, b: k * t + b, x, y, p0=p0)
    k, b = popt
    logger.debug("Linear fit k=%g b=%g R2=%g", k, b, r2_score(y, k * x + b))
    return float(k), float(b)


def spherical_to_cartesian(
    theta: float | np.ndarray, phi: float | np.ndarray
) -> np.ndarray:
    """Spherical coordinates to Cartesian coordinates.

    Args:
            theta (float or np.ndarray): The polar angle(s).
            phi (float or np.ndarray): The azimuthal angle(s).

    Returns:
            np.ndarray: The Cartesian coordinates.
    """
    return np.array(
        [
            np.sin(theta) * np.cos(phi),
            np.sin(theta) * np.sin(phi),
            np.cos(theta),
        ]
    )
