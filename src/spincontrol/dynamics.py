#!/usr/bin/env python
"""
Free induction decay and Rabi oscillations of a central spin in a bath.

Two nested Monte-Carlo averages are used:

- **bath average** (`SpinCluster`): for a fixed set of couplings `D`, draw
  `N` random bath spin configurations, each giving a static field offset
  :math:`\\beta_p = \\sum_j \\sigma_{pj} D_j`, and average the closed-form
  single-spin signal over them;
- **disorder average** (`SpinEnsemble`): average the bath average over `M`
  clusters drawn from the ensemble, rerolling one cluster in place
  between realisations.

Both loops keep a running mean and a running sum of squared deviations,

.. math::
    V_i = V_{i-1} + \\frac{(i f_i - S_i)^2}{i (i - 1)}, \\quad
    \\sigma^2 = \\frac{V_N}{N - 1},

where :math:`S_i` is the running sum. The disorder loop feeds the
per-cluster means through the same formula, so its variance mixes the
bath and disorder fluctuations rather than separating them.

Single-spin signals (:math:`\\Omega = \\sqrt{h^2 + \\beta^2}`):

- FID, spin prepared along the transverse field:
  :math:`f = \\frac{1}{2}[\\cos^2(\\Omega t/2) + \\sin^2(\\Omega t/2)
  (h^2 - \\beta^2)/\\Omega^2]`; with no transverse field the bath
  average is exactly :math:`\\frac{1}{2}\\prod_j \\cos(D_j t)`.
- Rabi, spin prepared along `z0` and driven along x:
    - z: :math:`(\\beta^2 + h^2 \\cos \\Omega t) / (2 \\Omega^2)`
    - y: :math:`-h \\sin(\\Omega t) / (2 \\Omega)`
    - x: :math:`\\beta h (1 - \\cos \\Omega t) / (2 \\Omega^2)`

When :math:`\\Omega = 0` the spin does not move and the signals take
their unperturbed values.
"""

import logging
from typing import Callable

import numpy as np
from tqdm import tqdm

from .ensembles import SpinCluster, SpinEnsemble, beta_sampling

logger = logging.getLogger(__name__)


class RunningVariance:
    """Running mean and unbiased variance of array-valued samples.

    >>> acc = RunningVariance(1)
    >>> for f in [1.0, 2.0, 3.0, 4.0]:
    ...     acc.update(np.array([f]))
    >>> acc.mean, acc.variance
    (array([2.5]), array([1.66666667]))
    """

    def __init__(self, size: int):
        """RunningVariance constructor."""
        self.count = 0
        self.total = np.zeros(size)
        self.sq_dev = np.zeros(size)

    def update(self, f: np.ndarray):
        """Add one sample."""
        self.count += 1
        i = self.count
        self.total += f
        if i > 1:
            self.sq_dev += (i * f - self.total) ** 2 / (i * (i - 1))

    @property
    def mean(self) -> np.ndarray:
        """Sample mean."""
        return self.total / self.count

    @property
    def variance(self) -> np.ndarray:
        """Unbiased sample variance (zero for a single sample)."""
        if self.count < 2:
            return np.zeros_like(self.total)
        return self.sq_dev / (self.count - 1)


def _check_time(t) -> np.ndarray:
    t = np.asarray(t, dtype=float)
    if t.ndim != 1 or len(t) == 0:
        raise ValueError("Time `t` needs to be a non-empty 1D array!")
    return t


def _check_samples(count: int, geterr: bool, name: str):
    if count < 1:
        raise ValueError(f"Number of samples `{name}` needs to be positive!")
    if geterr and count < 2:
        raise ValueError(f"Variance requires at least two samples (`{name}` >= 2)!")


def _fid_sample(t: np.ndarray, beta: float, h: float) -> np.ndarray:
    omega2 = h**2 + beta**2
    if omega2 == 0:
        return np.full_like(t, 0.5)
    cos2 = np.cos(np.sqrt(omega2) * t / 2) ** 2
    return (cos2 + (cos2 - 1) * (beta**2 - h**2) / omega2) / 2


def _rabi_z(t: np.ndarray, beta: float, h: float) -> np.ndarray:
    omega2 = h**2 + beta**2
    if omega2 == 0:
        return np.full_like(t, 0.5)
    return (beta**2 + h**2 * np.cos(np.sqrt(omega2) * t)) / (2 * omega2)


def _rabi_y(t: np.ndarray, beta: float, h: float) -> np.ndarray:
    omega = np.sqrt(h**2 + beta**2)
    if omega == 0:
        return np.zeros_like(t)
    return -h * np.sin(omega * t) / (2 * omega)


def _rabi_x(t: np.ndarray, beta: float, h: float) -> np.ndarray:
    omega2 = h**2 + beta**2
    if omega2 == 0:
        return np.zeros_like(t)
    return beta * h * (1 - np.cos(np.sqrt(omega2) * t)) / (2 * omega2)


RABI_AXES = {1: _rabi_x, 2: _rabi_y, 3: _rabi_z}


def _bath_average(
    signal: Callable, t: np.ndarray, cluster: SpinCluster, h: float, N: int, geterr: bool, rng
):
    acc = RunningVariance(len(t))
    for beta in beta_sampling(cluster, N, rng):
        acc.update(signal(t, beta, h))
    if geterr:
        return acc.mean, acc.variance
    return acc.mean


def _disorder_average(
    cluster_signal: Callable,
    t: np.ndarray,
    ensemble: SpinEnsemble,
    M: int,
    geterr: bool,
    rng,
    progress: bool,
):
    logger.debug("Disorder average over M=%d clusters of %d spins", M, ensemble.N)
    cluster = SpinCluster(ensemble, rng)
    acc = RunningVariance(len(t))
    for _ in tqdm(range(M), disable=not progress):
        acc.update(cluster_signal(cluster))
        cluster.reroll()
    if geterr:
        return acc.mean, acc.variance
    return acc.mean


def fid(
    t,
    spins,
    h: float = 0,
    *,
    M: int = 200,
    N: int = 100,
    geterr: bool = False,
    rng=None,
    progress: bool = True,
):
    """Free induction decay of the central spin.

    For a `SpinCluster` the signal is averaged over `N` bath
    configurations (exact product formula when `h == 0`). For a
    `SpinEnsemble` it is further averaged over `M` disorder
    realisations.

    Args:
            t (array-like): Time points.
            spins (SpinCluster | SpinEnsemble): The bath.
            h (float): Transverse field strength.
            M (int): Number of clusters (ensemble only).
            N (int): Number of bath samples per cluster.
            geterr (bool): Also return the sampling variance.
            rng: Seed or `np.random.Generator`; a cluster falls back to
                its own generator.
            progress (bool): Show a progress bar over the clusters.

    Returns:
            np.ndarray or (np.ndarray, np.ndarray): The mean signal, and
            its variance when `geterr` is set.

    >>> ensemble = SpinEnsemble(1.0, 3, [0, 0, 1], 0.1, 5)
    >>> cluster = SpinCluster(ensemble, rng=0)
    >>> cluster.couplings = np.array([1.0])
    >>> fid([0, np.pi], cluster)
    array([ 0.5, -0.5])
    """
    t = _check_time(t)
    if isinstance(spins, SpinEnsemble):
        _check_samples(M, geterr, "M")
        _check_samples(N, False, "N")
        return _disorder_average(
            lambda c: fid(t, c, h, N=N),
            t, spins, M, geterr, rng, progress,
        )
    if isinstance(spins, SpinCluster):
        if h == 0:
            f = np.prod(np.cos(np.outer(t, spins.couplings)), axis=1) / 2
            return (f, np.zeros_like(f)) if geterr else f
        _check_samples(N, geterr, "N")
        return _bath_average(_fid_sample, t, spins, h, N, geterr, rng)
    raise TypeError(f"Expected SpinCluster or SpinEnsemble, got {type(spins)}")


def rabi(
    t,
    spins,
    h: float,
    *,
    M: int = 200,
    N: int = 100,
    axis: int = 3,
    geterr: bool = False,
    rng=None,
    progress: bool = True,
):
    """Rabi oscillation of the central spin under a transverse drive.

    Args:
            t (array-like): Time points.
            spins (SpinCluster | SpinEnsemble): The bath.
            h (float): Driving field strength.
            M (int): Number of clusters (ensemble only).
            N (int): Number of bath samples per cluster.
            axis (int): Projection axis, 1, 2, 3 for x, y, z.
            geterr (bool): Also return the sampling variance.
            rng: Seed or `np.random.Generator`; a cluster falls back to
                its own generator.
            progress (bool): Show a progress bar over the clusters.

    Returns:
            np.ndarray or (np.ndarray, np.ndarray): The mean signal, and
            its variance when `geterr` is set.
    """
    if axis not in RABI_AXES:
        raise ValueError("Value of `axis` needs to be 1, 2 or 3!")
    t = _check_time(t)
    if isinstance(spins, SpinEnsemble):
        _check_samples(M, geterr, "M")
        _check_samples(N, False, "N")
        return _disorder_average(
            lambda c: rabi(t, c, h, N=N, axis=axis),
            t, spins, M, geterr, rng, progress,
        )
    if isinstance(spins, SpinCluster):
        _check_samples(N, geterr, "N")
        return _bath_average(RABI_AXES[axis], t, spins, h, N, geterr, rng)
    raise TypeError(f"Expected SpinCluster or SpinEnsemble, got {type(spins)}")
