#!/usr/bin/env python
"""Estimators for linewidths, coherence times and effective driving.

Functions:
        Bath scales
            - `dipolar_linewidth(spins, M=1000)`: RMS bath field Γ.
            - `coherence_time(spins, M=1000)`: Gaussian decay time
              :math:`T_2 = \\sqrt{2} / \\Gamma` of the free induction decay.
            - `relevant_time(spins, n_t, scale=1.0)`: Time grid covering
              :math:`[0, \\mathrm{scale} \\cdot T_2]`.
        Driving
            - `driving(h, t, cluster, aim)`: Average (or per-sample) rotation
              angle and axis of a pulse in the presence of the bath.
            - `rabi_period(ensemble, h)`: Rabi flip time from a linear fit
              around the first zero crossing of the Rabi curve.

Notes:
        - For a cluster with couplings :math:`D_j` the bath field
          :math:`\\beta = \\sum_j \\sigma_j D_j` has variance
          :math:`\\sum_j D_j^2`, so :math:`\\Gamma` is its standard deviation
          and the free induction decay envelope is
          :math:`\\frac{1}{2} e^{-\\Gamma^2 t^2 / 2}`.
        - `rabi_period` linearises the Rabi curve over the window
          :math:`t_0 (1 \\pm \\lambda)`; the estimate is only meaningful for
          small `lam`.
"""

import logging
from typing import Sequence

import numpy as np

from .dynamics import rabi
from .ensembles import SpinCluster, SpinEnsemble, beta_sampling
from .utils import fit_linear, normalize

logger = logging.getLogger(__name__)


def dipolar_linewidth(spins, M: int = 1000, rng=None) -> float:
    """RMS bath field felt by the central spin.

    Args:
            spins (SpinCluster | SpinEnsemble): For a cluster
                :math:`\\Gamma = \\sqrt{\\sum_j D_j^2}`; for an ensemble the
                mean square is averaged over `M` realisations.
            M (int): Number of clusters (ensemble only).
            rng: Seed or `np.random.Generator`.

    Returns:
            float: The linewidth Γ.
    """
    if isinstance(spins, SpinCluster):
        return float(np.sqrt(np.sum(spins.couplings**2)))
    if isinstance(spins, SpinEnsemble):
        if M < 1:
            raise ValueError("Number of clusters `M` needs to be positive!")
        cluster = SpinCluster(spins, rng)
        second_moment = 0.0
        for _ in range(M):
            second_moment += np.sum(cluster.couplings**2)
            cluster.reroll()
        gamma = float(np.sqrt(second_moment / M))
        logger.debug("Dipolar linewidth %g from M=%d clusters", gamma, M)
        return gamma
    raise TypeError(f"Expected SpinCluster or SpinEnsemble, got {type(spins)}")


def coherence_time(spins, M: int = 1000, rng=None) -> float:
    """Coherence time :math:`T_2 = \\sqrt{2} / \\Gamma`.

    >>> ensemble = SpinEnsemble(1.0, 3, [0, 0, 1], 0.5, 4)
    >>> cluster = SpinCluster(ensemble, rng=0)
    >>> cluster.couplings = np.array([1.0, 1.0])
    >>> coherence_time(cluster)
    1.0
    """
    return float(np.sqrt(2) / dipolar_linewidth(spins, M=M, rng=rng))


def relevant_time(spins, n_t: int, scale: float = 1.0, M: int = 1000, rng=None) -> np.ndarray:
    """Evenly spaced time points on `[0, scale * T2]`.

    Args:
            spins (SpinCluster | SpinEnsemble): The bath.
            n_t (int): Number of intervals (`n_t + 1` points).
            scale (float): Multiple of the coherence time to cover.

    Returns:
            np.ndarray: The time grid.
    """
    if n_t < 1:
        raise ValueError("Number of intervals `n_t` needs to be positive!")
    T2 = coherence_time(spins, M=M, rng=rng) * scale
    return np.linspace(0, T2, n_t + 1)


def driving(
    h: float,
    t: float,
    cluster: SpinCluster,
    aim: Sequence[float] = (1, 0, 0),
    *,
    N: int = 100,
    sampling: bool = False,
    rng=None,
):
    """Effective rotation of a pulse applied to the central spin.

    Each bath sample :math:`\\beta_p` adds a field along `z0`, so the
    pulse rotates about :math:`\\vec{n}_p = \\beta_p \\hat{z}_0 + h \\hat{a}`
    by :math:`\\Omega_p t` with :math:`\\Omega_p = |\\vec{n}_p|`.

    Args:
            h (float): Pulse field strength.
            t (float): Pulse duration.
            cluster (SpinCluster): The bath realisation.
            aim (array-like): Pulse axis (normalised, not modified).
            N (int): Number of bath samples.
            sampling (bool): Return every sample instead of averages.
            rng: Seed or `np.random.Generator`.

    Returns:
            (float, np.ndarray) or (np.ndarray, np.ndarray):
            - aggregate: the mean phase :math:`\\bar{\\Omega} t` and the
              normalised mean axis, shape `(3,)`; `z0` if the mean field
              vanishes;
            - `sampling=True`: the phases :math:`\\Omega_p t`, shape `(N,)`,
              and the unit axes :math:`\\vec{n}_p / \\Omega_p`, shape `(N, 3)`.
    """
    aim = normalize(aim)
    z0 = cluster.ensemble.z0
    beta = beta_sampling(cluster, N, rng)
    n_p = beta[:, None] * z0[None, :] + h * aim[None, :]
    omega_p = np.linalg.norm(n_p, axis=1)

    if sampling:
        with np.errstate(invalid="ignore", divide="ignore"):
            axes = n_p / omega_p[:, None]
        axes[omega_p == 0] = z0
        return t * omega_p, axes
    omega = np.sum(omega_p) / N
    total = np.sum(n_p, axis=0)
    if np.linalg.norm(total) == 0:
        return omega * t, z0.copy()
    return omega * t, normalize(total)


def rabi_period(
    ensemble: SpinEnsemble,
    h: float = 0,
    *,
    M: int = 1000,
    N: int = 100,
    lam: float = 0.1,
    L: int = 20,
    rng=None,
    progress: bool = True,
) -> float:
    """Rabi flip time of a driven ensemble.

    The linewidth Γ fixes the guess :math:`\\omega = \\sqrt{h^2 + \\Gamma^2}`
    and :math:`t_0 = \\pi / (2 \\omega)` for the first zero crossing of
    the z projection. The Rabi curve is sampled at `L` points in
    :math:`t_0 (1 \\pm \\lambda)` and fitted with a line :math:`k t + b`
    (initial guess :math:`(-\\omega, \\pi/2)`). The result is
    :math:`-2 b / k`, i.e. twice the fitted zero crossing, which is the
    π-pulse duration :math:`\\pi / \\omega` for a clean drive.

    Args:
            ensemble (SpinEnsemble): The bath.
            h (float): Driving field strength.
            M (int): Number of clusters.
            N (int): Number of bath samples per cluster.
            lam (float): Relative half width of the fit window.
            L (int): Number of fit points.
            rng: Seed or `np.random.Generator`.
            progress (bool): Show a progress bar.

    Returns:
            float: The flip time.

    Raises:
            ValueError: For `h == 0` or an invalid fit window.
            RuntimeError: If the fitted slope is not a finite negative number.
    """
    if not 0 < lam < 1:
        raise ValueError("Value of `lam` needs to be in (0, 1)!")
    if L < 2:
        raise ValueError("Number of fit points `L` needs to be at least 2!")
    if h == 0:
        raise ValueError("Driving field `h` needs to be non-zero!")
    rng = np.random.default_rng(rng)
    gamma = dipolar_linewidth(ensemble, M=M, rng=rng)
    omega = np.sqrt(h**2 + gamma**2)
    t0 = np.pi / (2 * omega)
    t = np.linspace(t0 * (1 - lam), t0 * (1 + lam), L)
    curve = rabi(t, ensemble, h, M=M, N=N, rng=rng, progress=progress)
    k, b = fit_linear(t, curve, [-omega, np.pi / 2])
    if not np.isfinite(k) or k >= 0:
        raise RuntimeError(f"Ill-conditioned Rabi fit, slope k={k}!")
    return -2 * b / k
