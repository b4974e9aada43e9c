#! /usr/bin/env python
"""Spin baths: statistical ensembles and their random realisations.

Classes:
        - `SpinEnsemble`: Immutable statistical description of a bath
          (density, dimension, quantisation axis, concentration, size,
          sampling geometry).
        - `SpinCluster`: One disorder realisation of an ensemble, i.e. a
          concrete set of coupling strengths `D`.

Functions:
        - `beta_sampling(cluster, N)`: Random bath fields
          :math:`\\beta_p = \\sum_j \\sigma_{pj} D_j` for independent,
          uniform bath spin orientations :math:`\\sigma_{pj} = \\pm 1`.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .sampling import Geometry, dipolar_couplings, random_positions
from .utils import normalize


class SpinEnsemble:
    """Statistical description of a spin bath.

    Args:
        density (float): Number density of host sites.
        dim (int): Spatial dimension (1, 2 or 3).
        z0 (array-like): Quantisation axis of the central spin
            (normalised on construction).
        concentration (float): Fraction of host sites occupied by
            bath spins.
        N (int): Number of bath spins in a cluster.
        geometry (Geometry | str): Sampling geometry.

    The ensemble is immutable: all attributes are read-only.

    >>> ensemble = SpinEnsemble(0.39486, 3, [0, 0, 2], 0.1, 10, "spherical")
    >>> ensemble
    SpinEnsemble: spherical
      Density: 0.39486
      Dimension: 3
      Axis: [0.0, 0.0, 1.0]
      Concentration: 0.1
      Number of bath spins: 10
    >>> ensemble.geometry
    <Geometry.SPHERICAL: 'spherical'>
    """

    def __repr__(self) -> str:  # noqa D105
        lines = [
            f"SpinEnsemble: {self.geometry.value}",
            f"  Density: {self.density}",
            f"  Dimension: {self.dim}",
            f"  Axis: {self.z0.tolist()}",
            f"  Concentration: {self.concentration}",
            f"  Number of bath spins: {self.N}",
        ]
        return "\n".join(lines)

    def __init__(
        self,
        density: float,
        dim: int,
        z0: Sequence[float] = (0, 0, 1),
        concentration: float = 1.0,
        N: int = 100,
        geometry: Geometry | str = Geometry.SPHERICAL,
    ):
        """SpinEnsemble constructor."""
        if density <= 0:
            raise ValueError("Value of `density` needs to be positive!")
        if dim not in (1, 2, 3):
            raise ValueError("Dimension `dim` needs to be 1, 2 or 3!")
        if not 0 < concentration <= 1:
            raise ValueError("Value of `concentration` needs to be in (0, 1]!")
        if N < 1:
            raise ValueError("Number of bath spins `N` needs to be positive!")
        z0 = np.asarray(z0, dtype=float)
        if z0.shape != (3,):
            raise ValueError("Axis `z0` needs to be a 3-vector!")
        z0 = normalize(z0)
        z0.setflags(write=False)
        self._density = density
        self._dim = dim
        self._z0 = z0
        self._concentration = concentration
        self._N = N
        self._geometry = Geometry(geometry)

    @property
    def density(self) -> float:
        """Number density of host sites."""
        return self._density

    @property
    def dim(self) -> int:
        """Spatial dimension."""
        return self._dim

    @property
    def z0(self) -> np.ndarray:
        """Unit quantisation axis (read-only array)."""
        return self._z0

    @property
    def concentration(self) -> float:
        """Fraction of host sites occupied by bath spins."""
        return self._concentration

    @property
    def N(self) -> int:
        """Number of bath spins per cluster."""
        return self._N

    @property
    def geometry(self) -> Geometry:
        """Sampling geometry."""
        return self._geometry

    def sample_couplings(self, rng=None) -> np.ndarray:
        """Draw the couplings of a fresh disorder realisation.

        Args:
            rng: Seed or `np.random.Generator`.

        Returns:
            np.ndarray: `N` dipolar coupling strengths.
        """
        positions = random_positions(
            self.geometry, self.dim, self.N, self.density, self.concentration, rng
        )
        return dipolar_couplings(positions, self.z0)


class SpinCluster:
    """A single disorder realisation of a `SpinEnsemble`.

    Args:
        ensemble (SpinEnsemble): The parent ensemble.
        rng: Seed or `np.random.Generator`; the cluster keeps the
            generator and uses it for `reroll`.

    The cluster owns its `couplings` buffer, stored as floats. `reroll`
    overwrites the values in place, the length and the ensemble never
    change.

    >>> ensemble = SpinEnsemble(1.0, 3, [0, 0, 1], 0.5, 8)
    >>> cluster = SpinCluster(ensemble, rng=42)
    >>> len(cluster)
    8
    >>> before = cluster.couplings.copy()
    >>> bool(np.all(cluster.reroll().couplings != before))
    True
    """

    ensemble: SpinEnsemble

    def __repr__(self) -> str:  # noqa D105
        return f"SpinCluster({len(self)} spins, {self.ensemble.geometry.value})"

    def __init__(self, ensemble: SpinEnsemble, rng=None):
        """SpinCluster constructor."""
        self.ensemble = ensemble
        self._rng = np.random.default_rng(rng)
        self.couplings = ensemble.sample_couplings(self._rng)

    def __len__(self) -> int:
        return len(self.couplings)

    @property
    def couplings(self) -> np.ndarray:
        """Coupling strengths `D` (float array owned by the cluster)."""
        return self._couplings

    @couplings.setter
    def couplings(self, value):
        self._couplings = np.array(value, dtype=float)

    @property
    def rng(self) -> np.random.Generator:
        """Random generator owned by the cluster."""
        return self._rng

    def reroll(self) -> SpinCluster:
        """Replace the couplings with a fresh draw from the same ensemble.

        Returns:
            SpinCluster: `self`, for chaining.
        """
        self.couplings[:] = self.ensemble.sample_couplings(self._rng)
        return self

    def copy(self, rng=None) -> SpinCluster:
        """Independent cluster with the same couplings.

        The copy has its own coupling buffer and random generator, so it
        can be rerolled by another worker.
        """
        clone = SpinCluster.__new__(SpinCluster)
        clone.ensemble = self.ensemble
        clone._rng = np.random.default_rng(rng)
        clone.couplings = self.couplings.copy()
        return clone


def beta_sampling(cluster: SpinCluster, N: int, rng=None) -> np.ndarray:
    """Sample the bath field felt by the central spin.

    Every sample flips each bath spin independently with probability
    1/2, i.e. :math:`\\beta_p = \\sum_j \\sigma_{pj} D_j` with
    :math:`\\sigma_{pj} \\in \\{+1, -1\\}`.

    Args:
        cluster (SpinCluster): The bath realisation.
        N (int): Number of samples.
        rng: Seed or `np.random.Generator`; defaults to the cluster's
            own generator.

    Returns:
        np.ndarray: The `N` field offsets.
    """
    if N < 1:
        raise ValueError("Number of samples `N` needs to be positive!")
    rng = cluster.rng if rng is None else np.random.default_rng(rng)
    sigma = rng.choice([1.0, -1.0], size=(N, len(cluster)))
    return sigma @ cluster.couplings
