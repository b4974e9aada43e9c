#! /usr/bin/env python

import doctest
import itertools
import unittest

import numpy as np
import numpy.testing
from spincontrol import dynamics
from spincontrol.dynamics import RunningVariance, fid, rabi
from spincontrol.ensembles import SpinCluster, SpinEnsemble
from spincontrol.evolution import unitary
from spincontrol.pauli_matrices import bloch_vector
from spincontrol.sequences import SquarePulse


def load_tests(loader, tests, ignore):
    tests.addTests(doctest.DocTestSuite(dynamics))
    return tests


def make_cluster(couplings, seed=0):
    ensemble = SpinEnsemble(1.0, 3, [0, 0, 1], 0.1, len(couplings))
    cluster = SpinCluster(ensemble, rng=seed)
    cluster.couplings = np.array(couplings, dtype=float)
    return cluster


class RunningVarianceTestCase(unittest.TestCase):
    def test_matches_numpy(self):
        samples = np.random.default_rng(2).normal(size=(50, 4))
        acc = RunningVariance(4)
        for f in samples:
            acc.update(f)
        np.testing.assert_allclose(acc.mean, samples.mean(axis=0))
        np.testing.assert_allclose(acc.variance, samples.var(axis=0, ddof=1))

    def test_single_sample(self):
        acc = RunningVariance(2)
        acc.update(np.array([1.0, 2.0]))
        np.testing.assert_array_equal(acc.variance, [0, 0])


class FidTestCase(unittest.TestCase):
    """Free induction decay of clusters and ensembles."""

    def setUp(self):
        self.t = np.linspace(0, 5, 11)

    def test_exact_without_field(self):
        cluster = make_cluster([0.3, 0.5, 0.7])
        f, var = fid(self.t, cluster, geterr=True)
        exact = np.prod(np.cos(np.outer(self.t, [0.3, 0.5, 0.7])), axis=1) / 2
        np.testing.assert_allclose(f, exact)
        np.testing.assert_array_equal(var, 0)
        self.assertEqual(f[0], 0.5)

    def test_weak_field_converges_to_exact(self):
        couplings = [0.3, 0.5, 0.7]
        cluster = make_cluster(couplings)
        N = 10000
        f, var = fid(self.t, cluster, h=1e-6, N=N, geterr=True, rng=8)
        exact = fid(self.t, cluster)
        tolerance = 5 * np.sqrt(var / N) + 1e-6
        self.assertTrue(np.all(np.abs(f - exact) <= tolerance))

    def test_matches_propagator(self):
        """Single coupling: the bath average is exact (signal even in beta)."""
        beta, h = 0.8, 1.7
        cluster = make_cluster([beta])
        f = fid(self.t, cluster, h=h, N=20, rng=0)
        psi = np.array([1, 1]) / np.sqrt(2)
        expected = [
            bloch_vector(unitary(SquarePulse(t, h), beta) @ psi)[0] / 2 for t in self.t
        ]
        np.testing.assert_allclose(f, expected, atol=1e-12)

    def test_ensemble(self):
        ensemble = SpinEnsemble(0.5, 3, [0, 0, 1], 0.2, 10)
        f, var = fid(self.t, ensemble, h=0.5, M=5, N=20, geterr=True, rng=1, progress=False)
        self.assertEqual(f.shape, self.t.shape)
        self.assertTrue(np.all(var >= 0))
        self.assertTrue(np.all(np.abs(f) <= 0.5 + 1e-12))
        again = fid(self.t, ensemble, h=0.5, M=5, N=20, geterr=True, rng=1, progress=False)
        np.testing.assert_array_equal(f, again[0])

    def test_invalid(self):
        cluster = make_cluster([1.0])
        ensemble = cluster.ensemble
        self.assertRaises(ValueError, fid, [], cluster)
        self.assertRaises(ValueError, fid, self.t, ensemble, M=1, geterr=True)
        self.assertRaises(ValueError, fid, self.t, cluster, h=1.0, N=1, geterr=True)
        self.assertRaises(TypeError, fid, self.t, [1.0, 2.0])


class RabiTestCase(unittest.TestCase):
    """Rabi oscillations of clusters and ensembles."""

    def setUp(self):
        self.t = np.linspace(0, 3, 13)

    def test_no_bath(self):
        cluster = make_cluster([0.0, 0.0])
        h = 2.0
        np.testing.assert_allclose(
            rabi(self.t, cluster, h, N=5), np.cos(h * self.t) / 2, atol=1e-12
        )
        np.testing.assert_allclose(
            rabi(self.t, cluster, h, N=5, axis=2), -np.sin(h * self.t) / 2, atol=1e-12
        )
        np.testing.assert_allclose(
            rabi(self.t, cluster, h, N=5, axis=1), 0, atol=1e-12
        )

    def test_matches_propagator(self):
        psi = np.array([1, 0])
        h = 1.3
        for beta in (0.0, 0.4, -2.5):
            with self.subTest(beta=beta):
                for axis in (1, 2, 3):
                    signal = dynamics.RABI_AXES[axis](self.t, beta, h)
                    expected = [
                        bloch_vector(unitary(SquarePulse(t, h), beta) @ psi)[axis - 1] / 2
                        for t in self.t
                    ]
                    np.testing.assert_allclose(signal, expected, atol=1e-12)

    def test_converges_to_exact(self):
        """Mean over random bath states approaches the mean over all of them."""
        couplings = np.array([0.4, 0.7])
        cluster = make_cluster(couplings)
        h, N = 1.3, 10000
        configurations = itertools.product([1.0, -1.0], repeat=len(couplings))
        betas = [np.dot(sigma, couplings) for sigma in configurations]
        f, var = rabi(self.t, cluster, h, N=N, geterr=True, rng=5)
        exact = np.mean([dynamics.RABI_AXES[3](self.t, b, h) for b in betas], axis=0)
        tolerance = 3 * np.sqrt(var / N) + 1e-12
        self.assertTrue(np.all(np.abs(f - exact) <= tolerance))

    def test_no_motion(self):
        t = np.array([0.0, 1.0])
        np.testing.assert_array_equal(dynamics.RABI_AXES[3](t, 0.0, 0.0), [0.5, 0.5])
        np.testing.assert_array_equal(dynamics.RABI_AXES[1](t, 0.0, 0.0), [0.0, 0.0])

    def test_ensemble_variance(self):
        ensemble = SpinEnsemble(0.5, 3, [0, 0, 1], 0.2, 10)
        z, var = rabi(self.t, ensemble, 2.0, M=4, N=10, geterr=True, rng=2, progress=False)
        self.assertEqual(z[0], 0.5)
        self.assertEqual(var[0], 0.0)

    def test_invalid_axis(self):
        cluster = make_cluster([1.0])
        self.assertRaises(ValueError, rabi, self.t, cluster, 1.0, axis=4)
        self.assertRaises(ValueError, rabi, self.t, cluster, 1.0, axis=0)


if __name__ == "__main__":
    unittest.main()
