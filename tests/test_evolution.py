#! /usr/bin/env python

import doctest
import unittest

import numpy as np
import numpy.testing
import spincontrol as sc
from spincontrol import evolution
from spincontrol.evolution import deploy, kraus_operators, operate, operation, unitary
from spincontrol.pauli_matrices import SIGMA
from spincontrol.sequences import Idle, Sequence, SquarePulse, cp, xy
from spincontrol.utils import isunitary, purity


def load_tests(loader, tests, ignore):
    tests.addTests(doctest.DocTestSuite(evolution))
    return tests


RHO_UP = np.array([[1, 0], [0, 0]], dtype=complex)


class UnitaryTestCase(unittest.TestCase):
    def test_idle_without_bath(self):
        np.testing.assert_allclose(unitary(Idle(3)), np.eye(2))

    def test_unitary(self):
        ops = [
            Idle(0.7),
            SquarePulse(0.3, 2.0, [1, 1, 0]),
            cp(1.0, 5.0),
            xy(0.4, 3.0, symmetry=True),
        ]
        for op in ops:
            for beta in (0.0, 0.3, -1.1):
                with self.subTest(op=op, beta=beta):
                    self.assertTrue(isunitary(unitary(op, beta)))

    def test_pi_pulse(self):
        X = sc.sequences.pi_pulse(2.0, [1, 0, 0])
        np.testing.assert_allclose(unitary(X), -1j * SIGMA["x"], atol=1e-12)

    def test_xy4_refocuses(self):
        """Ideal XY-4 is the identity up to a global phase."""
        V = unitary(xy(1.0, 10.0))
        self.assertAlmostEqual(abs(np.trace(V)), 2.0)

    def test_inverse_gate(self):
        seq = Sequence(Idle(0.0), [SquarePulse(0.8, 1.3, [1, 2, 3])], [1, -1])
        np.testing.assert_allclose(unitary(seq, 0.7), np.eye(2), atol=1e-12)

    def test_order(self):
        X = SquarePulse(1.0, 1.0, [1, 0, 0])
        Y = SquarePulse(1.0, 1.0, [0, 1, 0])
        seq = Sequence(Idle(0.5), [X, Y], [1, 0, 2])
        expected = unitary(Y, 0.2) @ unitary(Idle(0.5), 0.2) @ unitary(X, 0.2)
        np.testing.assert_allclose(unitary(seq, 0.2), expected)

    def test_quantisation_axis(self):
        U = unitary(Idle(1.0), 2.0, z0=[1, 0, 0])
        np.testing.assert_allclose(U, unitary(SquarePulse(1.0, 2.0, [1, 0, 0])))

    def test_unknown_type(self):
        self.assertRaises(TypeError, unitary, "X")

    def test_evolution(self):
        U = unitary(SquarePulse(0.9, 1.5, [0, 1, 1]), 0.3)
        psi = np.array([1, 1j]) / np.sqrt(2)
        rho = np.outer(psi, psi.conj())
        out = evolution.evolution(rho, U)
        np.testing.assert_allclose(out, np.outer(U @ psi, (U @ psi).conj()), atol=1e-12)
        np.testing.assert_allclose(evolution.evolution(psi, U), U @ psi)


class ChannelTestCase(unittest.TestCase):
    def setUp(self):
        self.betas = np.array([-0.5, 0.1, 0.9])
        self.weights = [1, 2, 1]

    def test_completeness(self):
        for op in (Idle(2.0), SquarePulse(1.0, 3.0), xy(0.5, 4.0)):
            with self.subTest(op=op):
                K = kraus_operators(op, self.betas, self.weights)
                total = sum(k.conj().T @ k for k in K)
                np.testing.assert_allclose(total, np.eye(2), atol=1e-12)

    def test_trace_preserving(self):
        K = kraus_operators(Idle(2.0), self.betas)
        rho = np.array([[0.5, 0.5], [0.5, 0.5]], dtype=complex)
        out = operate(rho, K)
        self.assertAlmostEqual(np.real(np.trace(out)), 1.0)
        np.testing.assert_allclose(out, out.conj().T)
        self.assertLess(purity(out), 1.0)

    def test_single_sample_is_unitary(self):
        K = kraus_operators(SquarePulse(1.0, 2.0), 0.4)
        self.assertEqual(len(K), 1)
        np.testing.assert_allclose(K[0], unitary(SquarePulse(1.0, 2.0), 0.4))

    def test_invalid_weights(self):
        self.assertRaises(ValueError, kraus_operators, Idle(1.0), self.betas, [1, 1])
        self.assertRaises(ValueError, kraus_operators, Idle(1.0), self.betas, [1, -1, 1])

    def test_operation(self):
        ensemble = sc.ensembles.SpinEnsemble(1.0, 3, [0, 0, 1], 0.2, 8)
        cluster = sc.ensembles.SpinCluster(ensemble, rng=4)
        phases, axes = sc.estimations.driving(5.0, 0.3, cluster, N=25, sampling=True)
        out = operation(RHO_UP, phases, axes)
        self.assertAlmostEqual(np.real(np.trace(out)), 1.0)
        np.testing.assert_allclose(out, out.conj().T, atol=1e-12)

    def test_operation_matches_unitary(self):
        pulse = SquarePulse(0.6, 2.0, [0, 1, 0])
        out = operation(RHO_UP, [2.0 * 0.6], [[0, 1, 0]])
        U = unitary(pulse)
        np.testing.assert_allclose(out, U @ RHO_UP @ U.conj().T, atol=1e-12)


class DeployTestCase(unittest.TestCase):
    def test_length(self):
        seq = xy(1.0, 6.0, symmetry=True)
        k, g = seq.counts
        for n, cycle in ((1, 1), (3, 2)):
            with self.subTest(n=n, cycle=cycle):
                times, states = deploy(np.array([1, 0]), seq, n, 0.2, cycle=cycle)
                self.assertEqual(len(times), cycle * (k * n + g))
                self.assertEqual(len(states), len(times))
                self.assertAlmostEqual(times[-1], cycle * seq.duration)

    def test_final_state(self):
        seq = cp(0.8, 4.0)
        beta = 0.35
        psi = np.array([1, 1]) / np.sqrt(2)
        _, states = deploy(psi, seq, 5, beta, cycle=3)
        V = unitary(seq, beta)
        np.testing.assert_allclose(states[-1], V @ V @ V @ psi, atol=1e-12)

    def test_density_matches_vector(self):
        seq = Sequence(Idle(0.5), [SquarePulse(0.4, 3.0, [1, 0, 0])], [0, 1, 0, -1])
        psi = np.array([1, 0])
        _, vectors = deploy(psi, seq, 2, 0.6, cycle=2)
        _, matrices = deploy(np.outer(psi, psi), seq, 2, 0.6, cycle=2)
        for v, rho in zip(vectors, matrices):
            np.testing.assert_allclose(rho, np.outer(v, v.conj()), atol=1e-12)

    def test_mixture_stays_physical(self):
        seq = xy(0.5, 6.0)
        _, states = deploy(RHO_UP, seq, 2, [-0.4, 0.0, 0.4], [1, 1, 2])
        for rho in states:
            self.assertAlmostEqual(np.real(np.trace(rho)), 1.0)
            self.assertLessEqual(purity(rho), 1.0 + 1e-12)

    def test_state_vector_needs_scalar_field(self):
        psi = np.array([1, 0])
        self.assertRaises(ValueError, deploy, psi, cp(1.0, 1.0), 1, [0.1, 0.2, 0.3])
        self.assertRaises(ValueError, deploy, psi, cp(1.0, 1.0), 1, np.array([0.1]))

    def test_invalid_cycle(self):
        self.assertRaises(ValueError, deploy, np.array([1, 0]), cp(1.0, 1.0), 1, 0.0, cycle=0)


if __name__ == "__main__":
    unittest.main()
