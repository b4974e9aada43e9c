#!/usr/bin/env python
"""
Propagators and trajectories of a qubit under pulse sequences.

The bath acts on the central spin as a static field offset `β` along
the quantisation axis `z0`. For a single bath configuration a pulse is
a unitary; for an incoherent mixture of configurations `β_k` with
weights `c_k` it is the quantum channel with Kraus operators

.. math::
    K_k = \\sqrt{c_k} \\, U(\\beta_k), \\quad \\sum_k c_k = 1,
    \\qquad \\rho \\mapsto \\sum_k K_k \\rho K_k^\\dagger.

Functions:
        - `unitary(op, beta, z0)`: Propagator of an `Idle`, a `SquarePulse`
          or a whole `Sequence` cycle.
        - `kraus_operators(op, betas, weights, z0)`: Kraus set of the
          bath-averaged channel.
        - `evolution(state, U)`, `operate(rho, kraus)`: Apply a unitary or
          a channel.
        - `operation(rho, phases, axes, weights)`: Channel of per-sample
          rotations, as returned by `estimations.driving(..., sampling=True)`.
        - `deploy(state, seq, n, beta, ...)`: Time-resolved trajectory
          through `cycle` repetitions of a sequence.

Shape conventions:
        - state vector: `(2,)`, density matrix: `(2, 2)`.
        - `deploy` returns `(times, states)` with
          `len(times) == cycle * (k * n + g)` for `k` idle and `g` gate
          markers in `seq.order`; the initial state is not included.
"""

from typing import Optional, Sequence as SequenceType

import numpy as np

from .pauli_matrices import SIGMA
from .sequences import Idle, Sequence, SquarePulse, cycle_slice
from .utils import normalize, rotation

Z0 = (0, 0, 1)


def _dagger(U: np.ndarray) -> np.ndarray:
    return U.conj().T


def _apply_unitary(U: np.ndarray, psi: np.ndarray) -> np.ndarray:
    return U @ psi


def _weights(betas: np.ndarray, weights) -> np.ndarray:
    if weights is None:
        return np.full(len(betas), 1 / len(betas))
    weights = np.asarray(weights, dtype=float)
    if weights.shape != betas.shape:
        raise ValueError("Number of `weights` needs to match the number of `betas`!")
    if np.any(weights < 0) or weights.sum() == 0:
        raise ValueError("Values of `weights` need to be non-negative, not all zero!")
    return weights / weights.sum()


def unitary(op, beta: float = 0, z0: SequenceType[float] = Z0) -> np.ndarray:
    """Propagator of a pulse or of one cycle of a sequence.

    - `SquarePulse`: rotation by the field `h * aim + beta * z0` for `t`;
    - `Idle`: rotation by `beta * z0` for `t`;
    - `Sequence`: product of the gate propagators in `order`
      (later gates multiply from the left, `-k` uses the adjoint).

    Args:
            op (Idle | SquarePulse | Sequence): The control element.
            beta (float): Bath field offset.
            z0 (array-like): Quantisation axis.

    Returns:
            np.ndarray: The `(2, 2)` unitary.

    >>> bool(np.allclose(unitary(Idle(3)), np.eye(2)))
    True
    """
    z0 = normalize(z0)
    if isinstance(op, SquarePulse):
        return rotation(op.aim * op.h + z0 * beta, op.t)
    if isinstance(op, Idle):
        return rotation(z0 * beta, op.t)
    if isinstance(op, Sequence):
        U0 = unitary(op.idle, beta, z0)
        Un = [unitary(g, beta, z0) for g in op.gates]
        V = SIGMA["u"].copy()
        for i in op.order:
            if i == 0:
                U = U0
            else:
                U = Un[abs(i) - 1] if i > 0 else _dagger(Un[abs(i) - 1])
            V = U @ V
        return V
    raise TypeError(f"Expected Idle, SquarePulse or Sequence, got {type(op)}")


def kraus_operators(
    op,
    betas: SequenceType[float],
    weights: Optional[SequenceType[float]] = None,
    z0: SequenceType[float] = Z0,
) -> list:
    """Kraus operators of the bath-averaged channel of `op`.

    Args:
            op (Idle | SquarePulse | Sequence): The control element.
            betas (array-like): Bath field samples.
            weights (array-like): Probabilities of the samples
                (normalised; uniform by default).
            z0 (array-like): Quantisation axis.

    Returns:
            list[np.ndarray]: The operators `sqrt(c_k) U(beta_k)`.
    """
    betas = np.atleast_1d(np.asarray(betas, dtype=float))
    c = _weights(betas, weights)
    return [np.sqrt(c_k) * unitary(op, b_k, z0) for b_k, c_k in zip(betas, c)]


def evolution(state: np.ndarray, U: np.ndarray) -> np.ndarray:
    """Apply a unitary to a state vector (`U ψ`) or a density matrix (`U ρ U†`)."""
    state = np.asarray(state)
    if state.ndim == 1:
        return U @ state
    return U @ state @ _dagger(U)


def operate(rho: np.ndarray, kraus: SequenceType[np.ndarray]) -> np.ndarray:
    """Apply a channel in operator-sum form, `Σ_k K_k ρ K_k†`."""
    return sum(K @ rho @ _dagger(K) for K in kraus)


def operation(
    rho: np.ndarray,
    phases: np.ndarray,
    axes: np.ndarray,
    weights: Optional[SequenceType[float]] = None,
) -> np.ndarray:
    """Channel of an incoherent mixture of rotations.

    Args:
            rho (np.ndarray): Density matrix.
            phases (np.ndarray): Rotation angles, shape `(N,)`.
            axes (np.ndarray): Unit rotation axes, shape `(N, 3)`.
            weights (array-like): Probabilities (uniform by default).

    Returns:
            np.ndarray: The transformed density matrix.
    """
    phases = np.asarray(phases, dtype=float)
    c = _weights(phases, weights)
    kraus = [
        np.sqrt(c_k) * rotation(n_k, phi_k) for phi_k, n_k, c_k in zip(phases, axes, c)
    ]
    return operate(rho, kraus)


def deploy(
    state: np.ndarray,
    seq: Sequence,
    n: int,
    beta,
    weights: Optional[SequenceType[float]] = None,
    z0: SequenceType[float] = Z0,
    *,
    cycle: int = 1,
):
    """Trajectory of a state through `cycle` repetitions of `seq`.

    Every idle period is split into `n` sub-steps of `idle.t / n` and
    each sub-step is recorded; each gate is recorded once.

    - A state vector, shape `(2,)`, evolves unitarily under a single
      bath field `beta`.
    - A density matrix, shape `(2, 2)`, evolves under the channel of the
      bath samples `beta` (scalar or array) with `weights`.

    Args:
            state (np.ndarray): Initial state vector or density matrix.
            seq (Sequence): The sequence.
            n (int): Idle sub-steps.
            beta (float or array-like): Bath field(s).
            weights (array-like): Probabilities of the bath fields
                (density matrices only).
            z0 (array-like): Quantisation axis.
            cycle (int): Number of repetitions.

    Returns:
            (np.ndarray, list[np.ndarray]): End time of every step and the
            state after it.

    >>> seq = Sequence(Idle(1.0), [SquarePulse(1.0, np.pi)], [0, 1, 0])
    >>> times, states = deploy(np.array([1, 0]), seq, 2, 0.0, cycle=2)
    >>> times
    array([0.5, 1. , 2. , 2.5, 3. , 3.5, 4. , 5. , 5.5, 6. ])
    >>> len(states)
    10
    """
    if cycle < 1:
        raise ValueError("Number of cycles `cycle` needs to be positive!")
    ticks = cycle_slice(seq, n)
    sub_idle = Idle(seq.idle.t / n)
    state = np.asarray(state, dtype=complex)

    if state.ndim == 1:
        if np.ndim(beta) != 0:
            raise ValueError("A state vector needs a single scalar `beta`!")
        apply = _apply_unitary
        idle_op = unitary(sub_idle, beta, z0)
        gate_ops = [(U, _dagger(U)) for U in (unitary(g, beta, z0) for g in seq.gates)]
    else:
        apply = lambda kraus, rho: operate(rho, kraus)
        idle_op = kraus_operators(sub_idle, beta, weights, z0)
        gate_ops = [
            (K, [_dagger(k) for k in K])
            for K in (kraus_operators(g, beta, weights, z0) for g in seq.gates)
        ]

    states = []
    for _ in range(cycle):
        for i in seq.order:
            if i == 0:
                for _ in range(n):
                    state = apply(idle_op, state)
                    states.append(state)
            else:
                forward, backward = gate_ops[abs(i) - 1]
                state = apply(forward if i > 0 else backward, state)
                states.append(state)

    times = np.concatenate([ticks + k * seq.duration for k in range(cycle)])
    return times, states
