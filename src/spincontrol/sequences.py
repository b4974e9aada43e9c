#! /usr/bin/env python
"""Control pulses and dynamical decoupling sequences.

A pulse is one of a closed set of variants:

- `Idle(t)`: free evolution for a time `t` (only the bath field acts);
- `SquarePulse(t, h, aim)`: a constant field of strength `h` along the
  unit vector `aim`, applied for a time `t`.

A `Sequence` combines an `Idle` period with a list of gate pulses and an
`order`. Each entry of `order` is

- `0`: one idle period,
- `k > 0`: gate `k` (1-based),
- `k < 0`: the inverse (adjoint) of gate `|k|`.

Factories for common sequences: `cp` (Carr-Purcell) and `xy` (XY-4,
XY-8 when `symmetry=True`), built from π pulses of duration `π / h`.
"""

from __future__ import annotations

from typing import Optional, Sequence as SequenceType, Union

import numpy as np

from .utils import normalize


class Idle:
    """Free evolution period.

    >>> Idle(3)
    Idle(t=3)
    """

    def __init__(self, t: float):
        """Idle constructor."""
        if t < 0:
            raise ValueError("Duration `t` needs to be non-negative!")
        self.t = t

    def __repr__(self) -> str:  # noqa D105
        return f"Idle(t={self.t})"


class SquarePulse:
    """Constant-amplitude control pulse.

    Args:
        t (float): Duration.
        h (float): Field strength (angular frequency).
        aim (array-like): Field direction, normalised on construction.
        name (str): Optional label used when printing sequences.

    >>> SquarePulse(np.pi, 1.0, [0, 2, 0], name="Y")
    Y(t=3.141592653589793, h=1.0, aim=[0.0, 1.0, 0.0])
    """

    def __init__(
        self,
        t: float,
        h: float,
        aim: SequenceType[float] = (1, 0, 0),
        name: Optional[str] = None,
    ):
        """SquarePulse constructor."""
        if t < 0:
            raise ValueError("Duration `t` needs to be non-negative!")
        self.t = t
        self.h = h
        self.aim = normalize(aim)
        self.name = name

    def __repr__(self) -> str:  # noqa D105
        name = self.name if self.name else "SquarePulse"
        return f"{name}(t={self.t}, h={self.h}, aim={self.aim.tolist()})"


Pulse = Union[Idle, SquarePulse]


class Sequence:
    """Pulse sequence repeated in cycles.

    Args:
        idle (Idle): The base free evolution period.
        gates (list[Pulse]): Gate pulses, referenced 1-based by `order`.
        order (list[int]): Cyclic gate order (see module docstring).
        names (list[str]): Labels of the gates; defaults to the pulse
            names, or `G1`, `G2`, ...

    >>> X = SquarePulse(np.pi, 1.0, [1, 0, 0], name="X")
    >>> seq = Sequence(Idle(0.5), [X], [0, 1, 0, 0, -1, 0])
    >>> seq
    Sequence(τ=0.5): τ X τ τ X' τ
    >>> seq.counts
    (4, 2)
    """

    def __init__(
        self,
        idle: Idle,
        gates: SequenceType[Pulse],
        order: SequenceType[int],
        names: Optional[SequenceType[str]] = None,
    ):
        """Sequence constructor."""
        if not isinstance(idle, Idle):
            raise TypeError("The base period `idle` needs to be an `Idle` pulse!")
        gates = list(gates)
        order = [int(i) for i in order]
        for i in order:
            if abs(i) > len(gates):
                raise ValueError(
                    f"Gate index {i} in `order` out of range (only {len(gates)} gates)!"
                )
        if names is None:
            names = [
                getattr(g, "name", None) or f"G{k + 1}" for k, g in enumerate(gates)
            ]
        elif len(names) != len(gates):
            raise ValueError("Number of `names` needs to match the number of gates!")
        self.idle = idle
        self.gates = gates
        self.order = order
        self.names = list(names)

    def __repr__(self) -> str:  # noqa D105
        symbols = [
            "τ" if i == 0 else self.names[abs(i) - 1] + ("" if i > 0 else "'")
            for i in self.order
        ]
        return f"Sequence(τ={self.idle.t}): " + " ".join(symbols)

    @property
    def counts(self) -> tuple[int, int]:
        """Number of idle markers and gate markers in one cycle."""
        k = sum(1 for i in self.order if i == 0)
        return k, len(self.order) - k

    @property
    def duration(self) -> float:
        """Duration of one cycle."""
        return sum(
            self.idle.t if i == 0 else self.gates[abs(i) - 1].t for i in self.order
        )


def pi_pulse(h: float, aim: SequenceType[float], name: Optional[str] = None) -> SquarePulse:
    """π rotation of duration `π / h` about `aim`."""
    if h <= 0:
        raise ValueError("Field strength `h` needs to be positive!")
    return SquarePulse(np.pi / h, h, aim, name=name)


def cp(t: float, h: float) -> Sequence:
    """Carr-Purcell cycle `τ/2 X τ/2`.

    Args:
        t (float): Inter-pulse spacing `τ`.
        h (float): Pulse field strength.

    >>> cp(2.0, 10.0)
    Sequence(τ=1.0): τ X τ
    """
    X = pi_pulse(h, [1, 0, 0], "X")
    return Sequence(Idle(t / 2), [X], [0, 1, 0])


def xy(t: float, h: float, symmetry: bool = False) -> Sequence:
    """XY-4 cycle (XY-8 with `symmetry=True`).

    Each π pulse is centred in an inter-pulse spacing `τ`, i.e.
    surrounded by idle periods `τ/2`.

    >>> xy(2.0, 10.0)
    Sequence(τ=1.0): τ X τ τ Y τ τ X τ τ Y τ
    >>> xy(2.0, 10.0, symmetry=True).counts
    (16, 8)
    """
    X = pi_pulse(h, [1, 0, 0], "X")
    Y = pi_pulse(h, [0, 1, 0], "Y")
    pattern = [1, 2, 1, 2]
    if symmetry:
        pattern = pattern + pattern[::-1]
    order = []
    for g in pattern:
        order += [0, g, 0]
    return Sequence(Idle(t / 2), [X, Y], order)


def cycle_slice(seq: Sequence, n: int) -> np.ndarray:
    """Time stamps of the recorded steps within one cycle.

    Idle periods are split into `n` sub-steps of `idle.t / n`; each
    gate is one step of its own duration. The stamps are the end times
    of the steps, measured from the start of the cycle.

    >>> cycle_slice(cp(2.0, np.pi), 2)
    array([0.5, 1. , 2. , 2.5, 3. ])
    """
    if n < 1:
        raise ValueError("Number of sub-steps `n` needs to be positive!")
    dt = seq.idle.t / n
    steps = []
    for i in seq.order:
        if i == 0:
            steps += [dt] * n
        else:
            steps.append(seq.gates[abs(i) - 1].t)
    return np.cumsum(steps)
