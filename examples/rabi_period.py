#! /usr/bin/env python

import matplotlib.pyplot as plt
import numpy as np

import spincontrol as sc
from spincontrol.utils import is_fast_run


def main(M=200, N=100, n_h=8):
    ensemble = sc.ensembles.SpinEnsemble(1.0, 3, [0, 0, 1], 0.05, 50)
    gamma = sc.estimations.dipolar_linewidth(ensemble, rng=0)

    h = gamma * np.logspace(-1, 1.5, n_h)
    periods = [
        sc.estimations.rabi_period(ensemble, hi, M=M, N=N, rng=2, progress=False)
        for hi in h
    ]

    plt.plot(h / gamma, np.array(periods) * h / np.pi, "o-")
    plt.axhline(1, color="k", linestyle="--", linewidth=1)
    plt.xscale("log")
    plt.xlabel("$h / \\Gamma$", size=14)
    plt.ylabel("$T_\\pi h / \\pi$", size=14)
    plt.title("Rabi flip time relative to the bare drive", size=16)
    path = __file__[:-3] + f"_{0}.png"
    plt.savefig(path)

    plt.clf()
    t = np.linspace(0, 4 * np.pi / h[-1], 101)
    for axis in (1, 2, 3):
        signal = sc.dynamics.rabi(t, ensemble, h[-1], M=M, N=N, axis=axis, rng=3)
        sc.plot.plot_signal(t, signal, label=f"axis {axis}", colour=f"C{axis}")
    plt.legend()
    path = __file__[:-3] + f"_{1}.png"
    plt.savefig(path)

    return 0


if __name__ == "__main__":
    if is_fast_run():
        main(M=5, N=10, n_h=3)
    else:
        main()
