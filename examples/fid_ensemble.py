#! /usr/bin/env python

import matplotlib.pyplot as plt
import numpy as np

import spincontrol as sc
from spincontrol.utils import is_fast_run


def main(M=200, N=100, n_t=100):
    ensemble = sc.ensembles.SpinEnsemble(1.0, 3, [0, 0, 1], 0.02, 50)
    t = sc.estimations.relevant_time(ensemble, n_t, scale=3.0, rng=0)

    for h, colour in [(0.0, "C0"), (0.05, "C1"), (0.2, "C2")]:
        f, var = sc.dynamics.fid(t, ensemble, h, M=M, N=N, geterr=True, rng=1)
        sc.plot.plot_signal(t, f, var, label=f"$h = {h}$", colour=colour)

    T2 = sc.estimations.coherence_time(ensemble, rng=0)
    plt.axvline(T2, color="k", linestyle="--", linewidth=1)
    plt.title("Free induction decay in a dilute dipolar bath", size=16)
    plt.legend()
    path = __file__[:-3] + f"_{0}.png"
    plt.savefig(path)

    print(f"{T2=}")
    return 0


if __name__ == "__main__":
    if is_fast_run():
        main(M=10, N=20, n_t=20)
    else:
        main()
