#! /usr/bin/env python

import matplotlib.pyplot as plt
import numpy as np

import spincontrol as sc
from spincontrol.utils import is_fast_run


def main(N=200, n=20, cycle=10):
    ensemble = sc.ensembles.SpinEnsemble(1.0, 3, [0, 0, 1], 0.05, 50)
    cluster = sc.ensembles.SpinCluster(ensemble, rng=0)
    T2 = sc.estimations.coherence_time(cluster)
    betas = sc.ensembles.beta_sampling(cluster, N)

    psi = np.array([1, 1]) / np.sqrt(2)
    rho0 = np.outer(psi, psi.conj())
    h = 100 / T2

    sequences = {
        "CP": sc.sequences.cp(T2 / 4, h),
        "XY-4": sc.sequences.xy(T2 / 4, h),
        "XY-8": sc.sequences.xy(T2 / 4, h, symmetry=True),
    }
    for name, seq in sequences.items():
        times, states = sc.evolution.deploy(rho0, seq, n, betas, cycle=cycle)
        fidelity = [sc.utils.state_fidelity(rho0, rho) for rho in states]
        plt.plot(times / T2, fidelity, label=f"{name}")
        print(f"{name}: {seq}")
        print(f"  final fidelity {fidelity[-1]:.4f}")

    idle = sc.sequences.Sequence(sc.sequences.Idle(T2 / 4), [], [0])
    times, states = sc.evolution.deploy(rho0, idle, n, betas, cycle=cycle * 4)
    plt.plot(times / T2, [sc.utils.state_fidelity(rho0, rho) for rho in states], "k--", label="free")

    plt.xlabel("$t / T_2$", size=14)
    plt.ylabel("Fidelity", size=14)
    plt.legend()
    path = __file__[:-3] + f"_{0}.png"
    plt.savefig(path)

    plt.clf()
    times, states = sc.evolution.deploy(psi, sequences["XY-4"], n, betas[0], cycle=2)
    sc.plot.plot_bloch_trajectory(times, states)
    path = __file__[:-3] + f"_{1}.png"
    plt.savefig(path)

    return 0


if __name__ == "__main__":
    if is_fast_run():
        main(N=20, n=5, cycle=2)
    else:
        main()
