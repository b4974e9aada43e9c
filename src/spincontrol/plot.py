#! /usr/bin/env python

import matplotlib.pyplot as plt
import numpy as np

from .pauli_matrices import bloch_vector


def plot_signal(t, mean, var=None, ax=None, label=None, colour="C0", **kwargs):
    """Plot a Monte-Carlo signal with an optional one sigma band.

    Args:
            t (np.ndarray): Time points.
            mean (np.ndarray): Mean signal.
            var (np.ndarray): Sampling variance, as returned with
                `geterr=True`.
            ax (matplotlib.axes.Axes): Target axes (current axes by default).
            label (str): Legend label.
            colour (str): Line and band colour.

    Returns:
            matplotlib.axes.Axes: The axes drawn on.
    """
    if ax is None:
        ax = plt.gca()
    ax.plot(t, mean, color=colour, label=label, **kwargs)
    if var is not None:
        sigma = np.sqrt(np.asarray(var))
        ax.fill_between(t, mean - sigma, mean + sigma, color=colour, alpha=0.3)
    ax.set_xlabel("$t$", size=14)
    ax.set_ylabel("Signal", size=14)
    return ax


def plot_bloch_trajectory(times, states, ax=None):
    """Plot the Bloch vector components of a `deploy` trajectory."""
    if ax is None:
        ax = plt.gca()
    xyz = np.array([bloch_vector(s) for s in states])
    for k, name in enumerate(["x", "y", "z"]):
        ax.plot(times, xyz[:, k], label=f"$\\langle \\sigma_{name} \\rangle$")
    ax.set_xlabel("$t$", size=14)
    ax.set_ylabel("Bloch component", size=14)
    ax.set_ylim(-1.05, 1.05)
    ax.legend()
    return ax
