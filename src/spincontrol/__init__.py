from importlib.metadata import PackageNotFoundError, version

from . import (
    dynamics,
    ensembles,
    estimations,
    evolution,
    pauli_matrices,
    plot,
    sampling,
    sequences,
    utils,
)

try:
    __version__ = version("spincontrol")
except PackageNotFoundError:
    __version__ = "unknown"
