import numpy as np


def pauli() -> dict:
    """Generate the spin-1/2 Pauli matrices.

    Return:
        dict: A dictionary containing 4 `np.array` matrices of
        shape `(2, 2)`:
            - the unit operator `result["u"]`,
            - Pauli matrix for x axis `result["x"]`,
            - Pauli matrix for y axis `result["y"]`,
            - Pauli matrix for z axis `result["z"]`.

    >>> sigma = pauli()
    >>> bool(np.allclose(sigma["x"] @ sigma["x"], sigma["u"]))
    True
    """
    result = {}
    result["u"] = np.array([[1.0, 0.0], [0.0, 1.0]], dtype=complex)
    result["x"] = np.array([[0.0, 1.0], [1.0, 0.0]], dtype=complex)
    result["y"] = np.array([[0.0, -1.0j], [1.0j, 0.0]], dtype=complex)
    result["z"] = np.array([[1.0, 0.0], [0.0, -1.0]], dtype=complex)
    return result


SIGMA = pauli()


def bloch_vector(state: np.ndarray) -> np.ndarray:
    """Bloch vector of a qubit state.

    Args:
        state (np.ndarray): Either a state vector of shape `(2,)` or
            a density matrix of shape `(2, 2)`.

    Returns:
        np.ndarray: The expectation values `(<σx>, <σy>, <σz>)`.

    >>> bloch_vector(np.array([1, 0]))
    array([0., 0., 1.])
    """
    state = np.asarray(state)
    if state.ndim == 1:
        rho = np.outer(state, state.conj())
    else:
        rho = state
    return np.array(
        [np.real(np.trace(SIGMA[k] @ rho)) for k in ("x", "y", "z")]
    )
