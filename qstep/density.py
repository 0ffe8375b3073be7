# qstep/density.py
"""Density-matrix engine for mixed initial states.

rho is a (2^n, 2^n) complex128 array with the same little-endian index
convention as state vectors. Only single-qubit conjugation rho -> U rho U^dagger
is supported; multi-qubit gates raise UnsupportedGateError.
"""
from typing import Iterable, Sequence, Tuple

import numpy as np

from .errors import ConfigurationError, UnsupportedGateError
from .gates import Gate, is_single_qubit, single_qubit_matrix
from .logging import get_logger
from .state import as_vector

logger = get_logger(__name__)


def _check_square(rho: np.ndarray) -> int:
    if rho.ndim != 2 or rho.shape[0] != rho.shape[1]:
        raise ConfigurationError(f"Density matrix must be square, got shape {rho.shape}")
    dim = rho.shape[0]
    if dim < 2 or dim & (dim - 1):
        raise ConfigurationError(f"Density matrix dimension {dim} is not a power of two")
    return dim


def from_pure_state(vector) -> np.ndarray:
    """rho[i, j] = psi[i] * conj(psi[j])."""
    psi = as_vector(vector)
    return np.outer(psi, psi.conj())


def from_ensemble(ensemble: Iterable[Tuple[float, object]]) -> np.ndarray:
    """sum_k p_k |psi_k><psi_k|; weights are taken as given (not renormalised)."""
    rho = None
    for prob, vector in ensemble:
        term = float(prob) * from_pure_state(vector)
        if rho is None:
            rho = term
        elif term.shape != rho.shape:
            raise ConfigurationError("Ensemble members have different dimensions")
        else:
            rho = rho + term
    if rho is None:
        raise ConfigurationError("Ensemble is empty")
    return rho


def apply_single_qubit_gate(rho: np.ndarray, U: np.ndarray, target: int) -> np.ndarray:
    """Return U rho U^dagger for a 2x2 U on ``target``; ``rho`` is not modified."""
    rho = np.asarray(rho, dtype=np.complex128)
    dim = _check_square(rho)
    if not 0 <= target < dim.bit_length() - 1:
        raise ConfigurationError(f"Target qubit {target} out of range")
    U = np.asarray(U, dtype=np.complex128)
    bit = 1 << target
    u00, u01, u10, u11 = U[0, 0], U[0, 1], U[1, 0], U[1, 1]

    # U rho: pair rows across the target bit, every column at once
    u_rho = rho.copy()
    for i0 in range(dim):
        if i0 & bit:
            continue
        i1 = i0 | bit
        a0, a1 = rho[i0, :], rho[i1, :]
        u_rho[i0, :] = u00 * a0 + u01 * a1
        u_rho[i1, :] = u10 * a0 + u11 * a1

    # (U rho) U^dagger: pair columns, entries of U^dagger are conj(U[j, i])
    out = u_rho.copy()
    for j0 in range(dim):
        if j0 & bit:
            continue
        j1 = j0 | bit
        b0, b1 = u_rho[:, j0], u_rho[:, j1]
        out[:, j0] = b0 * np.conj(u00) + b1 * np.conj(u01)
        out[:, j1] = b0 * np.conj(u10) + b1 * np.conj(u11)
    return out


def apply_column_density(rho: np.ndarray, gates: Sequence[Gate], num_qubits: int) -> np.ndarray:
    """Conjugate by every single-qubit gate in a column; measurement gates are skipped."""
    rho = np.asarray(rho, dtype=np.complex128)
    if rho.shape != (1 << num_qubits, 1 << num_qubits):
        raise ConfigurationError(f"Density matrix shape {rho.shape} does not match {num_qubits} qubits")
    for gate in gates:
        if gate.is_measure:
            continue
        if not is_single_qubit(gate.kind):
            raise UnsupportedGateError(f"{gate.name} is not supported by the density-matrix engine")
        rho = apply_single_qubit_gate(rho, single_qubit_matrix(gate), gate.targets[0])
        logger.debug("Conjugated rho by %s on qubit %d", gate.name, gate.targets[0])
    return rho


def marginal_probability_of_one(rho: np.ndarray, target: int) -> float:
    """P(qubit ``target`` = 1) = sum of Re rho[i, i] over i with that bit set."""
    rho = np.asarray(rho)
    dim = _check_square(rho)
    if not 0 <= target < dim.bit_length() - 1:
        raise ConfigurationError(f"Target qubit {target} out of range")
    bit = 1 << target
    return float(sum(rho[i, i].real for i in range(rho.shape[0]) if i & bit))


def diagonal_probabilities(rho: np.ndarray) -> np.ndarray:
    return np.real(np.diag(rho)).copy()


def trace(rho: np.ndarray) -> complex:
    return complex(np.trace(rho))


def is_hermitian(rho: np.ndarray, atol: float = 1e-12) -> bool:
    return bool(np.allclose(rho, np.conj(rho).T, atol=atol, rtol=0))
