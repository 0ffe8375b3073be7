# qstep/state.py
import numpy as np
from dataclasses import dataclass

from .cplx import pairs_to_array
from .errors import ConfigurationError


def num_qubits_for(length: int) -> int:
    """n such that 2**n == length; raises ConfigurationError otherwise."""
    if length < 2 or length & (length - 1):
        raise ConfigurationError(f"State length {length} is not a power of two >= 2")
    return length.bit_length() - 1


def as_vector(values, num_qubits: int = None) -> np.ndarray:
    """Fresh complex128 copy of ``values`` (array, complex list or (re, im) pairs).

    Never pads or truncates: a length other than 2**num_qubits is an error.
    """
    if isinstance(values, State):
        values = values.psi
    if isinstance(values, np.ndarray) and values.dtype.kind == "c":
        psi = np.array(values, dtype=np.complex128).ravel()
    else:
        psi = pairs_to_array(values)
    if num_qubits is None:
        num_qubits_for(psi.shape[0])
    elif psi.shape[0] != (1 << num_qubits):
        raise ConfigurationError(
            f"State vector length {psi.shape[0]} does not match 2^{num_qubits}")
    return psi


@dataclass
class State:
    n: int
    psi: np.ndarray  # shape (2**n,), complex128; qubit k is bit k of the index

    @staticmethod
    def zero(n: int) -> "State":
        N = 1 << n
        psi = np.zeros(N, dtype=np.complex128)
        psi[0] = 1.0 + 0.0j
        return State(n=n, psi=psi)

    @staticmethod
    def from_vector(values) -> "State":
        psi = as_vector(values)
        return State(n=num_qubits_for(psi.shape[0]), psi=psi)

    @property
    def dim(self) -> int:
        return self.psi.shape[0]

    def norm2(self) -> float:
        return float(np.vdot(self.psi, self.psi).real)

    def check_normalized(self, tol=1e-9):
        n2 = self.norm2()
        if not (abs(1.0 - n2) <= tol):
            raise AssertionError(f"Normalization failed: ||psi||^2={n2}")

    def probabilities(self) -> np.ndarray:
        return np.abs(self.psi) ** 2

    def copy(self) -> "State":
        return State(self.n, self.psi.copy())

    def as_numpy(self) -> np.ndarray:
        return self.psi
