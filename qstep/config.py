# qstep/config.py
"""
Configuration for the column simulator.
"""
from __future__ import annotations

from dataclasses import dataclass

BACKENDS = ("serial", "numba")


@dataclass
class SimulatorConfig:
    """Knobs shared by the statevector engine, measurement and shot sampling."""

    # Kernel backend: "serial" (plain Python loops) or "numba" (JIT, single-threaded)
    backend: str = "serial"

    # Run-level seed used whenever the caller does not pass one explicitly
    seed: int = 42

    # |1 - ||psi||^2| above this is logged after unitary columns
    norm_tol: float = 1e-9
    check_norm: bool = True

    # Retained squared norm below this skips renormalisation after a collapse
    collapse_eps: float = 1e-15

    max_qubits: int = 5

    def __post_init__(self):
        if self.backend not in BACKENDS:
            raise ValueError(f"Unknown backend {self.backend!r}; expected one of {BACKENDS}")
        if not 1 <= self.max_qubits:
            raise ValueError("max_qubits must be >= 1")


DEFAULT_CONFIG = SimulatorConfig()
