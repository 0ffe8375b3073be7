# qstep/measurement.py
"""Computational-basis measurement: distributions, sampling and partial collapse.

Labels are ``format(index, "0{n}b")``: qubit 0 is the *last* character.
"""
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

import numpy as np

from .errors import ConfigurationError
from .logging import get_logger
from .rng import SeededRNG

logger = get_logger(__name__)

PROBABILITY = "probability"
SHOT = "shot"
MODES = (PROBABILITY, SHOT)


@dataclass(frozen=True)
class MeasurementSummary:
    """What a column's measurement gates report.

    ``probabilities`` is always the full pre-measurement basis distribution.
    ``outcome`` and ``post_state`` are set only in shot mode.
    """
    probabilities: Dict[str, float]
    measured: Tuple[int, ...]
    outcome: Optional[str] = None
    post_state: Optional[np.ndarray] = None

    def marginal(self) -> Dict[str, float]:
        return marginal_probabilities(self.probabilities, self.measured)


def basis_label(index: int, num_qubits: int) -> str:
    return format(index, f"0{num_qubits}b")


def probabilities(psi: np.ndarray) -> np.ndarray:
    return np.abs(psi) ** 2


def probability_map(psi: np.ndarray, num_qubits: int) -> Dict[str, float]:
    probs = probabilities(psi)
    return {basis_label(i, num_qubits): float(p) for i, p in enumerate(probs)}


def sample_index(probs: Sequence[float], rng: SeededRNG) -> int:
    """Index of the first cumulative probability strictly exceeding r ~ U[0, 1).

    Falls back to the last index when rounding leaves r >= the total.
    """
    r = rng.next()
    cumulative = 0.0
    for i, p in enumerate(probs):
        cumulative += p
        if r < cumulative:
            return i
    return len(probs) - 1


def measured_mask(measured: Sequence[int]) -> int:
    mask = 0
    for q in measured:
        mask |= 1 << q
    return mask


def collapse(psi: np.ndarray, measured: Sequence[int], outcome: int, eps: float = 1e-15) -> np.ndarray:
    """Project onto basis states agreeing with ``outcome`` on the measured bits.

    Returns a new, renormalised vector; unmeasured qubits keep their relative
    amplitudes. If the retained norm is below ``eps`` the projection is
    returned unscaled.
    """
    mask = measured_mask(measured)
    want = outcome & mask
    keep = (np.arange(psi.shape[0]) & mask) == want
    out = np.where(keep, psi, 0.0).astype(np.complex128)
    kept = float(np.sum(np.abs(out) ** 2))
    if kept > eps:
        out /= np.sqrt(kept)
    else:
        logger.warning("Collapse retained norm %.3e below %.1e; skipping renormalisation", kept, eps)
    return out


def marginal_probabilities(prob_map: Dict[str, float], measured: Sequence[int]) -> Dict[str, float]:
    """Sum a full-basis distribution over the unmeasured qubits.

    Keys are the measured bits, highest qubit first (the same reading order
    as full labels), e.g. measured (0, 2) on "101" -> "11".
    """
    order = sorted(set(measured), reverse=True)
    out: Dict[str, float] = {}
    for label, p in prob_map.items():
        n = len(label)
        if order and not (0 <= order[-1] and order[0] < n):
            raise ConfigurationError(f"Measured qubits {tuple(measured)} out of range for {n}-qubit labels")
        key = "".join(label[n - 1 - q] for q in order)
        out[key] = out.get(key, 0.0) + p
    return dict(sorted(out.items()))


def measure_column(psi: np.ndarray, measured: Sequence[int], num_qubits: int,
                   mode: str = PROBABILITY, rng: Optional[SeededRNG] = None,
                   eps: float = 1e-15) -> MeasurementSummary:
    """Summarise (probability mode) or sample and collapse (shot mode).

    ``psi`` is never modified; in shot mode the collapsed vector is in
    ``post_state``.
    """
    if mode not in MODES:
        raise ValueError(f"Unknown measurement mode {mode!r}; expected one of {MODES}")
    measured = tuple(measured)
    probs = probabilities(psi)
    prob_map = {basis_label(i, num_qubits): float(p) for i, p in enumerate(probs)}

    if mode == PROBABILITY:
        return MeasurementSummary(prob_map, measured)

    if rng is None:
        raise ValueError("shot mode needs an explicit SeededRNG")
    index = sample_index(probs, rng)
    post = collapse(psi, measured, index, eps)
    label = basis_label(index, num_qubits)
    logger.debug("Sampled %s on qubits %s", label, measured)
    return MeasurementSummary(prob_map, measured, outcome=label, post_state=post)
