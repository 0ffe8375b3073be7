# qstep/shots.py
from collections import defaultdict
from typing import Dict, Mapping

import numpy as np

from .logging import get_logger
from .measurement import basis_label, probabilities, sample_index
from .rng import SeededRNG
from .state import as_vector

logger = get_logger(__name__)


def run_shots(final_state, num_qubits: int, shot_count: int, seed: int) -> Dict[str, int]:
    """Histogram of ``shot_count`` independent samples of the terminal state.

    Uses its own SeededRNG(seed); nothing is collapsed.
    """
    if shot_count < 0:
        raise ValueError(f"shot_count must be >= 0, got {shot_count}")
    psi = as_vector(final_state, num_qubits)
    probs = probabilities(psi)
    rng = SeededRNG(seed)
    counts = defaultdict(int)
    for _ in range(shot_count):
        counts[basis_label(sample_index(probs, rng), num_qubits)] += 1
    logger.debug("Sampled %d shots over %d outcomes (seed=%d)", shot_count, len(counts), rng.seed)
    return dict(sorted(counts.items()))


def counts_to_probs(counts: Mapping[str, int]) -> Dict[str, float]:
    total = sum(counts.values())
    if total <= 0:
        raise ValueError("counts must contain at least one shot")
    return {k: v / total for k, v in counts.items()}


def total_variation(counts: Mapping[str, int], expected: Mapping[str, float]) -> float:
    """Half the L1 distance between a histogram and an exact distribution."""
    observed = counts_to_probs(counts)
    keys = set(observed) | set(expected)
    return 0.5 * float(np.sum([abs(observed.get(k, 0.0) - expected.get(k, 0.0)) for k in keys]))
