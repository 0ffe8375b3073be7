# qstep/rng.py
import numpy as np

_SEED_MASK = 0xFFFFFFFF


class SeededRNG:
    """Reproducible uniform generator for measurement sampling.

    The 32-bit seed is expanded by numpy's SeedSequence into PCG64 state, so
    the same seed always replays the same sequence of ``next()`` values.
    One instance belongs to one simulation (or shot-sampling) run.
    """

    def __init__(self, seed: int = 42):
        self._seed = int(seed) & _SEED_MASK
        self._gen = np.random.Generator(np.random.PCG64(np.random.SeedSequence(self._seed)))

    @property
    def seed(self) -> int:
        return self._seed

    def next(self) -> float:
        """Uniform double in [0, 1)."""
        return float(self._gen.random())

    def __repr__(self) -> str:
        return f"SeededRNG(seed={self._seed})"
