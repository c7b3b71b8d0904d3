"""
avi/analysis/simulation.py
===========================
Placeholder Noise Source - AVI Interview Engine

Some response metrics have no real acoustic model behind them yet when the
extractor sends no data (pitch jitter, disfluency) and the demo flow adds a
simulated nervousness indicator on high-stress questions. Those draws come
ONLY from an object passed in by the caller, so the scoring formulas stay
deterministic: no noise source, no randomness.

This module does NOT:
    - Touch any scoring formula
    - Hold process-wide random state
"""

import logging
import random
from typing import Protocol

logger = logging.getLogger("avi.analysis.simulation")


class NoiseSource(Protocol):
    """Anything that yields floats in [0, 1)."""

    def draw(self) -> float: ...


class SeededNoise:
    """Reproducible noise source backed by its own random.Random instance."""

    def __init__(self, seed: int | None = None) -> None:
        self.seed = seed
        self._rng = random.Random(seed)

    def draw(self) -> float:
        return self._rng.random()

    def __repr__(self) -> str:
        return f"SeededNoise(seed={self.seed!r})"


class FixedNoise:
    """Returns the same value on every draw."""

    def __init__(self, value: float) -> None:
        if not 0.0 <= value < 1.0:
            raise ValueError(f"FixedNoise value must be in [0, 1), got {value}")
        self.value = value

    def draw(self) -> float:
        return self.value
