"""
Seeded linear-congruential random source.

Every generator owns one SeededRandom and reseeds it at the start of each
generation call, so identical inputs always replay the same draw sequence.
The sequence is defined by integer arithmetic only and is therefore
identical across platforms and numpy versions.
"""

from typing import Optional

_MULTIPLIER = 1103515245
_INCREMENT = 12345
_MASK = 0x7FFFFFFF

DEFAULT_SEED = 42


class SeededRandom:
    """Deterministic LCG producing floats in [0, 1]."""

    def __init__(self, seed: Optional[int] = None):
        self.seed = DEFAULT_SEED
        self.reseed(seed)

    def reseed(self, seed: Optional[int] = None) -> None:
        self.seed = (DEFAULT_SEED if seed is None else int(seed)) & _MASK

    def random(self) -> float:
        self.seed = (self.seed * _MULTIPLIER + _INCREMENT) & _MASK
        return self.seed / _MASK

    def uniform(self, low: float, high: float) -> float:
        return low + self.random() * (high - low)

    def index(self, n: int) -> int:
        """Random index in [0, n)."""
        return min(int(self.random() * n), n - 1)


__all__ = ["SeededRandom", "DEFAULT_SEED"]
