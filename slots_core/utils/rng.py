"""
Random sources for grid generation and bonus-session decisions.

Every component that needs randomness takes a RandomSource explicitly. Only
the outer factories (create_app, configure) create the non-deterministic
default; tests pass a seeded Mulberry32RandomSource to replay an exact stream.
"""
import secrets
from typing import Optional

UINT32_MASK = 0xFFFFFFFF
_TWO_POW_32 = 4294967296


class RandomSource:
    """Produces uniform floats in [0, 1)."""

    def next(self) -> float:
        raise NotImplementedError

    def next_int(self, upper: int) -> int:
        """Uniform integer in [0, upper)."""
        if upper <= 0:
            raise ValueError("upper must be positive")
        # Guards against a float rounding up to 1.0 * upper.
        return min(int(self.next() * upper), upper - 1)


class SystemRandomSource(RandomSource):
    def __init__(self):
        self._random = secrets.SystemRandom()

    def next(self) -> float:
        return self._random.random()

    def __repr__(self):
        return "<SystemRandomSource>"


def _imul(a, b):
    return (a * b) & UINT32_MASK


class Mulberry32RandomSource(RandomSource):
    """Mulberry32: 32-bit state, one add-and-mix step per draw."""

    def __init__(self, seed: int):
        if isinstance(seed, bool) or not isinstance(seed, int):
            raise ValueError(f"Seed must be an integer, got {seed!r}")
        self.seed = seed & UINT32_MASK
        self._state = self.seed

    def next(self) -> float:
        self._state = (self._state + 0x6D2B79F5) & UINT32_MASK
        a = self._state
        t = _imul(a ^ (a >> 15), a | 1)
        t = ((t + _imul(t ^ (t >> 7), t | 61)) & UINT32_MASK) ^ t
        return ((t ^ (t >> 14)) & UINT32_MASK) / _TWO_POW_32

    def __repr__(self):
        return f"<Mulberry32RandomSource seed={self.seed}>"


def create_random_source(seed: Optional[int] = None) -> RandomSource:
    if seed is None:
        return SystemRandomSource()
    return Mulberry32RandomSource(seed)
