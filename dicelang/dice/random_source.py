"""Random sources for dice draws.

The evaluator takes any object with a ``randint(low, high)`` method, so tests
can script draws and services can pick their own generator.
"""

import secrets
from typing import Protocol, runtime_checkable


@runtime_checkable
class RandomSource(Protocol):
    """Uniform integer generator used for every die draw."""

    def randint(self, a: int, b: int) -> int:
        """Return a uniformly random integer N with a <= N <= b."""
        ...


def system_random() -> RandomSource:
    """Create a cryptographically strong source backed by the OS.

    ``SystemRandom`` keeps no generator state of its own, so a fresh instance
    per evaluation never races with other rollers.
    """
    return secrets.SystemRandom()
