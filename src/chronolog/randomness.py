"""Injectable source of uniform random integers.

``random.Random`` and ``random.SystemRandom`` both satisfy the protocol; tests
pass scripted sources to pin exact roulette buckets and catalog picks.
"""

from __future__ import annotations

import random
from typing import Protocol


class RandomSource(Protocol):
    def randrange(self, stop: int) -> int:
        """Return a uniform integer in ``[0, stop)``."""
        ...


_system_random = random.SystemRandom()


def get_random_source() -> RandomSource:
    """FastAPI dependency returning the process-wide random source."""
    return _system_random
