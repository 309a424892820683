"""
Injectable time and randomness sources.

Stages never call datetime.now() or the random module directly. Tests pass a
FixedClock and a ScriptedRandom so both branches of every chance-based rule can
be forced.
"""

import random
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional


class Clock(ABC):
    """Source of the current time."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current time as a timezone-aware datetime."""
        ...


class SystemClock(Clock):
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """
    Clock frozen at a given instant.

    Naive datetimes are treated as UTC.
    """

    def __init__(self, fixed: datetime):
        if fixed.tzinfo is None:
            fixed = fixed.replace(tzinfo=timezone.utc)
        self._fixed = fixed

    def now(self) -> datetime:
        return self._fixed

    def advance(self, **kwargs) -> None:
        """Move the frozen instant forward, e.g. advance(days=2)."""
        self._fixed = self._fixed + timedelta(**kwargs)


class RandomSource(ABC):
    """Source of uniform draws in [0.0, 1.0)."""

    @abstractmethod
    def random(self) -> float:
        ...


class SystemRandom(RandomSource):
    """Pseudo-random draws, optionally seeded for reproducible demos."""

    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed)

    def random(self) -> float:
        return self._rng.random()


class ScriptedRandom(RandomSource):
    """
    Replays a fixed sequence of draws.

    Once the script is exhausted the fallback value is returned for every
    further draw.
    """

    def __init__(self, values: Iterable[float] = (), fallback: float = 0.99):
        self._values: List[float] = list(values)
        self.fallback = fallback
        self.draws = 0

    def random(self) -> float:
        self.draws += 1
        if self._values:
            return self._values.pop(0)
        return self.fallback
