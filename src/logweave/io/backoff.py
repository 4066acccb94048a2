"""Delay strategies between delivery retries.

- ExponentialBackoff: base * multiplier^attempt, capped, optional jitter
- ConstantBackoff: fixed delay (``ConstantBackoff(0)`` retries immediately)
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@runtime_checkable
class Backoff(Protocol):
    """Computes the pause before a retry. Attempts are 0-indexed (first retry = 0)."""

    def delay(self, attempt: int) -> float:
        """Seconds to wait before retry number ``attempt``."""
        ...


@dataclass(frozen=True, slots=True)
class ExponentialBackoff:
    """Delay = min(base * multiplier^attempt, max_delay), scaled by 0.5-1.5x when ``jitter``.

    The default schedule (1s, 2s, 4s ... capped at 30s) is deterministic.
    """

    base: float = 1.0
    max_delay: float = 30.0
    multiplier: float = 2.0
    jitter: bool = False

    def delay(self, attempt: int) -> float:
        d = min(self.base * (self.multiplier ** attempt), self.max_delay)
        return d * (0.5 + random.random()) if self.jitter else d


@dataclass(frozen=True, slots=True)
class ConstantBackoff:
    """Fixed delay between retries."""

    delay_seconds: float = 1.0

    def delay(self, attempt: int) -> float:
        return self.delay_seconds
