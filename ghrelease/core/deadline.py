"""Deadline token passed explicitly to every remote call.

A run has one overall time budget. Each network call asks the token how much
time is left and uses that as its socket timeout; once the budget is spent,
calls fail without touching the network and the run aborts at that step.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field

__all__ = ["Deadline", "DEFAULT_CALL_TIMEOUT_SECONDS"]

# Upper bound for a single call, even when the overall budget is larger.
DEFAULT_CALL_TIMEOUT_SECONDS = 60.0


@dataclass(frozen=True, slots=True)
class Deadline:
    """Absolute point in time after which no new remote call is started.

    Attributes:
        expires_at: Clock value at which the deadline fires (None = never).
        clock: Monotonic clock, injectable for tests.
    """

    expires_at: float | None = None
    clock: Callable[[], float] = field(default=time.monotonic, compare=False, repr=False)

    @classmethod
    def after(cls, seconds: float, *, clock: Callable[[], float] = time.monotonic) -> Deadline:
        """Create a deadline `seconds` from now."""
        return cls(expires_at=clock() + seconds, clock=clock)

    @classmethod
    def never(cls) -> Deadline:
        return cls(expires_at=None)

    def remaining(self) -> float | None:
        """Seconds left, clamped at 0. None when there is no deadline."""
        if self.expires_at is None:
            return None
        return max(0.0, self.expires_at - self.clock())

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0.0

    def call_timeout(self, cap: float = DEFAULT_CALL_TIMEOUT_SECONDS) -> float:
        """Timeout to use for the next call: the smaller of cap and remaining."""
        remaining = self.remaining()
        if remaining is None:
            return cap
        return min(cap, remaining)
