"""Ok/Err result values.

Remote calls and reconciliation steps return a Result instead of raising, so
each caller decides at the call site whether a failure is fatal.

    match client.get_release_by_tag(owner, repo, tag, deadline=deadline):
        case Ok(release):
            ...
        case Err(error) if error.not_found:
            ...
        case Err(error):
            return Err(RemoteServiceError(action="failed to get release", error=error))
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

T = TypeVar("T")
E = TypeVar("E")
F = TypeVar("F")


@dataclass(frozen=True, slots=True)
class Ok[T]:
    value: T

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map_err(self, f: Callable[[E], F]) -> Ok[T]:
        return self


@dataclass(frozen=True, slots=True)
class Err[E]:
    error: E

    def unwrap(self) -> None:
        """Raise ValueError carrying the error. Only for tests and scripts."""
        raise ValueError(f"unwrap() on Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        return default

    def map_err(self, f: Callable[[E], F]) -> Err[F]:
        """Replace the error, e.g. to attach the action that was attempted."""
        return Err(f(self.error))


type Result[T, E] = Ok[T] | Err[E]
