"""Result type for explicit error handling.

Every fallible operation in shiplog (git calls, provider requests, config
loading) returns a Result instead of raising, so the release flow can
decide per call site whether a failure halts the run or is swallowed.

    match repo.get_diff("v1.0.0", "v1.1.0"):
        case Ok(commits):
            ...
        case Err(error):
            console.error(error.message)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

__all__ = ["Err", "Ok", "Result"]


@dataclass(frozen=True, slots=True)
class Ok[T]:
    value: T

    def map_err[F](self, f: Callable[[object], F]) -> Ok[T]:
        """Return self; there is no error to convert."""
        del f
        return self

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    error: E

    def map_err[F](self, f: Callable[[E], F]) -> Err[F]:
        """Convert the error payload, e.g. a ConfigError into a ReleaseError."""
        return Err(f(self.error))

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


type Result[T, E] = Ok[T] | Err[E]
