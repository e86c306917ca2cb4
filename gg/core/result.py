"""Result type for explicit error handling.

Per-repository failures, scan failures and config failures are all carried
as values instead of exceptions, so a batch of repository queries can keep
going when one of them breaks.

Usage:
    match inspect(path, QueryKind.STATUS, include_untracked=True):
        case Ok(entries):
            print(f"{len(entries)} changed files")
        case Err(failure):
            print(f"{failure.reason}: {failure.message}")
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """A successful result.

    Attributes:
        value: The success value.
    """

    value: T

    def map(self, f: Callable[[T], U]) -> Ok[U]:
        """Apply f to the contained value."""
        return Ok(f(self.value))

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    """A failed result.

    Attributes:
        error: The error value.
    """

    error: E

    def map(self, f: Callable[[object], object]) -> Err[E]:
        """Return self unchanged."""
        return self

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


type Result[T, E] = Ok[T] | Err[E]
