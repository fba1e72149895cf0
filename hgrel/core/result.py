"""Result type for explicit error handling.

Every pipeline step, the process runner and config loading return a
``Result`` instead of raising, so a failure travels back to the CLI as a
value and only the CLI decides the process exit status.

Usage:
    match run_captured(invocation):
        case Ok(result):
            print(result.stdout)
        case Err(error):
            print(f"could not start: {error.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful result carrying a value."""

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failed result carrying an error value."""

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result: TypeAlias = Ok[T] | Err[E]
