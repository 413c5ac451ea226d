"""
Result envelope for consistent success/failure handling.

``EventBus.publish`` returns a ``Result[Dispatch]`` rather than raising:
a refused transfer is an expected outcome that the caller must look at,
not an exceptional one. ``Ok`` wraps a value, ``Err`` wraps the
``VigieError`` that explains why nothing happened.

Manifesto:
    - **Explicit over Implicit:** A refused transfer is a value, not a stack unwind
    - **Per-record outcomes:** Ingestion wraps every load step and keeps going
    - **Pattern matching:** ``match result: case Ok(v) ... case Err(e) ...``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                     Result[T]                                │
        ├─────────────────┬─────────────────┬─────────────────────────┤
        │     Ok[T]       │     Err[T]      │     Utilities           │
        ├─────────────────┼─────────────────┼─────────────────────────┤
        │ • value: T      │ • error: Exc    │ • try_result()          │
        │ • unwrap()      │ • unwrap_err()  │                         │
        │ • unwrap_or()   │ • unwrap_or()   │                         │
        └─────────────────┴─────────────────┴─────────────────────────┘

Examples:
    >>> from vigie.core.result import Ok, Err
    >>> Ok(10).unwrap()
    10
    >>> Err(ValueError("oops")).unwrap_or(0)
    0

Tags:
    result-pattern, error-handling, vigie

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from vigie.core.errors import VigieError


T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful result containing a value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Get the value. Safe for Ok."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def unwrap_err(self) -> Exception:
        raise ValueError(f"Called unwrap_err on {self!r}")

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """Failed result containing an error."""

    error: Exception

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Raise the error. Use only when you're sure it's Ok."""
        raise self.error

    def unwrap_or(self, default: T) -> T:
        return default

    def unwrap_err(self) -> Exception:
        return self.error

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Ok[T] | Err[T]


def try_result(f: Callable[[], T], *, catch: tuple[type[Exception], ...] = (VigieError,)) -> Result[T]:
    """
    Execute a zero-argument callable and wrap its outcome.

    Only the exception types in ``catch`` become ``Err``; anything else
    propagates, so programming errors are not mistaken for refusals.

    Examples:
        >>> try_result(lambda: 1 + 1).unwrap()
        2
        >>> from vigie.core.errors import UnknownEntity
        >>> def missing():
        ...     raise UnknownEntity("nobody")
        >>> try_result(missing).is_err()
        True
    """
    try:
        return Ok(f())
    except catch as e:
        return Err(e)


__all__ = [
    "Ok",
    "Err",
    "Result",
    "try_result",
]
