"""
Result envelope for executor outcomes.

An executor either succeeds or fails with a typed error. ``Ok[T]`` and
``Err[T]`` make that explicit: the workflow composer inspects the outcome
instead of relying on exceptions travelling through the whole chain.

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                     Result[T]                                │
        ├─────────────────┬─────────────────┬─────────────────────────┤
        │     Ok[T]       │     Err[T]      │     Utilities           │
        ├─────────────────┼─────────────────┼─────────────────────────┤
        │ • value: T      │ • error: Exc    │ • try_result()          │
        │ • map()         │ • inspect_err() │                         │
        │ • unwrap()      │ • unwrap()      │                         │
        └─────────────────┴─────────────────┴─────────────────────────┘

Examples:
    >>> from mu.core.result import Ok, Err
    >>> Ok(10).map(lambda x: x * 2).unwrap()
    20
    >>> Err(ValueError("oops")).map(lambda x: x * 2).is_err()
    True

Guardrails:
    ❌ DON'T: Call unwrap() on a result you have not checked
    ✅ DO: Use is_err() or pattern matching

Tags:
    result-pattern, error-handling, mu-core
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from mu.core.errors import MuError

T = TypeVar("T")
U = TypeVar("U")


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

    def map(self, f: Callable[[T], U]) -> Result[U]:
        """Transform the value if Ok."""
        return Ok(f(self.value))

    def inspect_err(self, f: Callable[[Exception], None]) -> Result[T]:
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"ok": True, "value": self.value}

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """
    Failed result containing an error.

    ``map`` passes the same error through untouched, so a chain of
    operations stops contributing work at the first failure.
    """

    error: Exception

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Raise the error. Use only when you're sure it's Ok."""
        raise self.error

    def map(self, f: Callable[[T], U]) -> Result[U]:
        return Err(self.error)

    def inspect_err(self, f: Callable[[Exception], None]) -> Result[T]:
        """Call f with error for side effects, return self."""
        f(self.error)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        if isinstance(self.error, MuError):
            return {"ok": False, "error": self.error.to_dict()}
        return {
            "ok": False,
            "error": {
                "error_type": type(self.error).__name__,
                "message": str(self.error),
            },
        }

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Ok[T] | Err[T]


def try_result(
    f: Callable[[], T],
    *,
    catch: type[Exception] | tuple[type[Exception], ...] = MuError,
) -> Result[T]:
    """
    Run ``f`` and wrap the outcome in a Result.

    Only exceptions matching ``catch`` become ``Err``; anything else is a
    bug and propagates to the caller unchanged.

    Examples:
        >>> try_result(lambda: 42).unwrap()
        42
        >>> try_result(lambda: int("x"), catch=ValueError).is_err()
        True
    """
    try:
        return Ok(f())
    except catch as e:
        return Err(e)


__all__ = ["Ok", "Err", "Result", "try_result"]
