"""
Outcome envelope returned by every operation.

Provides :class:`Outcome`, a tagged success/failure result. Every
``Operation.perform()`` returns one and ``Operation.invoke()`` guarantees one,
even when ``perform()`` raises. Exactly one branch is meaningful at a time:
a success carries ``data``, a failure carries ``error`` (and optionally the raw
``details``).

A success may also carry a *next operation*. That tag is decided when the
Outcome is constructed with :meth:`Outcome.then`, so the chain runner never has
to guess whether a value "looks like" an operation.

Manifesto:
    - **Operations never throw:** Callers branch on ``success``, not try/except
    - **Explicit chaining:** ``Outcome.then(op)`` is the only way to continue
      a chain; a plain value always terminates it
    - **Cancellation is success:** A user backing out is ``Outcome.ok(None)``

Architecture:
    ::

        ┌───────────────────────────────────────────────────────────┐
        │                       Outcome[T]                           │
        ├───────────────────┬───────────────────┬───────────────────┤
        │   ok(data)        │  then(operation)  │  fail(error, ...) │
        │   success=True    │  success=True     │  success=False    │
        │   data=T          │  data=operation   │  error=str        │
        │                   │  next_operation   │  details=Any      │
        └───────────────────┴───────────────────┴───────────────────┘

Examples:
    >>> Outcome.ok(42).data
    42
    >>> Outcome.fail("Invalid menu selection").success
    False
    >>> format_outcome(Outcome.ok("yes"))
    '✅ { success: true, data: yes }'

Tags:
    result-pattern, outcome, chaining, opchain

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from opchain.framework.operations.base import Operation

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Outcome(Generic[T]):
    """Tagged success/failure result.

    Use the factory methods :meth:`ok`, :meth:`then` and :meth:`fail`
    instead of the constructor.

    Attributes:
        success: ``True`` when the operation completed without error.
        data: The payload (``None`` on failure).
        error: Human-readable failure message (``None`` on success).
        details: Raw failure detail, e.g. the exception that escaped ``perform()``.
        next_operation: Operation to run next when this Outcome continues a chain.
    """

    success: bool
    data: T | None = None
    error: str | None = None
    details: Any = None
    next_operation: Operation[Any] | None = None

    # ------------------------------------------------------------------ #
    # Factory helpers
    # ------------------------------------------------------------------ #

    @classmethod
    def ok(cls, data: T) -> Outcome[T]:
        """Create a terminal successful outcome."""
        return cls(success=True, data=data)

    @classmethod
    def then(cls, operation: Operation[Any]) -> Outcome[Any]:
        """Create a successful outcome whose data is the next operation to run."""
        return cls(success=True, data=operation, next_operation=operation)

    @classmethod
    def fail(cls, error: str, details: Any = None) -> Outcome[T]:
        """Create a failed outcome."""
        return cls(success=False, error=error, details=details)

    @property
    def continues_chain(self) -> bool:
        """Whether the chain runner should invoke :attr:`next_operation`."""
        return self.success and self.next_operation is not None

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a plain dict (for JSON output)."""
        d: dict[str, Any] = {"success": self.success}
        if self.success:
            if self.next_operation is not None:
                d["next_operation"] = self.next_operation.name
            elif self.data is not None:
                d["data"] = self.data
        else:
            d["error"] = self.error
            if self.details is not None:
                d["details"] = str(self.details)
        return d


def format_outcome(outcome: Outcome[Any]) -> str:
    """Render an outcome as the one-line form echoed into operation logs."""
    if outcome.success:
        data = outcome.next_operation.name if outcome.next_operation is not None else outcome.data
        return f"✅ {{ success: true, data: {data} }}"
    return f"❌ {{ success: false, error: {outcome.error}, details: {outcome.details} }}"


__all__ = ["Outcome", "format_outcome"]
