"""
Structured error types for the opchain runtime.

Provides a small hierarchy of typed errors that separates the three ways an
operation can go wrong: a lifecycle violation (a bug in how operations are
composed), a malformed scripted-input string, and a catastrophic crash that
escapes the chain runner. Expected business failures are NOT exceptions; they
travel through :class:`opchain.core.result.Outcome`.

Manifesto:
    - **Fail loudly on composition bugs:** Logging after finalize, popping the
      wrong stack frame or consuming the wrong scripted input kind all raise
    - **Fail early on bad scripts:** Script parse errors surface at queue
      construction, never at consumption time
    - **Rich context:** Errors carry the operation name/id and input position
    - **Error chaining:** Wrapped exceptions are preserved as ``cause``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                        OpchainError                              │
        │               (category, context, cause)                         │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  LifecycleError            ScriptParseError   OperationCrashed   │
        │  (LIFECYCLE)               (PARSE)            (INTERNAL)         │
        │       │                                                          │
        │  LoggerFinalizedError      OperationNotFoundError                │
        │  LoggerSuspendError        (CONFIG)                              │
        │  StackOrderError                                                 │
        │  OperationAlreadyInvokedError                                    │
        │  InputKindMismatchError                                          │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    >>> error = ScriptParseError("Unknown input kind 'jump'", position=3)
    >>> error.category
    <ErrorCategory.PARSE: 'PARSE'>
    >>> error.context.position
    3

    >>> error = LifecycleError("boom").with_context(operation="Main menu")
    >>> error.to_dict()["context"]
    {'operation': 'Main menu'}

Guardrails:
    ❌ DON'T: Raise these for expected user-facing failures
    ✅ DO: Return ``Outcome.fail(...)`` from ``perform()`` instead

    ❌ DON'T: Catch LifecycleError to keep going
    ✅ DO: Fix the operation composition that triggered it

Tags:
    error-handling, exception-hierarchy, lifecycle, scripted-input, opchain

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and reporting."""

    LIFECYCLE = "LIFECYCLE"  # Operation/logger/stack misuse
    INPUT = "INPUT"  # Scripted or live input contract violations
    PARSE = "PARSE"  # Malformed scripted-input strings
    CONFIG = "CONFIG"  # Unknown operation names, bad settings
    INTERNAL = "INTERNAL"  # Crashes escaping the chain runner


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        operation: Display name of the operation involved
        operation_id: Monotonic id of the operation involved
        input_kind: Scripted input kind involved (``selection``, ``text``, ...)
        position: 1-based position in a scripted-input string
        metadata: Additional key-value pairs
    """

    operation: str | None = None
    operation_id: int | None = None
    input_kind: str | None = None
    position: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["operation", "operation_id", "input_kind", "position"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class OpchainError(Exception):
    """
    Base exception for all opchain errors.

    Subclasses set ``default_category``; callers may override it per
    instance. ``cause`` is chained onto ``__cause__`` so tracebacks show the
    original failure.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> OpchainError:
        """
        Add context to this error (fluent API).

        Usage:
            raise LifecycleError("Stack corrupted").with_context(
                operation="Main menu", operation_id=4
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# LIFECYCLE ERRORS (bugs in operation composition)
# =============================================================================


class LifecycleError(OpchainError):
    """
    An operation, logger or stack was used outside its lifecycle.

    These are raised synchronously and bypass the Outcome channel on purpose:
    they indicate a programming error, not a user-facing condition.
    """

    default_category = ErrorCategory.LIFECYCLE


class LoggerFinalizedError(LifecycleError):
    """A log call reached a logger that has already been finalized."""

    def __init__(self, logger_name: str, part_number: int = 1):
        self.logger_name = logger_name
        self.part_number = part_number
        super().__init__(
            f"Cannot log to finalized logger '{logger_name}' (part {part_number})",
            context=ErrorContext(operation=logger_name),
        )


class LoggerSuspendError(LifecycleError):
    """A logger was suspended in a state that does not allow it."""

    pass


class StackOrderError(LifecycleError):
    """The operation stack was popped out of LIFO order."""

    pass


class OperationAlreadyInvokedError(LifecycleError):
    """An operation instance was invoked a second time."""

    def __init__(self, operation: str, operation_id: int):
        super().__init__(
            f"Operation {operation_id} ({operation}) has already been invoked",
            context=ErrorContext(operation=operation, operation_id=operation_id),
        )


class InputKindMismatchError(LifecycleError):
    """The head of the scripted-input queue is not of the requested kind."""

    default_category = ErrorCategory.INPUT

    def __init__(self, expected: str, actual: str, value: Any, position: int):
        self.expected = expected
        self.actual = actual
        self.value = value
        super().__init__(
            f"Scripted input #{position} is {actual}:{value!r} but a {expected} input was requested",
            context=ErrorContext(input_kind=expected, position=position),
        )


# =============================================================================
# SCRIPT / CONFIG ERRORS
# =============================================================================


class ScriptParseError(OpchainError):
    """A scripted-input string could not be parsed."""

    default_category = ErrorCategory.PARSE

    def __init__(self, message: str, *, position: int | None = None, item: str | None = None):
        self.position = position
        self.item = item
        context = ErrorContext(position=position)
        if item is not None:
            context.metadata["item"] = item
        prefix = f"Scripted input #{position}: " if position is not None else ""
        super().__init__(f"{prefix}{message}", context=context)


class OperationNotFoundError(OpchainError):
    """Operation name not found in the registry."""

    default_category = ErrorCategory.CONFIG

    def __init__(self, name: str, available: list[str] | None = None):
        self.operation_name = name
        self.available = available or []
        message = f"Operation not found: {name}"
        if self.available:
            message += f" (available: {', '.join(self.available)})"
        super().__init__(message, context=ErrorContext(operation=name))


class OperationCrashedError(OpchainError):
    """An exception escaped an operation chain; execution cannot continue."""

    default_category = ErrorCategory.INTERNAL

    def __init__(self, operation: str, cause: BaseException):
        super().__init__(
            f"Operation crashed: {operation}: {cause}",
            context=ErrorContext(operation=operation),
            cause=cause,
        )


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "OpchainError",
    "LifecycleError",
    "LoggerFinalizedError",
    "LoggerSuspendError",
    "StackOrderError",
    "OperationAlreadyInvokedError",
    "InputKindMismatchError",
    "ScriptParseError",
    "OperationNotFoundError",
    "OperationCrashedError",
]
