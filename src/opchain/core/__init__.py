"""opchain core -- result envelope, error hierarchy and settings.

Architecture::

    errors.py      Structured error hierarchy (OpchainError, LifecycleError)
    result.py      Outcome[T] envelope (ok / then / fail)
    settings.py    RuntimeSettings (pydantic-settings, OPCHAIN_* env vars)
"""

from opchain.core.errors import (
    ErrorCategory,
    ErrorContext,
    InputKindMismatchError,
    LifecycleError,
    LoggerFinalizedError,
    LoggerSuspendError,
    OpchainError,
    OperationAlreadyInvokedError,
    OperationCrashedError,
    OperationNotFoundError,
    ScriptParseError,
    StackOrderError,
)
from opchain.core.result import Outcome, format_outcome

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
    "Outcome",
    "format_outcome",
]
