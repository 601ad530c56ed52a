"""
Operation context for console log events.

Attaches the currently executing operation (id, name, parent, depth) to
every console log event without passing it through each call. The context
is pushed by ``Operation.invoke()`` and restored on exit, so nested
operations see their own values and the parent's are back once they return.
"""

from contextvars import ContextVar, Token
from dataclasses import asdict, dataclass
from typing import Any

import structlog


@dataclass(frozen=True)
class LogContext:
    """
    Execution context attached to console log entries.

    operation_id: Monotonic id of the current operation
    operation: Display name of the current operation
    parent_operation: Display name of the enclosing operation, if any
    depth: Stack depth (1 = root operation)
    """

    operation_id: int | None = None
    operation: str | None = None
    parent_operation: str | None = None
    depth: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict."""
        return {k: v for k, v in asdict(self).items() if v is not None}

    def merge(self, **kwargs: Any) -> "LogContext":
        """Copy with ``kwargs`` applied; ``None`` values leave a field unchanged."""
        current = asdict(self)
        current.update({k: v for k, v in kwargs.items() if v is not None})
        return LogContext(**current)


_log_context: ContextVar[LogContext] = ContextVar("opchain_log_context")  # noqa: B039


def get_context() -> LogContext:
    """Context of the operation currently executing in this thread/task."""
    return _log_context.get(LogContext())


def clear_context() -> None:
    """Forget any operation context (tests, new runs)."""
    _log_context.set(LogContext())


class ContextToken:
    """Handle returned by :func:`push_context`."""

    def __init__(self, token: Token[LogContext]):
        self._token = token

    def restore(self) -> None:
        """Put back the context that was current before the push."""
        _log_context.reset(self._token)


def push_context(**kwargs: Any) -> ContextToken:
    """
    Layer operation fields over the current context.

    Usage:
        token = push_context(operation_id=3, operation="Main menu")
        try:
            do_work()
        finally:
            token.restore()
    """
    updated = get_context().merge(**kwargs)
    return ContextToken(_log_context.set(updated))


def add_context_processor(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """
    Structlog processor that adds the operation context to every log entry.

    Registered in configure_logging(); explicit keys on the event win.
    """
    for key, value in get_context().to_dict().items():
        event_dict.setdefault(key, value)
    return event_dict


def get_logger(name: str | None = None) -> Any:
    """
    Get a structured console logger.

    Args:
        name: Logger name (typically __name__)
    """
    return structlog.get_logger(name)
