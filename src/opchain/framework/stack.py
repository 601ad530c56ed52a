"""Operation stack: the nesting of currently executing operations.

The stack models depth, not parallelism. Exactly one operation is current
at any instant; its ancestors are paused below it. Each entry is an
:class:`OperationRecord` holding the logger ownership decision made when
the operation was invoked.

Logger ownership:
    - An *owning* record has its own :class:`OperationLogger`
    - A *borrowing* record resolves its logger through the record it
      borrowed from, so it follows the lender across suspend/resume parts
    - Suspending a lender's logger checks it out as a
      :class:`SuspensionToken`; resuming checks it back in as the next part

Tags:
    opchain, framework, stack, ownership, lifecycle

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any

from opchain.core.errors import LoggerSuspendError, StackOrderError
from opchain.logging import LogSession, OperationLogger, SuspensionToken


class OperationState(str, Enum):
    """Lifecycle of one operation invocation."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    SUSPEND_PARENT = "suspend_parent"
    EXECUTING = "executing"
    RESULT_LOGGED = "result_logged"
    OWN_LOGGER_FINALIZED = "own_logger_finalized"
    PARENT_RESUMED = "parent_resumed"
    DONE = "done"


@dataclass(eq=False)
class OperationRecord:
    """One entry on the operation stack."""

    operation_id: int
    name: str
    operation: Any = None
    state: OperationState = OperationState.NOT_STARTED
    owns_logger: bool = False
    own_logger: OperationLogger | None = None
    lender: OperationRecord | None = None
    suspension: SuspensionToken | None = None
    suspended: OperationRecord | None = None

    @property
    def logger(self) -> OperationLogger | None:
        """Logger this operation writes to (own or borrowed)."""
        if self.lender is not None:
            return self.lender.logger
        return self.own_logger

    @property
    def has_active_logger(self) -> bool:
        """Whether this record owns a logger that is currently open."""
        return self.owns_logger and self.own_logger is not None and not self.own_logger.finalized

    def advance(self, state: OperationState) -> None:
        self.state = state

    # ------------------------------------------------------------------ #
    # Ownership tokens
    # ------------------------------------------------------------------ #

    def suspend_logger(self) -> SuspensionToken:
        """Check this record's own logger out as a finalized part."""
        if not self.has_active_logger or self.own_logger is None:
            raise LoggerSuspendError(f"Operation '{self.name}' has no active logger to suspend")
        self.suspension = self.own_logger.suspend()
        return self.suspension

    def resume_logger(self, session: LogSession | None = None) -> OperationLogger:
        """Check the suspended logger back in as the next part."""
        if self.suspension is None:
            raise LoggerSuspendError(f"Operation '{self.name}' has no suspended logger to resume")
        token, self.suspension = self.suspension, None
        self.own_logger = OperationLogger.resume_from(token, session)
        return self.own_logger


class OperationStack:
    """LIFO stack of :class:`OperationRecord` entries."""

    def __init__(self) -> None:
        self._records: list[OperationRecord] = []

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[OperationRecord]:
        return iter(self._records)

    def __repr__(self) -> str:
        return f"OperationStack({' > '.join(r.name for r in self._records)})"

    @property
    def depth(self) -> int:
        return len(self._records)

    @property
    def current(self) -> OperationRecord | None:
        return self._records[-1] if self._records else None

    @property
    def names(self) -> list[str]:
        return [r.name for r in self._records]

    def push(self, record: OperationRecord) -> None:
        self._records.append(record)

    def pop(self, record: OperationRecord) -> OperationRecord:
        """
        Remove ``record``, which must be the top of the stack.

        Raises:
            StackOrderError: If ``record`` is not the current operation
        """
        if not self._records or self._records[-1] is not record:
            top = self._records[-1].name if self._records else "<empty>"
            raise StackOrderError(f"Cannot pop '{record.name}': current operation is '{top}'")
        return self._records.pop()

    def parent_of(self, record: OperationRecord) -> OperationRecord | None:
        """Record directly below ``record``, if any."""
        for index, candidate in enumerate(self._records):
            if candidate is record:
                return self._records[index - 1] if index > 0 else None
        return None

    def nearest_logger_holder(self, record: OperationRecord) -> OperationRecord | None:
        """Closest ancestor of ``record`` that has a logger to lend."""
        parent = self.parent_of(record)
        while parent is not None:
            if parent.logger is not None:
                return parent
            parent = self.parent_of(parent)
        return None

    def clear(self) -> None:
        self._records.clear()


__all__ = ["OperationState", "OperationRecord", "OperationStack"]
