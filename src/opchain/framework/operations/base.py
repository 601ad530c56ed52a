"""
Operation base classes.

An :class:`Operation` is a named unit of work. Subclasses implement
:meth:`Operation.perform` and return an :class:`~opchain.core.result.Outcome`;
callers use :meth:`Operation.invoke`, which wraps ``perform()`` with the
stack, logging and exception-safety lifecycle:

1. Push a record for this operation onto the run's operation stack
2. Decide logger ownership: borrow the nearest ancestor's logger, or own a
   fresh one. An owner whose direct parent holds an active logger suspends
   the parent's logger first, so the two records never interleave
3. Log ``Starting operation <id>: <name>`` at debug level
4. Call ``perform()``; an escaping exception becomes a failure Outcome
5. Log the outcome
6. Finalize the logger if this operation owns it
7. Always: resume a suspended parent logger as its next part, then pop

``invoke()`` returns an Outcome for every ``perform()`` implementation,
including ones that raise. Only ``BaseException`` subclasses that are not
``Exception`` (``SystemExit``, ``KeyboardInterrupt``) pass through, which is
how exit operations end the process. Each instance may be invoked once.
"""

from __future__ import annotations

import itertools
from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from opchain.core.errors import LifecycleError, OperationAlreadyInvokedError
from opchain.core.result import Outcome, format_outcome
from opchain.framework.context import RunContext, get_run_context
from opchain.framework.stack import OperationRecord, OperationState
from opchain.input import InputResolver
from opchain.logging import LogLevel, OperationLogger, get_logger, push_context

log = get_logger(__name__)

_operation_ids = itertools.count(1)

RESUME_MARKER = "[RESUMING AFTER CHILD OPERATION]"

T = TypeVar("T")


class Operation(ABC, Generic[T]):
    """Base class for all operations."""

    # Operation metadata
    name: str = ""
    description: str = ""

    def __init__(self, name: str | None = None) -> None:
        self.name = name or self.name or type(self).__name__
        self.operation_id = next(_operation_ids)
        self._context: RunContext | None = None
        self._record: OperationRecord | None = None
        self._invoked = False

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.operation_id}, name={self.name!r})"

    @classmethod
    def execute(cls, *args: Any, **kwargs: Any) -> Outcome[Any]:
        """Construct and invoke in one step."""
        return cls(*args, **kwargs).invoke()

    @abstractmethod
    def perform(self) -> Outcome[T]:
        """Do the work. Must be implemented by subclasses."""
        ...

    def uses_parent_logger(self) -> bool:
        """Whether to write into an ancestor's logger. Override to own one."""
        return True

    # ------------------------------------------------------------------ #
    # Accessors
    # ------------------------------------------------------------------ #

    @property
    def context(self) -> RunContext:
        return self._context or get_run_context()

    @property
    def inputs(self) -> InputResolver:
        return self.context.inputs

    @property
    def state(self) -> OperationState:
        return self._record.state if self._record is not None else OperationState.NOT_STARTED

    @property
    def owns_logger(self) -> bool:
        return self._record is not None and self._record.owns_logger

    @property
    def logger(self) -> OperationLogger:
        """
        Logger this operation writes to (own or borrowed).

        Raises:
            LifecycleError: Before :meth:`invoke` has assigned one
        """
        if self._record is None or self._record.logger is None:
            raise LifecycleError(f"Operation '{self.name}' has no logger outside invoke()")
        return self._record.logger

    def finalize_own_logger(self) -> None:
        """Write this operation's artifact now (for operations about to exit)."""
        if self._record is not None and self._record.owns_logger and self._record.own_logger is not None:
            self._record.own_logger.finalize()

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def invoke(self) -> Outcome[T]:
        """Run :meth:`perform` inside the operation lifecycle."""
        if self._invoked:
            error = OperationAlreadyInvokedError(self.name, self.operation_id)
            log.error("operation.already_invoked", operation=self.name, operation_id=self.operation_id)
            return Outcome.fail(error.message, details=error)
        self._invoked = True

        ctx = self._context = get_run_context()
        record = self._record = OperationRecord(self.operation_id, self.name, self)
        ctx.stack.push(record)
        record.advance(OperationState.RUNNING)
        parent = ctx.stack.parent_of(record)
        scope = push_context(
            operation_id=self.operation_id,
            operation=self.name,
            parent_operation=parent.name if parent else None,
            depth=ctx.stack.depth,
        )

        exiting = True
        try:
            outcome = self._run(record, parent)
            exiting = False
            return outcome
        finally:
            try:
                if record.suspended is not None and not exiting:
                    self._resume_parent(record)
            finally:
                scope.restore()
                ctx.stack.pop(record)
                record.advance(OperationState.DONE)

    def _run(self, record: OperationRecord, parent: OperationRecord | None) -> Outcome[T]:
        try:
            self._acquire_logger(record, parent)
            self.logger.debug(f"Starting operation {self.operation_id}: {self.name}")

            record.advance(OperationState.EXECUTING)
            try:
                outcome = self.perform()
                if not isinstance(outcome, Outcome):
                    raise TypeError(f"perform() returned {type(outcome).__name__}, expected Outcome")
            except Exception as exc:
                self.logger.error("Unexpected error in operation", error=exc)
                outcome = Outcome.fail(str(exc) or type(exc).__name__, details=exc)

            self._log_outcome(outcome)
            record.advance(OperationState.RESULT_LOGGED)
        except Exception as exc:
            # The logging lifecycle itself failed
            log.error(
                "operation.lifecycle_error",
                operation=self.name,
                operation_id=self.operation_id,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            outcome = Outcome.fail(str(exc) or type(exc).__name__, details=exc)

        if record.owns_logger:
            try:
                self.finalize_own_logger()
            except Exception as exc:
                # The logger stays registered, so the session flush retries it
                log.error(
                    "operation.finalize_failed",
                    operation=self.name,
                    operation_id=self.operation_id,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                return Outcome.fail(f"Could not write log artifact: {exc}", details=exc)
            record.advance(OperationState.OWN_LOGGER_FINALIZED)
        return outcome

    def _acquire_logger(self, record: OperationRecord, parent: OperationRecord | None) -> None:
        holder = self.context.stack.nearest_logger_holder(record)
        if holder is not None and self.uses_parent_logger():
            record.lender = holder
            return

        record.owns_logger = True
        if parent is not None and parent.has_active_logger:
            record.advance(OperationState.SUSPEND_PARENT)
            parent.suspend_logger()
            record.suspended = parent
        record.own_logger = OperationLogger(self.name, self.context.session)

    def describe_outcome(self, outcome: Outcome[T]) -> str:
        """One-line form of the outcome for the log. Override to redact data."""
        return format_outcome(outcome)

    def _log_outcome(self, outcome: Outcome[T]) -> None:
        label = f"Operation {self.operation_id}: {self.name}"
        if outcome.success:
            self.logger.debug(f"{label} completed successfully")
        else:
            self.logger.log(LogLevel.ERROR, f"{label} failed", {"error": outcome.error})
        self.logger.debug(f"Operation {self.operation_id}: {self.describe_outcome(outcome)}")

    def _resume_parent(self, record: OperationRecord) -> None:
        parent = record.suspended
        record.suspended = None
        if parent is None:
            return
        resumed = parent.resume_logger(self.context.session)
        resumed.info(RESUME_MARKER)
        record.advance(OperationState.PARENT_RESUMED)


class UIOperation(Operation[T]):
    """
    Base class for UI operations (prompts, selections, displays).

    UI operations are short-lived and write into their parent's logger, so
    a whole interaction reads as one sequential record.
    """

    def echo(self, message: str) -> None:
        """Print to the user's console."""
        self.inputs.console.print(message, highlight=False)


class MenuOperation(Operation[T]):
    """
    Base class for menus: operations that return the next operation to run.

    Cancelling a menu is a success with no data, meaning "go back".
    """

    def handle_cancellation(self, message: str = "  ❌ Cancelled") -> Outcome[Any]:
        self.logger.info(message)
        return Outcome.ok(None)


__all__ = ["Operation", "UIOperation", "MenuOperation", "RESUME_MARKER"]
