"""Chain runner.

Manifesto:
    The runner executes a root operation and keeps going while each
    Outcome names a next operation. The terminal operation owns all
    user-facing presentation; the runner only sequences, logs and stops.
    An exception reaching this level means the operation lifecycle itself
    broke: it is recorded as a fatal artifact and re-raised, never retried.

Tags:
    opchain, framework, runner, chain, lifecycle

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import Any

from opchain.core.errors import OperationCrashedError
from opchain.core.result import Outcome
from opchain.framework.context import RunContext, get_run_context, use_run_context
from opchain.framework.operations.base import Operation
from opchain.logging import get_logger

log = get_logger(__name__)


class ChainRunner:
    """
    Sequential chain runner.

    Operations run one after another in the current thread; nothing is
    retried.

    Attributes:
        history: Operations invoked by the most recent chain, in order
    """

    def __init__(self, context: RunContext | None = None) -> None:
        self.context = context
        self.history: list[Operation[Any]] = []

    def execute_chain(self, operation: Operation[Any]) -> Outcome[Any]:
        """
        Run ``operation`` and every operation its Outcomes hand on.

        Returns:
            The Outcome of the last operation in the chain

        Raises:
            OperationCrashedError: If an exception escapes an operation's lifecycle
        """
        ctx = self.context or get_run_context()
        self.history = []
        with use_run_context(ctx):
            log.debug("chain.start", root=operation.name)
            current = operation
            while True:
                outcome = self._invoke(ctx, current)
                if not outcome.continues_chain:
                    log.debug(
                        "chain.completed",
                        terminal=current.name,
                        success=outcome.success,
                        steps=len(self.history),
                    )
                    return outcome
                log.debug("chain.next", previous=current.name, next=outcome.next_operation.name)
                current = outcome.next_operation

    def execute_single(self, operation: Operation[Any]) -> Outcome[Any]:
        """Invoke one operation without following its Outcome."""
        ctx = self.context or get_run_context()
        self.history = []
        with use_run_context(ctx):
            return self._invoke(ctx, operation)

    def _invoke(self, ctx: RunContext, operation: Operation[Any]) -> Outcome[Any]:
        self.history.append(operation)
        try:
            return operation.invoke()
        except Exception as exc:
            ctx.session.error(
                "FATAL: Operation crashed",
                error=exc,
                operation=operation.name,
                operation_id=operation.operation_id,
            )
            raise OperationCrashedError(operation.name, exc) from exc


# Default runner instance
_runner: ChainRunner | None = None


def get_runner() -> ChainRunner:
    """Get or create runner instance."""
    global _runner
    if _runner is None:
        _runner = ChainRunner()
    return _runner


__all__ = ["ChainRunner", "get_runner"]
