"""
Run context: everything one chain execution shares.

A :class:`RunContext` bundles the operation stack, the log session that
receives artifacts, and the input resolver. It lives in a ``ContextVar``
rather than a module global, so independent runs (tests, embedded use) each
get an isolated stack::

    with use_run_context(RunContext(session=LogSession(tmp_path))):
        ChainRunner().execute_chain(MainMenuOperation())

Code outside a ``use_run_context`` block gets a lazily built default
context driven by :class:`~opchain.core.settings.RuntimeSettings`.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field

from opchain.framework.stack import OperationStack
from opchain.input import InputResolver
from opchain.logging import LogSession, get_log_session


@dataclass
class RunContext:
    """Stack, artifact session and input source of one run."""

    session: LogSession = field(default_factory=get_log_session)
    inputs: InputResolver = field(default_factory=InputResolver)
    stack: OperationStack = field(default_factory=OperationStack)


_run_context: ContextVar[RunContext | None] = ContextVar("opchain_run_context", default=None)


def get_run_context() -> RunContext:
    """Current run context, creating the default one on first use."""
    ctx = _run_context.get()
    if ctx is None:
        from opchain.core.settings import get_settings

        ctx = RunContext(inputs=InputResolver.from_settings(get_settings()))
        _run_context.set(ctx)
    return ctx


def set_run_context(ctx: RunContext | None) -> None:
    """Install ``ctx`` for the current context (``None`` resets)."""
    _run_context.set(ctx)


@contextmanager
def use_run_context(ctx: RunContext) -> Iterator[RunContext]:
    """Scope ``ctx`` to a ``with`` block, restoring the previous one after."""
    token = _run_context.set(ctx)
    try:
        yield ctx
    finally:
        _run_context.reset(token)


__all__ = ["RunContext", "get_run_context", "set_run_context", "use_run_context"]
