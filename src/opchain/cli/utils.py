"""
CLI utility helpers: output formatting and run setup.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from opchain.core.errors import OpchainError, OperationCrashedError
from opchain.core.result import Outcome
from opchain.core.settings import RuntimeSettings
from opchain.framework import RunContext, use_run_context
from opchain.input import InputResolver, RichPrompter, ScriptedInputQueue, SessionRecorder
from opchain.logging import LogSession, get_logger, set_log_session

console = Console()
err_console = Console(stderr=True)

log = get_logger(__name__)


@dataclass
class CliState:
    """Options from the root callback, shared with sub-commands."""

    settings: RuntimeSettings
    record: Path | None = None


# ── Output helpers ───────────────────────────────────────────────────────


def print_error(error: BaseException) -> None:
    if isinstance(error, OpchainError):
        err_console.print(f"[bold red]Error[/bold red] ({error.category.value}): {error.message}")
    else:
        err_console.print(f"[bold red]Error[/bold red]: {error}")


def script_table(queue: ScriptedInputQueue) -> Table:
    """Rich table of a parsed script."""
    table = Table(title="Scripted inputs", show_lines=False, pad_edge=False)
    table.add_column("#", justify="right")
    table.add_column("kind")
    table.add_column("value", overflow="fold")
    for entry in queue.declared:
        value = entry.value.value if hasattr(entry.value, "value") else entry.value
        table.add_row(str(entry.position), entry.kind.value, repr(value))
    return table


# ── Run setup ────────────────────────────────────────────────────────────


def build_run_context(settings: RuntimeSettings, recorder: SessionRecorder | None = None) -> RunContext:
    """
    Create the artifact session and input resolver for one CLI run.

    Raises:
        ScriptParseError: If ``settings.inputs`` is not a valid script
    """
    session = LogSession(settings.log_dir)
    set_log_session(session)
    inputs = InputResolver.from_script(
        settings.inputs,
        confirm_mode=settings.confirm_mode,
        prompter=RichPrompter(console),
        recorder=recorder,
        console=console,
    )
    if inputs.queue is not None:
        log.info("Initialized with simulated inputs", inputs=inputs.queue.summary())
    return RunContext(session=session, inputs=inputs)


@contextmanager
def _registry_installed(run_ctx: RunContext) -> Iterator[None]:
    registry = run_ctx.session.registry
    registry.install()
    try:
        yield
    finally:
        registry.finalize_all("exit")
        registry.uninstall()


def execute(state: CliState, work: Callable[[RunContext], Outcome[Any] | None]) -> None:
    """
    Run ``work`` inside a fresh run context and map the result to an exit code.

    ``SystemExit`` from an exit operation keeps its status; a crashed chain
    exits with status 1.
    """
    recorder = SessionRecorder() if state.record is not None else None
    try:
        run_ctx = build_run_context(state.settings, recorder)
    except OpchainError as exc:
        print_error(exc)
        raise typer.Exit(code=1) from None

    code = 0
    error: str | None = None
    try:
        with _registry_installed(run_ctx), use_run_context(run_ctx):
            outcome = work(run_ctx)
        if outcome is not None and not outcome.success:
            err_console.print(f"[bold red]Error[/bold red]: {outcome.error}")
            code, error = 1, outcome.error
    except SystemExit as exc:
        code = exc.code if isinstance(exc.code, int) else (0 if exc.code is None else 1)
    except OperationCrashedError as exc:
        err_console.print(f"[bold red]Operation crashed:[/bold red] {exc.cause}")
        code, error = 1, exc.message
    except OpchainError as exc:
        print_error(exc)
        code, error = 1, exc.message
    finally:
        if recorder is not None and state.record is not None:
            recorder.complete(success=code == 0, error=error)
            recorder.save(state.record)
            console.print(f"[dim]Recorded session → {state.record}[/dim]")
            console.print(f"[dim]Replay with: --inputs '{escape(recorder.to_script())}'[/dim]")

    if code:
        raise typer.Exit(code=code)
