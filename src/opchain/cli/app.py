"""
Root Typer application for the opchain CLI.

Without a sub-command the interactive menu session starts. ``--inputs``
replays a scripted session instead of prompting, e.g.::

    opchain --inputs 'select:0,input:"Ada",confirm:no,select:3'
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError
from typer import Typer

from opchain.cli.utils import CliState, console, err_console, execute, print_error, script_table
from opchain.core.errors import ScriptParseError
from opchain.core.result import Outcome
from opchain.core.settings import RuntimeSettings
from opchain.framework import ChainRunner, InteractiveSession, RunContext, create_operation, describe_operations
from opchain.input import ScriptedInputQueue
from opchain.logging import configure_logging

app = Typer(
    name="opchain",
    help="opchain: run chains of interactive operations, live or scripted.",
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("opchain")
        except PackageNotFoundError:
            from opchain import __version__ as v
        typer.echo(f"opchain {v}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    inputs: str | None = typer.Option(
        None, "--inputs", "-i", help="Scripted inputs, e.g. 'select:1,input:\"hello world\"'."
    ),
    log_dir: Path | None = typer.Option(None, "--log-dir", help="Directory for log artifacts."),
    log_level: str | None = typer.Option(
        None, "--log-level", help="DEBUG, INFO, WARNING, ERROR, DEFAULT or VERBOSE."
    ),
    log_format: str | None = typer.Option(None, "--log-format", help="console or json."),
    lenient_confirm: bool = typer.Option(
        False, "--lenient-confirm", help="Treat unknown scripted confirmations as 'no'."
    ),
    record: Path | None = typer.Option(None, "--record", help="Save the session's inputs as JSON."),
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """opchain CLI: interactive session, single operations and script checks."""
    overrides: dict[str, Any] = {
        key: value
        for key, value in {
            "inputs": inputs,
            "log_dir": log_dir,
            "log_level": log_level,
            "log_format": log_format,
        }.items()
        if value is not None
    }
    if lenient_confirm:
        overrides["confirm_mode"] = "lenient"

    try:
        settings = RuntimeSettings(**overrides)
    except ValidationError as exc:
        first = exc.errors()[0]
        err_console.print(f"[bold red]Invalid option[/bold red] {first['loc'][0]}: {first['msg']}")
        raise typer.Exit(code=1) from None

    configure_logging(level=settings.log_level, format=settings.log_format, force=True)
    ctx.obj = CliState(settings=settings, record=record)

    if ctx.invoked_subcommand is None:
        from opchain.operations import MainMenuOperation

        def interactive(run_ctx: RunContext) -> Outcome[Any]:
            console.print("[bold]opchain[/bold] interactive session\n")
            return InteractiveSession(MainMenuOperation, runner=ChainRunner(run_ctx)).run()

        execute(ctx.obj, interactive)


# ── Sub-commands ─────────────────────────────────────────────────────────


@app.command("run")
def run_operation(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Registered operation name (see 'opchain list')."),
    json_out: bool = typer.Option(False, "--json", help="Print the terminal Outcome as JSON."),
) -> None:
    """Run one registered operation and the chain it starts."""

    def work(run_ctx: RunContext) -> Outcome[Any]:
        outcome = ChainRunner(run_ctx).execute_chain(create_operation(name))
        if json_out:
            console.print_json(json.dumps(outcome.to_dict(), default=str))
        return outcome

    execute(ctx.obj, work)


@app.command("list")
def list_cmd() -> None:
    """List registered operations."""
    from rich.table import Table

    table = Table(title="Operations", pad_edge=False)
    table.add_column("name")
    table.add_column("description")
    for name, description in describe_operations():
        table.add_row(name, description)
    console.print(table)


@app.command("inputs")
def inputs_cmd(
    ctx: typer.Context,
    script: str = typer.Argument(..., help="Scripted-input string to check."),
) -> None:
    """Parse a scripted-input string and show what it will replay."""
    try:
        queue = ScriptedInputQueue(script, confirm_mode=ctx.obj.settings.confirm_mode)
    except ScriptParseError as exc:
        print_error(exc)
        raise typer.Exit(code=1) from None

    console.print(script_table(queue))
    console.print(f"canonical: {queue.to_script()}", highlight=False, markup=False)


def run() -> None:
    """Console-script entry point."""
    app()
