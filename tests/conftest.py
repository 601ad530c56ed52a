"""
Shared pytest fixtures and configuration for opchain tests.

This module provides:
- Isolation fixtures (settings cache, log session, run context, log context)
- A temporary LogSession with its own LoggerRegistry
- A RunContext whose console output is captured
- A factory for scripted input resolvers

Usage:
    def test_something(run_context, scripted):
        scripted('select:1,input:"hello world"')
        ...
"""

import io
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from rich.console import Console

from opchain.core.settings import clear_settings_cache
from opchain.framework import RunContext, set_run_context, use_run_context
from opchain.framework.registry import clear_registry as clear_operation_registry
from opchain.input import InputResolver
from opchain.logging import LoggerRegistry, LogSession, clear_context, set_log_session


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def isolate_runtime(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """
    Reset process-wide state around every test.

    Any code that falls back to the default log session writes under
    tmp_path instead of ./logs.
    """
    for var in (
        "OPCHAIN_INPUTS",
        "OPCHAIN_LOG_LEVEL",
        "OPCHAIN_LOG_FORMAT",
        "OPCHAIN_CONFIRM_MODE",
        "OPCHAIN_MAX_INPUT_ATTEMPTS",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("OPCHAIN_LOG_DIR", str(tmp_path / "default-logs"))
    clear_settings_cache()
    set_log_session(None)
    set_run_context(None)
    clear_context()
    yield
    clear_settings_cache()
    set_log_session(None)
    set_run_context(None)
    clear_context()


@pytest.fixture
def clean_operation_registry() -> Generator[None, None, None]:
    """
    Clear operation registry before and after test.

    Not auto-applied because most tests don't touch the registry.
    """
    clear_operation_registry()
    yield
    clear_operation_registry()


# =============================================================================
# Logging / run context
# =============================================================================


@pytest.fixture
def log_session(tmp_path: Path) -> LogSession:
    """Session writing into tmp_path with a private logger registry."""
    return LogSession(tmp_path / "logs", registry=LoggerRegistry())


@pytest.fixture
def console_buffer() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def console(console_buffer: io.StringIO) -> Console:
    """Console that records into console_buffer (no colours)."""
    return Console(file=console_buffer, width=120, color_system=None)


@pytest.fixture
def run_context(log_session: LogSession, console: Console) -> Generator[RunContext, None, None]:
    """Non-interactive RunContext installed for the duration of the test."""
    ctx = RunContext(session=log_session, inputs=InputResolver(console=console))
    with use_run_context(ctx):
        yield ctx


@pytest.fixture
def scripted(run_context: RunContext, console: Console) -> Callable[..., InputResolver]:
    """
    Replace the run context's inputs with a scripted resolver.

        inputs = scripted("select:0,confirm:yes")
    """

    def _scripted(script: str, **kwargs) -> InputResolver:
        run_context.inputs = InputResolver.from_script(script, console=console, **kwargs)
        return run_context.inputs

    return _scripted
