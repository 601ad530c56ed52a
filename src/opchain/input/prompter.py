"""
Live prompt backends.

A :class:`Prompter` is the interactive half of input resolution: it is only
consulted when no scripted value is available. :class:`RichPrompter` asks on
the terminal with ``rich.prompt``; any backend that returns ``None`` on
cancellation satisfies the protocol.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from rich.console import Console
from rich.prompt import Confirm, IntPrompt, Prompt

from opchain.input.scripted import CONFIRMATION_WORDS, ConfirmationChoice


class Prompter(Protocol):
    """Interactive input source. ``None`` always means the user cancelled."""

    def echo(self, message: str) -> None: ...

    def select(self, message: str, choices: Sequence[str], allow_cancel: bool = True) -> int | None: ...

    def text(self, message: str, default: str | None = None, password: bool = False) -> str | None: ...

    def toggle(self, message: str, default: bool = False) -> bool | None: ...

    def confirm(self, message: str, choices: Sequence[ConfirmationChoice]) -> ConfirmationChoice | None: ...

    def acknowledge(self, message: str) -> None: ...


class RichPrompter:
    """Terminal prompts built on ``rich.prompt``."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def echo(self, message: str) -> None:
        self.console.print(message, highlight=False)

    def select(self, message: str, choices: Sequence[str], allow_cancel: bool = True) -> int | None:
        self.console.print(f"[bold]{message}[/bold]")
        for number, choice in enumerate(choices, start=1):
            self.console.print(f"  [cyan]{number}[/cyan]. {choice}", highlight=False)
        if allow_cancel:
            self.console.print("  [cyan]0[/cyan]. ❌ Cancel")

        valid = [str(n) for n in range(0 if allow_cancel else 1, len(choices) + 1)]
        try:
            picked = IntPrompt.ask(">", console=self.console, choices=valid, show_choices=False)
        except (EOFError, KeyboardInterrupt):
            return None
        if picked == 0:
            return None
        return picked - 1

    def text(self, message: str, default: str | None = None, password: bool = False) -> str | None:
        # An empty answer yields ``default``; it must be a string, never None
        try:
            return Prompt.ask(
                message,
                console=self.console,
                default=default or "",
                show_default=bool(default),
                password=password,
            )
        except (EOFError, KeyboardInterrupt):
            return None

    def toggle(self, message: str, default: bool = False) -> bool | None:
        try:
            return Confirm.ask(message, console=self.console, default=default)
        except (EOFError, KeyboardInterrupt):
            return None

    def confirm(self, message: str, choices: Sequence[ConfirmationChoice]) -> ConfirmationChoice | None:
        words = [choice.value for choice in choices]
        while True:
            try:
                answer = Prompt.ask(f"{message} [{'/'.join(words)}]", console=self.console)
            except (EOFError, KeyboardInterrupt):
                return None
            choice = CONFIRMATION_WORDS.get(answer.strip().lower())
            if choice in choices:
                return choice
            self.console.print(f"[yellow]Please answer {', '.join(words)}[/yellow]")

    def acknowledge(self, message: str) -> None:
        try:
            self.console.input(f"[dim]{message}[/dim] ")
        except (EOFError, KeyboardInterrupt):
            return


__all__ = ["Prompter", "RichPrompter"]
