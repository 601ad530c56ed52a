"""
Demo flows: the main menu and the operations it leads to.

The main menu does no work itself. It returns the operation for the chosen
entry and the chain runner runs that next::

    MainMenuOperation ──► GreetOperation ──► "Hello, Ada!"   (terminal)
                      ──► AboutOperation                     (terminal)
                      ──► DisplayFatalErrorAndExit           (exit 1)
                      ──► ExitNormally                       (exit 0)
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from opchain.core.result import Outcome
from opchain.framework.operations import MenuOperation, Operation
from opchain.operations.exits import DisplayFatalErrorAndExit, ExitNormally
from opchain.operations.primitives import (
    ConfirmOperation,
    InputTextOperation,
    SelectOperation,
    ShowInfoOperation,
    TextValidation,
)


class GreetOperation(Operation[str | None]):
    """Ask for a name and greet it. Keeps its own log artifact."""

    description = "Ask for your name and say hello"

    def __init__(self) -> None:
        super().__init__("Greet")

    def uses_parent_logger(self) -> bool:
        return False

    def perform(self) -> Outcome[str | None]:
        asked = InputTextOperation(
            "What is your name?",
            default="friend",
            validation=TextValidation(max_length=40),
        ).invoke()
        if not asked.success:
            return Outcome.fail(asked.error or "Name input failed", details=asked.details)
        if asked.data is None:
            self.logger.info("Greeting cancelled")
            return Outcome.ok(None)

        loud = ConfirmOperation(
            f"Greet {asked.data} loudly?",
            more_info=["A loud greeting is written in capitals."],
        ).invoke()
        if not loud.success:
            return Outcome.fail(loud.error or "Confirmation failed", details=loud.details)

        greeting = f"Hello, {asked.data}!"
        if loud.data:
            greeting = greeting.upper()
        self.inputs.console.print(f"\n[bold green]{greeting}[/bold green]")
        self.logger.info(f"Greeted {asked.data}", loud=bool(loud.data))
        return Outcome.ok(greeting)


class AboutOperation(ShowInfoOperation):
    """Boxed description of the tool."""

    description = "Show what this tool is"

    def __init__(self) -> None:
        from opchain import __version__

        super().__init__(
            f"opchain {__version__}",
            [
                "Operations return Outcomes; an Outcome may name the next operation.",
                "Each operation's log is written as its own artifact.",
                "Pass --inputs to replay a scripted session.",
            ],
            boxed=True,
        )


MenuEntry = tuple[str, Callable[[], Operation[Any]]]

MAIN_MENU: tuple[MenuEntry, ...] = (
    ("👋 Say hello", GreetOperation),
    ("ℹ️  About", AboutOperation),
    ("💣 Display fatal error and exit", DisplayFatalErrorAndExit),
    ("🚪 Just exit normally", ExitNormally),
)


class MainMenuOperation(MenuOperation[Operation[Any] | None]):
    """Top-level menu; returns the operation to run next."""

    description = "Show the main menu"

    def __init__(self, entries: tuple[MenuEntry, ...] = MAIN_MENU) -> None:
        super().__init__("Main menu")
        self.entries = entries

    def perform(self) -> Outcome[Operation[Any] | None]:
        labels = [label for label, _ in self.entries]
        picked = SelectOperation("MAIN MENU", labels, allow_cancel=False).invoke()
        if not picked.success:
            return Outcome.fail(picked.error or "Menu selection failed", details=picked.details)
        if picked.data is None:
            return self.handle_cancellation()

        factory = dict(self.entries).get(picked.data)
        if factory is None:
            return Outcome.fail("Invalid menu selection", details=picked.data)
        return Outcome.then(factory())


__all__ = ["MainMenuOperation", "GreetOperation", "AboutOperation", "MAIN_MENU"]
