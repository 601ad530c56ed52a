"""Terminal operations that end the process.

Both write their own artifact and finalize it before raising ``SystemExit``,
since nothing after them gets a chance to.
"""

from __future__ import annotations

from rich.console import Console

from opchain.core.result import Outcome
from opchain.framework.operations import Operation

err_console = Console(stderr=True)


class ExitNormally(Operation[None]):
    """Say goodbye and exit with status 0."""

    description = "Exit normally (status 0)"

    def __init__(self, message: str | None = None) -> None:
        super().__init__("Exit normally")
        self.message = message

    def uses_parent_logger(self) -> bool:
        return False

    def perform(self) -> Outcome[None]:
        if self.message:
            self.inputs.console.print(self.message, highlight=False)
        self.logger.info("Exiting normally", exit_code=0)
        self.finalize_own_logger()
        raise SystemExit(0)


class DisplayFatalErrorAndExit(Operation[None]):
    """Report a fatal error and exit with status 1."""

    description = "Display a fatal error and exit (status 1)"

    def __init__(self, error: BaseException | str | None = None) -> None:
        super().__init__("Display fatal error and exit")
        self.error = error or "You have chosen to display a fatal error and exit."

    def uses_parent_logger(self) -> bool:
        return False

    def perform(self) -> Outcome[None]:
        detail = str(self.error)
        self.logger.error("Fatal error occurred", error=self.error if isinstance(self.error, BaseException) else None)
        self.logger.error(detail)

        err_console.print("[bold red]Fatal error occurred[/bold red]")
        err_console.print(detail, highlight=False)
        self.finalize_own_logger()
        raise SystemExit(1)


__all__ = ["ExitNormally", "DisplayFatalErrorAndExit"]
