"""Interactive session loop.

Shows a menu, runs the chain the user picked, and shows the menu again.
A menu that fails is shown again up to ``max_menu_failures`` times in a
row; a menu that succeeds with nothing to run (the user backed out) ends
the session. Chain crashes are not caught here.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from opchain.core.result import Outcome
from opchain.framework.operations import Operation
from opchain.framework.runner import ChainRunner
from opchain.logging import get_logger

log = get_logger(__name__)


class InteractiveSession:
    """
    Menu → chain → menu loop.

    Attributes:
        chains_run: Chains started from the menu so far
        last_outcome: Terminal Outcome of the most recent chain
    """

    def __init__(
        self,
        menu_factory: Callable[[], Operation[Any]],
        *,
        runner: ChainRunner | None = None,
        max_menu_failures: int = 3,
    ) -> None:
        self.menu_factory = menu_factory
        self.runner = runner or ChainRunner()
        self.max_menu_failures = max_menu_failures
        self.chains_run = 0
        self.last_outcome: Outcome[Any] | None = None

    def run(self) -> Outcome[Any]:
        """
        Loop until the menu yields nothing to run.

        Returns:
            The menu Outcome that ended the session
        """
        failures = 0
        while True:
            menu_outcome = self.runner.execute_single(self.menu_factory())

            if not menu_outcome.success:
                failures += 1
                log.error(
                    "session.menu_failed",
                    error=menu_outcome.error,
                    failures=failures,
                    max_failures=self.max_menu_failures,
                )
                if failures >= self.max_menu_failures:
                    return menu_outcome
                continue
            failures = 0

            if not menu_outcome.continues_chain:
                log.debug("session.ended", chains_run=self.chains_run)
                return menu_outcome

            self.chains_run += 1
            self.last_outcome = self.runner.execute_chain(menu_outcome.next_operation)
            if not self.last_outcome.success:
                log.warning("session.chain_failed", error=self.last_outcome.error)


__all__ = ["InteractiveSession"]
