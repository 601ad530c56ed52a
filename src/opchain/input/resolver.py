"""
Input resolution: scripted value first, live prompt second.

Operations never talk to a prompt library or to the scripted queue directly.
They ask an :class:`InputResolver`, which pops the next matching entry from
the :class:`~opchain.input.scripted.ScriptedInputQueue` when one is present
and otherwise falls through to the live :class:`~opchain.input.prompter.Prompter`.
Identical operation code therefore runs interactively and under a script.

Simulated values are echoed to the console as if typed and written to the
requesting operation's log as ``[SIMULATED INPUT] <kind> = <value>``.
Secrets are masked in both places.

Without a prompter (``prompter=None``) the resolver is non-interactive: an
exhausted queue resolves to ``None``, the same signal as a live
cancellation.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from rich.console import Console

from opchain.core.errors import InputKindMismatchError
from opchain.input.prompter import Prompter, RichPrompter
from opchain.input.recording import SessionRecorder
from opchain.input.scripted import (
    ConfirmationChoice,
    ConfirmMode,
    InputKind,
    ScriptedInput,
    ScriptedInputQueue,
)
from opchain.logging.context import get_logger

if TYPE_CHECKING:
    from opchain.core.settings import RuntimeSettings

log = get_logger(__name__)

SECRET_MASK = "********"
# Recorded for a cancelled live selection; replays as a cancel
CANCELLED_SELECTION = -1
YES_NO = (ConfirmationChoice.AFFIRMATIVE, ConfirmationChoice.NEGATIVE)


class InputResolver:
    """
    Resolves every user input of a run.

    Args:
        queue: Scripted inputs, consumed before any live prompt
        prompter: Live input backend; ``None`` for non-interactive runs
        recorder: Optional recorder that sees every resolved value
        console: Where simulated inputs are echoed
    """

    def __init__(
        self,
        queue: ScriptedInputQueue | None = None,
        prompter: Prompter | None = None,
        recorder: SessionRecorder | None = None,
        console: Console | None = None,
    ) -> None:
        self.queue = queue
        self.prompter = prompter
        self.recorder = recorder
        self.console = console or Console()

    def __repr__(self) -> str:
        mode = "interactive" if self.prompter is not None else "non-interactive"
        return f"InputResolver({mode}, queue={self.queue!r})"

    @classmethod
    def from_script(
        cls,
        script: str | None,
        *,
        confirm_mode: ConfirmMode = "strict",
        prompter: Prompter | None = None,
        recorder: SessionRecorder | None = None,
        console: Console | None = None,
    ) -> InputResolver:
        queue = ScriptedInputQueue(script, confirm_mode=confirm_mode) if script else None
        return cls(queue, prompter, recorder, console)

    @classmethod
    def from_settings(cls, settings: RuntimeSettings, *, interactive: bool = True) -> InputResolver:
        """Build from settings; interactive runs prompt on the terminal."""
        return cls.from_script(
            settings.inputs,
            confirm_mode=settings.confirm_mode,
            prompter=RichPrompter() if interactive else None,
        )

    @property
    def has_simulated(self) -> bool:
        return self.queue is not None and self.queue.has_more()

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _next(self, kind: InputKind, owner: Any) -> ScriptedInput | None:
        if self.queue is None:
            return None
        try:
            return self.queue.get_next(kind)
        except InputKindMismatchError as exc:
            raise exc.with_context(operation=getattr(owner, "name", None)) from None

    def _simulated(self, owner: Any, entry: ScriptedInput, message: str, shown: str) -> None:
        self.console.print(f"{message}\n> {shown} (simulated)", highlight=False)
        text = f"[SIMULATED INPUT] {entry.kind.value} = {shown}"
        logger = getattr(owner, "logger", None)
        if logger is not None:
            logger.info(text, position=entry.position)
        else:
            log.info(text, position=entry.position)

    def _record(self, kind: InputKind, value: Any, owner: Any, simulated: bool) -> None:
        if self.recorder is not None:
            self.recorder.record(kind, value, operation=getattr(owner, "name", None), simulated=simulated)

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def select(
        self,
        message: str,
        choices: Sequence[str],
        *,
        allow_cancel: bool = True,
        owner: Any = None,
    ) -> int | None:
        """
        Pick one of ``choices`` by zero-based index.

        A scripted index outside ``choices`` resolves to ``None`` (cancel).
        """
        entry = self._next(InputKind.SELECTION, owner)
        if entry is not None:
            index = int(entry.value)
            valid = 0 <= index < len(choices)
            self._simulated(owner, entry, message, choices[index] if valid else f"{index} (cancel)")
            self._record(InputKind.SELECTION, index, owner, simulated=True)
            return index if valid else None

        if self.prompter is None:
            return None
        picked = self.prompter.select(message, choices, allow_cancel)
        recorded = CANCELLED_SELECTION if picked is None else picked
        self._record(InputKind.SELECTION, recorded, owner, simulated=False)
        return picked

    def text(self, message: str, *, default: str | None = None, owner: Any = None) -> str | None:
        entry = self._next(InputKind.TEXT, owner)
        if entry is not None:
            value = str(entry.value)
            self._simulated(owner, entry, message, value)
            self._record(InputKind.TEXT, value, owner, simulated=True)
            return value

        if self.prompter is None:
            return None
        value = self.prompter.text(message, default=default)
        self._record(InputKind.TEXT, value, owner, simulated=False)
        return value

    def secret(self, message: str, *, owner: Any = None) -> str | None:
        """Like :meth:`text`, masked on screen, in logs and in recordings."""
        entry = self._next(InputKind.TEXT, owner)
        if entry is not None:
            self._simulated(owner, entry, message, SECRET_MASK)
            self._record(InputKind.TEXT, None, owner, simulated=True)
            return str(entry.value)

        if self.prompter is None:
            return None
        value = self.prompter.text(message, password=True)
        self._record(InputKind.TEXT, None, owner, simulated=False)
        return value

    def toggle(self, message: str, *, default: bool = False, owner: Any = None) -> bool | None:
        entry = self._next(InputKind.TOGGLE, owner)
        if entry is not None:
            value = bool(entry.value)
            self._simulated(owner, entry, message, "yes" if value else "no")
            self._record(InputKind.TOGGLE, value, owner, simulated=True)
            return value

        if self.prompter is None:
            return None
        value = self.prompter.toggle(message, default=default)
        self._record(InputKind.TOGGLE, value, owner, simulated=False)
        return value

    def confirm(
        self,
        message: str,
        *,
        allow_more_info: bool = False,
        owner: Any = None,
    ) -> ConfirmationChoice | None:
        entry = self._next(InputKind.CONFIRMATION, owner)
        if entry is not None:
            choice = ConfirmationChoice(entry.value)
            self._simulated(owner, entry, message, choice.value)
            self._record(InputKind.CONFIRMATION, choice, owner, simulated=True)
            return choice

        if self.prompter is None:
            return None
        choices = (*YES_NO, ConfirmationChoice.MORE_INFO) if allow_more_info else YES_NO
        choice = self.prompter.confirm(message, choices)
        self._record(InputKind.CONFIRMATION, choice, owner, simulated=False)
        return choice

    def acknowledge(self, message: str = "Press Enter to continue...", *, owner: Any = None) -> None:
        """Wait for the user; a scripted run consumes one confirmation entry."""
        entry = self._next(InputKind.CONFIRMATION, owner)
        if entry is not None:
            self._simulated(owner, entry, message, "(acknowledged)")
            return
        if self.prompter is not None:
            self.prompter.acknowledge(message)


__all__ = ["InputResolver", "SECRET_MASK", "CANCELLED_SELECTION"]
