"""Session recording: capture resolved inputs and replay them as a script.

A :class:`SessionRecorder` attached to an
:class:`~opchain.input.resolver.InputResolver` records every interaction
(live or simulated). The recording serialises to JSON and converts back to
a scripted-input string, so a manual walkthrough can become a repeatable
automated run.

Examples:
    >>> recorder = SessionRecorder()
    >>> recorder.record(InputKind.SELECTION, 1, operation="Main menu")
    >>> recorder.to_script()
    'select:1'
"""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from opchain.input.scripted import ConfirmationChoice, InputKind, ScriptedInput
from opchain.logging.context import get_logger

log = get_logger(__name__)

RECORDING_FORMAT_VERSION = "1"


class SessionInteraction(BaseModel):
    """One resolved input."""

    kind: InputKind
    value: Any
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    operation: str | None = None
    simulated: bool = False


class SessionMetadata(BaseModel):
    completed_successfully: bool = False
    duration_seconds: float | None = None
    error: str | None = None


class RecordedSession(BaseModel):
    """A complete recording, as written to disk."""

    version: str = RECORDING_FORMAT_VERSION
    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    interactions: list[SessionInteraction] = Field(default_factory=list)
    metadata: SessionMetadata | None = None


class SessionRecorder:
    """Collects interactions during a run."""

    def __init__(self) -> None:
        self.session = RecordedSession()

    def __len__(self) -> int:
        return len(self.session.interactions)

    @property
    def interactions(self) -> list[SessionInteraction]:
        return self.session.interactions

    def record(
        self,
        kind: InputKind,
        value: Any,
        *,
        operation: str | None = None,
        simulated: bool = False,
    ) -> None:
        if isinstance(value, ConfirmationChoice):
            value = value.value
        self.session.interactions.append(
            SessionInteraction(kind=kind, value=value, operation=operation, simulated=simulated)
        )

    def complete(self, *, success: bool, error: str | None = None) -> None:
        """Stamp the outcome of the run onto the recording."""
        duration = (datetime.now(UTC) - self.session.started_at).total_seconds()
        self.session.metadata = SessionMetadata(
            completed_successfully=success,
            duration_seconds=round(duration, 3),
            error=error,
        )

    def to_entries(self) -> list[ScriptedInput]:
        """Interactions as scripted entries (secrets and cancellations skipped)."""
        entries: list[ScriptedInput] = []
        for interaction in self.session.interactions:
            if interaction.value is None:
                continue
            value = interaction.value
            if interaction.kind is InputKind.CONFIRMATION:
                value = ConfirmationChoice(value)
            entries.append(ScriptedInput(interaction.kind, value, len(entries) + 1))
        return entries

    def to_script(self) -> str:
        """Scripted-input string that replays this recording."""
        return ",".join(entry.to_script_item() for entry in self.to_entries())

    def save(self, path: Path | str) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.session.model_dump_json(indent=2), encoding="utf-8")
        log.info("session.recorded", path=str(path), interactions=len(self))
        return path

    @classmethod
    def load(cls, path: Path | str) -> SessionRecorder:
        recorder = cls()
        recorder.session = RecordedSession.model_validate_json(Path(path).read_text(encoding="utf-8"))
        return recorder


__all__ = [
    "SessionRecorder",
    "RecordedSession",
    "SessionInteraction",
    "SessionMetadata",
]
