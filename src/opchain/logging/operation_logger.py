"""
Per-operation log buffer with a suspend/resume/finalize lifecycle.

An :class:`OperationLogger` collects the structured entries of one logical
operation in memory, mirrors every entry to the live console immediately,
and materializes the buffer as a single named artifact when it is
finalized. Nested operations that need an isolated transcript suspend the
parent's logger (finalizing it as "part N") and the parent resumes into a
fresh logger numbered N+1 afterwards.

Manifesto:
    - **Dual sink:** Live console visibility plus a durable per-operation record
    - **Never interleaved:** A child with its own artifact splits the parent's
      record into numbered parts around it instead of mixing lines
    - **Fail loudly:** Logging after finalize is a lifecycle bug and raises
    - **Never lost:** Live loggers are registered; abnormal termination
      flushes them through :class:`~opchain.logging.registry.LoggerRegistry`

Architecture:
    ::

        Parent operation                  Child (own logger)
        ────────────────                  ──────────────────
        OperationLogger("Bench")  part 1
          │ log ... log
          │ suspend() ──► SuspensionToken(name, part=1)
          │                                 OperationLogger("Install")
          │                                   │ log ... log
          │                                   │ finalize() ──► artifact
          │ resume_from(token) ──► OperationLogger("Bench") part 2
          │ log ... log                       "[CONTINUED FROM PART 1]"
          │ finalize() ──► artifact .part2

    Lifecycle::

        OPEN ──log()──► OPEN ──finalize()/suspend()──► FINALIZED
                                     │
                            log() ───┴──► LoggerFinalizedError

Examples:
    >>> logger = OperationLogger("Main menu", session)
    >>> logger.info("Showing menu")
    >>> token = logger.suspend()
    >>> resumed = OperationLogger.resume_from(token, session)
    >>> resumed.part_number
    2

Guardrails:
    ❌ DON'T: Keep a reference to a suspended logger and log to it
    ✅ DO: Resume through :meth:`OperationLogger.resume_from`

    ❌ DON'T: Finalize a logger you borrowed from an ancestor
    ✅ DO: Let the owning operation finalize it

Tags:
    logging, artifacts, suspend-resume, lifecycle, opchain

Doc-Types:
    - API Reference
    - Logging Guide
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from opchain.core.errors import LoggerFinalizedError, LoggerSuspendError
from opchain.logging.context import get_logger
from opchain.logging.entries import LogEntry, LogLevel, format_artifact_line
from opchain.logging.session import LogSession, get_log_session

# Keys structlog reserves for itself
_RESERVED_KEYS = frozenset({"event", "level", "logger", "timestamp"})


@dataclass(frozen=True)
class SuspensionToken:
    """
    Checked-out state of a suspended logger.

    Handed back to :meth:`OperationLogger.resume_from` to continue the same
    logical record as the next part.

    Attributes:
        name: Operation name the record belongs to
        part_number: Part that was just finalized
        artifact: File written for that part (``None`` if it was empty)
    """

    name: str
    part_number: int
    artifact: Path | None = None


class OperationLogger:
    """Buffered, console-mirrored logger for one logical operation."""

    def __init__(
        self,
        name: str,
        session: LogSession | None = None,
        *,
        part_number: int = 1,
        continues_from: SuspensionToken | None = None,
    ) -> None:
        self.name = name
        self.session = session or get_log_session()
        self.part_number = part_number
        self.continues_from = continues_from
        self.entries: list[LogEntry] = []
        self._finalized = False
        self._artifact: Path | None = None
        self._console = get_logger("opchain.operation")

        self.session.registry.register(self)

    def __repr__(self) -> str:
        state = "finalized" if self._finalized else "open"
        return f"OperationLogger({self.name!r}, part={self.part_number}, {state}, entries={len(self.entries)})"

    @property
    def finalized(self) -> bool:
        return self._finalized

    @property
    def artifact(self) -> Path | None:
        """Artifact written by :meth:`finalize`, if any."""
        return self._artifact

    # ------------------------------------------------------------------ #
    # Logging
    # ------------------------------------------------------------------ #

    def log(
        self,
        level: LogLevel | str,
        message: str,
        context: dict[str, Any] | None = None,
        error: BaseException | None = None,
    ) -> LogEntry:
        """
        Buffer an entry and mirror it to the console.

        Raises:
            LoggerFinalizedError: If this logger was already finalized or suspended
        """
        if self._finalized:
            raise LoggerFinalizedError(self.name, self.part_number)

        entry = LogEntry(
            level=LogLevel(level),
            message=message,
            context=dict(context) if context else None,
            error=error,
        )
        self.entries.append(entry)
        self._mirror(entry)
        return entry

    def debug(self, message: str, **context: Any) -> LogEntry:
        return self.log(LogLevel.DEBUG, message, context)

    def info(self, message: str, **context: Any) -> LogEntry:
        return self.log(LogLevel.INFO, message, context)

    def warning(self, message: str, **context: Any) -> LogEntry:
        return self.log(LogLevel.WARNING, message, context)

    def error(self, message: str, error: BaseException | None = None, **context: Any) -> LogEntry:
        return self.log(LogLevel.ERROR, message, context, error)

    def _mirror(self, entry: LogEntry) -> None:
        fields = {
            (f"ctx_{key}" if key in _RESERVED_KEYS else key): value
            for key, value in (entry.context or {}).items()
        }
        if self.part_number > 1:
            fields["part"] = self.part_number
        if entry.error is not None:
            fields["error"] = str(entry.error) or type(entry.error).__name__
        getattr(self._console, entry.level.method)(entry.message, **fields)

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def render(self) -> str:
        """Artifact text for the current buffer."""
        body = "\n".join(format_artifact_line(entry) for entry in self.entries)
        if self.part_number <= 1:
            return body
        header = f"[CONTINUED FROM PART {self.part_number - 1}]"
        if self.continues_from is not None and self.continues_from.artifact is not None:
            header += f"\n[PREVIOUS PART: {self.continues_from.artifact.name}]"
        return f"{header}\n\n{body}"

    def finalize(self) -> Path | None:
        """
        Close the logger and write its artifact. Idempotent.

        The artifact is named after the first entry's timestamp and level and
        this operation's name. An empty buffer writes nothing. If the write
        fails the logger stays open and registered, so the entries can still
        be flushed later.

        Returns:
            Path of the artifact, or ``None`` when nothing was logged

        Raises:
            OSError: If the artifact cannot be written
        """
        if self._finalized:
            return self._artifact

        if self.entries:
            first = self.entries[0]
            filename = self.session.namer.name(first.timestamp, first.level, self.name, self.part_number)
            self._artifact = self.session.write_artifact(filename, self.render())

        self._finalized = True
        self.session.registry.unregister(self)
        return self._artifact

    def suspend(self) -> SuspensionToken:
        """
        Finalize the current buffer as part N and check the record out.

        Raises:
            LoggerSuspendError: If the logger is already finalized
        """
        if self._finalized:
            raise LoggerSuspendError(f"Cannot suspend finalized logger '{self.name}' (part {self.part_number})")
        artifact = self.finalize()
        return SuspensionToken(name=self.name, part_number=self.part_number, artifact=artifact)

    @classmethod
    def resume_from(cls, token: SuspensionToken, session: LogSession | None = None) -> OperationLogger:
        """Create the logger for the part that follows a suspended one."""
        return cls(token.name, session, part_number=token.part_number + 1, continues_from=token)

    def emergency_finalize(self, reason: str, error: BaseException | None = None) -> Path | None:
        """Flush on abnormal termination, noting why."""
        if self._finalized:
            return self._artifact
        self.log(
            LogLevel.WARNING,
            f"Logger finalized due to {reason}",
            {"error": str(error)} if error is not None else None,
        )
        return self.finalize()


__all__ = ["OperationLogger", "SuspensionToken"]
