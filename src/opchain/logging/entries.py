"""
Log entries, artifact formatting and artifact naming.

A :class:`LogEntry` is one buffered record inside an operation logger.
Artifacts are plain text files; this module owns their line format and
their file names:

    {YYYY-MM-DD-HH-MM-SS-mmm}-{sequence}-{LEVEL}-{description}[.partN].log

``sequence`` disambiguates artifacts created within the same millisecond.
"""

from __future__ import annotations

import json
import re
import traceback
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


class LogLevel(str, Enum):
    """Levels an operation logger accepts."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"

    @property
    def method(self) -> str:
        """Name of the matching structlog method."""
        return self.value.lower()


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class LogEntry:
    """One structured log record."""

    level: LogLevel
    message: str
    timestamp: datetime = field(default_factory=utc_now)
    context: dict[str, Any] | None = None
    error: BaseException | None = None


def strip_ansi(text: str) -> str:
    """Remove ANSI colour/control sequences."""
    return _ANSI_RE.sub("", text)


def format_iso(timestamp: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a Z suffix."""
    return timestamp.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


def _error_summary(error: BaseException) -> str:
    return str(error) or type(error).__name__


def format_artifact_line(entry: LogEntry) -> str:
    """Format an entry as one line of an operation artifact."""
    line = f"{format_iso(entry.timestamp)} {entry.level.value:<7} {strip_ansi(entry.message)}"
    if entry.context:
        line += f" | Context: {json.dumps(entry.context, default=str)}"
    if entry.error is not None:
        line += f" | Error: {_error_summary(entry.error)}"
    return line


def format_entry_document(entry: LogEntry) -> str:
    """Format a standalone entry as a full document (no colours, full details)."""
    lines = [
        f"Timestamp: {format_iso(entry.timestamp)}",
        f"Level: {entry.level.value}",
        f"Message: {strip_ansi(entry.message)}",
    ]
    if entry.context:
        lines.append("\nContext:")
        lines.append(json.dumps(entry.context, indent=2, default=str))
    if entry.error is not None:
        lines.append("\nError:")
        lines.append(f"Name: {type(entry.error).__name__}")
        lines.append(f"Message: {_error_summary(entry.error)}")
        stack = "".join(traceback.format_exception(entry.error)).rstrip()
        lines.append(f"Stack:\n{stack}")
    return "\n".join(lines)


def sanitize_for_filename(text: str) -> str:
    """Replace characters that are awkward in file names; at most 100 chars."""
    text = re.sub(r"[^a-zA-Z0-9\-_. ]", "_", text)
    text = re.sub(r"\s+", "_", text)
    text = re.sub(r"_+", "_", text)
    return text.strip("_")[:100]


class ArtifactNamer:
    """
    Generates artifact file names with a per-millisecond sequence number.

    Only the most recent ``max_tracked`` milliseconds are remembered; older
    counters are dropped down to ``keep`` entries.
    """

    def __init__(self, max_tracked: int = 1000, keep: int = 900) -> None:
        self._counters: OrderedDict[str, int] = OrderedDict()
        self._max_tracked = max_tracked
        self._keep = keep

    def name(
        self,
        timestamp: datetime,
        level: LogLevel,
        description: str,
        part_number: int = 1,
        ext: str = "log",
    ) -> str:
        local = timestamp.astimezone()
        base = local.strftime("%Y-%m-%d-%H-%M-%S-") + f"{local.microsecond // 1000:03d}"

        counter = self._counters.get(base, 0) + 1
        self._counters[base] = counter
        self._counters.move_to_end(base)
        if len(self._counters) > self._max_tracked:
            while len(self._counters) > self._keep:
                self._counters.popitem(last=False)

        part_suffix = f".part{part_number}" if part_number > 1 else ""
        return f"{base}-{counter}-{level.value}-{sanitize_for_filename(description)}{part_suffix}.{ext}"


__all__ = [
    "LogLevel",
    "LogEntry",
    "ArtifactNamer",
    "format_artifact_line",
    "format_entry_document",
    "format_iso",
    "sanitize_for_filename",
    "strip_ansi",
    "utc_now",
]
