"""
Log session: the directory that receives every artifact of one CLI run.

Each run writes into ``<log_dir>/<session timestamp>/``. The directory is
created lazily on the first artifact, so runs that never log leave nothing
behind. Artifacts are never overwritten; a name collision gets a ``-N``
suffix before the extension.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from opchain.logging.context import get_logger
from opchain.logging.entries import ArtifactNamer, LogEntry, LogLevel, format_entry_document
from opchain.logging.registry import LoggerRegistry, get_logger_registry

log = get_logger(__name__)


class LogSession:
    """
    Owns the artifact directory, the file namer and the logger registry.

    Attributes:
        root: Configured log directory
        directory: Per-session subdirectory artifacts are written into
        registry: Registry every logger of this session registers with
        namer: Per-millisecond artifact namer shared by the session
    """

    def __init__(
        self,
        log_dir: Path | str = "logs",
        *,
        registry: LoggerRegistry | None = None,
        namer: ArtifactNamer | None = None,
        started_at: datetime | None = None,
    ) -> None:
        self.started_at = started_at or datetime.now()
        self.session_id = self.started_at.strftime("%Y-%m-%d-%H-%M-%S-%f")[:-3]
        self.root = Path(log_dir)
        self.directory = self.root / self.session_id
        self.registry = registry if registry is not None else get_logger_registry()
        self.namer = namer if namer is not None else ArtifactNamer()

    def ensure_directory(self) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        return self.directory

    def write_artifact(self, filename: str, content: str) -> Path:
        """Write a new artifact, never replacing an existing file."""
        directory = self.ensure_directory()
        path = directory / filename
        attempt = 1
        while True:
            try:
                with path.open("x", encoding="utf-8") as fh:
                    fh.write(content)
                    if not content.endswith("\n"):
                        fh.write("\n")
                return path
            except FileExistsError:
                attempt += 1
                candidate = Path(filename)
                path = directory / f"{candidate.stem}-{attempt}{candidate.suffix}"

    def write_entry(self, entry: LogEntry) -> Path:
        """
        Record a standalone entry (not owned by any operation).

        The entry is mirrored to the console and written as its own artifact,
        named after its own message.
        """
        getattr(log, entry.level.method)(
            entry.message,
            **(entry.context or {}),
            **({"error": str(entry.error)} if entry.error is not None else {}),
        )
        filename = self.namer.name(entry.timestamp, entry.level, entry.message)
        return self.write_artifact(filename, format_entry_document(entry))

    def error(self, message: str, error: BaseException | None = None, **context) -> Path:
        """Shortcut for a standalone ERROR entry."""
        return self.write_entry(
            LogEntry(level=LogLevel.ERROR, message=message, context=context or None, error=error)
        )

    def artifacts(self) -> list[Path]:
        """Artifacts written so far, in chronological order."""
        if not self.directory.exists():
            return []
        return sorted((p for p in self.directory.iterdir() if p.is_file()), key=_artifact_order)


# Artifact names start with "YYYY-MM-DD-HH-MM-SS-mmm-<seq>-"
_STAMP_LENGTH = 23


def _artifact_order(path: Path) -> tuple[str, int, str]:
    seq = path.name[_STAMP_LENGTH + 1 :].partition("-")[0]
    return path.name[:_STAMP_LENGTH], int(seq) if seq.isdigit() else 0, path.name


_session: LogSession | None = None


def get_log_session() -> LogSession:
    """Get or create the process-wide session (directory from settings)."""
    global _session
    if _session is None:
        from opchain.core.settings import get_settings

        _session = LogSession(get_settings().log_dir)
    return _session


def set_log_session(session: LogSession | None) -> None:
    """Replace the process-wide session (``None`` resets it)."""
    global _session
    _session = session
