"""Process-wide registry of live operation loggers.

Manifesto:
    Buffered log entries must never be lost. Every operation logger
    registers itself on creation and unregisters on finalize; whatever is
    still registered when the process dies abnormally (interrupt, unhandled
    exception, interpreter exit) gets emergency-finalized exactly once.

Tags:
    opchain, logging, registry, signals, atexit, shutdown

Doc-Types:
    api-reference
"""

from __future__ import annotations

import atexit
import signal
import sys
import threading
from types import FrameType, TracebackType
from typing import Any, Protocol

from opchain.logging.context import get_logger

log = get_logger(__name__)


class EmergencyFinalizable(Protocol):
    """Anything the registry can flush on abnormal termination."""

    def emergency_finalize(self, reason: str, error: BaseException | None = None) -> Any: ...


class LoggerRegistry:
    """
    Tracks live loggers and flushes them on abnormal termination.

    ``install()`` hooks ``atexit``, ``sys.excepthook`` and SIGINT/SIGTERM.
    ``finalize_all()`` empties the registry before flushing, so a logger is
    never emergency-finalized twice even if several hooks fire.
    """

    HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM)

    def __init__(self) -> None:
        self._active: dict[EmergencyFinalizable, None] = {}
        self._installed = False
        self._previous_excepthook: Any = None
        self._previous_handlers: dict[int, Any] = {}

    def register(self, logger: EmergencyFinalizable) -> None:
        self._active[logger] = None

    def unregister(self, logger: EmergencyFinalizable) -> None:
        self._active.pop(logger, None)

    @property
    def active(self) -> tuple[EmergencyFinalizable, ...]:
        """Live loggers in registration order."""
        return tuple(self._active)

    def __len__(self) -> int:
        return len(self._active)

    def finalize_all(self, reason: str, error: BaseException | None = None) -> int:
        """
        Emergency-finalize every live logger.

        Returns:
            Number of loggers that were flushed
        """
        loggers = list(self._active)
        # Clear first so re-entrant hooks see nothing to do
        self._active.clear()

        flushed = 0
        for logger in loggers:
            try:
                logger.emergency_finalize(reason, error)
                flushed += 1
            except Exception as exc:
                log.error("logger.emergency_finalize_failed", reason=reason, error=str(exc))
        if loggers:
            log.debug("logger.registry_flushed", reason=reason, flushed=flushed)
        return flushed

    # ------------------------------------------------------------------ #
    # Process hooks
    # ------------------------------------------------------------------ #

    def install(self, *, signals: bool = True) -> None:
        """Hook process termination paths. Safe to call more than once."""
        if self._installed:
            return

        atexit.register(self.finalize_all, "exit")

        self._previous_excepthook = sys.excepthook
        sys.excepthook = self._excepthook

        if signals and threading.current_thread() is threading.main_thread():
            for sig in self.HANDLED_SIGNALS:
                self._previous_handlers[sig] = signal.signal(sig, self._handle_signal)

        self._installed = True

    def uninstall(self) -> None:
        """Undo :meth:`install` (for tests and embedding)."""
        if not self._installed:
            return
        atexit.unregister(self.finalize_all)
        if sys.excepthook == self._excepthook:
            sys.excepthook = self._previous_excepthook
        for sig, handler in self._previous_handlers.items():
            signal.signal(sig, handler)
        self._previous_handlers.clear()
        self._installed = False

    def _excepthook(
        self,
        exc_type: type[BaseException],
        exc: BaseException,
        tb: TracebackType | None,
    ) -> None:
        self.finalize_all("unhandled exception", exc)
        self._previous_excepthook(exc_type, exc, tb)

    def _handle_signal(self, signum: int, frame: FrameType | None) -> None:
        self.finalize_all(signal.Signals(signum).name)
        raise SystemExit(128 + signum)


_registry: LoggerRegistry | None = None


def get_logger_registry() -> LoggerRegistry:
    """Get or create the process-wide registry."""
    global _registry
    if _registry is None:
        _registry = LoggerRegistry()
    return _registry
