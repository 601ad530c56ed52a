"""
Logging configuration.

Provides a single entry point for configuring the live console sink.
Per-operation artifacts (the durable sink) are written by
:class:`opchain.logging.operation_logger.OperationLogger` regardless of
the console level configured here.

Without explicit arguments the level and format come from:
- OPCHAIN_LOG_LEVEL: DEBUG | INFO | WARNING | ERROR | DEFAULT | VERBOSE (default: INFO)
- OPCHAIN_LOG_FORMAT: json | console (default: console)

DEFAULT and VERBOSE are shortcuts: DEFAULT shows INFO and above,
VERBOSE shows everything.

Usage:
    # CLI entry point
    from opchain.logging import configure_logging
    configure_logging()

    # Or with explicit settings
    configure_logging(level="DEBUG", format="json")
"""

import logging
import os
import sys
from typing import Literal

import structlog
from structlog.types import Processor

from opchain.logging.context import add_context_processor

LEVEL_SHORTCUTS = {
    "DEFAULT": "INFO",
    "VERBOSE": "DEBUG",
}

# Set by configure_logging()
_configured = False


def resolve_level(level: str) -> str:
    """Map a level name or shortcut to a stdlib level name."""
    upper = level.strip().upper()
    upper = LEVEL_SHORTCUTS.get(upper, upper)
    if upper not in ("DEBUG", "INFO", "WARNING", "ERROR"):
        raise ValueError(f"Invalid log level: {level}")
    return upper


def configure_logging(
    level: str | None = None,
    format: Literal["json", "console"] | None = None,
    force: bool = False,
) -> None:
    """
    Configure structured console logging for the application.

    Should be called once at application startup (CLI entry).
    Subsequent calls are no-ops unless force=True.

    Args:
        level: Log level or shortcut (overrides OPCHAIN_LOG_LEVEL env var)
        format: Output format (overrides OPCHAIN_LOG_FORMAT env var)
        force: Reconfigure even if already configured
    """
    global _configured

    if _configured and not force:
        return

    log_level = resolve_level(level or os.environ.get("OPCHAIN_LOG_LEVEL", "INFO"))
    log_format = (format or os.environ.get("OPCHAIN_LOG_FORMAT", "console")).lower()

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        # UTC ISO-8601 with Z suffix
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        # Operation id/name from contextvars
        add_context_processor,
        structlog.processors.format_exc_info,
        structlog.processors.StackInfoRenderer(),
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer(default=str))
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=sys.stderr.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    # structlog routes through stdlib; its root level does the filtering
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level),
        force=True,
    )
    logging.getLogger("opchain").setLevel(getattr(logging, log_level))

    _configured = True


def is_debug_enabled() -> bool:
    """Whether opchain console output includes DEBUG events."""
    return logging.getLogger("opchain").isEnabledFor(logging.DEBUG)


def is_configured() -> bool:
    """Whether configure_logging() has run in this process."""
    return _configured
