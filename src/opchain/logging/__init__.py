"""
opchain logging - live console logging plus per-operation artifacts.

This module provides:
- Structured console logging with structlog (configure_logging, get_logger)
- Operation context propagation via contextvars
- OperationLogger: buffered per-operation artifacts with suspend/resume
- LogSession: the per-run artifact directory
- LoggerRegistry: emergency flush of live loggers on abnormal termination

Usage:
    from opchain.logging import configure_logging, LogSession, OperationLogger

    configure_logging(level="DEBUG")
    session = LogSession("logs")

    logger = OperationLogger("Main menu", session)
    logger.info("Showing menu")
    logger.finalize()
"""

from opchain.logging.config import configure_logging, is_configured, is_debug_enabled, resolve_level
from opchain.logging.context import (
    LogContext,
    clear_context,
    get_context,
    get_logger,
    push_context,
)
from opchain.logging.entries import (
    ArtifactNamer,
    LogEntry,
    LogLevel,
    format_artifact_line,
    format_entry_document,
    sanitize_for_filename,
)
from opchain.logging.operation_logger import OperationLogger, SuspensionToken
from opchain.logging.registry import LoggerRegistry, get_logger_registry
from opchain.logging.session import LogSession, get_log_session, set_log_session

__all__ = [
    # Configuration
    "configure_logging",
    "is_configured",
    "is_debug_enabled",
    "resolve_level",
    # Context
    "get_logger",
    "push_context",
    "clear_context",
    "get_context",
    "LogContext",
    # Entries
    "LogEntry",
    "LogLevel",
    "ArtifactNamer",
    "format_artifact_line",
    "format_entry_document",
    "sanitize_for_filename",
    # Artifacts
    "OperationLogger",
    "SuspensionToken",
    "LogSession",
    "get_log_session",
    "set_log_session",
    "LoggerRegistry",
    "get_logger_registry",
]
