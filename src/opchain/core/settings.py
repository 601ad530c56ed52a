"""Runtime settings for opchain.

Every knob the runtime reads from the environment lives here: where log
artifacts go, how loud the console is, and how scripted input is parsed.
CLI flags override these values; nothing else reads environment variables.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Type-checked at startup, not halfway through a chain
    - **Environment-driven:** Reads ``OPCHAIN_*`` env vars and ``.env`` files
    - **Sensible defaults:** ``logs/`` next to the working directory, INFO console

Examples:
    >>> from opchain.core.settings import RuntimeSettings
    >>> settings = RuntimeSettings(log_level="DEBUG")
    >>> settings.confirm_mode
    'strict'

Tags:
    settings, configuration, pydantic, environment, opchain

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "DEFAULT", "VERBOSE")


class RuntimeSettings(BaseSettings):
    """opchain runtime configuration.

    Fields
    ──────
    log_dir             : Root directory for per-session log artifacts
    log_level           : Console level (DEBUG/INFO/WARNING/ERROR, DEFAULT, VERBOSE)
    log_format          : ``console`` (coloured) or ``json``
    inputs              : Scripted-input string replayed instead of live prompts
    confirm_mode        : ``strict`` rejects unknown confirmation values,
                          ``lenient`` coerces them to "no"
    max_input_attempts  : Bound on validation re-prompts (``None`` = unbounded)
    """

    model_config = SettingsConfigDict(
        env_prefix="OPCHAIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Logging ──────────────────────────────────────────────────
    log_dir: Path = Field(default=Path("logs"), description="Root directory for log artifacts")
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"

    # ── Scripted input ───────────────────────────────────────────
    inputs: str | None = None
    confirm_mode: Literal["strict", "lenient"] = "strict"
    max_input_attempts: int | None = Field(default=None, ge=1)

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVEL_NAMES:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVEL_NAMES)}, got {value!r}")
        return level


@lru_cache(maxsize=1)
def get_settings() -> RuntimeSettings:
    """Return the cached process settings."""
    return RuntimeSettings()


def clear_settings_cache() -> None:
    """Drop the cached settings (for tests)."""
    get_settings.cache_clear()


__all__ = ["RuntimeSettings", "get_settings", "clear_settings_cache", "LOG_LEVEL_NAMES"]
