"""Tests for opchain.core.settings: RuntimeSettings."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from opchain.core.settings import RuntimeSettings, clear_settings_cache, get_settings


class TestDefaults:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("OPCHAIN_LOG_DIR", raising=False)
        s = RuntimeSettings()
        assert s.log_dir == Path("logs")
        assert s.log_level == "INFO"
        assert s.log_format == "console"
        assert s.inputs is None
        assert s.confirm_mode == "strict"
        assert s.max_input_attempts is None


class TestEnvironment:
    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("OPCHAIN_LOG_LEVEL", "verbose")
        monkeypatch.setenv("OPCHAIN_CONFIRM_MODE", "lenient")
        monkeypatch.setenv("OPCHAIN_INPUTS", "select:1")
        s = RuntimeSettings()
        assert s.log_level == "VERBOSE"
        assert s.confirm_mode == "lenient"
        assert s.inputs == "select:1"

    def test_get_settings_is_cached(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("OPCHAIN_LOG_LEVEL", "DEBUG")
        assert get_settings() is first
        clear_settings_cache()
        assert get_settings().log_level == "DEBUG"


class TestValidation:
    def test_invalid_level(self):
        with pytest.raises(ValidationError):
            RuntimeSettings(log_level="LOUD")

    def test_invalid_confirm_mode(self):
        with pytest.raises(ValidationError):
            RuntimeSettings(confirm_mode="sometimes")

    def test_attempts_must_be_positive(self):
        with pytest.raises(ValidationError):
            RuntimeSettings(max_input_attempts=0)
