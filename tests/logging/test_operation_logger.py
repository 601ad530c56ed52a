"""
Tests for OperationLogger: buffering, finalize, suspend/resume.

Covers:
- Entries are buffered and written on finalize
- finalize() is idempotent; an empty buffer writes nothing
- A failed write leaves the logger open and registered
- Logging after finalize/suspend raises LoggerFinalizedError
- suspend() + resume_from() continue the record as part N+1
- emergency_finalize() notes the reason before flushing
"""

import pytest

from opchain.core.errors import LoggerFinalizedError, LoggerSuspendError
from opchain.logging import LoggerRegistry, LogLevel, LogSession, OperationLogger, SuspensionToken


class TestBuffering:
    def test_entries_are_buffered(self, log_session):
        logger = OperationLogger("Main menu", log_session)
        logger.info("Showing menu")
        logger.debug("details", choice=2)
        assert [e.message for e in logger.entries] == ["Showing menu", "details"]
        assert logger.entries[1].context == {"choice": 2}
        assert logger.entries[1].level is LogLevel.DEBUG

    def test_reserved_context_keys_do_not_break_console(self, log_session):
        logger = OperationLogger("x", log_session)
        logger.info("message", event="clash", level="clash")
        assert logger.entries[0].context == {"event": "clash", "level": "clash"}

    def test_error_entry_keeps_exception(self, log_session):
        logger = OperationLogger("x", log_session)
        err = ValueError("bad")
        logger.error("failed", error=err)
        assert logger.entries[0].error is err


class TestFinalize:
    def test_writes_named_artifact(self, log_session):
        logger = OperationLogger("Main menu", log_session)
        logger.debug("Starting")
        logger.info("Done")
        path = logger.finalize()
        assert path is not None and path.exists()
        assert path.parent == log_session.directory
        assert path.name.endswith("-1-DEBUG-Main_menu.log")
        lines = path.read_text().splitlines()
        assert "DEBUG   Starting" in lines[0]
        assert "INFO    Done" in lines[1]

    def test_idempotent(self, log_session):
        logger = OperationLogger("x", log_session)
        logger.info("one")
        first = logger.finalize()
        assert logger.finalize() == first
        assert len(log_session.artifacts()) == 1

    def test_empty_buffer_writes_nothing(self, log_session):
        logger = OperationLogger("x", log_session)
        assert logger.finalize() is None
        assert log_session.artifacts() == []
        assert not log_session.directory.exists()

    def test_log_after_finalize_raises(self, log_session):
        logger = OperationLogger("x", log_session)
        logger.info("one")
        logger.finalize()
        with pytest.raises(LoggerFinalizedError):
            logger.info("too late")

    def test_registry_tracks_live_loggers(self, log_session):
        logger = OperationLogger("x", log_session)
        assert logger in log_session.registry.active
        logger.finalize()
        assert logger not in log_session.registry.active

    def test_failed_write_leaves_logger_open(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        session = LogSession(blocker, registry=LoggerRegistry())
        logger = OperationLogger("x", session)
        logger.info("keep me")
        with pytest.raises(OSError):
            logger.finalize()
        assert not logger.finalized
        assert logger in session.registry.active

    def test_failed_suspend_leaves_logger_open(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        session = LogSession(blocker, registry=LoggerRegistry())
        logger = OperationLogger("Bench", session)
        logger.info("keep me")
        with pytest.raises(OSError):
            logger.suspend()
        assert not logger.finalized
        logger.info("still writable")
        assert len(logger.entries) == 2


class TestSuspendResume:
    def test_suspend_returns_token(self, log_session):
        logger = OperationLogger("Bench", log_session)
        logger.info("before child")
        token = logger.suspend()
        assert isinstance(token, SuspensionToken)
        assert token.name == "Bench"
        assert token.part_number == 1
        assert token.artifact is not None and token.artifact.exists()
        assert logger.finalized

    def test_log_after_suspend_raises(self, log_session):
        logger = OperationLogger("Bench", log_session)
        logger.info("x")
        logger.suspend()
        with pytest.raises(LoggerFinalizedError):
            logger.info("y")

    def test_suspend_finalized_raises(self, log_session):
        logger = OperationLogger("Bench", log_session)
        logger.finalize()
        with pytest.raises(LoggerSuspendError):
            logger.suspend()

    def test_resume_continues_as_next_part(self, log_session):
        logger = OperationLogger("Bench", log_session)
        logger.info("part one")
        token = logger.suspend()

        resumed = OperationLogger.resume_from(token, log_session)
        assert resumed.part_number == 2
        resumed.info("part two")
        path = resumed.finalize()

        assert path.name.endswith("-INFO-Bench.part2.log")
        text = path.read_text()
        assert text.startswith("[CONTINUED FROM PART 1]\n")
        assert f"[PREVIOUS PART: {token.artifact.name}]" in text
        assert "part two" in text
        assert "part one" not in text

    def test_parts_concatenate_in_order(self, log_session):
        logger = OperationLogger("Bench", log_session)
        logger.info("first")
        token = logger.suspend()
        resumed = OperationLogger.resume_from(token, log_session)
        resumed.info("second")
        resumed.finalize()

        texts = [p.read_text() for p in log_session.artifacts()]
        joined = "".join(texts)
        assert joined.index("first") < joined.index("second")


class TestEmergencyFinalize:
    def test_notes_reason(self, log_session):
        logger = OperationLogger("Main menu", log_session)
        logger.info("working")
        path = logger.emergency_finalize("SIGINT")
        last = path.read_text().splitlines()[-1]
        assert "WARNING" in last
        assert "Logger finalized due to SIGINT" in last

    def test_noop_when_finalized(self, log_session):
        logger = OperationLogger("x", log_session)
        logger.info("working")
        path = logger.finalize()
        assert logger.emergency_finalize("exit") == path
        assert "finalized due to" not in path.read_text()
