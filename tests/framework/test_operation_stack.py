"""Tests for OperationStack and OperationRecord ownership tokens."""

import pytest

from opchain.core.errors import LoggerSuspendError, StackOrderError
from opchain.framework import OperationRecord, OperationStack
from opchain.logging import OperationLogger


def record(op_id: int, name: str, **kwargs) -> OperationRecord:
    return OperationRecord(op_id, name, **kwargs)


class TestOperationStack:
    def test_push_pop_lifo(self):
        stack = OperationStack()
        a, b = record(1, "a"), record(2, "b")
        stack.push(a)
        stack.push(b)
        assert stack.current is b
        assert stack.names == ["a", "b"]
        assert stack.pop(b) is b
        assert stack.pop(a) is a
        assert stack.depth == 0
        assert stack.current is None

    def test_pop_out_of_order_raises(self):
        stack = OperationStack()
        a, b = record(1, "a"), record(2, "b")
        stack.push(a)
        stack.push(b)
        with pytest.raises(StackOrderError, match="current operation is 'b'"):
            stack.pop(a)
        assert stack.depth == 2

    def test_pop_empty_raises(self):
        with pytest.raises(StackOrderError, match="<empty>"):
            OperationStack().pop(record(1, "a"))

    def test_parent_of(self):
        stack = OperationStack()
        a, b = record(1, "a"), record(2, "b")
        stack.push(a)
        stack.push(b)
        assert stack.parent_of(b) is a
        assert stack.parent_of(a) is None
        assert stack.parent_of(record(3, "stranger")) is None

    def test_nearest_logger_holder_skips_loggerless(self, log_session):
        stack = OperationStack()
        owner = record(1, "owner", owns_logger=True, own_logger=OperationLogger("owner", log_session))
        middle = record(2, "middle")
        leaf = record(3, "leaf")
        for r in (owner, middle, leaf):
            stack.push(r)
        assert stack.nearest_logger_holder(leaf) is owner

    def test_iteration_and_clear(self):
        stack = OperationStack()
        stack.push(record(1, "a"))
        assert [r.name for r in stack] == ["a"]
        stack.clear()
        assert len(stack) == 0


class TestOwnershipTokens:
    def test_borrower_resolves_through_lender(self, log_session):
        lender = record(1, "lender", owns_logger=True, own_logger=OperationLogger("lender", log_session))
        borrower = record(2, "borrower", lender=lender)
        assert borrower.logger is lender.logger
        assert not borrower.has_active_logger

    def test_suspend_and_resume(self, log_session):
        owner = record(1, "owner", owns_logger=True, own_logger=OperationLogger("owner", log_session))
        owner.logger.info("first")
        token = owner.suspend_logger()
        assert token.part_number == 1
        assert not owner.has_active_logger

        resumed = owner.resume_logger(log_session)
        assert resumed.part_number == 2
        assert owner.logger is resumed
        assert owner.has_active_logger

    def test_suspend_without_logger_raises(self):
        with pytest.raises(LoggerSuspendError):
            record(1, "bare").suspend_logger()

    def test_resume_without_suspension_raises(self, log_session):
        owner = record(1, "owner", owns_logger=True, own_logger=OperationLogger("owner", log_session))
        with pytest.raises(LoggerSuspendError):
            owner.resume_logger(log_session)

    def test_double_suspend_raises(self, log_session):
        owner = record(1, "owner", owns_logger=True, own_logger=OperationLogger("owner", log_session))
        owner.suspend_logger()
        with pytest.raises(LoggerSuspendError):
            owner.suspend_logger()
