"""Tests for opchain.core.result: Outcome and format_outcome."""

from opchain.core.result import Outcome, format_outcome
from opchain.framework.operations import Operation


class _Noop(Operation[None]):
    def perform(self) -> Outcome[None]:
        return Outcome.ok(None)


# =====================================================================
# Factories
# =====================================================================


class TestOutcomeOk:
    def test_ok_basic(self):
        r = Outcome.ok("hello")
        assert r.success is True
        assert r.data == "hello"
        assert r.error is None
        assert r.next_operation is None

    def test_ok_none_is_terminal(self):
        r = Outcome.ok(None)
        assert r.success is True
        assert r.continues_chain is False

    def test_ok_with_operation_value_does_not_chain(self):
        """Only then() continues a chain; the data's shape is never inspected."""
        r = Outcome.ok(_Noop("next"))
        assert r.continues_chain is False


class TestOutcomeThen:
    def test_then_sets_next_operation(self):
        op = _Noop("next")
        r = Outcome.then(op)
        assert r.success is True
        assert r.next_operation is op
        assert r.data is op
        assert r.continues_chain is True


class TestOutcomeFail:
    def test_fail_basic(self):
        r = Outcome.fail("Invalid menu selection")
        assert r.success is False
        assert r.data is None
        assert r.error == "Invalid menu selection"
        assert r.continues_chain is False

    def test_fail_with_details(self):
        err = ValueError("boom")
        r = Outcome.fail("boom", details=err)
        assert r.details is err

    def test_frozen(self):
        r = Outcome.ok(1)
        try:
            r.success = False  # type: ignore[misc]
        except AttributeError:
            pass
        else:
            raise AssertionError("Outcome should be immutable")


# =====================================================================
# Serialisation
# =====================================================================


class TestFormatOutcome:
    def test_success(self):
        assert format_outcome(Outcome.ok("yes")) == "✅ { success: true, data: yes }"

    def test_failure(self):
        text = format_outcome(Outcome.fail("nope", details="why"))
        assert text == "❌ { success: false, error: nope, details: why }"

    def test_chained_shows_operation_name(self):
        assert format_outcome(Outcome.then(_Noop("Greet"))) == "✅ { success: true, data: Greet }"


class TestToDict:
    def test_success(self):
        assert Outcome.ok(3).to_dict() == {"success": True, "data": 3}

    def test_success_without_data(self):
        assert Outcome.ok(None).to_dict() == {"success": True}

    def test_failure(self):
        d = Outcome.fail("bad", details=KeyError("k")).to_dict()
        assert d["success"] is False
        assert d["error"] == "bad"
        assert "k" in d["details"]

    def test_chained(self):
        assert Outcome.then(_Noop("About")).to_dict() == {"success": True, "next_operation": "About"}
