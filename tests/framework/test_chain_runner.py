"""
Tests for ChainRunner.

Covers:
- A → B → C chains, each invoked exactly once
- Terminal Outcome is the last operation's
- Failure Outcomes stop the chain
- Crash path: FATAL artifact + OperationCrashedError
"""

import pytest

from opchain.core.errors import OperationCrashedError
from opchain.core.result import Outcome
from opchain.framework import ChainRunner, Operation, get_run_context


class Step(Operation[str]):
    def __init__(self, name: str, next_step: Operation | None = None, fail: bool = False) -> None:
        super().__init__(name)
        self.next_step = next_step
        self.fail = fail
        self.calls = 0

    def perform(self) -> Outcome[str]:
        self.calls += 1
        self.logger.info(f"step {self.name}")
        if self.fail:
            return Outcome.fail(f"{self.name} failed")
        if self.next_step is not None:
            return Outcome.then(self.next_step)
        return Outcome.ok(self.name)


class Broken(Operation[None]):
    """Operation whose invoke() itself raises."""

    name = "Broken"

    def invoke(self):
        raise RuntimeError("lifecycle broke")

    def perform(self):
        return Outcome.ok(None)


class TestExecuteChain:
    def test_chain_runs_each_once(self, run_context):
        c = Step("C")
        b = Step("B", c)
        a = Step("A", b)
        runner = ChainRunner(run_context)

        outcome = runner.execute_chain(a)

        assert outcome.success and outcome.data == "C"
        assert [a.calls, b.calls, c.calls] == [1, 1, 1]
        assert [op.name for op in runner.history] == ["A", "B", "C"]

    def test_each_step_writes_own_artifact(self, run_context):
        ChainRunner(run_context).execute_chain(Step("A", Step("B")))
        names = [p.name for p in run_context.session.artifacts()]
        assert names[0].endswith("-A.log") and names[1].endswith("-B.log")

    def test_failure_stops_chain(self, run_context):
        after = Step("After")
        outcome = ChainRunner(run_context).execute_chain(Step("A", Step("B", after, fail=True)))
        assert not outcome.success
        assert outcome.error == "B failed"
        assert after.calls == 0

    def test_perform_exception_is_failure_not_crash(self, run_context):
        class Raises(Operation[None]):
            def perform(self):
                raise ValueError("nope")

        outcome = ChainRunner(run_context).execute_chain(Raises())
        assert not outcome.success

    def test_uses_given_context(self, run_context, log_session):
        seen = []

        class Peek(Operation[None]):
            def perform(self):
                seen.append(get_run_context())
                return Outcome.ok(None)

        ChainRunner(run_context).execute_chain(Peek())
        assert seen == [run_context]

    def test_execute_single_does_not_follow(self, run_context):
        b = Step("B")
        outcome = ChainRunner(run_context).execute_single(Step("A", b))
        assert outcome.next_operation is b
        assert b.calls == 0


class TestCrash:
    def test_crash_writes_fatal_artifact_and_raises(self, run_context):
        runner = ChainRunner(run_context)
        with pytest.raises(OperationCrashedError) as exc_info:
            runner.execute_chain(Step("A", Broken()))

        assert isinstance(exc_info.value.cause, RuntimeError)
        assert exc_info.value.context.operation == "Broken"

        fatal = [p for p in run_context.session.artifacts() if "FATAL" in p.name]
        assert len(fatal) == 1
        assert fatal[0].name.endswith("-ERROR-FATAL_Operation_crashed.log")
        text = fatal[0].read_text(encoding="utf-8")
        assert "lifecycle broke" in text
        assert '"operation": "Broken"' in text
