"""
Tests for Operation.invoke().

Covers:
- invoke() never raises for Exception subclasses from perform()
- Non-Outcome return values become failures
- An unwritable artifact becomes a failure, not an exception
- Single invocation per instance
- Logger ownership: borrow vs own
- Suspend/resume parts bracketing a child's artifact
- SystemExit passes through without resuming the parent
- State machine reaches DONE
"""

import pytest

from opchain.core.errors import LifecycleError, OperationAlreadyInvokedError
from opchain.core.result import Outcome
from opchain.framework import Operation, OperationState, RunContext, use_run_context
from opchain.framework.operations import RESUME_MARKER
from opchain.input import InputResolver
from opchain.logging import LoggerRegistry, LogSession


class Echo(Operation[str]):
    name = "Echo"

    def __init__(self, value: str = "hi") -> None:
        super().__init__()
        self.value = value

    def perform(self) -> Outcome[str]:
        self.logger.info(f"echo {self.value}")
        return Outcome.ok(self.value)


class Isolated(Operation[str]):
    """Child that insists on its own artifact."""

    name = "Isolated"

    def uses_parent_logger(self) -> bool:
        return False

    def perform(self) -> Outcome[str]:
        self.logger.info("isolated work")
        return Outcome.ok("isolated")


class Exploding(Operation[None]):
    name = "Exploding"

    def perform(self) -> Outcome[None]:
        raise ValueError("kaboom")


class Exiting(Operation[None]):
    name = "Exiting"

    def uses_parent_logger(self) -> bool:
        return False

    def perform(self) -> Outcome[None]:
        self.logger.info("leaving")
        self.finalize_own_logger()
        raise SystemExit(3)


class Parent(Operation[str]):
    name = "Parent"

    def __init__(self, child_factory) -> None:
        super().__init__()
        self.child_factory = child_factory
        self.child_outcome: Outcome | None = None

    def perform(self) -> Outcome[str]:
        self.logger.info("before child")
        self.child_outcome = self.child_factory().invoke()
        self.logger.info("after child")
        return Outcome.ok("parent done")


def read(path) -> str:
    return path.read_text(encoding="utf-8")


class TestInvokeBasics:
    def test_returns_outcome(self, run_context):
        outcome = Echo("x").invoke()
        assert outcome.success and outcome.data == "x"

    def test_exception_becomes_failure(self, run_context):
        op = Exploding()
        outcome = op.invoke()
        assert not outcome.success
        assert outcome.error == "kaboom"
        assert isinstance(outcome.details, ValueError)
        assert op.state is OperationState.DONE

    def test_failure_is_logged_with_error(self, run_context):
        Exploding().invoke()
        [artifact] = run_context.session.artifacts()
        text = read(artifact)
        assert "Unexpected error in operation | Error: kaboom" in text
        assert "Exploding failed" in text

    def test_non_outcome_return_is_failure(self, run_context):
        class Sloppy(Operation[int]):
            def perform(self):
                return 42

        outcome = Sloppy().invoke()
        assert not outcome.success
        assert "expected Outcome" in outcome.error
        assert isinstance(outcome.details, TypeError)

    def test_second_invoke_fails(self, run_context):
        op = Echo()
        assert op.invoke().success
        second = op.invoke()
        assert not second.success
        assert isinstance(second.details, OperationAlreadyInvokedError)
        assert "already been invoked" in second.error

    def test_execute_constructs_and_invokes(self, run_context):
        assert Echo.execute("y").data == "y"

    def test_logger_outside_invoke_raises(self, run_context):
        with pytest.raises(LifecycleError):
            Echo().logger

    def test_operation_ids_are_unique(self):
        assert Echo().operation_id != Echo().operation_id

    def test_default_name_is_class_name(self):
        class Unnamed(Operation[None]):
            def perform(self):
                return Outcome.ok(None)

        assert Unnamed().name == "Unnamed"
        assert Unnamed("Custom").name == "Custom"

    def test_stack_is_empty_afterwards(self, run_context):
        Parent(Echo).invoke()
        assert run_context.stack.depth == 0

    def test_unwritable_artifact_is_failure(self, tmp_path, console):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        ctx = RunContext(session=LogSession(blocker, registry=LoggerRegistry()), inputs=InputResolver(console=console))
        with use_run_context(ctx):
            op = Echo("x")
            outcome = op.invoke()
        assert not outcome.success
        assert outcome.error.startswith("Could not write log artifact")
        assert isinstance(outcome.details, OSError)
        assert op.state is OperationState.DONE
        assert ctx.stack.depth == 0
        # Still registered so the session flush can retry it
        assert len(ctx.session.registry) == 1


class TestLoggerOwnership:
    def test_root_operation_owns_logger(self, run_context):
        op = Echo()
        op.invoke()
        assert op.owns_logger
        [artifact] = run_context.session.artifacts()
        assert artifact.name.endswith("-DEBUG-Echo.log")
        assert "Starting operation" in read(artifact)

    def test_borrowing_child_writes_into_parent_artifact(self, run_context):
        parent = Parent(lambda: Echo("nested"))
        parent.invoke()
        [artifact] = run_context.session.artifacts()
        text = read(artifact)
        assert text.index("before child") < text.index("echo nested") < text.index("after child")
        assert not parent.child_outcome.details

    def test_owning_child_brackets_parent_parts(self, run_context):
        parent = Parent(Isolated)
        assert parent.invoke().success
        assert parent.child_outcome.data == "isolated"

        part1, child, part2 = run_context.session.artifacts()
        assert part1.name.endswith("-Parent.log")
        assert child.name.endswith("-Isolated.log")
        assert part2.name.endswith("-Parent.part2.log")

        assert "before child" in read(part1)
        assert "after child" not in read(part1)

        child_text = read(child)
        assert "isolated work" in child_text
        assert "before child" not in child_text and "after child" not in child_text

        part2_text = read(part2)
        assert part2_text.startswith("[CONTINUED FROM PART 1]")
        assert f"[PREVIOUS PART: {part1.name}]" in part2_text
        assert part2_text.index(RESUME_MARKER) < part2_text.index("after child")

    def test_borrower_follows_resumed_lender(self, run_context):
        """A grandchild borrowing after a resume writes into part 2."""

        class Outer(Operation[None]):
            name = "Outer"

            def perform(self):
                Isolated().invoke()
                Echo("late").invoke()
                return Outcome.ok(None)

        Outer().invoke()
        part1, _child, part2 = run_context.session.artifacts()
        assert "echo late" in read(part2)
        assert "echo late" not in read(part1)

    def test_nested_owners_produce_three_parts(self, run_context):
        class Twice(Operation[None]):
            name = "Twice"

            def perform(self):
                Isolated().invoke()
                Isolated().invoke()
                return Outcome.ok(None)

        Twice().invoke()
        names = [p.name for p in run_context.session.artifacts()]
        assert [n.rsplit("-", 1)[-1] for n in names] == [
            "Twice.log",
            "Isolated.log",
            "Twice.part2.log",
            "Isolated.log",
            "Twice.part3.log",
        ]
        assert read(run_context.session.artifacts()[-1]).startswith("[CONTINUED FROM PART 2]")

    def test_all_loggers_closed_after_chain(self, run_context):
        Parent(Isolated).invoke()
        assert len(run_context.session.registry) == 0


class TestExitPath:
    def test_system_exit_propagates(self, run_context):
        with pytest.raises(SystemExit) as exc_info:
            Exiting().invoke()
        assert exc_info.value.code == 3
        assert run_context.stack.depth == 0

    def test_parent_not_resumed_while_exiting(self, run_context):
        parent = Parent(Exiting)
        with pytest.raises(SystemExit):
            parent.invoke()

        names = [p.name for p in run_context.session.artifacts()]
        assert len(names) == 2
        assert names[0].endswith("-Parent.log")
        assert names[1].endswith("-Exiting.log")
        assert not any("part2" in n for n in names)
        assert run_context.stack.depth == 0

    def test_keyboard_interrupt_propagates(self, run_context):
        class Interrupted(Operation[None]):
            def perform(self):
                raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            Interrupted().invoke()


class TestStateMachine:
    def test_owner_with_parent_visits_every_state(self, run_context):
        seen: list[OperationState] = []

        class Watched(Isolated):
            def perform(self):
                seen.append(self.state)
                return super().perform()

        child = Watched()
        Parent(lambda: child).invoke()
        assert seen == [OperationState.EXECUTING]
        assert child.state is OperationState.DONE

    def test_not_started_before_invoke(self):
        assert Echo().state is OperationState.NOT_STARTED
