"""
UI primitives: the building blocks menus and flows are composed from.

Every primitive is a :class:`~opchain.framework.operations.UIOperation`, so it
writes into its caller's log, and resolves input through the run's
:class:`~opchain.input.InputResolver`, so it behaves identically under a
script. Cancellation is always ``Outcome.ok(None)``.

Validation failures never recurse: the primitive warns, then asks again in
a loop. ``max_attempts`` (or ``OPCHAIN_MAX_INPUT_ATTEMPTS``) turns an
endless re-prompt into a business failure.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from rich.panel import Panel

from opchain.core.result import Outcome, format_outcome
from opchain.core.settings import get_settings
from opchain.framework.operations import Operation, UIOperation
from opchain.input import SECRET_MASK, ConfirmationChoice

MIN_PASSWORD_LENGTH = 6


def _attempt_limit(max_attempts: int | None) -> int | None:
    return max_attempts if max_attempts is not None else get_settings().max_input_attempts


# =============================================================================
# SELECT
# =============================================================================


class SelectOperation(UIOperation[str | None]):
    """
    Choose one option from a list.

    Returns the chosen option, or ``None`` when cancelled. A scripted index
    outside the option list counts as a cancellation.
    """

    def __init__(self, message: str, options: Sequence[str], allow_cancel: bool = True) -> None:
        super().__init__(f"Select: {message}")
        self.message = message
        self.options = list(options)
        self.allow_cancel = allow_cancel

    def perform(self) -> Outcome[str | None]:
        index = self.inputs.select(self.message, self.options, allow_cancel=self.allow_cancel, owner=self)
        if index is None:
            self.logger.debug("Selection cancelled")
            return Outcome.ok(None)
        selected = self.options[index]
        self.logger.info(f"Selected: {selected}", index=index)
        return Outcome.ok(selected)


# =============================================================================
# TEXT INPUT
# =============================================================================


@dataclass(frozen=True)
class TextValidation:
    """Rules applied to entered text (scripted text included)."""

    required: bool = False
    min_length: int | None = None
    max_length: int | None = None
    numeric: bool = False
    pattern: str | re.Pattern[str] | None = None
    validator: Callable[[str], bool | str] | None = None

    def check(self, value: str) -> str | None:
        """Return an error message, or ``None`` if ``value`` is acceptable."""
        if self.required and not value:
            return "This field is required"
        if self.min_length and len(value) < self.min_length:
            return f"Minimum length is {self.min_length} characters"
        if self.max_length and len(value) > self.max_length:
            return f"Maximum length is {self.max_length} characters"
        if self.numeric and not value.isdigit():
            return "Only numeric characters are allowed"
        if self.pattern is not None and re.search(self.pattern, value) is None:
            return "Invalid format"
        if self.validator is not None:
            result = self.validator(value)
            if result is not True:
                return result if isinstance(result, str) else "Validation failed"
        return None


class InputTextOperation(UIOperation[str | None]):
    """Prompt for text, applying a default and validation rules."""

    def __init__(
        self,
        message: str,
        default: str | None = None,
        validation: TextValidation | None = None,
        *,
        max_attempts: int | None = None,
    ) -> None:
        super().__init__(f"Input text: {message}")
        self.message = message
        self.default = default
        self.validation = validation
        self.max_attempts = max_attempts

    def perform(self) -> Outcome[str | None]:
        prompt = f"{self.message} (default: {self.default})" if self.default else self.message
        limit = _attempt_limit(self.max_attempts)
        attempts = 0

        while True:
            attempts += 1
            entered = self.inputs.text(prompt, default=self.default, owner=self)
            if entered is None:
                return Outcome.ok(None)

            value = entered or self.default or ""
            problem = self.validation.check(value) if self.validation else None
            if problem is None:
                return Outcome.ok(value)

            self.echo(f"[yellow]{problem}[/yellow]")
            self.logger.warning(f"Invalid input: {problem}", attempt=attempts)
            if limit is not None and attempts >= limit:
                return Outcome.fail(f"No valid input after {attempts} attempts", details=problem)


class InputPasswordOperation(UIOperation[str | None]):
    """Prompt for a masked password of at least six characters."""

    def __init__(
        self,
        message: str = "Enter password",
        confirm: bool = False,
        *,
        max_attempts: int | None = None,
    ) -> None:
        super().__init__("Input password")
        self.message = message
        self.confirm = confirm
        self.max_attempts = max_attempts

    def perform(self) -> Outcome[str | None]:
        limit = _attempt_limit(self.max_attempts)
        attempts = 0

        while True:
            attempts += 1
            password = self.inputs.secret(self.message, owner=self)
            if password is None:
                return Outcome.ok(None)

            problem: str | None = None
            if len(password) < MIN_PASSWORD_LENGTH:
                problem = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            elif self.confirm:
                confirmation = self.inputs.secret("Confirm password", owner=self)
                if confirmation is None:
                    return Outcome.ok(None)
                if confirmation != password:
                    problem = "Passwords do not match"

            if problem is None:
                self.logger.info("Password entered", value=SECRET_MASK)
                return Outcome.ok(password)

            self.echo(f"[yellow]{problem}[/yellow]")
            self.logger.warning(problem, attempt=attempts)
            if limit is not None and attempts >= limit:
                return Outcome.fail(f"No valid password after {attempts} attempts", details=problem)

    def describe_outcome(self, outcome: Outcome[str | None]) -> str:
        if outcome.success and outcome.data is not None:
            return format_outcome(Outcome.ok(SECRET_MASK))
        return super().describe_outcome(outcome)


# =============================================================================
# CONFIRM / INFO
# =============================================================================


class ShowInfoOperation(UIOperation[None]):
    """Show a block of text (optionally boxed) and wait for acknowledgement."""

    def __init__(self, title: str, content: str | Sequence[str], boxed: bool = False) -> None:
        super().__init__(f"Show info: {title}")
        self.title = title
        self.lines = content.split("\n") if isinstance(content, str) else list(content)
        self.boxed = boxed

    def perform(self) -> Outcome[None]:
        console = self.inputs.console
        if self.boxed:
            console.print(Panel("\n".join(self.lines), title=self.title, expand=False), highlight=False)
        else:
            console.print(f"\n{self.title}\n{'=' * len(self.title)}", highlight=False)
            for line in self.lines:
                console.print(line, highlight=False)

        self.inputs.acknowledge(owner=self)
        return Outcome.ok(None)


MoreInfo = str | Sequence[str] | Callable[[], Operation[Any]]


class ConfirmOperation(UIOperation[bool | None]):
    """
    Yes/no question with an optional "more info" answer.

    ``more_info`` is text to show, or a factory returning a fresh operation
    to run each time more info is requested. After showing it the question
    is asked again. Without ``more_info`` that answer counts as "no".
    """

    def __init__(self, message: str, *, more_info: MoreInfo | None = None) -> None:
        super().__init__(f"Confirm: {message}")
        self.message = message
        self.more_info = more_info

    def perform(self) -> Outcome[bool | None]:
        while True:
            choice = self.inputs.confirm(self.message, allow_more_info=self.more_info is not None, owner=self)
            if choice is None:
                return Outcome.ok(None)

            if choice is ConfirmationChoice.MORE_INFO and self.more_info is not None:
                outcome = self._more_info_operation().invoke()
                if not outcome.success:
                    self.logger.warning("More info could not be shown", error=outcome.error)
                continue

            answer = choice is ConfirmationChoice.AFFIRMATIVE
            self.logger.info(f"Confirmed: {'yes' if answer else 'no'}")
            return Outcome.ok(answer)

    def _more_info_operation(self) -> Operation[Any]:
        if callable(self.more_info):
            return self.more_info()
        return ShowInfoOperation("Additional Information", self.more_info)


# =============================================================================
# MULTIPLE TEXT
# =============================================================================


@dataclass(frozen=True)
class TextField:
    """One field of an :class:`InputMultipleTextOperation` form."""

    key: str
    message: str
    default: str | None = None
    validation: TextValidation | None = None
    required: bool = False


GO_BACK = "↩️  Go back to previous field"
CANCEL_FORM = "❌ Cancel entire form"


class InputMultipleTextOperation(UIOperation[dict[str, str] | None]):
    """
    Collect several text fields in order, with back navigation.

    Cancelling a field after the first offers to go back to the previous
    one or to cancel the whole form.
    """

    def __init__(self, title: str, fields: TextField | Sequence[TextField]) -> None:
        super().__init__(f"Input multiple: {title}")
        self.title = title
        self.fields = [fields] if isinstance(fields, TextField) else list(fields)

    def perform(self) -> Outcome[dict[str, str] | None]:
        values: dict[str, str] = {}
        index = 0
        self.echo(f"\n{self.title}\n{'═' * min(len(self.title), 60)}")

        while index < len(self.fields):
            field = self.fields[index]
            if index > 0:
                entered = "\n".join(f"  {f.key}: {values[f.key]}" for f in self.fields[:index])
                self.echo(f"\nEntered so far:\n{entered}")

            validation = field.validation or (TextValidation(required=True) if field.required else None)
            outcome = InputTextOperation(field.message, values.get(field.key) or field.default, validation).invoke()
            if not outcome.success:
                return Outcome.fail(f"Failed to get {field.key}: {outcome.error}", details=outcome.details)

            if outcome.data is None:
                if index == 0 or not self._go_back():
                    return Outcome.ok(None)
                index -= 1
                continue

            values[field.key] = outcome.data
            index += 1

        summary = "\n".join(f"  {f.key}: {values[f.key]}" for f in self.fields)
        self.echo(f"\n✅ All fields collected:\n{summary}")
        self.logger.info("All fields collected", fields=list(values))
        return Outcome.ok(values)

    def _go_back(self) -> bool:
        outcome = SelectOperation("What would you like to do?", [GO_BACK, CANCEL_FORM], allow_cancel=False).invoke()
        return outcome.success and outcome.data == GO_BACK


__all__ = [
    "SelectOperation",
    "TextValidation",
    "InputTextOperation",
    "InputPasswordOperation",
    "ShowInfoOperation",
    "ConfirmOperation",
    "TextField",
    "InputMultipleTextOperation",
    "MIN_PASSWORD_LENGTH",
]
