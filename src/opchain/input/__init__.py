"""
opchain input - scripted and live user input.

Usage:
    from opchain.input import InputResolver

    inputs = InputResolver.from_script('select:1,input:"hello world"')
    inputs.select("Pick one", ["a", "b"])   # 1
    inputs.text("Your name")                # 'hello world'
"""

from opchain.input.prompter import Prompter, RichPrompter
from opchain.input.recording import RecordedSession, SessionInteraction, SessionRecorder
from opchain.input.resolver import CANCELLED_SELECTION, SECRET_MASK, InputResolver
from opchain.input.scripted import (
    ConfirmationChoice,
    ConfirmMode,
    InputKind,
    ScriptedInput,
    ScriptedInputQueue,
    parse_script,
)

__all__ = [
    # Script
    "InputKind",
    "ConfirmationChoice",
    "ConfirmMode",
    "ScriptedInput",
    "ScriptedInputQueue",
    "parse_script",
    # Resolution
    "InputResolver",
    "Prompter",
    "RichPrompter",
    "CANCELLED_SELECTION",
    "SECRET_MASK",
    # Recording
    "SessionRecorder",
    "RecordedSession",
    "SessionInteraction",
]
