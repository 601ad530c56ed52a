"""Built-in operations: UI primitives, exits and the demo menu."""

from opchain.operations.exits import DisplayFatalErrorAndExit, ExitNormally
from opchain.operations.menu import MAIN_MENU, AboutOperation, GreetOperation, MainMenuOperation
from opchain.operations.primitives import (
    MIN_PASSWORD_LENGTH,
    ConfirmOperation,
    InputMultipleTextOperation,
    InputPasswordOperation,
    InputTextOperation,
    SelectOperation,
    ShowInfoOperation,
    TextField,
    TextValidation,
)

BUILTIN_OPERATIONS = {
    "main-menu": MainMenuOperation,
    "greet": GreetOperation,
    "about": AboutOperation,
    "fatal": DisplayFatalErrorAndExit,
    "exit": ExitNormally,
}

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
    "ExitNormally",
    "DisplayFatalErrorAndExit",
    "MainMenuOperation",
    "GreetOperation",
    "AboutOperation",
    "MAIN_MENU",
    "BUILTIN_OPERATIONS",
]
