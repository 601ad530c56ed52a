"""
opchain framework - operations, the operation stack and the chain runner.

Usage:
    from opchain.framework import ChainRunner, RunContext, use_run_context

    with use_run_context(RunContext(session=LogSession("logs"))):
        outcome = ChainRunner().execute_chain(MainMenuOperation())
"""

from opchain.framework.context import RunContext, get_run_context, set_run_context, use_run_context
from opchain.framework.operations import RESUME_MARKER, MenuOperation, Operation, UIOperation
from opchain.framework.registry import (
    clear_registry,
    create_operation,
    describe_operations,
    get_operation,
    list_operations,
    register_operation,
)
from opchain.framework.runner import ChainRunner, get_runner
from opchain.framework.session import InteractiveSession
from opchain.framework.stack import OperationRecord, OperationStack, OperationState

__all__ = [
    # Operations
    "Operation",
    "UIOperation",
    "MenuOperation",
    "RESUME_MARKER",
    # Stack
    "OperationStack",
    "OperationRecord",
    "OperationState",
    # Context
    "RunContext",
    "get_run_context",
    "set_run_context",
    "use_run_context",
    # Running
    "ChainRunner",
    "get_runner",
    "InteractiveSession",
    # Registry
    "register_operation",
    "get_operation",
    "create_operation",
    "list_operations",
    "describe_operations",
    "clear_registry",
]
