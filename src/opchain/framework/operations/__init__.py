"""Operation base classes."""

from opchain.framework.operations.base import RESUME_MARKER, MenuOperation, Operation, UIOperation

__all__ = ["Operation", "UIOperation", "MenuOperation", "RESUME_MARKER"]
