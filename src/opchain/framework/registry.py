"""Operation registry for registering and discovering operations by name.

Manifesto:
    A central registry lets the CLI start any operation by name
    (``opchain run greet``) without import-time coupling to the module
    that defines it.

Tags:
    opchain, framework, registry, operation-discovery, lookup

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from opchain.core.errors import OperationNotFoundError
from opchain.logging import get_logger

if TYPE_CHECKING:
    from opchain.framework.operations import Operation

logger = get_logger(__name__)

OperationFactory = Callable[[], "Operation[Any]"]

# Global operation registry
_registry: dict[str, OperationFactory] = {}
_loaded: bool = False


def register_operation(name: str) -> Callable[[OperationFactory], OperationFactory]:
    """Decorator to register an operation class (or zero-argument factory)."""

    def decorator(factory: OperationFactory) -> OperationFactory:
        if name in _registry:
            raise ValueError(f"Operation '{name}' is already registered")
        _registry[name] = factory
        logger.debug(
            "operation_registered",
            name=name,
            factory=getattr(factory, "__name__", repr(factory)),
        )
        return factory

    return decorator


def _ensure_loaded() -> None:
    """Ensure the built-in operations are imported (lazy initialization)."""
    global _loaded
    if not _loaded:
        _loaded = True
        _load_operations()


def get_operation(name: str) -> OperationFactory:
    """
    Get an operation factory by name.

    Raises:
        OperationNotFoundError: If nothing is registered under ``name``
    """
    _ensure_loaded()
    if name not in _registry:
        raise OperationNotFoundError(name, sorted(_registry))
    return _registry[name]


def create_operation(name: str) -> Operation[Any]:
    """Build a fresh operation instance for ``name``."""
    return get_operation(name)()


def list_operations() -> list[str]:
    """List all registered operation names."""
    _ensure_loaded()
    return sorted(_registry.keys())


def describe_operations() -> list[tuple[str, str]]:
    """``(name, description)`` pairs for every registered operation."""
    _ensure_loaded()
    return [
        (name, getattr(_registry[name], "description", "") or "No description available")
        for name in sorted(_registry)
    ]


def clear_registry() -> None:
    """Clear registry (for testing)."""
    global _loaded
    _registry.clear()
    _loaded = False


def _load_operations() -> None:
    """
    Register the built-in operations under their CLI names.

    Called lazily so logging is configured before registration messages
    are emitted. Names already registered are left alone.
    """
    from opchain.operations import BUILTIN_OPERATIONS

    for name, factory in BUILTIN_OPERATIONS.items():
        _registry.setdefault(name, factory)

    logger.debug("operation_registry_loaded", registered=len(_registry))


__all__ = [
    "register_operation",
    "get_operation",
    "create_operation",
    "list_operations",
    "describe_operations",
    "clear_registry",
]
