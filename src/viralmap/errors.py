"""
Exception taxonomy for viralmap.

Only structural misconfiguration is raised. Path misses follow the normal
container semantics (KeyError, default values) and decorator loops are
broken silently by the interception engine.
"""

from __future__ import annotations

import typing as _typing


class ViralMapError(Exception):
    """Base class for viralmap errors."""

    pass


class OperationNotFoundError(ViralMapError, AttributeError):
    """Raised when wrapping an operation the owner does not implement."""

    def __init__(self, operation: str, owner: _typing.Any) -> None:
        self.operation = operation
        self.owner = owner
        owner_name = owner.__name__ if isinstance(owner, type) else type(owner).__name__
        super().__init__(f"'{owner_name}' has no interceptable operation '{operation}'")


class DuplicateRegistrationError(ViralMapError, ValueError):
    """Raised when strict registration finds the decorator already in place."""

    def __init__(self, operation: str, decorator: _typing.Any) -> None:
        self.operation = operation
        self.decorator = decorator
        name = getattr(decorator, "__qualname__", repr(decorator))
        super().__init__(f"Decorator {name} is already registered for '{operation}'")


class DocumentError(ViralMapError, ValueError):
    """Raised when a YAML or JSON document can't be read."""

    def __init__(self, source: _typing.Any, message: str) -> None:
        self.source = source
        super().__init__(f"Error in document {source}: {message}")


class PathConflictError(ViralMapError, TypeError):
    """Raised when a path write has to pass through a non-container value."""

    def __init__(self, path: str, component: _typing.Any, value: _typing.Any) -> None:
        self.path = path
        self.component = component
        self.value = value
        super().__init__(
            f"Cannot descend into '{component}' of path '{path}': "
            f"{type(value).__name__} is not a container"
        )
