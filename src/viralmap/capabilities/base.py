"""
Base class for capabilities.

A capability bundles the decorators it registers, the capabilities it needs
underneath it, methods it adds to containers, and a relocate hook run when a
value is placed inside a container.
"""

from __future__ import annotations

import typing as _typing

import viralmap.core.interception as interception


class Capability:
    """
    A named behaviour bundle for containers.

    Subclasses override decorators(), and optionally ``requires``,
    ``methods`` and relocate(). Capabilities compare equal by class, so a
    container carries at most one of each kind.
    """

    # Activated before this one, i.e. wrapped further inside.
    requires: _typing.ClassVar[tuple[type[Capability], ...]] = ()

    # Exposed as bound methods of containers: name -> function(container, ...)
    methods: _typing.ClassVar[_typing.Mapping[str, _typing.Callable[..., _typing.Any]]] = {}

    @property
    def name(self) -> str:
        return type(self).__name__

    def decorators(self) -> dict[str, interception.Decorator]:
        """
        Map operation names to decorators.

        Names the container doesn't support are skipped on activation, so a
        capability may list both mapping and sequence operations. Return the
        same callables on every call; duplicate detection compares them.
        """
        return {}

    def relocate(self, parent: _typing.Any, value: _typing.Any, hint: _typing.Any) -> None:
        """Adjust a container-valued ``value`` placed in ``parent`` at ``hint``."""

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Capability):
            return NotImplemented
        return type(self) is type(other)

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{self.name}()"
