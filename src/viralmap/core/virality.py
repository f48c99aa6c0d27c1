"""
Propagation of capabilities into nested values.

enhance_value() is called by the Viral capability for every value that
passes through a decorated operation. Plain dicts and lists, and containers
missing some of the parent's capabilities, come out as containers that carry
the parent's capabilities, default factory, separator, registry and ancestor
types. Values that already carry everything are returned as they are.
"""

from __future__ import annotations

import collections.abc as _abc
import logging as _logging
import typing as _typing

import viralmap.core.containers as containers

_logger = _logging.getLogger(__name__)


def is_enhanceable(value: _typing.Any) -> bool:
    """Whether a value is a mapping or mutable sequence that can be upgraded."""
    if isinstance(value, (str, bytes, bytearray)):
        return False
    return isinstance(value, (_abc.Mapping, _abc.MutableSequence))


def capabilities_of(owner: _typing.Any) -> list[_typing.Any]:
    if isinstance(owner, containers.Container):
        return owner.active_capabilities()
    return []


def carries_capabilities(parent: _typing.Any, value: _typing.Any) -> bool:
    """Whether value is a container with every capability active on parent."""
    if not isinstance(value, containers.Container):
        return False
    return all(value.has_capability(capability) for capability in capabilities_of(parent))


def best_ancestor(parent: _typing.Any, value: _typing.Any) -> type[containers.Container]:
    """
    The container type a value should be upgraded to.

    The value's explicit ancestor wins, then the parent's, then the parent's
    own type if it is the same kind of container, then ViralDict/ViralList.
    """
    if isinstance(value, _abc.Mapping):
        attribute, fallback = "mapping_ancestor", containers.ViralDict
    else:
        attribute, fallback = "sequence_ancestor", containers.ViralList

    for source in (value, parent):
        explicit = getattr(source, attribute, None) if isinstance(source, containers.Container) else None
        if explicit is not None:
            return _typing.cast(type[containers.Container], explicit)
    if isinstance(parent, fallback):
        return type(parent)
    return fallback


def _adopt(parent: _typing.Any, value: containers.Container) -> None:
    """Copy the parent's decoration state onto a container."""
    if not isinstance(parent, containers.Container):
        return
    if value._registry is None and parent._registry is not None:
        value.registry = parent._registry
    for capability in parent.active_capabilities():
        value.registry.activate(value, capability)
    if value.default_factory is None and parent.default_factory is not None:
        value.default_factory = parent.default_factory
    if value._separator is None and parent._separator is not None:
        value.separator = parent._separator
    for attribute in ("mapping_ancestor", "sequence_ancestor"):
        explicit = getattr(parent, attribute)
        if explicit is not None and getattr(value, attribute) is None:
            setattr(value, attribute, explicit)

    # A list inside an UberDict should produce UberDicts again, and the
    # other way around.
    if isinstance(parent, containers.ViralDict) and isinstance(value, containers.ViralList):
        if value.mapping_ancestor is None:
            value.mapping_ancestor = type(parent)
    elif isinstance(parent, containers.ViralList) and isinstance(value, containers.ViralDict):
        if value.sequence_ancestor is None:
            value.sequence_ancestor = type(parent)


def _upgrade(
    parent: _typing.Any,
    value: _typing.Any,
    hint: _typing.Any,
    memo: dict[int, _typing.Any],
) -> containers.Container:
    ancestor = best_ancestor(parent, value)
    if type(value) is ancestor:
        memo[id(value)] = value
        _adopt(parent, value)
        return _typing.cast(containers.Container, value)

    _logger.debug("Upgrading %s to %s", type(value).__name__, ancestor.__name__)
    upgraded = ancestor()
    memo[id(value)] = upgraded
    _adopt(parent, upgraded)
    # Located before filling, so children are placed under the right prefix.
    if isinstance(parent, containers.Container):
        parent.relocate(upgraded, hint)

    # Fill through raw operations so the new container's own decorators
    # don't run again on values enhanced here.
    if isinstance(value, _abc.Mapping):
        store = upgraded._raw("__setitem__")
        for key, item in value.items():
            store(key, enhance_value(upgraded, item, key, _memo=memo))
    else:
        append = upgraded._raw("append")
        for index, item in enumerate(value):
            append(enhance_value(upgraded, item, index, _memo=memo))
    return upgraded


def enhance_value(
    parent: _typing.Any,
    value: _typing.Any,
    hint: _typing.Any = None,
    *,
    _memo: dict[int, _typing.Any] | None = None,
) -> _typing.Any:
    """
    Give a value the capabilities of the container it is placed in.

    Args:
        parent: The container the value is read from or written to.
        value: Any value; only mappings and mutable sequences are touched.
        hint: Key or index of the value inside parent, used to relocate it.

    Returns:
        The value itself when nothing had to change, otherwise a new
        container of the best ancestor type holding the same data.
    """
    if not is_enhanceable(value):
        return value
    if _memo is None:
        _memo = {}
    if id(value) in _memo:
        return _memo[id(value)]

    if not carries_capabilities(parent, value):
        value = _upgrade(parent, value, hint, _memo)
    else:
        # Already capable: no copy, but default factory and ancestors still follow the parent.
        _adopt(parent, value)

    if isinstance(parent, containers.Container):
        parent.relocate(value, hint)
    return value
