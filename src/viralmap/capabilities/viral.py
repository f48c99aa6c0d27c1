"""
Viral capability: nested containers inherit their parent's capabilities.

Reads enhance what they return; writes enhance what they store. A keyed
read that had to build a new container for a stored value writes it back,
so that changes made through the returned container are not lost.
"""

from __future__ import annotations

import collections.abc as _abc
import typing as _typing

import viralmap.capabilities.base as base
import viralmap.core.containers as containers
import viralmap.core.interception as interception
import viralmap.core.operations as operations
import viralmap.core.virality as virality

_MISSING = object()


def _stored(receiver: containers.Container, key: _typing.Any) -> _typing.Any:
    """The value stored at key, read without any decoration."""
    try:
        if isinstance(receiver, _abc.Mapping):
            return receiver._raw("get")(key, _MISSING)
        return containers.Container._raw(receiver, "__getitem__")(key)
    except (KeyError, IndexError, TypeError):
        return _MISSING


def _hint_for(receiver: containers.Container, name: str, args: tuple[_typing.Any, ...]) -> _typing.Any:
    if not args or not operations.is_keyed(name):
        return None
    hint = args[0]
    # Relocate sequence items under their absolute index.
    if isinstance(receiver, _abc.Sequence) and isinstance(hint, int) and not isinstance(hint, bool) and hint < 0:
        hint += len(receiver)
    return hint


def _propagate(
    receiver: containers.Container,
    name: str,
    hint: _typing.Any,
    result: _typing.Any,
) -> _typing.Any:
    enhanced = virality.enhance_value(receiver, result, hint)
    if enhanced is not result and hint is not None and name in operations.RETAINING_READ:
        if _stored(receiver, hint) is result:
            receiver._raw("__setitem__")(hint, enhanced)
    return enhanced


def enhance_result(operation: interception.BoundOperation, *args: _typing.Any, **kwargs: _typing.Any) -> _typing.Any:
    """Read decorator: enhance the value an operation returns."""
    result = operation(*args, **kwargs)
    receiver = operation.receiver
    return _propagate(receiver, operation.name, _hint_for(receiver, operation.name, args), result)


def enhance_arguments(
    operation: interception.BoundOperation,
    *args: _typing.Any,
    **kwargs: _typing.Any,
) -> _typing.Any:
    """Write decorator: enhance the values an operation stores, and its result."""
    receiver = operation.receiver
    name = operation.name
    hint = _hint_for(receiver, name, args)

    if operations.is_keyed(name):
        args = args[:1] + tuple(virality.enhance_value(receiver, value, hint) for value in args[1:])
    elif name == "append":
        args = tuple(virality.enhance_value(receiver, value, len(receiver)) for value in args)
    elif name == "extend" and args:
        start = len(receiver)
        items = list(args[0])
        args = ([virality.enhance_value(receiver, item, start + index) for index, item in enumerate(items)],)
    elif name == "update":
        args = tuple(_enhance_items(receiver, arg) for arg in args)
    else:
        args = tuple(virality.enhance_value(receiver, value) for value in args)
    kwargs = {key: virality.enhance_value(receiver, value, key) for key, value in kwargs.items()}

    return _propagate(receiver, name, hint, operation(*args, **kwargs))


def _enhance_items(receiver: containers.Container, arg: _typing.Any) -> dict[_typing.Any, _typing.Any]:
    items = arg.items() if isinstance(arg, _abc.Mapping) else dict(arg).items()
    return {key: virality.enhance_value(receiver, value, key) for key, value in items}


class Viral(base.Capability):
    """Propagate the container's capabilities into every nested value."""

    def decorators(self) -> dict[str, interception.Decorator]:
        result: dict[str, interception.Decorator] = {}
        for name in operations.READ:
            result[name] = enhance_result
        for name in operations.WRITE:
            result[name] = enhance_arguments
        return result
