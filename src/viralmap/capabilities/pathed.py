"""
Pathed access: address nested values with separator-delimited paths.

    >>> data["foo.bar"]          # same as data["foo"]["bar"]
    >>> data["a.b.c"] = 1        # creates data["a"] and data["a"]["b"]
    >>> data[["a", "b", "c"]]    # pre-split path

Reads never create anything: a missing intermediate behaves like an empty
mapping, so ``get`` returns its default and ``in`` is False. Writes create
missing intermediate mappings and replace None; writing through any other
non-container raises PathConflictError.

Keys that are neither strings nor lists pass through untouched. A
PathComponent is a single, already-split key.
"""

from __future__ import annotations

import collections.abc as _abc
import logging as _logging
import typing as _typing

import viralmap.capabilities.base as base
import viralmap.capabilities.viral as viral
import viralmap.core.containers as containers
import viralmap.core.interception as interception
import viralmap.core.operations as operations
import viralmap.core.paths as paths
import viralmap.core.virality as virality
import viralmap.errors as errors

_logger = _logging.getLogger(__name__)

_MISSING = object()

# Operations that answer with the container itself for an empty path.
_SELF_FOR_EMPTY_PATH = frozenset(("__getitem__", "get", "setdefault"))

_READ_OPERATIONS = operations.MAPPING_KEYED_READ + operations.SEQUENCE_INDEXED_READ
_WRITE_OPERATIONS = operations.MAPPING_KEYED_WRITE + ("__setitem__",)


def literal_key(container: _typing.Any, key: _typing.Any) -> _typing.Any:
    """Mark a string key so path resolution won't split it."""
    if isinstance(key, str) and isinstance(container, containers.Container) and container.has_capability(PathedAccess):
        return paths.PathComponent(key)
    return key


def _leaf_key(container: _typing.Any, component: _typing.Any) -> _typing.Any:
    if isinstance(container, _abc.Mapping):
        return literal_key(container, component)
    index = paths.to_index(component)
    return component if index is None else index


def _in_range(container: _typing.Sized, index: int | None) -> bool:
    return index is not None and -len(container) <= index < len(container)


def _child(data: _typing.Any, head: _typing.Any, create: bool) -> _typing.Any:
    """Look up one component, _MISSING if it isn't there."""
    if isinstance(data, _abc.Mapping):
        key = literal_key(data, head)
        if key in data:
            return data[key]
        if not create and getattr(data, "default_factory", None) is not None:
            return data[key]
        return _MISSING
    index = paths.to_index(head)
    if _in_range(data, index):
        return data[index]
    return _MISSING


def _create(data: _typing.Any, head: _typing.Any, path: list[_typing.Any]) -> _typing.Any:
    """Put an empty mapping at head and return it as stored."""
    _logger.debug("Creating intermediate mapping at %s", paths.normalize(path, data.separator))
    if isinstance(data, _abc.Mapping):
        key = literal_key(data, head)
        data[key] = {}
        return data[key]

    index = paths.to_index(head)
    if index is None:
        raise errors.PathConflictError(paths.normalize(path, data.separator), head, data)
    if index == len(data):
        data.append({})
    else:
        data[index] = {}
    return data[index]


def _descend(
    receiver: containers.Container,
    parts: list[_typing.Any],
    create: bool,
) -> containers.Container:
    """
    Walk the intermediate components of a path.

    Returns the container the last component should be applied to. On a
    read miss that is a new empty mapping located where the miss happened.
    """
    data: _typing.Any = receiver
    walked = receiver.path_components()
    for head in parts:
        walked = walked + [head]
        child = _child(data, head, create)
        if child is _MISSING or child is None:
            if not create:
                return _typing.cast(containers.Container, virality.enhance_value(data, {}, _leaf_key(data, head)))
            child = _create(data, head, walked)
        elif not isinstance(child, containers.Container):
            if create:
                raise errors.PathConflictError(paths.normalize(walked, receiver.separator), head, child)
            return _typing.cast(containers.Container, virality.enhance_value(data, {}, _leaf_key(data, head)))
        child.tighten_path_prefix(walked)
        data = child
    return _typing.cast(containers.Container, data)


def _dispatch(
    leaf: containers.Container,
    name: str,
    key: _typing.Any,
    args: tuple[_typing.Any, ...],
    kwargs: dict[str, _typing.Any],
) -> _typing.Any:
    """Apply an operation to the final container of a path."""
    in_range = _in_range(leaf, key if isinstance(key, int) else None)
    if name == "pop" and isinstance(leaf, _abc.MutableSequence) and (args or "default" in kwargs):
        if in_range:
            return leaf.pop(key)
        return args[0] if args else kwargs["default"]

    if name in leaf.operations:
        return getattr(leaf, name)(key, *args, **kwargs)

    # Mapping operations reaching into a sequence.
    if name == "__contains__":
        return in_range
    if name == "get":
        if in_range:
            return leaf[key]
        return args[0] if args else kwargs.get("default")
    if name == "setdefault":
        if not in_range:
            if key != len(leaf):
                raise IndexError(f"list index {key!r} out of range for setdefault")
            leaf.append(args[0] if args else kwargs.get("default"))
            key = len(leaf) - 1
        return leaf[key]
    raise errors.OperationNotFoundError(name, leaf)


def _resolve(
    operation: interception.BoundOperation,
    key: _typing.Any,
    args: tuple[_typing.Any, ...],
    kwargs: dict[str, _typing.Any],
    *,
    create: bool,
) -> _typing.Any:
    if isinstance(key, paths.PathComponent):
        return operation(str(key), *args, **kwargs)
    if not paths.is_path(key):
        return operation(key, *args, **kwargs)

    receiver = operation.receiver
    name = operation.name
    parts = paths.components(key, receiver.separator)

    if not parts:
        if name in _SELF_FOR_EMPTY_PATH:
            return receiver
        if name == "__contains__":
            return True
        return operation(key, *args, **kwargs)

    if len(parts) == 1:
        leaf_key = _leaf_key(receiver, parts[0])
        if isinstance(leaf_key, paths.PathComponent):
            leaf_key = str(leaf_key)
        return operation(leaf_key, *args, **kwargs)

    leaf = _descend(receiver, parts[:-1], create)
    try:
        return _dispatch(leaf, name, _leaf_key(leaf, parts[-1]), args, kwargs)
    except KeyError:
        raise KeyError(key) from None


def pathed_read(operation: interception.BoundOperation, *args: _typing.Any, **kwargs: _typing.Any) -> _typing.Any:
    """Read decorator: resolve a path without creating anything."""
    if not args:
        return operation(*args, **kwargs)
    return _resolve(operation, args[0], args[1:], kwargs, create=False)


def pathed_write(operation: interception.BoundOperation, *args: _typing.Any, **kwargs: _typing.Any) -> _typing.Any:
    """Write decorator: resolve a path, creating missing intermediate mappings."""
    if not args:
        return operation(*args, **kwargs)
    return _resolve(operation, args[0], args[1:], kwargs, create=True)


class PathedAccess(base.Capability):
    """Resolve separator-delimited paths on keyed and indexed operations."""

    requires = (viral.Viral,)

    def decorators(self) -> dict[str, interception.Decorator]:
        result: dict[str, interception.Decorator] = {name: pathed_read for name in _READ_OPERATIONS}
        result.update({name: pathed_write for name in _WRITE_OPERATIONS})
        return result

    def relocate(self, parent: _typing.Any, value: _typing.Any, hint: _typing.Any) -> None:
        """Locate a nested container at the parent's path plus its key."""
        if hint is None or isinstance(hint, (bool, slice)):
            return
        if not isinstance(value, containers.Container) or not isinstance(parent, containers.Container):
            return
        if parent._separator is not None:
            value.separator = parent._separator
        location = parent.path_components() + [str(hint) if isinstance(hint, paths.PathComponent) else hint]
        value.tighten_path_prefix(location)
