"""
Recursive operations on container trees.

Each capability only adds methods; none of them decorates an operation.
The functions also work on their own, called with the container as first
argument:

    >>> base = UberDict({"a": {"b": 1}, "list": [1]})
    >>> base.recursive_merge({"a": {"c": 2}, "list": [2]}) == {"a": {"b": 1, "c": 2}, "list": [1, 2]}
    True
"""

from __future__ import annotations

import collections.abc as _abc
import copy as _copy
import typing as _typing

import viralmap.capabilities.base as base
import viralmap.capabilities.indifferent as indifferent
import viralmap.capabilities.pathed as pathed
import viralmap.capabilities.viral as viral
import viralmap.core.containers as containers
import viralmap.core.virality as virality

_MISSING = object()

# Instance attributes a duplicate takes over from its original.
_DECORATION_ATTRIBUTES = (
    "_registry",
    "_separator",
    "_path_prefix",
    "default_factory",
    "mapping_ancestor",
    "sequence_ancestor",
)

FetchCallback: _typing.TypeAlias = _typing.Callable[[_typing.Any, _typing.Any, _typing.Any], _typing.Any]


def _is_sequence(value: _typing.Any) -> bool:
    return isinstance(value, (list, tuple, _abc.MutableSequence)) and not isinstance(value, (str, bytes, bytearray))


# =============================================================================
# Dup
# =============================================================================


def _copy_decoration(source: containers.Container, target: containers.Container) -> None:
    state = vars(source)
    for attribute in _DECORATION_ATTRIBUTES:
        if attribute in state:
            setattr(target, attribute, state[attribute])
    for capability in source.active_capabilities():
        target.registry.activate(target, capability)


def _copy_tree(value: _typing.Any, memo: dict[int, _typing.Any]) -> _typing.Any:
    if id(value) in memo:
        return memo[id(value)]

    if isinstance(value, containers.Container):
        double = type(value)()
        _copy_decoration(value, double)
        memo[id(value)] = double
        if isinstance(value, _abc.Mapping):
            store = double._raw("__setitem__")
            for key, item in value.items():
                store(key, _copy_tree(item, memo))
        else:
            append = double._raw("append")
            for item in value:
                append(_copy_tree(item, memo))
        return double

    if isinstance(value, _abc.Mapping):
        result: dict[_typing.Any, _typing.Any] = {}
        memo[id(value)] = result
        for key, item in value.items():
            result[key] = _copy_tree(item, memo)
        return result

    if _is_sequence(value) and not isinstance(value, tuple):
        items: list[_typing.Any] = []
        memo[id(value)] = items
        items.extend(_copy_tree(item, memo) for item in value)
        return items

    try:
        return _copy.deepcopy(value)
    except (TypeError, _copy.Error):
        return value


def recursive_dup(container: _typing.Any) -> _typing.Any:
    """
    Deep copy a container tree.

    Containers are copied as the same type and keep their capabilities,
    default factory, separator and path prefix. Values that can't be copied
    are shared.
    """
    return _copy_tree(container, {})


deep_dup = recursive_dup


# =============================================================================
# Merge
# =============================================================================


def _incoming_keys(container: _typing.Any, other: _typing.Mapping[_typing.Any, _typing.Any]) -> list[_typing.Any]:
    keys = list(other.keys())
    if isinstance(container, containers.Container):
        capability = container.get_capability(indifferent.IndifferentAccess)
        if isinstance(capability, indifferent.IndifferentAccess):
            return capability.unique_keys(keys)
    return keys


def _merge_key(container: _typing.Any, key: _typing.Any, incoming: _typing.Any, overwrite: bool) -> None:
    target = pathed.literal_key(container, key)
    current = container.get(target)

    if current is None:
        container[target] = recursive_dup(incoming)
    elif incoming is None:
        return
    elif isinstance(current, _abc.Mapping) and isinstance(incoming, _abc.Mapping):
        recursive_update(current, incoming, overwrite)
    elif _is_sequence(current) and _is_sequence(incoming):
        current.extend(recursive_dup(list(incoming)))
    elif overwrite:
        container[target] = recursive_dup(incoming)


def recursive_update(container: _typing.Any, other: _typing.Any, overwrite: bool = True) -> _typing.Any:
    """
    Merge ``other`` into ``container`` in place.

    Mappings merge key by key and sequences concatenate. For anything else
    the incoming value replaces the existing one if ``overwrite`` is set.
    A None on either side keeps the value from the other side.

    Args:
        container: Mapping or sequence container to update.
        other: Data to merge in; None is a no-op.
        overwrite: Whether incoming scalars replace existing ones.

    Returns:
        The updated container.

    Raises:
        TypeError: If a mapping is merged with a non-mapping.
    """
    if other is None:
        return container

    if isinstance(container, _abc.Mapping):
        if not isinstance(other, _abc.Mapping):
            raise TypeError(f"cannot merge {type(other).__name__} into a mapping")
        for key in _incoming_keys(container, other):
            _merge_key(container, key, other[pathed.literal_key(other, key)], overwrite)
        return container

    if not _is_sequence(other):
        raise TypeError(f"cannot merge {type(other).__name__} into a sequence")
    container.extend(recursive_dup(list(other)))
    return container


def recursive_merge(container: _typing.Any, other: _typing.Any, overwrite: bool = True) -> _typing.Any:
    """Like recursive_update(), but on a duplicate; the container is unchanged."""
    return recursive_update(recursive_dup(container), other, overwrite)


# =============================================================================
# Sort
# =============================================================================


def recursive_sort(
    container: _typing.Any,
    key: _typing.Callable[[_typing.Any], _typing.Any] | None = None,
    reverse: bool = False,
) -> _typing.Any:
    """
    Sort mapping keys in place, nested mappings included.

    Sequences keep their order; mappings inside them are sorted.

    Raises:
        TypeError: If keys of one mapping can't be compared.
    """
    if isinstance(container, _abc.MutableMapping):
        ordered = sorted(container.keys(), key=key, reverse=reverse)
        if isinstance(container, containers.Container):
            read = containers.Container._raw(container, "__getitem__")
            store = container._raw("__setitem__")
        else:
            read, store = container.__getitem__, container.__setitem__
        items = [(item_key, read(item_key)) for item_key in ordered]
        container.clear()
        for item_key, value in items:
            recursive_sort(value, key, reverse)
            store(item_key, value)
    elif _is_sequence(container):
        for value in container:
            recursive_sort(value, key, reverse)
    return container


def recursive_sorted(
    container: _typing.Any,
    key: _typing.Callable[[_typing.Any], _typing.Any] | None = None,
    reverse: bool = False,
) -> _typing.Any:
    """A sorted duplicate of the container."""
    return recursive_sort(recursive_dup(container), key, reverse)


# =============================================================================
# Fetch
# =============================================================================


def _fetch_here(container: _typing.Any, key: _typing.Any) -> _typing.Any:
    if isinstance(container, _abc.Mapping):
        try:
            found = container.get(key, _MISSING)
        except TypeError:
            return _MISSING
    elif isinstance(key, int) and not isinstance(key, bool) and -len(container) <= key < len(container):
        found = container[key]
    else:
        return _MISSING
    return _MISSING if found is None else found


def _children(container: _typing.Any) -> _typing.Iterator[_typing.Any]:
    pairs = container.items() if isinstance(container, _abc.Mapping) else enumerate(container)
    for hint, value in list(pairs):
        if virality.is_enhanceable(value):
            yield virality.enhance_value(container, value, pathed.literal_key(container, hint))


def _fetch_one(container: _typing.Any, key: _typing.Any, default: _typing.Any, callback: FetchCallback | None) -> _typing.Any:
    found = _fetch_here(container, key)
    if found is not _MISSING:
        return found if callback is None else callback(container, found, default)
    for child in _children(container):
        inner = _fetch_one(child, key, default, callback)
        if inner is not _MISSING:
            return inner
    return _MISSING


def _fetch_all(container: _typing.Any, key: _typing.Any, default: _typing.Any, callback: FetchCallback | None) -> list[_typing.Any]:
    results = []
    found = _fetch_here(container, key)
    if found is not _MISSING:
        results.append(found if callback is None else callback(container, found, default))
    for child in _children(container):
        results.extend(_fetch_all(child, key, default, callback))
    return results


def recursive_fetch_one(
    container: _typing.Any,
    key: _typing.Any,
    default: _typing.Any = None,
    callback: FetchCallback | None = None,
) -> _typing.Any:
    """
    The first value stored under ``key`` anywhere in the tree.

    The container itself is checked first, then its children depth-first.
    None values don't count as found.

    Args:
        key: Key (or path) to look for.
        default: Returned when nothing is found.
        callback: Called as ``callback(parent, value, default)`` for the
            match; its return value is returned instead.
    """
    found = _fetch_one(container, key, default, callback)
    return default if found is _MISSING else found


def recursive_fetch_all(
    container: _typing.Any,
    key: _typing.Any,
    default: _typing.Any = None,
    callback: FetchCallback | None = None,
) -> _typing.Any:
    """Every value stored under ``key`` in the tree, or ``default`` if none."""
    results = _fetch_all(container, key, default, callback)
    return results if results else default


recursive_fetch = recursive_fetch_all


# =============================================================================
# Capabilities
# =============================================================================


class RecursiveDup(base.Capability):
    """Adds recursive_dup() / deep_dup()."""

    requires = (viral.Viral,)
    methods = {"recursive_dup": recursive_dup, "deep_dup": deep_dup}


class RecursiveMerge(base.Capability):
    """Adds recursive_merge() and recursive_update()."""

    requires = (viral.Viral,)
    methods = {"recursive_merge": recursive_merge, "recursive_update": recursive_update}


class RecursiveSort(base.Capability):
    """Adds recursive_sort() and recursive_sorted()."""

    requires = (viral.Viral,)
    methods = {"recursive_sort": recursive_sort, "recursive_sorted": recursive_sorted}


class RecursiveFetch(base.Capability):
    """Adds recursive_fetch_one(), recursive_fetch_all() and recursive_fetch()."""

    requires = (viral.Viral,)
    methods = {
        "recursive_fetch_one": recursive_fetch_one,
        "recursive_fetch_all": recursive_fetch_all,
        "recursive_fetch": recursive_fetch,
    }
