"""
Path helpers.

A path is either a string split on the (unescaped) separator or a list of
components that has already been split. Empty components are dropped, so
repeated, leading and trailing separators collapse:

    >>> components("foo..bar..")
    ['foo', 'bar']
    >>> normalize("foo..bar..")
    '.foo.bar'

A backslash escapes the separator inside a component:

    >>> components("a\\\\.b.c")
    ['a.b', 'c']
"""

from __future__ import annotations

import functools as _functools
import re as _re
import typing as _typing

import viralmap.constants as constants

_INTEGER = _re.compile(r"[+-]?\d+")


class PathComponent(str):
    """
    A single path component that must not be split again.

    Path resolution hands these to nested containers so that a component
    containing an escaped separator is not mistaken for a path. It compares
    and hashes like the plain string.
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return f"PathComponent({str.__repr__(self)})"


@_functools.lru_cache(maxsize=32)
def split_pattern(separator: str = constants.DEFAULT_SEPARATOR) -> _re.Pattern[str]:
    """Return the pattern splitting paths at unescaped separators."""
    return _re.compile(r"(?<!\\)" + _re.escape(separator))


def escape(component: _typing.Any, separator: str = constants.DEFAULT_SEPARATOR) -> str:
    """Escape separators inside a single component."""
    return str(component).replace(separator, constants.ESCAPE_CHARACTER + separator)


def unescape(component: str, separator: str = constants.DEFAULT_SEPARATOR) -> str:
    """Undo escape()."""
    return component.replace(constants.ESCAPE_CHARACTER + separator, separator)


def filter_components(parts: _typing.Iterable[_typing.Any]) -> list[_typing.Any]:
    """Drop empty and None components; unwrap PathComponent markers."""
    result = []
    for part in parts:
        if part is None or part == "":
            continue
        result.append(str(part) if isinstance(part, PathComponent) else part)
    return result


def components(path: _typing.Any, separator: str = constants.DEFAULT_SEPARATOR) -> list[_typing.Any]:
    """
    Break a path into its components.

    Args:
        path: A separator-delimited string, a PathComponent, or a list/tuple
            of components.
        separator: The separator to split strings at.

    Returns:
        The non-empty components, in order.

    Raises:
        TypeError: If path is neither a string nor a list/tuple.
    """
    if isinstance(path, PathComponent):
        return filter_components([path])
    if isinstance(path, str):
        parts = split_pattern(separator).split(path)
        return filter_components(unescape(part, separator) for part in parts)
    if isinstance(path, (list, tuple)):
        return filter_components(path)
    raise TypeError(f"path must be a string or a list of components, not {type(path).__name__}")


def join(parts: _typing.Iterable[_typing.Any], separator: str = constants.DEFAULT_SEPARATOR) -> str:
    """Join components with the separator, escaping separators inside them."""
    return separator.join(escape(part, separator) for part in parts)


def normalize(path: _typing.Any, separator: str = constants.DEFAULT_SEPARATOR) -> str:
    """Return the canonical absolute form: leading separator, no empty components."""
    return separator + join(components(path, separator), separator)


def depth(path: _typing.Any, separator: str = constants.DEFAULT_SEPARATOR) -> int:
    """Number of components in a path."""
    return len(components(path, separator))


def is_path(key: _typing.Any) -> bool:
    """Whether path resolution applies to a key at all."""
    return isinstance(key, (str, list))


def to_index(component: _typing.Any) -> int | None:
    """Coerce a component to a sequence index, or None if it isn't one."""
    if isinstance(component, bool):
        return None
    if isinstance(component, int):
        return component
    if isinstance(component, str) and _INTEGER.fullmatch(component):
        return int(component)
    return None
