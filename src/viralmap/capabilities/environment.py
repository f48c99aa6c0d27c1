"""
Environment override: environment variables shadow stored values on read.

For a read of ``key`` on a container located at ``.database.primary``, the
candidate variables are, most qualified first::

    DATABASE_PRIMARY_HOST
    PRIMARY_HOST
    HOST

The first one that is set wins. Its value is parsed as JSON where possible
(``"5432"`` becomes 5432, ``'{"a": 1}'`` a mapping) and used as a plain
string otherwise. The override is served from a recursive duplicate, so the
container itself is never modified.
"""

from __future__ import annotations

import json as _json
import logging as _logging
import os as _os
import re as _re
import typing as _typing

import viralmap.capabilities.base as base
import viralmap.capabilities.recursive as recursive
import viralmap.capabilities.viral as viral
import viralmap.config as config
import viralmap.constants as constants
import viralmap.core.containers as containers
import viralmap.core.interception as interception
import viralmap.core.paths as paths

_logger = _logging.getLogger(__name__)

_MISSING = object()

_NON_ALPHANUMERIC = _re.compile(r"[\W_]+")

_OPERATIONS = ("__getitem__", "get", "__contains__")


def key_to_env(key: _typing.Any, prefix: str = "") -> str:
    """
    Turn a key or normalized path into an environment variable name.

    >>> key_to_env(".foo.bar-baz")
    'FOO_BAR_BAZ'
    """
    name = _NON_ALPHANUMERIC.sub("_", str(key).upper()).strip("_")
    if not name:
        return ""
    return prefix + name


def _parse(raw: str) -> _typing.Any:
    try:
        return _json.loads(raw)
    except ValueError:
        return raw


class EnvironmentOverride(base.Capability):
    """
    Let environment variables override values read from a container.

    Args:
        prefix: Prepended verbatim to every variable name. None uses
            Settings.env_override_prefix.
        environ: Mapping to read variables from; os.environ by default.
    """

    requires = (viral.Viral, recursive.RecursiveDup)

    def __init__(
        self,
        prefix: str | None = None,
        environ: _typing.Mapping[str, str] | None = None,
    ) -> None:
        self._prefix = prefix
        self._environ = environ
        self._decorator = self._override

    @property
    def prefix(self) -> str:
        if self._prefix is None:
            return config.get_settings().env_override_prefix
        return self._prefix

    @property
    def environ(self) -> _typing.Mapping[str, str]:
        return _os.environ if self._environ is None else self._environ

    def decorators(self) -> dict[str, interception.Decorator]:
        return {name: self._decorator for name in _OPERATIONS}

    def candidate_names(self, container: _typing.Any, key: _typing.Any) -> list[str]:
        """Variable names to consult for a key, most qualified first."""
        if isinstance(container, containers.Container):
            separator = container.separator
            location = container.path_components()
        else:
            separator, location = constants.DEFAULT_SEPARATOR, []

        key_parts = paths.components(key, separator) if paths.is_path(key) else [key]
        # A key repeating the container's own last component isn't doubled.
        if key_parts and location and str(key_parts[0]) == str(location[-1]):
            location = location[:-1]
        parts = location + key_parts

        names: list[str] = []
        while parts:
            name = key_to_env(paths.normalize(parts, separator), self.prefix)
            if name and name not in names:
                names.append(name)
            parts = parts[1:]
        return names

    def lookup(self, container: _typing.Any, key: _typing.Any) -> tuple[str, _typing.Any] | None:
        """The first set variable for a key and its parsed value, if any."""
        environ = self.environ
        for name in self.candidate_names(container, key):
            raw = environ.get(name)
            if raw is not None:
                return name, _parse(raw)
        return None

    def _override(self, operation: interception.BoundOperation, *args: _typing.Any, **kwargs: _typing.Any) -> _typing.Any:
        if not args:
            return operation(*args, **kwargs)

        receiver = operation.receiver
        key = args[0]
        found = self.lookup(receiver, key)
        if found is None:
            return operation(*args, **kwargs)

        name, value = found
        # This decorator is on the call stack, so the read sees the stored value.
        try:
            current = receiver[key]
        except (KeyError, IndexError, TypeError):
            current = _MISSING
        if current is not _MISSING and current == value:
            return operation(*args, **kwargs)

        _logger.debug("Overriding %r from environment variable %s", key, name)
        double = recursive.recursive_dup(receiver)
        double[key] = value
        return getattr(double, operation.name)(*args, **kwargs)
