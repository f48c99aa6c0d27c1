"""
Reading and writing container trees as YAML or JSON.

Example:
    >>> data = load_yaml('''
    ... server:
    ...   port: 8080
    ... ''')
    >>> data["server.port"]
    8080
    >>> print(dump_yaml(data), end="")
    server:
      port: 8080
"""

from __future__ import annotations

import collections.abc as _abc
import json as _json
import pathlib as _pathlib
import typing as _typing

import yaml as _yaml

import viralmap.capabilities.recursive as recursive
import viralmap.core.containers as containers
import viralmap.core.virality as virality
import viralmap.errors as errors
import viralmap.uber as uber

_JSON_SUFFIXES = frozenset((".json",))


# =============================================================================
# YAML Loader
# =============================================================================


_MERGE_TAG = "tag:yaml.org,2002:merge"


def _mapping_constructor(
    loader: _yaml.SafeLoader,
    node: _yaml.MappingNode,
) -> dict[_typing.Any, _typing.Any]:
    """
    Construct a dict from a mapping node, rejecting duplicate keys.

    Keys pulled in through ``<<`` merge keys may be overridden; only the
    mapping's own keys have to be unique.
    """
    own = {id(key_node) for key_node, _ in node.value if key_node.tag != _MERGE_TAG}
    loader.flatten_mapping(node)
    pairs = loader.construct_pairs(node, deep=True)  # type: ignore[no-untyped-call]

    result: dict[_typing.Any, _typing.Any] = {}
    seen: set[_typing.Any] = set()
    for (key, value), (key_node, _) in zip(pairs, node.value, strict=True):
        if not isinstance(key, _abc.Hashable):
            raise _yaml.constructor.ConstructorError(
                "while constructing a mapping",
                node.start_mark,
                "found unhashable key",
                key_node.start_mark,
            )
        if id(key_node) in own:
            if key in seen:
                raise _yaml.constructor.ConstructorError(
                    "while constructing a mapping",
                    node.start_mark,
                    f"found duplicate key {key!r}",
                    key_node.start_mark,
                )
            seen.add(key)
        result[key] = value
    return result


class ViralLoader(_yaml.SafeLoader):
    """SafeLoader that refuses duplicate mapping keys."""

    pass


ViralLoader.add_constructor(
    _yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _mapping_constructor,
)


# =============================================================================
# Conversion
# =============================================================================


def to_container(
    data: _typing.Any,
    container_type: type[containers.ViralDict] = uber.UberDict,
    separator: str | None = None,
) -> containers.Container:
    """
    Wrap loaded data in a container.

    A mapping is merged into a new ``container_type``; a list becomes a list
    container carrying the same capabilities. An empty document gives an
    empty container.
    """
    container = container_type()
    if separator is not None:
        container.separator = separator
    if data is None:
        return container
    if isinstance(data, _abc.Mapping):
        return _typing.cast(containers.Container, recursive.recursive_update(container, data))
    if isinstance(data, list):
        return _typing.cast(containers.Container, virality.enhance_value(container, data))
    raise TypeError(f"document must hold a mapping or a list, not {type(data).__name__}")


def to_builtin(value: _typing.Any) -> _typing.Any:
    """Plain dicts and lists with the same content, e.g. for dumping."""
    if isinstance(value, _abc.Mapping):
        return {str(key) if isinstance(key, str) else key: to_builtin(item) for key, item in value.items()}
    if isinstance(value, _abc.MutableSequence) and not isinstance(value, bytearray):
        return [to_builtin(item) for item in value]
    return value


# =============================================================================
# Convenience Functions
# =============================================================================


def load_yaml(
    stream: _typing.Any,
    container_type: type[containers.ViralDict] = uber.UberDict,
    separator: str | None = None,
) -> containers.Container:
    """
    Load YAML into a container.

    Args:
        stream: YAML content (string, bytes, or file-like object).
        container_type: Container for the top-level mapping.
        separator: Path separator for the tree; None uses Settings.

    Raises:
        yaml.YAMLError: If the YAML is malformed or has duplicate keys.
    """
    loader = ViralLoader(stream)
    try:
        data = loader.get_single_data()
    finally:
        loader.dispose()
    return to_container(data, container_type, separator)


def load_file(
    path: str | _pathlib.Path,
    container_type: type[containers.ViralDict] = uber.UberDict,
    separator: str | None = None,
) -> containers.Container:
    """
    Load a YAML or JSON file (by suffix) into a container.

    Raises:
        DocumentError: If the file can't be read or parsed.
    """
    path = _pathlib.Path(path)
    try:
        content = path.read_text(encoding="utf-8")
        if path.suffix.lower() in _JSON_SUFFIXES:
            return to_container(_json.loads(content), container_type, separator)
        return load_yaml(content, container_type, separator)
    except (OSError, _yaml.YAMLError, ValueError, TypeError) as e:
        raise errors.DocumentError(path, str(e)) from e


def dump_yaml(value: _typing.Any) -> str:
    """Serialize a container tree as block-style YAML, keeping key order."""
    return _yaml.safe_dump(
        to_builtin(value),
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )


def dump_json(value: _typing.Any, indent: int | None = 2) -> str:
    return _json.dumps(to_builtin(value), indent=indent, ensure_ascii=False)
