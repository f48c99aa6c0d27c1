"""
Indifferent access: equivalent key representations find the same entry.

With the default policy ``data[1]`` finds a value stored under ``"1"`` and
the other way around. Writes to an equivalent key update the stored entry
instead of adding a twin. Optionally keys also match ignoring case.
"""

from __future__ import annotations

import collections.abc as _abc
import dataclasses as _dataclasses
import typing as _typing

import viralmap.capabilities.base as base
import viralmap.config as config
import viralmap.core.containers as containers
import viralmap.core.interception as interception
import viralmap.core.operations as operations
import viralmap.core.paths as paths

_MISSING = object()


def _kind(key: _typing.Any) -> str | None:
    if isinstance(key, bool):
        return None
    if isinstance(key, int):
        return "int"
    if isinstance(key, str):
        return "str"
    return None


@_dataclasses.dataclass(frozen=True, slots=True)
class KeyPolicy:
    """
    Which key representations are equivalent, and which one wins.

    Attributes:
        priority: Key kinds ("int", "str") in order of preference, used
            when equivalent keys collide.
        case_insensitive: Also match string keys ignoring case.
    """

    priority: tuple[str, ...] = ("int", "str")
    case_insensitive: bool = False

    @classmethod
    def from_settings(cls) -> KeyPolicy:
        settings = config.get_settings()
        return cls(
            priority=tuple(settings.key_priority),
            case_insensitive=settings.case_insensitive_keys,
        )

    def key_permutations(self, key: _typing.Any) -> list[_typing.Any]:
        """
        The representations to try for a key, the key itself first.

        >>> KeyPolicy().key_permutations("12")
        ['12', 12]
        >>> KeyPolicy().key_permutations("012")
        ['012']
        """
        if isinstance(key, paths.PathComponent):
            key = str(key)
        kind = _kind(key)
        if kind is None:
            return [key]

        forms: dict[str, _typing.Any] = {}
        if kind == "int":
            forms = {"int": key, "str": str(key)}
        else:
            index = paths.to_index(key)
            forms["str"] = key
            # Only canonical integer strings; "012" and "+1" stay strings.
            if index is not None and str(index) == key:
                forms["int"] = index

        result = [key]
        for preferred in self.priority:
            form = forms.get(preferred)
            if form is not None and _kind(form) != kind:
                result.append(form)
        return result

    def canonical(self, key: _typing.Any) -> _typing.Any:
        """A value equal for all equivalent keys."""
        if _kind(key) is None:
            return key
        text = str(key)
        return text.casefold() if self.case_insensitive else text

    def unique_keys(self, keys: _typing.Iterable[_typing.Any]) -> list[_typing.Any]:
        """
        Collapse equivalent keys, keeping the representation with priority.

        >>> KeyPolicy().unique_keys(["a", "1", 1, "b"])
        ['a', 1, 'b']
        """
        chosen: dict[_typing.Any, _typing.Any] = {}
        for key in keys:
            canonical = self.canonical(key)
            if canonical not in chosen or self._rank(key) < self._rank(chosen[canonical]):
                chosen[canonical] = key
        return list(chosen.values())

    def _rank(self, key: _typing.Any) -> int:
        kind = _kind(key)
        if kind in self.priority:
            return self.priority.index(kind)
        return len(self.priority)

    def resolve(self, container: _typing.Any, key: _typing.Any) -> _typing.Any:
        """The stored key equivalent to ``key``, or a sentinel on a miss."""
        contains = container._raw("__contains__")
        for candidate in self.key_permutations(key):
            try:
                if contains(candidate):
                    return candidate
            except TypeError:
                continue
        if self.case_insensitive and isinstance(key, str):
            folded = key.casefold()
            for stored in container.keys():
                if isinstance(stored, str) and stored.casefold() == folded:
                    return stored
        return _MISSING


class IndifferentAccess(base.Capability):
    """Resolve keys to their stored equivalent on keyed mapping operations."""

    def __init__(self, policy: KeyPolicy | None = None) -> None:
        self._policy = policy
        self._decorator = self._redirect

    @property
    def policy(self) -> KeyPolicy:
        """The key policy; Settings decide when none was given."""
        if self._policy is None:
            return KeyPolicy.from_settings()
        return self._policy

    def key_permutations(self, key: _typing.Any) -> list[_typing.Any]:
        return self.policy.key_permutations(key)

    def unique_keys(self, keys: _typing.Iterable[_typing.Any]) -> list[_typing.Any]:
        return self.policy.unique_keys(keys)

    def resolve(self, container: containers.Container, key: _typing.Any) -> _typing.Any:
        """The stored key equivalent to ``key``, or ``key`` itself on a miss."""
        stored = self.policy.resolve(container, key)
        return key if stored is _MISSING else stored

    def _redirect(self, operation: interception.BoundOperation, *args: _typing.Any, **kwargs: _typing.Any) -> _typing.Any:
        if args and isinstance(operation.receiver, _abc.Mapping):
            args = (self.resolve(operation.receiver, args[0]),) + args[1:]
        return operation(*args, **kwargs)

    def decorators(self) -> dict[str, interception.Decorator]:
        names = operations.MAPPING_KEYED_READ + operations.MAPPING_KEYED_WRITE
        return {name: self._decorator for name in names}
