"""
Prototype matching: score how well a mapping fits a template.

A prototype lists the keys a mapping must have. A None value accepts any
value, a mapping value is matched recursively, any other value counts +1
when equal and -1 otherwise. Missing keys give a negative score equal to
the number of keys missing; a nested mapping where the prototype expects
one is FAILURE.

    >>> data = UberDict({"a": 1, "b": {"c": 2}})
    >>> data.prototype_match_score({"a": None, "b": {"c": 2}})
    2
"""

from __future__ import annotations

import collections.abc as _abc
import typing as _typing

import viralmap.capabilities.base as base
import viralmap.capabilities.pathed as pathed
import viralmap.constants as constants

FAILURE = constants.PROTOTYPE_FAILURE


def prototype_match_score(
    container: _typing.Mapping[_typing.Any, _typing.Any],
    prototype: _typing.Mapping[_typing.Any, _typing.Any],
    strict: bool = False,
) -> int:
    """
    Score a mapping against a prototype.

    Args:
        container: The mapping to score.
        prototype: Keys to require, with values to compare (None: any).
        strict: Also penalize keys the prototype doesn't list. Only
            applies at the top level.

    Returns:
        The score; positive means a match.
    """
    keys = set(container.keys())
    missing = len(set(prototype.keys()) - keys)
    if missing:
        return -missing

    if strict:
        extra = len(keys - set(prototype.keys()))
        if extra:
            return -extra

    score = 0
    for key, expected in prototype.items():
        if expected is None:
            score += 1
            continue

        actual = container[pathed.literal_key(container, key)]
        if isinstance(expected, _abc.Mapping):
            if not isinstance(actual, _abc.Mapping):
                return FAILURE
            nested = prototype_match_score(actual, expected)
            if nested < 0:
                return nested
            score += nested
            continue

        score += 1 if actual == expected else -1
    return score


def prototype_match(
    container: _typing.Mapping[_typing.Any, _typing.Any],
    prototype: _typing.Mapping[_typing.Any, _typing.Any],
    strict: bool = False,
) -> bool:
    """Whether the mapping matches the prototype (a positive score)."""
    return prototype_match_score(container, prototype, strict) > 0


class PrototypeMatch(base.Capability):
    """Adds prototype_match() and prototype_match_score()."""

    methods = {
        "prototype_match": prototype_match,
        "prototype_match_score": prototype_match_score,
    }
