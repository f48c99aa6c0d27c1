"""
Capabilities that can be activated on containers.

Usage:
    from viralmap.capabilities import PathedAccess, Viral
    from viralmap.core import ViralDict

    data = ViralDict().activate(Viral(), PathedAccess())
    data["a.b.c"] = 1
"""

from viralmap.capabilities.base import Capability
from viralmap.capabilities.environment import EnvironmentOverride, key_to_env
from viralmap.capabilities.indifferent import IndifferentAccess, KeyPolicy
from viralmap.capabilities.pathed import PathedAccess, literal_key
from viralmap.capabilities.prototype import FAILURE, PrototypeMatch, prototype_match, prototype_match_score
from viralmap.capabilities.recursive import (
    RecursiveDup,
    RecursiveFetch,
    RecursiveMerge,
    RecursiveSort,
    deep_dup,
    recursive_dup,
    recursive_fetch,
    recursive_fetch_all,
    recursive_fetch_one,
    recursive_merge,
    recursive_sort,
    recursive_sorted,
    recursive_update,
)
from viralmap.capabilities.viral import Viral

__all__ = [
    "FAILURE",
    "Capability",
    "EnvironmentOverride",
    "IndifferentAccess",
    "KeyPolicy",
    "PathedAccess",
    "PrototypeMatch",
    "RecursiveDup",
    "RecursiveFetch",
    "RecursiveMerge",
    "RecursiveSort",
    "Viral",
    "deep_dup",
    "key_to_env",
    "literal_key",
    "prototype_match",
    "prototype_match_score",
    "recursive_dup",
    "recursive_fetch",
    "recursive_fetch_all",
    "recursive_fetch_one",
    "recursive_merge",
    "recursive_sort",
    "recursive_sorted",
    "recursive_update",
]
