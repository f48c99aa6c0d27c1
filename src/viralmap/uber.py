"""
UberDict: a dict with every general-purpose capability.

    >>> config = UberDict({"Server": {"port": "8080"}})
    >>> config["Server.port"]
    '8080'
    >>> config["Server"].path_prefix
    '.Server'
"""

from __future__ import annotations

import typing as _typing

import viralmap.capabilities.indifferent as indifferent
import viralmap.capabilities.pathed as pathed
import viralmap.capabilities.prototype as prototype
import viralmap.capabilities.recursive as recursive
import viralmap.capabilities.viral as viral
import viralmap.core.containers as containers


class UberDict(containers.ViralDict):
    """
    ViralDict with viral, indifferent, pathed, merge, dup, sort, fetch and
    prototype capabilities. Nested mappings become UberDicts as well.

    Initial data is merged in with recursive_update(), so nested input is
    copied rather than shared.
    """

    declared_capabilities = (
        viral.Viral(),
        indifferent.IndifferentAccess(),
        pathed.PathedAccess(),
        recursive.RecursiveMerge(),
        recursive.RecursiveDup(),
        recursive.RecursiveSort(),
        recursive.RecursiveFetch(),
        prototype.PrototypeMatch(),
    )

    def __init__(self, *args: _typing.Any, **kwargs: _typing.Any) -> None:
        containers.ViralDict.__init__(self)
        for arg in args:
            recursive.recursive_update(self, arg)
        if kwargs:
            recursive.recursive_update(self, kwargs)
