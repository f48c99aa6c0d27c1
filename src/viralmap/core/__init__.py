"""
Interception and propagation engine.

Example:
    >>> from viralmap.core import ViralDict, wrap
    >>> def shout(operation, key, *args):
    ...     return str(operation(key, *args)).upper()
    >>> data = ViralDict(greeting="hello")
    >>> _ = wrap(data, "__getitem__", shout)
    >>> data["greeting"]
    'HELLO'
"""

from viralmap.core.containers import Container, ViralDict, ViralList, decorate
from viralmap.core.interception import (
    BoundOperation,
    Registration,
    WrapperRegistry,
    get_default_registry,
    wrap,
    wrappers,
)
from viralmap.core.paths import PathComponent, components, escape, join, normalize
from viralmap.core.virality import enhance_value

__all__ = [
    "BoundOperation",
    "Container",
    "PathComponent",
    "Registration",
    "ViralDict",
    "ViralList",
    "WrapperRegistry",
    "components",
    "decorate",
    "enhance_value",
    "escape",
    "get_default_registry",
    "join",
    "normalize",
    "wrap",
    "wrappers",
]
