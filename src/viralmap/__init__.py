"""
viralmap - nested containers whose capabilities spread to every level.

Decorate a mapping with capabilities such as path access or indifferent
keys, and every mapping or list nested inside it gets the same capabilities
as soon as it is read or written.
"""

import importlib.metadata as _metadata

# Version is defined in pyproject.toml - read it and parse into tuple (primary representation)
_raw_version = _metadata.version("viralmap")
__version_info__: tuple[int, int, int] = tuple(int(x) for x in _raw_version.split(".")[:3])  # type: ignore[assignment]
__version__: str = ".".join(str(x) for x in __version_info__)

from viralmap.capabilities import (  # noqa: E402
    Capability,
    EnvironmentOverride,
    IndifferentAccess,
    KeyPolicy,
    PathedAccess,
    PrototypeMatch,
    RecursiveDup,
    RecursiveFetch,
    RecursiveMerge,
    RecursiveSort,
    Viral,
)
from viralmap.config import Settings, get_settings  # noqa: E402
from viralmap.core import (  # noqa: E402
    Container,
    PathComponent,
    ViralDict,
    ViralList,
    WrapperRegistry,
    decorate,
    enhance_value,
    get_default_registry,
    wrap,
    wrappers,
)
from viralmap.errors import (  # noqa: E402
    DocumentError,
    DuplicateRegistrationError,
    OperationNotFoundError,
    PathConflictError,
    ViralMapError,
)
from viralmap.loaders import dump_yaml, load_file, load_yaml  # noqa: E402
from viralmap.uber import UberDict  # noqa: E402

__all__ = [
    "__version__",
    "__version_info__",
    "Capability",
    "Container",
    "DocumentError",
    "DuplicateRegistrationError",
    "EnvironmentOverride",
    "IndifferentAccess",
    "KeyPolicy",
    "OperationNotFoundError",
    "PathComponent",
    "PathConflictError",
    "PathedAccess",
    "PrototypeMatch",
    "RecursiveDup",
    "RecursiveFetch",
    "RecursiveMerge",
    "RecursiveSort",
    "Settings",
    "UberDict",
    "Viral",
    "ViralDict",
    "ViralList",
    "ViralMapError",
    "WrapperRegistry",
    "decorate",
    "dump_yaml",
    "enhance_value",
    "get_default_registry",
    "get_settings",
    "load_file",
    "load_yaml",
    "wrap",
    "wrappers",
]
