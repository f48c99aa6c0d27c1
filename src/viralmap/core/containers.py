"""
Decoratable containers.

ViralDict and ViralList behave like dict and list, except that the
operations listed in viralmap.core.operations dispatch through the
interception engine. With no capability active they are plain containers.

Capabilities are activated on a class (``declared_capabilities`` or
WrapperRegistry.activate) or on a single instance (Container.activate).
Per-instance state lives in the instance ``__dict__``; class attributes
provide the defaults.

Example:
    >>> import viralmap.capabilities as capabilities
    >>> data = decorate({"foo": {"bar": 42}}, capabilities.Viral(), capabilities.PathedAccess())
    >>> data["foo.bar"]
    42
    >>> data["foo"].path_prefix
    '.foo'
"""

from __future__ import annotations

import types as _types
import typing as _typing

import viralmap.config as config
import viralmap.core.interception as interception
import viralmap.core.operations as operations
import viralmap.core.paths as paths

if _typing.TYPE_CHECKING:
    import viralmap.capabilities.base as capabilities_base

DefaultFactory: _typing.TypeAlias = _typing.Callable[[_typing.Any, _typing.Any], _typing.Any]


class Container:
    """
    Mixin holding the decoration state shared by mappings and sequences.

    Must come before dict or list in the bases so that ``_raw`` can reach
    the builtin operation through ``super(Container, self)``.
    """

    operations: _typing.ClassVar[frozenset[str]] = frozenset()
    declared_capabilities: _typing.ClassVar[tuple[capabilities_base.Capability, ...]] = ()

    # Types nested values are upgraded to; None means ViralDict / ViralList
    # (or the parent's own type when it is of the same kind).
    mapping_ancestor: type[ViralDict] | None = None
    sequence_ancestor: type[ViralList] | None = None

    default_factory: DefaultFactory | None = None

    _separator: str | None = None
    _path_prefix: str | None = None
    _registry: interception.WrapperRegistry | None = None

    def _raw(self, name: str) -> _typing.Callable[..., _typing.Any]:
        """The undecorated builtin operation, bound to this container."""
        raw: _typing.Callable[..., _typing.Any] = getattr(super(Container, self), name)
        return raw

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    @property
    def registry(self) -> interception.WrapperRegistry:
        """The registry holding this container's decorators."""
        return self._registry or interception.get_default_registry()

    @registry.setter
    def registry(self, value: interception.WrapperRegistry | None) -> None:
        self._registry = value

    @property
    def separator(self) -> str:
        """Path separator, falling back to Settings.separator."""
        return self._separator or config.get_settings().separator

    @separator.setter
    def separator(self, value: str | None) -> None:
        self._separator = value

    @property
    def path_prefix(self) -> str:
        """Absolute path of this container; the bare separator for a root."""
        if self._path_prefix is None:
            return self.separator
        return self._path_prefix

    @path_prefix.setter
    def path_prefix(self, value: _typing.Any) -> None:
        self._path_prefix = paths.normalize(value, self.separator)

    def path_components(self) -> list[_typing.Any]:
        return paths.components(self.path_prefix, self.separator)

    def tighten_path_prefix(self, path: _typing.Any) -> str:
        """
        Move the path prefix to ``path`` if that is deeper than the current one.

        The prefix is never shortened; it is measured in components.
        """
        candidate = paths.components(path, self.separator)
        if len(candidate) > len(self.path_components()):
            self.path_prefix = candidate
        return self.path_prefix

    # -------------------------------------------------------------------------
    # Capabilities
    # -------------------------------------------------------------------------

    def active_capabilities(self) -> list[capabilities_base.Capability]:
        return self.registry.capabilities(self)

    def has_capability(
        self,
        capability: capabilities_base.Capability | type[capabilities_base.Capability],
    ) -> bool:
        """Whether a capability (class or instance) is active on this container."""
        return self.registry.is_active(self, capability)

    def get_capability(
        self,
        capability_type: type[capabilities_base.Capability],
    ) -> capabilities_base.Capability | None:
        return self.registry.find(self, capability_type)

    def activate(self, *capabilities: capabilities_base.Capability) -> _typing.Self:
        """Activate capabilities on this instance only. Returns self."""
        for capability in capabilities:
            self.registry.activate(self, capability)
        return self

    def relocate(self, value: _typing.Any, hint: _typing.Any = None) -> _typing.Any:
        """
        Let every active capability adjust a value placed inside this container.

        ``hint`` is the key or index the value lives at, if known.
        """
        for capability in self.active_capabilities():
            capability.relocate(self, value, hint)
        return value

    def __getattr__(self, name: str) -> _typing.Any:
        # Only reached when normal lookup fails: expose capability methods.
        if not name.startswith("_"):
            for capability in self.active_capabilities():
                method = capability.methods.get(name)
                if method is not None:
                    return _types.MethodType(method, self)
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._raw('__repr__')()})"


class ViralDict(Container, dict):  # type: ignore[type-arg]
    """A dict whose keyed operations can be decorated."""

    operations = operations.MAPPING_OPERATIONS

    __getitem__ = interception.intercepted("__getitem__")
    __setitem__ = interception.intercepted("__setitem__")
    __delitem__ = interception.intercepted("__delitem__")
    __contains__ = interception.intercepted("__contains__")
    get = interception.intercepted("get")
    pop = interception.intercepted("pop")
    setdefault = interception.intercepted("setdefault")
    update = interception.intercepted("update")
    copy = interception.intercepted("copy")

    def __init__(self, *args: _typing.Any, **kwargs: _typing.Any) -> None:
        dict.__init__(self)
        if args or kwargs:
            self.update(*args, **kwargs)

    def __missing__(self, key: _typing.Any) -> _typing.Any:
        if self.default_factory is None:
            raise KeyError(key)
        return self.default_factory(self, key)

    def _raw(self, name: str) -> _typing.Callable[..., _typing.Any]:
        raw = super()._raw(name)
        if name not in ("__setitem__", "setdefault"):
            return raw

        # Stored keys are plain strings, never PathComponent markers.
        def store(key: _typing.Any, *args: _typing.Any) -> _typing.Any:
            if isinstance(key, paths.PathComponent):
                key = str(key)
            return raw(key, *args)

        return store


class ViralList(Container, list):  # type: ignore[type-arg]
    """A list whose indexed operations can be decorated."""

    operations = operations.SEQUENCE_OPERATIONS

    __getitem__ = interception.intercepted("__getitem__")
    __setitem__ = interception.intercepted("__setitem__")
    __delitem__ = interception.intercepted("__delitem__")
    pop = interception.intercepted("pop")
    insert = interception.intercepted("insert")
    append = interception.intercepted("append")
    extend = interception.intercepted("extend")
    copy = interception.intercepted("copy")

    def __init__(self, iterable: _typing.Iterable[_typing.Any] = ()) -> None:
        list.__init__(self)
        self.extend(iterable)

    def __iadd__(self, other: _typing.Iterable[_typing.Any]) -> _typing.Self:
        self.extend(other)
        return self

    def _raw(self, name: str) -> _typing.Callable[..., _typing.Any]:
        raw = super()._raw(name)
        if name != "__getitem__":
            return raw

        def getitem(index: _typing.Any) -> _typing.Any:
            try:
                return raw(index)
            except IndexError:
                if self.default_factory is None:
                    raise
                return self.default_factory(self, index)

        return getitem


def decorate(
    data: _typing.Any = None,
    *capabilities: capabilities_base.Capability,
    registry: interception.WrapperRegistry | None = None,
    default_factory: DefaultFactory | None = None,
    separator: str | None = None,
) -> Container:
    """
    Build a decorated root container.

    Args:
        data: Initial mapping or iterable of values. A list or tuple gives a
            ViralList, anything else a ViralDict.
        *capabilities: Capabilities to activate on the new instance.
        registry: Registry to hold the decorators; children inherit it.
        default_factory: Called as ``default_factory(container, key)`` for
            missing keys and indices.
        separator: Path separator for the tree.

    Returns:
        The new container, filled through its decorated operations.
    """
    container: Container
    container = ViralList() if isinstance(data, (list, tuple)) else ViralDict()
    if registry is not None:
        container.registry = registry
    if default_factory is not None:
        container.default_factory = default_factory
    if separator is not None:
        container.separator = separator
    container.activate(*capabilities)

    if isinstance(container, ViralList):
        container.extend(data)
    elif data is not None:
        container.update(data)
    return container
