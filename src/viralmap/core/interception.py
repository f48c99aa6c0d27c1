"""
Interception engine and capability registry.

Containers route every catalog operation through invoke(), which nests the
registered decorators around the raw dict/list operation. A decorator is
called as ``decorator(next_operation, *args, **kwargs)`` where
``next_operation`` is a BoundOperation for the next inner layer; it decides
whether (and with which arguments) to call inward.

Registrations are made against a container type or a single container
instance. The most recently registered decorator is the outermost one.

Each receiver keeps a stack of call frames ``(decorator id, receiver type)``.
When a decorator would run again on the same receiver while it is already
active, the engine skips it and calls the next inner layer directly. This
keeps mutually triggering capabilities from recursing without bound.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import logging as _logging
import typing as _typing

import viralmap.config as config
import viralmap.core.operations as operations
import viralmap.errors as errors

if _typing.TYPE_CHECKING:
    import viralmap.capabilities.base as capabilities_base

_logger = _logging.getLogger(__name__)

Decorator: _typing.TypeAlias = _typing.Callable[..., _typing.Any]

_LOCAL_REGISTRATIONS = "_local_registrations"
_LOCAL_CAPABILITIES = "_local_capabilities"
_CALL_FRAMES = "_call_frames"


@_dataclasses.dataclass(frozen=True, eq=False, slots=True)
class Registration:
    """A decorator registered for one operation of a type or instance."""

    operation: str
    decorator: Decorator
    capability: capabilities_base.Capability | None = None


class BoundOperation:
    """
    The next inner layer of an intercepted operation.

    Calling it runs the rest of the chain. ``receiver`` and ``name`` let a
    decorator find out what it is decorating.
    """

    __slots__ = ("receiver", "name", "_call")

    def __init__(
        self,
        receiver: _typing.Any,
        name: str,
        call: _typing.Callable[..., _typing.Any],
    ) -> None:
        self.receiver = receiver
        self.name = name
        self._call = call

    def __call__(self, *args: _typing.Any, **kwargs: _typing.Any) -> _typing.Any:
        return self._call(*args, **kwargs)

    def __repr__(self) -> str:
        return f"BoundOperation({type(self.receiver).__name__}.{self.name})"


def _describe(owner: _typing.Any) -> str:
    if isinstance(owner, type):
        return owner.__name__
    return f"<{type(owner).__name__} at {id(owner):#x}>"


def _instance_state(owner: _typing.Any, name: str, factory: _typing.Callable[[], _typing.Any]) -> _typing.Any:
    """Per-instance state, created on first use."""
    state = vars(owner)
    if name not in state:
        state[name] = factory()
    return state[name]


class WrapperRegistry:
    """
    Registry of decorators and capabilities.

    Type-level registrations are stored here, keyed by type; instance-level
    ones live on the instance. Lookups walk the type's MRO base-first and
    then the instance, which yields decorators inner to outer.

    Capabilities declared on a class (``declared_capabilities``) are
    activated in a registry the first time that registry sees the class.
    """

    def __init__(self, *, strict: bool | None = None) -> None:
        """
        Create a registry.

        Args:
            strict: Default for ``prevent_duplicates``. None defers to
                Settings.strict_registration.
        """
        self._strict = strict
        self._types: dict[type, dict[str, list[Registration]]] = {}
        self._type_capabilities: dict[type, list[capabilities_base.Capability]] = {}
        self._materialized: set[type] = set()

    @property
    def strict(self) -> bool:
        """Whether duplicate registrations raise by default."""
        if self._strict is None:
            return config.get_settings().strict_registration
        return self._strict

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def wrap(
        self,
        owner: _typing.Any,
        operation: str,
        decorator: Decorator,
        *,
        fail_if_missing: bool = True,
        prevent_duplicates: bool | None = None,
        capability: capabilities_base.Capability | None = None,
    ) -> Registration | None:
        """
        Register a decorator for an operation of a container type or instance.

        Args:
            owner: Container type or instance.
            operation: Catalog operation name, e.g. "__getitem__".
            decorator: Callable taking (next_operation, *args, **kwargs).
            fail_if_missing: Raise if the owner lacks the operation. If False,
                the call silently does nothing.
            prevent_duplicates: Raise if the decorator is already registered
                for this operation. None uses the registry default.
            capability: Capability the decorator belongs to, if any.

        Returns:
            The new registration, the existing one for a duplicate, or None
            when the operation is missing and fail_if_missing is False.

        Raises:
            OperationNotFoundError: If the operation is missing.
            DuplicateRegistrationError: If duplicates are prevented.
        """
        if operation not in operations.catalog_for(owner):
            if fail_if_missing:
                raise errors.OperationNotFoundError(operation, owner)
            return None

        if prevent_duplicates is None:
            prevent_duplicates = self.strict

        for existing in self.registrations(owner, operation):
            if existing.decorator == decorator:
                if prevent_duplicates:
                    raise errors.DuplicateRegistrationError(operation, decorator)
                return existing

        registration = Registration(operation, decorator, capability)
        self._registrations_of(owner).setdefault(operation, []).append(registration)
        _logger.debug("Wrapped %s.%s with %r", _describe(owner), operation, decorator)
        return registration

    def _registrations_of(self, owner: _typing.Any) -> dict[str, list[Registration]]:
        """The owner's own registration table (not its ancestry's)."""
        if isinstance(owner, type):
            self._materialize(owner)
            return self._types.setdefault(owner, {})
        return _typing.cast(
            dict[str, list[Registration]],
            _instance_state(owner, _LOCAL_REGISTRATIONS, dict),
        )

    def _materialize(self, owner_type: type) -> None:
        """Activate the capabilities a class declares, once per registry."""
        if owner_type in self._materialized:
            return
        self._materialized.add(owner_type)
        for capability in owner_type.__dict__.get("declared_capabilities", ()):
            self.activate(owner_type, capability)

    def _lineage(self, owner: _typing.Any) -> list[type]:
        owner_type = owner if isinstance(owner, type) else type(owner)
        lineage = list(reversed(owner_type.__mro__))
        for klass in lineage:
            self._materialize(klass)
        return lineage

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def registrations(self, owner: _typing.Any, operation: str) -> list[Registration]:
        """All registrations for an operation, inner to outer."""
        result: list[Registration] = []
        for klass in self._lineage(owner):
            result.extend(self._types.get(klass, {}).get(operation, ()))
        if not isinstance(owner, type):
            result.extend(vars(owner).get(_LOCAL_REGISTRATIONS, {}).get(operation, ()))
        return result

    def wrappers(self, owner: _typing.Any, operation: str) -> list[Decorator]:
        """The decorator callables for an operation, inner to outer."""
        return [registration.decorator for registration in self.registrations(owner, operation)]

    def capabilities(self, owner: _typing.Any) -> list[capabilities_base.Capability]:
        """Active capabilities in activation order."""
        result: list[capabilities_base.Capability] = []
        for klass in self._lineage(owner):
            result.extend(self._type_capabilities.get(klass, ()))
        if not isinstance(owner, type):
            result.extend(vars(owner).get(_LOCAL_CAPABILITIES, ()))
        return result

    def is_active(
        self,
        owner: _typing.Any,
        capability: capabilities_base.Capability | type[capabilities_base.Capability],
    ) -> bool:
        """Whether a capability (instance or class) is active on the owner."""
        capability_type = capability if isinstance(capability, type) else type(capability)
        return any(isinstance(active, capability_type) for active in self.capabilities(owner))

    def find(
        self,
        owner: _typing.Any,
        capability_type: type[capabilities_base.Capability],
    ) -> capabilities_base.Capability | None:
        """The active capability instance of the given class, if any."""
        for active in self.capabilities(owner):
            if isinstance(active, capability_type):
                return active
        return None

    # -------------------------------------------------------------------------
    # Capabilities
    # -------------------------------------------------------------------------

    def activate(self, owner: _typing.Any, capability: capabilities_base.Capability) -> bool:
        """
        Activate a capability on a container type or instance.

        Required capabilities are activated first, so they end up further
        inside the decorator chain.

        Returns:
            True if the capability was activated, False if it already was.
        """
        if self.is_active(owner, capability):
            return False

        for required in capability.requires:
            self.activate(owner, required())

        for operation, decorator in capability.decorators().items():
            self.wrap(owner, operation, decorator, fail_if_missing=False, capability=capability)

        if isinstance(owner, type):
            self._type_capabilities.setdefault(owner, []).append(capability)
        else:
            _instance_state(owner, _LOCAL_CAPABILITIES, list).append(capability)
        _logger.debug("Activated %s on %s", capability.name, _describe(owner))
        return True


# Global default registry
_default_registry: WrapperRegistry | None = None


def get_default_registry() -> WrapperRegistry:
    """
    Get the default registry.

    Containers not created with a registry of their own, and all
    registrations made against bare types, use this one.
    """
    global _default_registry
    if _default_registry is None:
        _default_registry = WrapperRegistry()
    return _default_registry


def registry_for(owner: _typing.Any) -> WrapperRegistry:
    """The registry responsible for a container type or instance."""
    if isinstance(owner, type):
        return get_default_registry()
    registry: WrapperRegistry = getattr(owner, "registry", None) or get_default_registry()
    return registry


def wrap(
    owner: _typing.Any,
    operation: str,
    decorator: Decorator,
    *,
    fail_if_missing: bool = True,
    prevent_duplicates: bool | None = None,
) -> Registration | None:
    """Register a decorator in the owner's registry. See WrapperRegistry.wrap."""
    return registry_for(owner).wrap(
        owner,
        operation,
        decorator,
        fail_if_missing=fail_if_missing,
        prevent_duplicates=prevent_duplicates,
    )


def wrappers(owner: _typing.Any, operation: str) -> list[Decorator]:
    """The decorators active for an operation on the owner, inner to outer."""
    return registry_for(owner).wrappers(owner, operation)


# =============================================================================
# Dispatch
# =============================================================================


def _call_frames(receiver: _typing.Any) -> list[tuple[int, type]]:
    return _typing.cast(list[tuple[int, type]], _instance_state(receiver, _CALL_FRAMES, list))


def _bind(receiver: _typing.Any, registration: Registration, inner: BoundOperation) -> BoundOperation:
    decorator = registration.decorator
    frame = (id(decorator), type(receiver))

    def call(*args: _typing.Any, **kwargs: _typing.Any) -> _typing.Any:
        frames = _call_frames(receiver)
        if frame in frames:
            _logger.debug("Loop break in %s.%s", _describe(receiver), inner.name)
            return inner(*args, **kwargs)
        frames.append(frame)
        try:
            return decorator(inner, *args, **kwargs)
        finally:
            frames.pop()

    return BoundOperation(receiver, inner.name, call)


def invoke(
    receiver: _typing.Any,
    name: str,
    args: tuple[_typing.Any, ...],
    kwargs: dict[str, _typing.Any],
) -> _typing.Any:
    """Run an operation on a receiver through its decorator chain."""
    operation = BoundOperation(receiver, name, receiver._raw(name))
    for registration in registry_for(receiver).registrations(receiver, name):
        operation = _bind(receiver, registration, operation)
    return operation(*args, **kwargs)


def intercepted(name: str) -> _typing.Callable[..., _typing.Any]:
    """Build a container method that dispatches through invoke()."""

    def operation(self: _typing.Any, *args: _typing.Any, **kwargs: _typing.Any) -> _typing.Any:
        return invoke(self, name, args, kwargs)

    operation.__name__ = name
    operation.__qualname__ = name
    operation.__doc__ = f"Intercepted ``{name}``; see viralmap.core.interception."
    return operation
