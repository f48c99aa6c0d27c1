"""
Operation catalog.

Classifies the container operations the interception engine can wrap:

- Keyed/indexed reads and writes take a key or index as first argument,
  which is what path resolution and indifferent access act upon.
- The remaining reads return containers (copies) and the remaining writes
  receive them (update, append, extend).

Capabilities look up which names to decorate here; containers use the same
tables to decide which of their methods are interceptable at all.
"""

from __future__ import annotations

# Mapping operations
MAPPING_KEYED_READ: tuple[str, ...] = ("__getitem__", "get", "__contains__", "pop", "__delitem__")
MAPPING_KEYED_WRITE: tuple[str, ...] = ("__setitem__", "setdefault")
MAPPING_READ: tuple[str, ...] = MAPPING_KEYED_READ + ("copy",)
MAPPING_WRITE: tuple[str, ...] = MAPPING_KEYED_WRITE + ("update",)

# Sequence operations. Membership on sequences tests values, not indices,
# so __contains__ is deliberately absent.
SEQUENCE_INDEXED_READ: tuple[str, ...] = ("__getitem__", "__delitem__", "pop")
SEQUENCE_INDEXED_WRITE: tuple[str, ...] = ("__setitem__", "insert")
SEQUENCE_READ: tuple[str, ...] = SEQUENCE_INDEXED_READ + ("copy",)
SEQUENCE_WRITE: tuple[str, ...] = SEQUENCE_INDEXED_WRITE + ("append", "extend")

MAPPING_OPERATIONS: frozenset[str] = frozenset(MAPPING_READ + MAPPING_WRITE)
SEQUENCE_OPERATIONS: frozenset[str] = frozenset(SEQUENCE_READ + SEQUENCE_WRITE)

READ: frozenset[str] = frozenset(MAPPING_READ + SEQUENCE_READ)
WRITE: frozenset[str] = frozenset(MAPPING_WRITE + SEQUENCE_WRITE)

KEYED_READ: frozenset[str] = frozenset(MAPPING_KEYED_READ + SEQUENCE_INDEXED_READ)
KEYED_WRITE: frozenset[str] = frozenset(MAPPING_KEYED_WRITE + SEQUENCE_INDEXED_WRITE)
KEYED: frozenset[str] = KEYED_READ | KEYED_WRITE

# Reads whose result is still stored in the receiver afterwards.
RETAINING_READ: frozenset[str] = frozenset(("__getitem__", "get", "setdefault"))


def is_keyed(operation: str) -> bool:
    """Whether the operation's first argument is a key or index."""
    return operation in KEYED


def catalog_for(owner: object) -> frozenset[str]:
    """Return the interceptable operations of a container type or instance."""
    owner_type = owner if isinstance(owner, type) else type(owner)
    catalog: frozenset[str] = getattr(owner_type, "operations", frozenset())
    return catalog
