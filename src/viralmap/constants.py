"""
Shared constants for viralmap.

This module provides a single source of truth for default values
that are used across multiple modules.
"""

# Path defaults
DEFAULT_SEPARATOR = "."
"""Default path separator."""

ESCAPE_CHARACTER = "\\"
"""Character escaping a separator inside a path component."""

# Indifferent access defaults
DEFAULT_KEY_PRIORITY: tuple[str, ...] = ("int", "str")
"""Preferred key representation order when equivalent keys collide."""

KEY_KINDS: frozenset[str] = frozenset(DEFAULT_KEY_PRIORITY)
"""Key representations understood by indifferent access."""

# Prototype matching
PROTOTYPE_FAILURE = -2147483648
"""Score for mismatches that can't be expressed as a count of missing keys."""

# Environment
SETTINGS_ENV_PREFIX = "VIRALMAP_"
"""Prefix for environment variables configuring viralmap itself."""
