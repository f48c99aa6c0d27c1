"""
Shared pytest fixtures for viralmap tests.

This file is automatically loaded by pytest. Fixtures defined here are
available to all test files without explicit imports.
"""

import os as _os
import typing as _typing
import unittest.mock as _mock

import pytest as _pytest

import viralmap.capabilities as capabilities
import viralmap.config as config
import viralmap.core as core


@_pytest.fixture(autouse=True)
def isolated_settings() -> _typing.Iterator[None]:
    """
    Isolate every test from VIRALMAP_* variables and cached settings.

    Settings are cached process-wide; tests that patch the environment
    call config.reload_settings() themselves.
    """
    clean_env = {k: v for k, v in _os.environ.items() if not k.startswith("VIRALMAP_")}
    with _mock.patch.dict(_os.environ, clean_env, clear=True):
        config.get_settings.cache_clear()
        yield
    config.get_settings.cache_clear()


@_pytest.fixture
def registry() -> core.WrapperRegistry:
    """A fresh registry, so type-level registrations don't leak between tests."""
    return core.WrapperRegistry(strict=False)


@_pytest.fixture
def pathed() -> core.Container:
    """An empty mapping with path access and propagation."""
    return core.decorate({}, capabilities.Viral(), capabilities.PathedAccess())


@_pytest.fixture
def nested() -> core.Container:
    """{"foo": {"bar": 42}} with path access and propagation."""
    return core.decorate({"foo": {"bar": 42}}, capabilities.Viral(), capabilities.PathedAccess())
