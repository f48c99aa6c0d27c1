"""Tests for environment variable overrides."""

import pytest as _pytest

import viralmap.capabilities as capabilities
import viralmap.config as config
import viralmap.uber as uber


@_pytest.fixture
def environ() -> dict[str, str]:
    return {}


@_pytest.fixture
def data(environ: dict[str, str]) -> uber.UberDict:
    """A config tree reading overrides from the ``environ`` fixture."""
    tree = uber.UberDict({"database": {"host": "localhost", "port": 5432}, "debug": False})
    tree.activate(capabilities.EnvironmentOverride(environ=environ))
    return tree


class TestKeyToEnv:
    """Tests for key_to_env()."""

    @_pytest.mark.parametrize(
        ("key", "expected"),
        [
            ("host", "HOST"),
            (".foo.bar-baz", "FOO_BAR_BAZ"),
            ("a..b", "A_B"),
            (3, "3"),
            ("...", ""),
        ],
    )
    def test_names(self, key: object, expected: str) -> None:
        """Non-alphanumeric runs become one underscore."""
        assert capabilities.key_to_env(key) == expected

    def test_prefix(self) -> None:
        """The prefix is prepended verbatim."""
        assert capabilities.key_to_env("host", "APP_") == "APP_HOST"


class TestEnvironmentOverride:
    """Tests for the capability."""

    def test_no_variable_reads_stored_value(self, data: uber.UberDict) -> None:
        """Without a variable the stored value is returned."""
        assert data["database.host"] == "localhost"

    def test_path_read_is_overridden(self, data: uber.UberDict, environ: dict[str, str]) -> None:
        """A variable named after the path overrides it."""
        environ["DATABASE_HOST"] = "db.example.com"
        assert data["database.host"] == "db.example.com"
        assert data.get("database.host") == "db.example.com"

    def test_nested_read_is_overridden(self, data: uber.UberDict, environ: dict[str, str]) -> None:
        """Nested containers use their location to name variables."""
        environ["DATABASE_HOST"] = "db.example.com"
        assert data["database"]["host"] == "db.example.com"

    def test_values_are_parsed_as_json(self, data: uber.UberDict, environ: dict[str, str]) -> None:
        """JSON values are decoded; anything else stays a string."""
        environ["DATABASE_PORT"] = "6543"
        environ["DEBUG"] = "true"
        assert data["database.port"] == 6543
        assert data["debug"] is True

    def test_container_is_not_modified(self, data: uber.UberDict, environ: dict[str, str]) -> None:
        """Overrides are served from a copy."""
        environ["DATABASE_HOST"] = "db.example.com"
        assert data["database.host"] == "db.example.com"
        assert dict.__getitem__(dict.__getitem__(data, "database"), "host") == "localhost"

    def test_missing_key_can_be_provided(self, data: uber.UberDict, environ: dict[str, str]) -> None:
        """A variable can supply a key the tree doesn't have."""
        environ["DATABASE_USER"] = "admin"
        assert "database.user" in data
        assert data["database.user"] == "admin"

    def test_unqualified_name_is_a_fallback(self, data: uber.UberDict, environ: dict[str, str]) -> None:
        """Shorter names apply when the qualified one isn't set."""
        environ["HOST"] = "fallback"
        assert data["database.host"] == "fallback"
        environ["DATABASE_HOST"] = "qualified"
        assert data["database.host"] == "qualified"

    def test_candidate_names(self, data: uber.UberDict) -> None:
        """Names go from most to least qualified."""
        capability = data.get_capability(capabilities.EnvironmentOverride)
        assert capability.candidate_names(data, "database.host") == ["DATABASE_HOST", "HOST"]
        assert capability.candidate_names(data["database"], "host") == ["DATABASE_HOST", "HOST"]

    def test_prefix(self, environ: dict[str, str]) -> None:
        """An explicit prefix is part of every name."""
        tree = uber.UberDict({"host": "a"})
        tree.activate(capabilities.EnvironmentOverride(prefix="APP_", environ=environ))
        environ["HOST"] = "ignored"
        environ["APP_HOST"] = "b"
        assert tree["host"] == "b"

    def test_prefix_from_settings(self, monkeypatch: _pytest.MonkeyPatch) -> None:
        """Without a prefix the Settings value is used."""
        monkeypatch.setenv("VIRALMAP_ENV_OVERRIDE_PREFIX", "SVC_")
        config.reload_settings()
        assert capabilities.EnvironmentOverride().prefix == "SVC_"

    def test_reads_os_environ_by_default(self, monkeypatch: _pytest.MonkeyPatch) -> None:
        """The process environment is the default source."""
        monkeypatch.setenv("PORT", "8081")
        tree = uber.UberDict({"port": 8080}).activate(capabilities.EnvironmentOverride())
        assert tree["port"] == 8081
