"""Tests for viralmap settings."""

import pydantic as _pydantic
import pytest as _pytest

import viralmap.config as config


class TestSettings:
    """Tests for Settings defaults and validation."""

    def test_defaults(self) -> None:
        """Defaults apply with a clean environment."""
        settings = config.Settings()
        assert settings.separator == "."
        assert settings.strict_registration is False
        assert settings.key_priority == ["int", "str"]
        assert settings.case_insensitive_keys is False
        assert settings.env_override_prefix == ""
        assert settings.log_level == "WARNING"

    def test_environment_overrides(self, monkeypatch: _pytest.MonkeyPatch) -> None:
        """VIRALMAP_* variables configure settings."""
        monkeypatch.setenv("VIRALMAP_SEPARATOR", "/")
        monkeypatch.setenv("VIRALMAP_KEY_PRIORITY", '["STR", "int"]')
        monkeypatch.setenv("VIRALMAP_LOG_LEVEL", "debug")
        settings = config.Settings()
        assert settings.separator == "/"
        assert settings.key_priority == ["str", "int"]
        assert settings.log_level == "DEBUG"

    @_pytest.mark.parametrize("separator", ["", "\\"])
    def test_invalid_separator(self, separator: str) -> None:
        """Separators can't be empty or contain the escape character."""
        with _pytest.raises(_pydantic.ValidationError):
            config.Settings(separator=separator)

    @_pytest.mark.parametrize("priority", [["float"], ["int", "int"]])
    def test_invalid_key_priority(self, priority: list[str]) -> None:
        """Only known, distinct key kinds are accepted."""
        with _pytest.raises(_pydantic.ValidationError):
            config.Settings(key_priority=priority)

    def test_invalid_log_level(self) -> None:
        """Unknown log levels are rejected."""
        with _pytest.raises(_pydantic.ValidationError):
            config.Settings(log_level="loud")


class TestSettingsCache:
    """Tests for get_settings() and reload_settings()."""

    def test_cached(self) -> None:
        """get_settings() returns the same instance."""
        assert config.get_settings() is config.get_settings()

    def test_reload_picks_up_changes(self, monkeypatch: _pytest.MonkeyPatch) -> None:
        """reload_settings() reads the environment again."""
        assert config.get_settings().separator == "."
        monkeypatch.setenv("VIRALMAP_SEPARATOR", ":")
        assert config.get_settings().separator == "."
        assert config.reload_settings().separator == ":"
