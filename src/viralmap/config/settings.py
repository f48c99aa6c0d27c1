"""
Settings configuration using pydantic-settings.

Loads configuration from:
1. Constructor arguments (highest precedence)
2. Environment variables with VIRALMAP_ prefix
3. .env file named by VIRALMAP_ENV_FILE (if present)

List values are given as JSON:
  VIRALMAP_KEY_PRIORITY='["str", "int"]'
"""

import functools as _functools
import logging as _logging
import os as _os
import pathlib as _pathlib

import pydantic as _pydantic
import pydantic_settings as _pydantic_settings

import viralmap.constants as constants


def _get_env_file() -> str | None:
    """Determine which .env file to load.

    Only an explicit VIRALMAP_ENV_FILE is honoured; a library should not
    pick up whatever .env happens to sit in the working directory.
    """
    if env_file := _os.environ.get("VIRALMAP_ENV_FILE"):
        if _pathlib.Path(env_file).exists():
            return env_file
    return None


class Settings(_pydantic_settings.BaseSettings):
    """
    viralmap configuration settings.

    All settings can be overridden via environment variables with the
    VIRALMAP_ prefix, e.g. VIRALMAP_SEPARATOR=/ or
    VIRALMAP_STRICT_REGISTRATION=true.
    """

    model_config = _pydantic_settings.SettingsConfigDict(
        env_prefix=constants.SETTINGS_ENV_PREFIX,
        env_file=_get_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    separator: str = _pydantic.Field(
        default=constants.DEFAULT_SEPARATOR,
        description="Path separator for containers that don't set their own",
    )

    strict_registration: bool = _pydantic.Field(
        default=False,
        description="Raise on duplicate decorator registration instead of ignoring it",
    )

    key_priority: list[str] = _pydantic.Field(
        default_factory=lambda: list(constants.DEFAULT_KEY_PRIORITY),
        description="Preferred representation when indifferent keys collide",
    )

    case_insensitive_keys: bool = _pydantic.Field(
        default=False,
        description="Let indifferent access also match keys ignoring case",
    )

    env_override_prefix: str = _pydantic.Field(
        default="",
        description="Prefix prepended to environment override variable names",
    )

    log_level: str = _pydantic.Field(
        default="WARNING",
        description="Log level used by the command line interface",
    )

    @_pydantic.field_validator("separator")
    @classmethod
    def _validate_separator(cls, value: str) -> str:
        if not value:
            raise ValueError("separator must not be empty")
        if constants.ESCAPE_CHARACTER in value:
            raise ValueError("separator must not contain the escape character")
        return value

    @_pydantic.field_validator("key_priority")
    @classmethod
    def _validate_key_priority(cls, value: list[str]) -> list[str]:
        kinds = [kind.strip().lower() for kind in value]
        unknown = sorted(set(kinds) - constants.KEY_KINDS)
        if unknown:
            raise ValueError(f"unknown key kinds: {', '.join(unknown)}")
        if len(set(kinds)) != len(kinds):
            raise ValueError("key kinds must not repeat")
        return kinds

    @_pydantic.field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(_logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {value}")
        return level


@_functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    return Settings()


def reload_settings() -> Settings:
    """Drop cached settings and load them again from the environment."""
    get_settings.cache_clear()
    return get_settings()
