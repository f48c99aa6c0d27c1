"""
Configuration module for viralmap.

Uses pydantic-settings for environment variable loading.
"""

from viralmap.config.settings import (
    Settings,
    get_settings,
    reload_settings,
)

__all__ = ["Settings", "get_settings", "reload_settings"]
