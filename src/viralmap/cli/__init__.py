"""
CLI module for viralmap.

Provides the command-line interface using Click.
"""

from viralmap.cli.main import cli, main

__all__ = ["main", "cli"]
