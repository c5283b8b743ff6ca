"""CLI module for benchvault.

This module provides the command-line interface using Typer.
"""

from __future__ import annotations

from benchvault.cli.main import app

__all__ = ["app"]
