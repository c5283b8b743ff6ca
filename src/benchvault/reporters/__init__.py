"""Reporters module for benchvault.

This module provides output formatters for append reports:
- Console: Terminal output with tables and colors
- JSON: Machine-readable format for notification tooling
"""

from __future__ import annotations

from benchvault.reporters.console import ConsoleReporter
from benchvault.reporters.json import JSONReporter

__all__ = [
    "ConsoleReporter",
    "JSONReporter",
]
