"""Core module for benchvault.

This module contains the record types, exceptions and configuration
used throughout the library.
"""

from __future__ import annotations

from benchvault.core.config import Settings, load_settings
from benchvault.core.exceptions import (
    BenchvaultError,
    ConfigurationError,
    DecodeError,
    DecodeErrorKind,
    LockTimeout,
    StoreIOError,
    ValidationError,
)
from benchvault.core.types import (
    BenchResult,
    Commit,
    CommitUser,
    Direction,
    Store,
    ToolRun,
    parse_timestamp,
)

__all__ = [
    "BenchResult",
    "BenchvaultError",
    "Commit",
    "CommitUser",
    "ConfigurationError",
    "DecodeError",
    "DecodeErrorKind",
    "Direction",
    "LockTimeout",
    "Settings",
    "Store",
    "StoreIOError",
    "ToolRun",
    "ValidationError",
    "load_settings",
    "parse_timestamp",
]
