"""benchvault: Append-only benchmark history with regression detection."""

from __future__ import annotations

from benchvault.core.exceptions import (
    BenchvaultError,
    ConfigurationError,
    DecodeError,
    DecodeErrorKind,
    LockTimeout,
    StoreIOError,
    ValidationError,
)
from benchvault.core.types import BenchResult, Commit, CommitUser, Direction, Store, ToolRun
from benchvault.engine import AppendEngine, AppendReport, AppendState, append
from benchvault.history import HistoryIndex, HistoryPoint
from benchvault.regression import RegressionDetector, RegressionResult, RegressionSignal, SignalKind, detect
from benchvault.storage import JSONFileStore, LoadResult, StoreLock, dumps, loads

__version__ = "0.3.0"
__all__ = [
    # Record model
    "BenchResult",
    "Commit",
    "CommitUser",
    "Direction",
    "Store",
    "ToolRun",
    # Storage
    "JSONFileStore",
    "LoadResult",
    "StoreLock",
    "dumps",
    "loads",
    # History and detection
    "HistoryIndex",
    "HistoryPoint",
    "RegressionDetector",
    "RegressionResult",
    "RegressionSignal",
    "SignalKind",
    "detect",
    # Append
    "AppendEngine",
    "AppendReport",
    "AppendState",
    "append",
    # Errors
    "BenchvaultError",
    "ConfigurationError",
    "DecodeError",
    "DecodeErrorKind",
    "LockTimeout",
    "StoreIOError",
    "ValidationError",
    # Version
    "__version__",
]
