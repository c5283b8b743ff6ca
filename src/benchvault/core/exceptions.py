"""Custom exceptions for benchvault.

This module defines the exception hierarchy used throughout the library.
All exceptions inherit from BenchvaultError for easy catching.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path


class BenchvaultError(Exception):
    """Base exception for all benchvault errors.

    All custom exceptions in benchvault inherit from this class,
    making it easy to catch all library-specific errors.

    Example:
        >>> try:
        ...     engine.append("Benchmark", run)
        ... except BenchvaultError as e:
        ...     print(f"benchvault error: {e}")
    """


class DecodeErrorKind(str, Enum):
    """Kind of decoding failure."""

    MALFORMED_DOCUMENT = "malformed_document"
    MALFORMED_ENTRY = "malformed_entry"


class DecodeError(BenchvaultError):
    """Raised when persisted benchmark data cannot be decoded.

    A MALFORMED_DOCUMENT error is fatal to a load. MALFORMED_ENTRY errors
    describe a single skipped run and are collected as diagnostics instead
    of being raised.

    Attributes:
        kind: Whether the whole document or a single entry is malformed.
        tool: Suite name of the malformed entry, if any.
        index: Position of the malformed entry within its suite, if any.

    Example:
        >>> raise DecodeError("entries must be an object", DecodeErrorKind.MALFORMED_DOCUMENT)
    """

    def __init__(
        self,
        message: str,
        kind: DecodeErrorKind,
        tool: str | None = None,
        index: int | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.tool = tool
        self.index = index

    def __str__(self) -> str:
        message = super().__str__()
        if self.kind is DecodeErrorKind.MALFORMED_ENTRY:
            return f"{self.tool}[{self.index}]: {message}"
        return message


class ValidationError(BenchvaultError):
    """Raised when a new run fails record validation.

    Nothing is persisted when this is raised.

    Attributes:
        suite: Suite the run was being appended to.
        bench: Name of the offending benchmark result, if any.

    Example:
        >>> raise ValidationError("value must be finite", suite="Benchmark", bench="jox.Chained")
    """

    def __init__(self, message: str, suite: str | None = None, bench: str | None = None) -> None:
        super().__init__(message)
        self.suite = suite
        self.bench = bench

    def __str__(self) -> str:
        message = super().__str__()
        context = [part for part in (self.suite, self.bench) if part]
        if context:
            return f"{' / '.join(context)}: {message}"
        return message


class StoreIOError(BenchvaultError):
    """Raised when the store cannot be read, written or renamed.

    Example:
        >>> raise StoreIOError("Permission denied", path=Path("data.js"))
    """

    def __init__(self, message: str, path: Path | str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = Path(path)


class LockTimeout(BenchvaultError):
    """Raised when the store lock cannot be acquired in time.

    Example:
        >>> raise LockTimeout(Path("data.js.lock"), timeout=30.0)
    """

    def __init__(self, path: Path | str, timeout: float) -> None:
        super().__init__(f"Could not acquire lock on {path} after {timeout}s")
        self.path = Path(path)
        self.timeout = timeout


class ConfigurationError(BenchvaultError):
    """Raised when configuration is invalid or missing.

    Example:
        >>> raise ConfigurationError("threshold_ratio must be >= 0, got -1")
    """
