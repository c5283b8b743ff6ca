"""JSON file storage for benchmark stores.

This module provides the file-based backend. Writes are atomic
(temp file + rename) so concurrent readers see either the old or the
new document, never a partial one.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from benchvault.core.exceptions import DecodeError, DecodeErrorKind, StoreIOError
from benchvault.storage.codec import LoadResult, dumps, loads
from benchvault.storage.lock import DEFAULT_POLL_INTERVAL, DEFAULT_TIMEOUT, StoreLock

if TYPE_CHECKING:
    from benchvault.core.types import Store

logger = logging.getLogger(__name__)

DEFAULT_JS_VARIABLE = "BENCHMARK_DATA"


class JSONFileStore:
    """JSON file storage for a benchmark store.

    Files ending in ``.js`` are written as ``window.BENCHMARK_DATA = {...}``;
    any other suffix gets plain JSON. A JS file using another variable name
    keeps that name on save.

    Example:
        >>> store = JSONFileStore("benchmark-data/data.js")
        >>> result = store.load()
        >>> with store.lock(timeout=10):
        ...     store.save(result.store)
    """

    def __init__(
        self,
        path: str | Path = "benchmark-data/data.js",
        js_variable: str | None = None,
        lock_timeout: float = DEFAULT_TIMEOUT,
        lock_poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        """Initialize the JSON file store.

        Args:
            path: Path to the store file.
            js_variable: Global variable name for ``.js`` files (default BENCHMARK_DATA).
            lock_timeout: Default lock wait in seconds.
            lock_poll_interval: Delay between lock attempts in seconds.
        """
        self._path = Path(path)
        self._js_variable = js_variable or DEFAULT_JS_VARIABLE
        self._lock_timeout = lock_timeout
        self._lock_poll_interval = lock_poll_interval

    @property
    def path(self) -> Path:
        """Path to the store file."""
        return self._path

    @property
    def location(self) -> str:
        """Human-readable location of the store."""
        return str(self._path)

    @property
    def js_variable(self) -> str | None:
        """Variable name used when writing, None for plain JSON."""
        if self._path.suffix == ".js":
            return self._js_variable
        return None

    def exists(self) -> bool:
        """Check whether a store file exists."""
        return self._path.exists()

    def load(self) -> LoadResult | None:
        """Load records from the store file.

        Returns:
            LoadResult, or None if the file does not exist or is blank.

        Raises:
            DecodeError: If the document is malformed as a whole.
            StoreIOError: If the file cannot be read.
        """
        if not self._path.exists():
            return None

        try:
            content = self._path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(
                f"{self._path} is not valid UTF-8 at byte {e.start}",
                DecodeErrorKind.MALFORMED_DOCUMENT,
            ) from e
        except OSError as e:
            raise StoreIOError(f"cannot read store: {e}", self._path) from e
        if not content.strip():
            return None

        result = loads(content)
        if result.js_variable and result.js_variable != self._js_variable:
            logger.debug(f"{self._path} uses window.{result.js_variable}, keeping it")
            self._js_variable = result.js_variable
        return result

    def save(self, store: Store) -> None:
        """Save the store with an atomic write.

        Uses temp file + fsync + rename for an atomic replace.

        Args:
            store: The store to write.

        Raises:
            StoreIOError: If any step fails. The previous file is left intact.
        """
        content = dumps(store, js_variable=self.js_variable)
        try:
            # Ensure parent directory exists
            self._path.parent.mkdir(parents=True, exist_ok=True)
            temp_fd, temp_path = tempfile.mkstemp(
                dir=self._path.parent,
                prefix=f".{self._path.name}_",
                suffix=".tmp",
            )
        except OSError as e:
            raise StoreIOError(f"cannot create temporary file: {e}", self._path) from e

        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            # Atomic rename
            Path(temp_path).replace(self._path)
        except OSError as e:
            # Clean up temp file on failure
            Path(temp_path).unlink(missing_ok=True)
            raise StoreIOError(f"cannot write store: {e}", self._path) from e
        logger.debug(f"Wrote {len(content)} characters to {self._path}")

    def lock(self, timeout: float | None = None) -> StoreLock:
        """Return the lock guarding this store file.

        Args:
            timeout: Maximum wait in seconds (None for the store default).
        """
        return StoreLock(
            self._path,
            timeout=self._lock_timeout if timeout is None else timeout,
            poll_interval=self._lock_poll_interval,
        )
