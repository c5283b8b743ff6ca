"""Scoped, bounded-wait lock guarding a store file.

Every append holds the lock from loading through persisting. The lock is a
``filelock.FileLock`` on a sibling ``<store>.lock`` file, so it serializes
writers across threads and processes. Readers never take it.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING

from filelock import FileLock, Timeout
from typing_extensions import Self

from benchvault.core.exceptions import ConfigurationError, LockTimeout

if TYPE_CHECKING:
    from types import TracebackType

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_POLL_INTERVAL = 0.05


def lock_path_for(target: Path | str) -> Path:
    """Path of the lock file guarding ``target``."""
    target = Path(target)
    return target.with_name(f"{target.name}.lock")


class StoreLock:
    """Exclusive lock on a store with a bounded wait.

    Example:
        >>> with StoreLock("benchmark-data/data.js", timeout=10):
        ...     ...  # load, merge, save
    """

    def __init__(
        self,
        target: Path | str,
        timeout: float = DEFAULT_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        """Initialize the lock.

        Args:
            target: The store file to guard.
            timeout: Maximum seconds to wait in acquire(). Must be >= 0.
            poll_interval: Seconds between acquisition attempts.

        Raises:
            ConfigurationError: If timeout is negative or poll_interval not positive.
        """
        if timeout < 0:
            raise ConfigurationError(f"lock timeout must be >= 0, got {timeout}")
        if poll_interval <= 0:
            raise ConfigurationError(f"lock poll interval must be > 0, got {poll_interval}")
        self._path = lock_path_for(target)
        self._timeout = timeout
        self._poll_interval = poll_interval
        self._lock = FileLock(str(self._path))
        self._acquired_at: float | None = None

    @property
    def path(self) -> Path:
        """The lock file."""
        return self._path

    @property
    def timeout(self) -> float:
        """Maximum wait in seconds."""
        return self._timeout

    @property
    def locked(self) -> bool:
        """Whether this lock object currently holds the lock."""
        return self._lock.is_locked

    def acquire(self) -> Self:
        """Acquire the lock, waiting at most ``timeout`` seconds.

        Returns:
            self, for use in ``with`` statements.

        Raises:
            LockTimeout: If the lock is still held elsewhere after the timeout.
        """
        self._path.parent.mkdir(parents=True, exist_ok=True)
        started = time.monotonic()
        try:
            self._lock.acquire(timeout=self._timeout, poll_interval=self._poll_interval)
        except Timeout as e:
            logger.warning(f"Timed out after {self._timeout}s waiting for {self._path}")
            raise LockTimeout(self._path, self._timeout) from e
        self._acquired_at = time.monotonic()
        logger.debug(f"Acquired {self._path} after {self._acquired_at - started:.3f}s")
        return self

    def release(self) -> None:
        """Release the lock. Releasing an unheld lock does nothing."""
        if not self._lock.is_locked:
            return
        self._lock.release()
        if self._acquired_at is not None:
            logger.debug(f"Released {self._path} after {time.monotonic() - self._acquired_at:.3f}s")
            self._acquired_at = None

    def __enter__(self) -> Self:
        return self.acquire()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()
