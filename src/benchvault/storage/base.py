"""Base protocol for benchmark store backends.

This module defines the StorageProtocol that all storage backends must implement.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from benchvault.core.types import Store
    from benchvault.storage.codec import LoadResult
    from benchvault.storage.lock import StoreLock


@runtime_checkable
class StorageProtocol(Protocol):
    """Protocol for benchmark store backends.

    Example:
        >>> class MyStorage:
        ...     location = "memory://"
        ...     def load(self) -> LoadResult | None: ...
        ...     # ... implement other methods
        >>> isinstance(MyStorage(), StorageProtocol)
        True
    """

    @property
    def location(self) -> str:
        """Human-readable location of the store, used in messages."""
        ...

    def load(self) -> LoadResult | None:
        """Load the current store.

        Returns:
            The decoded store, or None if no store exists yet.

        Raises:
            DecodeError: If the document is malformed as a whole.
            StoreIOError: If the store cannot be read.
        """
        ...

    def save(self, store: Store) -> None:
        """Persist the store atomically.

        Args:
            store: The store to write.

        Raises:
            StoreIOError: If the store cannot be written.
        """
        ...

    def lock(self, timeout: float | None = None) -> StoreLock:
        """Return the lock guarding this store (not yet acquired).

        Args:
            timeout: Maximum wait in seconds (None for the backend default).
        """
        ...
