"""Storage backends for benchmark stores.

This module provides the store codec, the storage protocol, the JSON file
backend and the lock guarding it.

Example:
    >>> from benchvault.storage import JSONFileStore
    >>> store = JSONFileStore("benchmark-data/data.js")
    >>> result = store.load()
"""

from __future__ import annotations

from benchvault.storage.base import StorageProtocol
from benchvault.storage.codec import LoadResult, dumps, loads
from benchvault.storage.json_store import JSONFileStore
from benchvault.storage.lock import StoreLock

__all__ = [
    "JSONFileStore",
    "LoadResult",
    "StorageProtocol",
    "StoreLock",
    "dumps",
    "loads",
]
