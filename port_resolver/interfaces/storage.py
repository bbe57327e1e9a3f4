"""Storage port - Abstraction for the persistent key-value store.

This protocol mirrors the on-device key-value storage the ports cache
persists to. Values are opaque strings; the cache stores one JSON array
under its cache key.
"""

from __future__ import annotations

from typing import Optional, Protocol


class KeyValueStoragePort(Protocol):
    """Port for persistent key-value storage.

    Implementations:
    - adapters/storage/json_file_storage.py (JsonFileStorage) - Production
    - adapters/storage/memory_storage.py (InMemoryStorage) - Testing, ephemeral runs
    - adapters/storage/null_storage.py (NullStorage) - Persistence disabled

    Implementations raise StorageError on I/O failures.
    """

    async def get_item(self, key: str) -> Optional[str]:
        """Read the value stored under a key.

        Args:
            key: The storage key.

        Returns:
            The stored string, or None if the key is absent.
        """
        ...

    async def set_item(self, key: str, value: str) -> None:
        """Store a value under a key, replacing any previous value.

        Args:
            key: The storage key.
            value: The string to store.
        """
        ...

    async def remove_item(self, key: str) -> None:
        """Delete a key. Removing an absent key is not an error.

        Args:
            key: The storage key.
        """
        ...
