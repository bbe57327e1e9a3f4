"""Null key-value storage.

Persists nothing: every read misses. Selected with
PORTS_CACHE_BACKEND=none to run without a ports cache.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class NullStorage:
    """No-op KeyValueStoragePort implementation."""

    name: str = "null"

    async def get_item(self, key: str) -> Optional[str]:
        return None

    async def set_item(self, key: str, value: str) -> None:
        pass

    async def remove_item(self, key: str) -> None:
        pass
