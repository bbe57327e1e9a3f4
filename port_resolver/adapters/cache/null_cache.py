"""Null lookup cache.

Always misses. The container installs it when the lookup cache size is
configured as 0, and tests use it to make every search reach the
(mocked) provider.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class NullLookupCache(Generic[T]):
    """No-op lookup cache - always misses."""

    name: str = "null"

    def get(self, key: str) -> Optional[T]:
        return None

    def set(self, key: str, value: T) -> None:
        pass

    def clear(self) -> int:
        return 0

    def size(self) -> int:
        return 0
