"""Lookup cache port - Session cache for online search results.

The persistent ports cache holds accepted, resolved ports. This port is
the short-lived companion used by the geocoder adapter to avoid asking
the provider the same question twice during a session.
"""

from __future__ import annotations

from typing import Optional, Protocol, TypeVar

T = TypeVar("T")


class LookupCachePort(Protocol[T]):
    """Port for in-process lookup caching.

    Implementation: adapters/cache/memory_cache.py (LookupCache)
    """

    def get(self, key: str) -> Optional[T]:
        """Get a cached value.

        Args:
            key: The lookup key (typically a normalized query).

        Returns:
            The cached value, or None if absent or expired.
        """
        ...

    def set(self, key: str, value: T) -> None:
        """Cache a value.

        Args:
            key: The lookup key.
            value: The value to cache.
        """
        ...

    def clear(self) -> int:
        """Clear all entries.

        Returns:
            Number of entries that were cleared.
        """
        ...

    def size(self) -> int:
        """Return the number of live entries."""
        ...
