"""In-process LRU lookup cache with optional TTL.

Used by the geocoder adapter to remember online search results for the
current session, so that repeated keystrokes or map refreshes do not hit
the provider again. Entries are evicted least-recently-used first once
max_size is reached.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Optional, Tuple, TypeVar

T = TypeVar("T")


@dataclass
class LookupCache(Generic[T]):
    """LRU lookup cache with optional TTL.

    Implements LookupCachePort.

    Attributes:
        ttl_seconds: Lifetime of an entry (None = no expiry)
        max_size: Maximum number of entries (None = unlimited)
        name: Cache name for logging

    Example:
        cache = LookupCache[list](name="geocode", ttl_seconds=3600, max_size=256)
        cache.set("hilo", results)
    """

    ttl_seconds: Optional[float] = None
    max_size: Optional[int] = None
    name: str = "lookup"

    _store: OrderedDict[str, Tuple[Any, float]] = field(
        default_factory=OrderedDict, repr=False
    )
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    _hits: int = field(default=0, repr=False)
    _misses: int = field(default=0, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(f"cache.{self.name}")

    def get(self, key: str) -> Optional[T]:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self._misses += 1
                return None

            value, expiry = entry
            if time.monotonic() > expiry:
                del self._store[key]
                self._logger.debug("Lookup entry expired", extra={"key": key})
                self._misses += 1
                return None

            self._store.move_to_end(key)
            self._hits += 1
            return value

    def set(self, key: str, value: T) -> None:
        with self._lock:
            if key in self._store:
                self._store.move_to_end(key)
            elif self.max_size is not None and len(self._store) >= self.max_size:
                evicted, _ = self._store.popitem(last=False)
                self._logger.debug(
                    "Lookup entry evicted",
                    extra={"key": evicted, "reason": "max_size"},
                )

            if self.ttl_seconds is not None:
                expiry = time.monotonic() + self.ttl_seconds
            else:
                expiry = float("inf")
            self._store[key] = (value, expiry)

    def clear(self) -> int:
        with self._lock:
            count = len(self._store)
            self._store.clear()
            self._hits = 0
            self._misses = 0
            self._logger.info("Lookup cache cleared", extra={"entries_cleared": count})
            return count

    def size(self) -> int:
        with self._lock:
            return len(self._store)

    def stats(self) -> Dict[str, Any]:
        """Return hit/miss counts and size."""
        with self._lock:
            total = self._hits + self._misses
            hit_rate = (self._hits / total * 100) if total > 0 else 0.0
            return {
                "size": len(self._store),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate_percent": round(hit_rate, 1),
            }
