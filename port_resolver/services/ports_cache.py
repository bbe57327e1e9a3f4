"""Ports cache service - Durable, bounded LRU + TTL store of resolved ports.

The cache is one JSON array stored under a single key of the injected
key-value storage. Entries are keyed logically by normalized name.

Lifecycle of an entry:

    absent -> cached (save / upsert)
           -> refreshed on upsert or touch
           -> evicted by the LRU cap (save / upsert)
           -> expired by TTL (load)
           -> removed (remove_by_name / clear)
           -> absent

Eviction happens at write time and TTL filtering at read time; there is
no background task. Nothing raised by the storage crosses this service:
reads degrade to an empty cache and writes become no-ops, both logged.
Concurrent callers are not serialized, the last write wins.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Iterable, List, Mapping

from ..config import CacheConfig, get_config, ports_cache_config
from ..domain.models import PortEntry, PortSource
from ..interfaces.storage import KeyValueStoragePort
from ..matching.normalizer import normalize


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass
class PortsCacheService:
    """Bounded persistent cache of resolved ports.

    Constructed once per process by the container with the storage
    handle to use; tests inject an in-memory store and a fake clock.

    Attributes:
        storage: Key-value storage holding the serialized cache
        config: Capacity, lifetime and storage key
        clock: Returns the current time in epoch milliseconds
    """

    storage: KeyValueStoragePort
    config: CacheConfig = field(default_factory=lambda: get_config().cache)
    clock: Callable[[], int] = now_ms

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    @property
    def limits(self) -> Mapping[str, Any]:
        """Read-only PORTS_CACHE_CONFIG: MAX_ENTRIES, TTL_MS, CACHE_KEY."""
        return ports_cache_config(self.config)

    async def load(self) -> List[PortEntry]:
        """Read the cache, dropping expired entries.

        Entries without saved_at never expire. Every returned entry has
        both saved_at and last_accessed populated.

        Returns:
            Live entries in stored order; [] on missing or corrupt data.
        """
        try:
            raw = await self.storage.get_item(self.config.cache_key)
        except Exception as e:
            self._logger.warning(
                "Ports cache read failed",
                extra={"key": self.config.cache_key, "error": str(e)},
            )
            return []
        if not raw:
            return []

        try:
            items = json.loads(raw)
        except ValueError as e:
            self._logger.warning(
                "Ports cache data corrupt, ignoring",
                extra={"key": self.config.cache_key, "error": str(e)},
            )
            return []
        if not isinstance(items, list):
            self._logger.warning(
                "Ports cache data is not a list, ignoring",
                extra={"key": self.config.cache_key},
            )
            return []

        now = self.clock()
        entries: List[PortEntry] = []
        expired = 0
        for item in items:
            try:
                entry = PortEntry.from_dict(item)
            except (KeyError, TypeError, ValueError) as e:
                self._logger.debug("Skipping malformed cache entry", extra={"error": str(e)})
                continue

            if entry.saved_at is not None and now - entry.saved_at > self.config.ttl_ms:
                expired += 1
                continue

            saved_at = entry.saved_at or now
            entries.append(entry.stamped(saved_at, entry.last_accessed or saved_at))

        if expired:
            self._logger.debug("Expired cache entries dropped", extra={"expired": expired})
        return entries

    async def save(self, entries: Iterable[PortEntry]) -> None:
        """Persist entries, stamping bookkeeping and applying the LRU cap.

        Args:
            entries: The full cache contents to store.
        """
        try:
            now = self.clock()
            stamped = [
                e.stamped(e.saved_at or now, e.last_accessed or e.saved_at or now)
                for e in (entries or [])
            ]
            await self._persist(self._evict(stamped))
        except Exception as e:
            self._logger.warning(
                "Ports cache save failed",
                extra={"key": self.config.cache_key, "error": str(e)},
            )

    async def clear(self) -> None:
        """Delete the whole persisted cache."""
        try:
            await self.storage.remove_item(self.config.cache_key)
            self._logger.info("Ports cache cleared", extra={"key": self.config.cache_key})
        except Exception as e:
            self._logger.warning(
                "Ports cache clear failed",
                extra={"key": self.config.cache_key, "error": str(e)},
            )

    async def upsert(self, entry: PortEntry) -> None:
        """Insert or replace the entry with the same normalized name.

        The stored entry is tagged source='cache' and stamped with the
        current time for both saved_at and last_accessed.

        Args:
            entry: The resolved port to cache.
        """
        try:
            entries = await self.load()
            now = self.clock()
            stored = replace(
                entry,
                source=PortSource.CACHE,
                saved_at=now,
                last_accessed=now,
                original_query=entry.original_query or None,
            )

            key = normalize(entry.name)
            index = next(
                (i for i, e in enumerate(entries) if normalize(e.name) == key), None
            )
            if index is None:
                entries.append(stored)
            else:
                entries[index] = stored

            await self._persist(self._evict(entries))
            self._logger.debug(
                "Port cached",
                extra={"port": entry.name, "replaced": index is not None},
            )
        except Exception as e:
            self._logger.warning(
                "Ports cache upsert failed",
                extra={"port": entry.name, "error": str(e)},
            )

    async def remove_by_name(self, name: str) -> bool:
        """Remove every entry whose normalized name matches.

        Args:
            name: Port name (case and diacritics are ignored).

        Returns:
            True if anything was removed and persisted, else False.
        """
        try:
            key = normalize(name)
            entries = await self.load()
            kept = [e for e in entries if normalize(e.name) != key]
            if len(kept) == len(entries):
                return False
            await self._persist(kept)
            self._logger.debug(
                "Cached port removed",
                extra={"port": name, "removed": len(entries) - len(kept)},
            )
            return True
        except Exception as e:
            self._logger.warning(
                "Ports cache remove failed",
                extra={"port": name, "error": str(e)},
            )
            return False

    async def touch(self, name: str) -> bool:
        """Mark a cached entry as just used, for LRU ordering.

        Args:
            name: Port name (case and diacritics are ignored).

        Returns:
            True if a matching entry was refreshed.
        """
        try:
            key = normalize(name)
            entries = await self.load()
            now = self.clock()
            touched = False
            for i, e in enumerate(entries):
                if normalize(e.name) == key:
                    entries[i] = replace(e, last_accessed=now)
                    touched = True
            if touched:
                await self._persist(entries)
            return touched
        except Exception as e:
            self._logger.warning(
                "Ports cache touch failed",
                extra={"port": name, "error": str(e)},
            )
            return False

    def _evict(self, entries: List[PortEntry]) -> List[PortEntry]:
        """Drop least-recently-accessed entries beyond max_entries."""
        overflow = len(entries) - self.config.max_entries
        if overflow <= 0:
            return entries
        ordered = sorted(entries, key=lambda e: e.last_accessed or 0)
        self._logger.debug(
            "Evicting least recently used ports",
            extra={"evicted": [e.name for e in ordered[:overflow]]},
        )
        return ordered[overflow:]

    async def _persist(self, entries: List[PortEntry]) -> None:
        payload = json.dumps([e.to_dict() for e in entries], ensure_ascii=False)
        await self.storage.set_item(self.config.cache_key, payload)
