"""Port resolver service - Search orchestrator.

Composes the normalizer, scorer, dataset index, ports cache and the
optional online geocoder into one best-match pipeline. Local search is
synchronous; anything that may touch storage or the network is async.

None of the public methods raise: failures degrade to local-only or
empty results and are logged.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from ..config import ResolverConfig, get_config
from ..domain.errors import GeocodingError
from ..domain.models import PortEntry, PortSource, ScoredPort
from ..interfaces.geocoding import PortGeocoderPort
from ..matching.dataset_index import PortDatasetIndex
from ..matching.normalizer import normalize, sanitize_port_query
from ..matching.scorer import best_score
from .ports_cache import PortsCacheService
from .resolution_stages import (
    CoordinateStage,
    LocalConfidentStage,
    LocalFallbackStage,
    OnlineLookup,
    OnlineStage,
    ResolutionStage,
    SearchContext,
    coordinate_entry,
)

CACHE_TIER = 0


@dataclass
class PortResolverService:
    """Resolve free-text port labels to port entries.

    Attributes:
        dataset_index: Curated + master reference data
        ports_cache: Persistent cache of resolved ports
        geocoder: Optional online provider (None = local only)
        config: Thresholds, limits and politeness settings
    """

    dataset_index: PortDatasetIndex
    ports_cache: PortsCacheService
    geocoder: Optional[PortGeocoderPort] = None
    config: ResolverConfig = field(default_factory=lambda: get_config().resolver)

    _online: Optional[OnlineLookup] = field(init=False, default=None, repr=False)
    _stages: tuple[ResolutionStage, ...] = field(init=False, default=(), repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        if self.geocoder is not None:
            self._online = OnlineLookup(self.geocoder, self.config)
        self._stages = (
            CoordinateStage(),
            LocalConfidentStage(
                search=self.search_ports_scored,
                ports_cache=self.ports_cache,
                high_confidence=self.config.high_confidence,
            ),
            OnlineStage(lookup=self._online, ports_cache=self.ports_cache),
            LocalFallbackStage(),
        )

    @property
    def stages(self) -> tuple[ResolutionStage, ...]:
        return self._stages

    def search_ports_scored(
        self,
        query: str,
        cache_snapshot: Sequence[PortEntry] = (),
        limit: Optional[int] = None,
    ) -> List[ScoredPort]:
        """Rank cached and dataset entries against a query.

        Cached entries are also matched on the query that originally
        produced them. Entries sharing a normalized name are collapsed
        to the best-ranked one.

        Args:
            query: Free-text port label.
            cache_snapshot: Cached entries to include.
            limit: Maximum number of results.

        Returns:
            Best first; equal scores prefer cache, then curated, then
            master, then the shorter name.
        """
        limit = self.config.default_limit if limit is None else limit
        if limit <= 0 or not normalize(query):
            return []

        candidates: List[ScoredPort] = []
        for entry in cache_snapshot or ():
            names = (entry.name, *entry.aliases, entry.original_query)
            score = best_score(query, names)
            if score > 0:
                candidates.append(ScoredPort(entry=entry, score=score, tier=CACHE_TIER))
        candidates.extend(
            self.dataset_index.search_scored(query, limit + len(candidates))
        )

        candidates.sort(key=lambda s: s.sort_key)
        results: List[ScoredPort] = []
        seen: set[str] = set()
        for scored in candidates:
            key = normalize(scored.entry.name)
            if key in seen:
                continue
            seen.add(key)
            results.append(scored)
            if len(results) >= limit:
                break
        return results

    def search_ports(
        self,
        query: str,
        cache_snapshot: Sequence[PortEntry] = (),
        limit: Optional[int] = None,
    ) -> List[PortEntry]:
        """Local-only search over the cache snapshot and the datasets."""
        return [s.entry for s in self.search_ports_scored(query, cache_snapshot, limit)]

    def resolve_port_by_name(
        self,
        name: str,
        cache_snapshot: Sequence[PortEntry] = (),
    ) -> Optional[PortEntry]:
        """Resolve one label locally, or None if no match is good enough.

        Coordinates typed in the label win over name matching.

        Args:
            name: Free-text port label (e.g. from an itinerary).
            cache_snapshot: Cached entries to include.

        Returns:
            The best entry scoring at least resolve_min_score, or None.
        """
        direct = coordinate_entry(name or "")
        if direct is not None:
            return direct

        best = self.search_ports_scored(name, cache_snapshot, 1)
        if best and best[0].score >= self.config.resolve_min_score:
            return best[0].entry
        return None

    async def unified_port_search(
        self,
        query: str,
        cache_snapshot: Optional[Sequence[PortEntry]] = None,
        limit: Optional[int] = None,
        allow_online: Optional[bool] = None,
    ) -> List[PortEntry]:
        """Search locally, then online if needed, caching accepted results.

        Args:
            query: Free-text port label.
            cache_snapshot: Cached entries; loaded from the cache if None.
            limit: Maximum number of results.
            allow_online: Override the configured online policy.

        Returns:
            Best first; possibly empty. Never raises.
        """
        raw = (query or "").strip()
        if not raw:
            return []

        limit = self.config.default_limit if limit is None else limit
        if cache_snapshot is None:
            cache_snapshot = await self.ports_cache.load()

        ctx = SearchContext(
            raw_query=raw,
            query=sanitize_port_query(raw) or raw,
            cache_snapshot=list(cache_snapshot),
            limit=limit,
            allow_online=self.config.allow_online if allow_online is None else allow_online,
        )

        for stage in self._stages:
            try:
                result = await stage.run(ctx)
            except Exception:
                self._logger.exception(
                    "Resolution stage failed", extra={"stage": stage.name, "query": raw}
                )
                continue
            if result is not None:
                self._logger.debug(
                    "Port search resolved",
                    extra={"stage": stage.name, "query": raw, "results": len(result)},
                )
                return result[:limit]
        return []

    async def resolve_unresolved(
        self,
        names: Sequence[str],
        cache_snapshot: Optional[Sequence[PortEntry]] = None,
    ) -> Dict[str, Optional[PortEntry]]:
        """Resolve a batch of labels, looking up misses online one by one.

        Labels are deduplicated by normalized form. Network lookups are
        spaced by batch_delay_seconds to stay under provider limits.

        Args:
            names: Port labels, e.g. all ports of the visible trips.
            cache_snapshot: Cached entries; loaded from the cache if None.

        Returns:
            Mapping of each distinct label to its entry, or None.
        """
        snapshot = list(
            await self.ports_cache.load() if cache_snapshot is None else cache_snapshot
        )
        results: Dict[str, Optional[PortEntry]] = {}
        seen: set[str] = set()
        looked_up_online = False

        for name in names:
            key = normalize(name)
            if not key or key in seen:
                continue
            seen.add(key)

            local = self.resolve_port_by_name(name, snapshot)
            if local is not None or self._online is None or not self.config.allow_online:
                results[name] = local
                continue

            if looked_up_online:
                await asyncio.sleep(self.config.batch_delay_seconds)
            looked_up_online = True

            query = sanitize_port_query(name) or name.strip()
            accepted = await self._online.find(name.strip(), query)
            if accepted is not None:
                await self.ports_cache.upsert(accepted)
                snapshot.append(accepted.with_source(PortSource.CACHE))
            results[name] = accepted

        return results

    async def search_online(self, query: str, limit: Optional[int] = None) -> List[PortEntry]:
        """Raw provider search, without confidence gating or caching.

        Returns:
            Provider candidates, or [] when offline or on failure.
        """
        if self.geocoder is None or not (query or "").strip():
            return []
        try:
            return await self.geocoder.search_ports_online(
                query.strip(), limit or self.config.online_limit
            )
        except GeocodingError as e:
            self._logger.warning(
                "Online port search failed",
                extra={"query": query, "error": str(e)},
            )
        except Exception as e:
            self._logger.warning(
                "Online port search raised unexpectedly",
                extra={"query": query, "error": str(e)},
            )
        return []
