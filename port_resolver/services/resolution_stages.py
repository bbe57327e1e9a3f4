"""Ordered resolution stages for unified port search.

Each stage inspects a shared SearchContext and either resolves the
search (returns a list of entries, possibly empty) or passes to the next
stage (returns None). The resolver runs them in order and the first
stage that resolves wins:

1. CoordinateStage     - "lat, lng" typed directly
2. LocalConfidentStage - cache + datasets, high-confidence only
3. OnlineStage         - geocoder with query-suffix retries, confidence-gated
4. LocalFallbackStage  - whatever local results exist
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Callable, List, Optional, Protocol, Sequence, Tuple

from ..config import ResolverConfig
from ..domain.errors import GeocodingError
from ..domain.models import PortEntry, PortSource, ScoredPort
from ..interfaces.geocoding import PortGeocoderPort
from ..matching.normalizer import normalize, sanitize_port_query
from ..matching.scorer import score_name

if TYPE_CHECKING:
    from .ports_cache import PortsCacheService

# Decimal "lat, lng" anywhere in the text; integers are too ambiguous
COORDINATE_PATTERN = re.compile(
    r"(?<![\d.])(-?\d{1,2}\.\d+)\s*,\s*(-?\d{1,3}\.\d+)(?![\d.])"
)

LocalSearch = Callable[[str, Sequence[PortEntry], int], List[ScoredPort]]


def parse_coordinates(text: str) -> Optional[Tuple[float, float, str]]:
    """Find a valid decimal coordinate pair in free text.

    Args:
        text: Raw query text.

    Returns:
        (lat, lng, remaining_text), or None when no pair is present or
        the values are out of range.
    """
    match = COORDINATE_PATTERN.search(text or "")
    if match is None:
        return None
    lat, lng = float(match.group(1)), float(match.group(2))
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        return None
    rest = (text[: match.start()] + " " + text[match.end() :]).strip(" ,;:-")
    return lat, lng, rest.strip()


def coordinate_entry(text: str) -> Optional[PortEntry]:
    """Build a synthetic entry from coordinates typed in the text."""
    parsed = parse_coordinates(text)
    if parsed is None:
        return None
    lat, lng, rest = parsed
    name = sanitize_port_query(rest) or f"{lat:.5f}, {lng:.5f}"
    return PortEntry(
        name=name,
        lat=lat,
        lng=lng,
        source=PortSource.UNKNOWN,
        original_query=text.strip(),
    )


@dataclass
class SearchContext:
    """State shared by the stages of one search.

    Attributes:
        raw_query: Text as supplied by the caller (stripped)
        query: Sanitized query, or the raw text if sanitizing empties it
        cache_snapshot: Cached entries to search alongside the datasets
        limit: Maximum number of results
        allow_online: Whether the online stage may run
        local: Local results, filled by LocalConfidentStage
    """

    raw_query: str
    query: str
    cache_snapshot: Sequence[PortEntry]
    limit: int
    allow_online: bool = True
    local: List[ScoredPort] = field(default_factory=list)


class ResolutionStage(Protocol):
    """A step of the unified search pipeline."""

    name: str

    async def run(self, ctx: SearchContext) -> Optional[List[PortEntry]]:
        """Return results to resolve the search, or None to pass."""
        ...


@dataclass
class OnlineLookup:
    """Confidence-gated online lookup with query-suffix retries.

    Attributes:
        geocoder: Online provider
        config: Thresholds, limits and suffixes
    """

    geocoder: PortGeocoderPort
    config: ResolverConfig

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def variants(self, query: str, fallback: Optional[str] = None) -> List[str]:
        """Lookup texts in order: the query with its suffixes, then the fallback's."""
        bases = [query]
        if fallback and normalize(fallback) != normalize(query):
            bases.append(fallback)
        return [
            text
            for base in bases
            for text in [base] + [f"{base} {suffix}" for suffix in self.config.query_suffixes]
        ]

    async def find(self, raw_query: str, query: Optional[str] = None) -> Optional[PortEntry]:
        """Look a port up online and accept it only if it matches well.

        The text as typed is tried first, with its suffixes. The
        sanitized label is only tried once every raw variant is empty.

        Args:
            raw_query: Text the caller supplied, recorded on the result.
            query: Sanitized port label, used as a fallback lookup.

        Returns:
            The accepted candidate tagged 'online', or None.
        """
        query = query or raw_query
        candidates: List[PortEntry] = []
        try:
            for variant in self.variants(raw_query, query):
                candidates = await self.geocoder.search_ports_online(
                    variant, self.config.online_limit
                )
                if candidates:
                    break
        except GeocodingError as e:
            self._logger.warning(
                "Online port lookup failed",
                extra={
                    "query": raw_query,
                    "rate_limited": e.is_rate_limited,
                    "error": str(e),
                },
            )
            return None
        except Exception as e:
            self._logger.warning(
                "Online port lookup raised unexpectedly",
                extra={"query": raw_query, "error": str(e)},
            )
            return None

        if not candidates:
            self._logger.debug("No online result", extra={"query": raw_query})
            return None

        top = candidates[0]
        confidence = max(score_name(query, top.name), score_name(raw_query, top.name))
        if confidence < self.config.min_online_confidence:
            self._logger.info(
                "Online match rejected, low confidence",
                extra={
                    "query": raw_query,
                    "candidate": top.name,
                    "confidence": round(confidence, 3),
                    "threshold": self.config.min_online_confidence,
                },
            )
            return None

        self._logger.info(
            "Online match accepted",
            extra={
                "query": raw_query,
                "candidate": top.name,
                "confidence": round(confidence, 3),
            },
        )
        return replace(top, source=PortSource.ONLINE, original_query=raw_query)


@dataclass
class CoordinateStage:
    """Direct coordinates win over any name lookup."""

    name: str = "coordinates"

    async def run(self, ctx: SearchContext) -> Optional[List[PortEntry]]:
        entry = coordinate_entry(ctx.raw_query)
        return [entry] if entry is not None else None


@dataclass
class LocalConfidentStage:
    """Serve from cache and datasets when the best match is strong."""

    search: LocalSearch
    ports_cache: PortsCacheService
    high_confidence: float
    name: str = "local"

    async def run(self, ctx: SearchContext) -> Optional[List[PortEntry]]:
        ctx.local = self.search(ctx.raw_query, ctx.cache_snapshot, ctx.limit)
        if not ctx.local or ctx.local[0].score <= self.high_confidence:
            return None

        top = ctx.local[0]
        if top.tier == 0:
            await self.ports_cache.touch(top.entry.name)
        return [s.entry for s in ctx.local]


@dataclass
class OnlineStage:
    """Ask the geocoder and persist an accepted result."""

    lookup: Optional[OnlineLookup]
    ports_cache: PortsCacheService
    name: str = "online"

    async def run(self, ctx: SearchContext) -> Optional[List[PortEntry]]:
        if not ctx.allow_online or self.lookup is None:
            return None

        accepted = await self.lookup.find(ctx.raw_query, ctx.query)
        if accepted is None:
            return None

        await self.ports_cache.upsert(accepted)
        key = normalize(accepted.name)
        rest = [s.entry for s in ctx.local if normalize(s.entry.name) != key]
        return [accepted] + rest


@dataclass
class LocalFallbackStage:
    """Return local results, possibly empty. Always resolves."""

    name: str = "fallback"

    async def run(self, ctx: SearchContext) -> Optional[List[PortEntry]]:
        return [s.entry for s in ctx.local]
