"""Nominatim online port search adapter.

Wraps geopy's Nominatim client with:
- Rate limiting (geopy RateLimiter)
- A session lookup cache via LookupCachePort
- Filtering of airports, airfields and heliports
- Typed GeocodingError on provider failures

The geopy client is blocking, so lookups run in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, List, Optional

from geopy.adapters import RequestsAdapter
from geopy.exc import (
    GeocoderRateLimited,
    GeocoderServiceError,
    GeocoderTimedOut,
    GeocoderUnavailable,
)
from geopy.extra.rate_limiter import RateLimiter
from geopy.geocoders import Nominatim

from ...config import GeocodingConfig, get_config
from ...domain.errors import GeocodingError
from ...domain.models import PortEntry, PortSource
from ...interfaces.cache import LookupCachePort
from ...matching.normalizer import normalize
from ..cache.memory_cache import LookupCache

# Results that are never cruise or ferry ports
EXCLUDED_LABELS = re.compile(r"\b(airport|air\s*field|airfield|heliport)\b", re.IGNORECASE)
EXCLUDED_TYPES = {"aerodrome", "helipad", "airport"}

# Address keys that name a settlement, most specific first
SETTLEMENT_KEYS = ("city", "town", "village", "municipality", "hamlet")

MAX_LABEL_LENGTH = 120


@dataclass
class NominatimPortGeocoder:
    """Nominatim port search with caching and rate limiting.

    Implements PortGeocoderPort using OpenStreetMap's Nominatim service.

    Attributes:
        config: Geocoding configuration
        cache: Session cache of results per normalized query and limit
    """

    config: GeocodingConfig = field(default_factory=lambda: get_config().geocoding)
    cache: LookupCachePort[List[PortEntry]] = field(
        default_factory=lambda: LookupCache(name="geocode")
    )

    _geolocator: Optional[Nominatim] = field(default=None, repr=False)
    _geocode_fn: Optional[Any] = field(default=None, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def _get_geocoder(self) -> Any:
        """Get or initialize the rate-limited geocode function."""
        if self._geocode_fn is not None:
            return self._geocode_fn

        self._logger.debug(
            "Initializing Nominatim geocoder",
            extra={
                "user_agent": self.config.user_agent,
                "timeout": self.config.timeout_seconds,
            },
        )

        # Pooled requests session shared by every lookup
        self._geolocator = Nominatim(
            user_agent=self.config.user_agent,
            timeout=self.config.timeout_seconds,
            adapter_factory=RequestsAdapter,
        )

        # Errors must surface so the resolver can tell failure from "no result"
        self._geocode_fn = RateLimiter(
            self._geolocator.geocode,
            min_delay_seconds=self.config.rate_limit_delay,
            max_retries=self.config.max_retries,
            error_wait_seconds=self.config.error_wait_seconds,
            swallow_exceptions=False,
        )

        return self._geocode_fn

    async def search_ports_online(self, query: str, limit: int = 5) -> List[PortEntry]:
        """Search Nominatim for ports matching a query.

        Args:
            query: The port label to look up.
            limit: Maximum number of candidates.

        Returns:
            Candidate entries tagged 'online', in provider order.

        Raises:
            GeocodingError: If the provider timed out, was unavailable,
                rate-limited the request or returned an error.
        """
        if not query or not query.strip() or limit <= 0:
            return []

        cache_key = f"{normalize(query)}:{limit}:{self.config.language}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            self._logger.debug("Online search cache hit", extra={"query": query})
            return list(cached)

        try:
            geocode_fn = self._get_geocoder()
            locations = await asyncio.to_thread(
                geocode_fn,
                query.strip(),
                exactly_one=False,
                limit=limit,
                language=self.config.language,
                addressdetails=True,
            )
        except GeocoderRateLimited as e:
            raise GeocodingError(
                "Geocoding provider rate-limited the request",
                query=query,
                is_rate_limited=True,
                cause=e,
            )
        except (GeocoderTimedOut, GeocoderUnavailable, GeocoderServiceError) as e:
            raise GeocodingError(
                "Geocoding provider error",
                query=query,
                cause=e,
            )

        results = [
            entry
            for entry in (self._to_entry(loc, query) for loc in (locations or []))
            if entry is not None
        ][:limit]

        self._logger.debug(
            "Online search finished",
            extra={"query": query, "results": len(results)},
        )
        self.cache.set(cache_key, results)
        return list(results)

    def _to_entry(self, location: Any, query: str) -> Optional[PortEntry]:
        """Convert a geopy Location to a PortEntry, or None if unusable."""
        raw = getattr(location, "raw", None) or {}
        address = raw.get("address") or {}

        label = self._label(raw, address)
        if not label:
            return None
        if EXCLUDED_LABELS.search(label) or EXCLUDED_LABELS.search(
            str(raw.get("display_name", ""))
        ):
            return None
        if str(raw.get("type", "")).lower() in EXCLUDED_TYPES:
            return None

        try:
            lat = float(location.latitude)
            lng = float(location.longitude)
        except (TypeError, ValueError):
            return None
        if not (math.isfinite(lat) and math.isfinite(lng)):
            return None

        try:
            return PortEntry(
                name=label,
                lat=lat,
                lng=lng,
                country=address.get("country") or None,
                region_code=self._region_code(address),
                source=PortSource.ONLINE,
                kind=raw.get("type") or None,
                original_query=query,
            )
        except ValueError:
            self._logger.debug(
                "Discarding invalid online result",
                extra={"query": query, "label": label},
            )
            return None

    @staticmethod
    def _label(raw: dict, address: dict) -> str:
        """Pick a short display name for a result."""
        name = raw.get("name")
        if not name:
            name = next((address[k] for k in SETTLEMENT_KEYS if address.get(k)), None)
        if not name:
            display = str(raw.get("display_name") or "")
            name = display.split(",")[0]
        return str(name or "").strip()[:MAX_LABEL_LENGTH]

    @staticmethod
    def _region_code(address: dict) -> Optional[str]:
        """Extract the subdivision code, e.g. 'US-HI' -> 'HI'."""
        iso = address.get("ISO3166-2-lvl4") or address.get("ISO3166-2-lvl3")
        if not iso or "-" not in str(iso):
            return None
        return str(iso).split("-", 1)[1] or None
