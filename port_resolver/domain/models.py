"""Immutable domain models for the port resolver.

All models are frozen dataclasses with slots. They carry no external
dependencies and convert to and from the persisted JSON shape
(camelCase keys) used by the ports cache.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class PortSource(str, Enum):
    """Where a port entry came from.

    The order of declaration is not the tie-break order; see
    ScoredPort.tier for that.
    """

    CURATED = "curated"
    MASTER = "master"
    CACHE = "cache"
    ONLINE = "online"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> PortSource:
        """Parse a persisted source value, defaulting to UNKNOWN."""
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True, slots=True)
class PortEntry:
    """A resolved geographic port or terminal.

    Attributes:
        name: Display name, never empty
        lat: Latitude in [-90, 90]
        lng: Longitude in [-180, 180]
        country: Country name or code
        region_code: Sub-national region (e.g. 'AK', 'BC')
        aliases: Alternate names used for matching
        source: Where the entry came from
        is_cruise: Whether the port is known to serve cruise ships
        kind: Feature kind reported by the provider (e.g. 'port')
        original_query: Text that produced this entry, for online results
        saved_at: Epoch-ms when the entry was persisted
        last_accessed: Epoch-ms of the last cache write or hit
    """

    name: str
    lat: float
    lng: float
    country: Optional[str] = None
    region_code: Optional[str] = None
    aliases: tuple[str, ...] = field(default_factory=tuple)
    source: PortSource = PortSource.UNKNOWN
    is_cruise: Optional[bool] = None
    kind: Optional[str] = None
    original_query: Optional[str] = None
    saved_at: Optional[int] = None
    last_accessed: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate name and coordinates."""
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("Port name must be a non-empty string")
        if not math.isfinite(self.lat) or not -90 <= self.lat <= 90:
            raise ValueError(f"Latitude must be between -90 and 90, got {self.lat}")
        if not math.isfinite(self.lng) or not -180 <= self.lng <= 180:
            raise ValueError(f"Longitude must be between -180 and 180, got {self.lng}")

    @property
    def label(self) -> str:
        """Return 'Name, Region, Country' with missing parts omitted."""
        parts = [self.name, self.region_code, self.country]
        return ", ".join(p for p in parts if p)

    def with_source(self, source: PortSource) -> PortEntry:
        return replace(self, source=source)

    def stamped(self, saved_at: int, last_accessed: int) -> PortEntry:
        """Return a copy carrying the given cache bookkeeping timestamps."""
        return replace(self, saved_at=saved_at, last_accessed=last_accessed)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the persisted JSON shape.

        Optional fields that are unset are omitted.
        """
        data: Dict[str, Any] = {
            "name": self.name,
            "lat": self.lat,
            "lng": self.lng,
            "source": self.source.value,
        }
        optional = {
            "country": self.country,
            "regionCode": self.region_code,
            "isCruise": self.is_cruise,
            "kind": self.kind,
            "originalQuery": self.original_query,
            "savedAt": self.saved_at,
            "lastAccessed": self.last_accessed,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        if self.aliases:
            data["aliases"] = list(self.aliases)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PortEntry:
        """Build an entry from the persisted JSON shape.

        Unknown keys are ignored.

        Raises:
            ValueError: If required fields are missing or invalid.
            TypeError: If a field has an unusable type.
        """
        if not isinstance(data, Mapping):
            raise TypeError(f"Expected a mapping, got {type(data).__name__}")

        aliases = data.get("aliases") or ()
        if isinstance(aliases, str):
            aliases = (aliases,)

        return cls(
            name=str(data.get("name") or "").strip(),
            lat=float(data["lat"]),
            lng=float(data["lng"]),
            country=_opt_str(data.get("country")),
            region_code=_opt_str(data.get("regionCode")),
            aliases=tuple(str(a) for a in aliases if a),
            source=PortSource.parse(data.get("source", "unknown")),
            is_cruise=_opt_bool(data.get("isCruise")),
            kind=_opt_str(data.get("kind")),
            original_query=_opt_str(data.get("originalQuery")),
            saved_at=_opt_int(data.get("savedAt")),
            last_accessed=_opt_int(data.get("lastAccessed")),
        )


@dataclass(frozen=True, slots=True)
class ScoredPort:
    """A candidate port with its match score.

    Attributes:
        entry: The candidate entry
        score: Similarity in [0, 1]
        tier: Tie-break rank, lower wins (0 = cache, 1 = curated, ...)
    """

    entry: PortEntry
    score: float
    tier: int = 0

    @property
    def sort_key(self) -> tuple[float, int, int]:
        """Ascending sort key: best score, then lowest tier, then shortest name."""
        return (-self.score, self.tier, len(self.entry.name))


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _opt_int(value: Any) -> Optional[int]:
    # 0 is treated as missing, matching how the bookkeeping fields are backfilled
    if value in (None, "", 0):
        return None
    return int(value)


_TRUE_STRINGS = frozenset({"true", "1", "yes"})
_FALSE_STRINGS = frozenset({"false", "0", "no"})


def _opt_bool(value: Any) -> Optional[bool]:
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, int):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    return None
