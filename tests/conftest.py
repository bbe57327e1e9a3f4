"""Shared fixtures: fake clock, fake geocoder, failing storage, small datasets."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pytest

from port_resolver.adapters.storage import InMemoryStorage
from port_resolver.config import CacheConfig, ResolverConfig, reset_config
from port_resolver.container import reset_container
from port_resolver.domain.errors import GeocodingError, StorageError
from port_resolver.domain.models import PortEntry, PortSource
from port_resolver.matching.dataset_index import PortDatasetIndex
from port_resolver.services import PortResolverService, PortsCacheService

T0 = 1_700_000_000_000


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: int = T0):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@dataclass
class FakeGeocoder:
    """PortGeocoderPort double returning canned results per query."""

    results: Dict[str, List[PortEntry]] = field(default_factory=dict)
    error: Optional[Exception] = None
    calls: List[str] = field(default_factory=list)

    async def search_ports_online(self, query: str, limit: int = 5) -> List[PortEntry]:
        self.calls.append(query)
        if self.error is not None:
            raise self.error
        return list(self.results.get(query, []))[:limit]


class FailingStorage:
    """KeyValueStoragePort whose every operation fails."""

    async def get_item(self, key):
        raise StorageError("disk unavailable", key=key, operation="get")

    async def set_item(self, key, value):
        raise StorageError("disk unavailable", key=key, operation="set")

    async def remove_item(self, key):
        raise StorageError("disk unavailable", key=key, operation="remove")


def make_cache_port(name: str, **overrides) -> PortEntry:
    """Build a cache-sourced entry with plausible coordinates."""
    values = dict(name=name, lat=10.0, lng=20.0, source=PortSource.CACHE)
    values.update(overrides)
    return PortEntry(**values)


CURATED = [
    PortEntry(name="Hilo", lat=19.7297, lng=-155.065, country="United States",
              region_code="HI", source=PortSource.CURATED, is_cruise=True),
    PortEntry(name="Kona", lat=19.64, lng=-155.9969, country="United States",
              region_code="HI", aliases=("Kailua-Kona",), source=PortSource.CURATED),
    PortEntry(name="Seattle", lat=47.629, lng=-122.3819, country="United States",
              region_code="WA", aliases=("Port of Seattle", "Pier 91"),
              source=PortSource.CURATED),
    PortEntry(name="Cozumel", lat=20.5083, lng=-86.9458, country="Mexico",
              source=PortSource.CURATED),
    PortEntry(name="Juneau", lat=58.2996, lng=-134.406, country="United States",
              region_code="AK", source=PortSource.CURATED),
]

MASTER = [
    PortEntry(name="Hilo", lat=19.73, lng=-155.06, source=PortSource.MASTER),
    PortEntry(name="Haines", lat=59.2358, lng=-135.445, region_code="AK",
              source=PortSource.MASTER),
    PortEntry(name="Lahaina", lat=20.8783, lng=-156.6825, region_code="HI",
              source=PortSource.MASTER),
]


@pytest.fixture(autouse=True)
def _isolated_globals(monkeypatch, tmp_path):
    """Keep the process-wide config and container out of users' home dirs."""
    monkeypatch.setenv("PORTS_CACHE_BACKEND", "memory")
    monkeypatch.setenv("PORTS_CACHE_STORAGE_PATH", str(tmp_path / "storage.json"))
    reset_config()
    reset_container()
    yield
    reset_container()
    reset_config()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def cache_config():
    return CacheConfig(backend="memory")


@pytest.fixture
def ports_cache(storage, cache_config, clock):
    return PortsCacheService(storage=storage, config=cache_config, clock=clock)


@pytest.fixture
def dataset_index():
    return PortDatasetIndex.from_entries(CURATED, MASTER)


@pytest.fixture
def geocoder():
    return FakeGeocoder()


@pytest.fixture
def resolver_config():
    return ResolverConfig(batch_delay_seconds=0.0)


@pytest.fixture
def resolver(dataset_index, ports_cache, geocoder, resolver_config):
    return PortResolverService(
        dataset_index=dataset_index,
        ports_cache=ports_cache,
        geocoder=geocoder,
        config=resolver_config,
    )
