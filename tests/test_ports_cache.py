"""Tests for the bounded LRU + TTL ports cache."""

import asyncio
import json

from conftest import T0, FailingStorage, FakeClock, make_cache_port

from port_resolver.adapters.storage import InMemoryStorage
from port_resolver.config import DAY_MS, CacheConfig
from port_resolver.domain.models import PortEntry, PortSource
from port_resolver.services import PortsCacheService

KEY = "ports_cache_v1"


def stored_items(storage):
    raw = asyncio.run(storage.get_item(KEY))
    return json.loads(raw) if raw else []


def test_default_limits():
    cache = PortsCacheService(storage=InMemoryStorage(), config=CacheConfig())
    assert dict(cache.limits) == {
        "MAX_ENTRIES": 500,
        "TTL_MS": 90 * DAY_MS,
        "CACHE_KEY": KEY,
    }


def test_load_empty_store(ports_cache):
    assert asyncio.run(ports_cache.load()) == []


class TestBoundAndEviction:
    def test_oldest_entries_evicted_on_save(self, storage):
        cache = PortsCacheService(storage=storage, config=CacheConfig(), clock=FakeClock())
        limit = cache.limits["MAX_ENTRIES"]
        n = limit + 5
        entries = [
            make_cache_port(f"Port{i}", saved_at=T0, last_accessed=T0 + i)
            for i in range(n)
        ]

        asyncio.run(cache.save(entries))
        names = {e.name for e in asyncio.run(cache.load())}

        assert len(names) == limit
        assert "Port0" not in names
        assert f"Port{n - 1}" in names
        for i in range(5):
            assert f"Port{i}" not in names

    def test_upsert_never_exceeds_bound(self, storage, clock):
        cache = PortsCacheService(
            storage=storage, config=CacheConfig(max_entries=3), clock=clock
        )

        async def scenario():
            for i in range(7):
                clock.advance(1)
                await cache.upsert(make_cache_port(f"Port{i}"))
                assert len(await cache.load()) <= 3
            return await cache.load()

        names = [e.name for e in asyncio.run(scenario())]
        assert sorted(names) == ["Port4", "Port5", "Port6"]

    def test_touch_protects_from_eviction(self, storage, clock):
        cache = PortsCacheService(
            storage=storage, config=CacheConfig(max_entries=2), clock=clock
        )

        async def scenario():
            await cache.upsert(make_cache_port("Hilo"))
            clock.advance(10)
            await cache.upsert(make_cache_port("Kona"))
            clock.advance(10)
            assert await cache.touch("hilo")
            clock.advance(10)
            await cache.upsert(make_cache_port("Juneau"))
            return await cache.load()

        names = {e.name for e in asyncio.run(scenario())}
        assert names == {"Hilo", "Juneau"}

    def test_stable_order_for_equal_access_times(self, storage, clock):
        cache = PortsCacheService(
            storage=storage, config=CacheConfig(max_entries=2), clock=clock
        )
        entries = [make_cache_port(n, saved_at=T0, last_accessed=T0) for n in "ABC"]

        asyncio.run(cache.save(entries))

        assert [e.name for e in asyncio.run(cache.load())] == ["B", "C"]


class TestTtl:
    def test_expired_entries_dropped_on_load(self, storage, clock):
        cache = PortsCacheService(storage=storage, config=CacheConfig(), clock=clock)
        old = make_cache_port("Old", saved_at=T0 - 91 * DAY_MS, last_accessed=T0 - DAY_MS)
        fresh = make_cache_port("Fresh", saved_at=T0 - 89 * DAY_MS, last_accessed=T0)

        asyncio.run(cache.save([old, fresh]))

        assert [e.name for e in asyncio.run(cache.load())] == ["Fresh"]

    def test_entry_at_exact_ttl_is_kept(self, storage, clock):
        cache = PortsCacheService(storage=storage, config=CacheConfig(), clock=clock)
        edge = make_cache_port("Edge", saved_at=T0 - 90 * DAY_MS, last_accessed=T0)

        asyncio.run(cache.save([edge]))

        assert len(asyncio.run(cache.load())) == 1

    def test_entries_without_saved_at_never_expire_and_are_backfilled(self, clock):
        payload = json.dumps([{"name": "Legacy", "lat": 1.5, "lng": 2.5}])
        storage = InMemoryStorage(initial={KEY: payload})
        cache = PortsCacheService(storage=storage, config=CacheConfig(), clock=clock)
        clock.advance(365 * DAY_MS)

        loaded = asyncio.run(cache.load())

        assert len(loaded) == 1
        assert loaded[0].saved_at == clock.now
        assert loaded[0].last_accessed == clock.now


class TestCorruptData:
    def test_invalid_json(self, ports_cache):
        storage = InMemoryStorage(initial={KEY: "{not json"})
        cache = PortsCacheService(storage=storage, config=ports_cache.config)
        assert asyncio.run(cache.load()) == []

    def test_not_a_list(self, ports_cache):
        storage = InMemoryStorage(initial={KEY: '{"name": "Hilo"}'})
        cache = PortsCacheService(storage=storage, config=ports_cache.config)
        assert asyncio.run(cache.load()) == []

    def test_malformed_entries_skipped(self, clock):
        payload = json.dumps(
            [
                {"name": "Good", "lat": 1, "lng": 2},
                {"name": "", "lat": 1, "lng": 2},
                {"name": "NoCoords"},
                {"name": "OutOfRange", "lat": 95, "lng": 2},
                "garbage",
            ]
        )
        storage = InMemoryStorage(initial={KEY: payload})
        cache = PortsCacheService(storage=storage, config=CacheConfig(), clock=clock)

        assert [e.name for e in asyncio.run(cache.load())] == ["Good"]

    def test_unknown_keys_ignored(self, clock):
        payload = json.dumps([{"name": "Hilo", "lat": 1, "lng": 2, "color": "red"}])
        storage = InMemoryStorage(initial={KEY: payload})
        cache = PortsCacheService(storage=storage, config=CacheConfig(), clock=clock)

        assert asyncio.run(cache.load())[0].name == "Hilo"


class TestUpsert:
    def test_round_trip(self, ports_cache, clock):
        entry = PortEntry(name="Cozumél", lat=20.5, lng=-86.9, source=PortSource.ONLINE,
                          original_query="Cozuml")

        asyncio.run(ports_cache.upsert(entry))
        loaded = asyncio.run(ports_cache.load())

        assert len(loaded) == 1
        assert loaded[0].name == "Cozumél"
        assert loaded[0].source is PortSource.CACHE
        assert loaded[0].original_query == "Cozuml"
        assert loaded[0].saved_at == clock.now
        assert loaded[0].last_accessed == clock.now

    def test_replaces_same_normalized_name(self, ports_cache, clock):
        async def scenario():
            await ports_cache.upsert(make_cache_port("Hilo", lat=1.0))
            clock.advance(5)
            await ports_cache.upsert(make_cache_port("HILO", lat=2.0))
            return await ports_cache.load()

        loaded = asyncio.run(scenario())
        assert len(loaded) == 1
        assert loaded[0].lat == 2.0
        assert loaded[0].saved_at == clock.now

    def test_persisted_shape_uses_camel_case(self, ports_cache, storage):
        asyncio.run(ports_cache.upsert(make_cache_port("Hilo", region_code="HI")))
        item = stored_items(storage)[0]
        assert item["regionCode"] == "HI"
        assert item["source"] == "cache"
        assert "savedAt" in item and "lastAccessed" in item


class TestRemoveAndClear:
    def test_remove_missing_name(self, ports_cache, storage):
        asyncio.run(ports_cache.upsert(make_cache_port("Hilo")))
        before = stored_items(storage)

        assert asyncio.run(ports_cache.remove_by_name("Kona")) is False
        assert stored_items(storage) == before

    def test_remove_present_name(self, ports_cache):
        async def scenario():
            await ports_cache.upsert(make_cache_port("Hilo"))
            await ports_cache.upsert(make_cache_port("Kona"))
            removed = await ports_cache.remove_by_name("  hilo ")
            return removed, await ports_cache.load()

        removed, loaded = asyncio.run(scenario())
        assert removed is True
        assert [e.name for e in loaded] == ["Kona"]

    def test_remove_drops_whole_normalized_group(self, storage, clock):
        cache = PortsCacheService(storage=storage, config=CacheConfig(), clock=clock)
        asyncio.run(cache.save([make_cache_port("Cadiz"), make_cache_port("Cádiz"),
                                make_cache_port("Hilo")]))

        assert asyncio.run(cache.remove_by_name("CADIZ")) is True
        assert [e.name for e in asyncio.run(cache.load())] == ["Hilo"]

    def test_clear(self, ports_cache, storage):
        async def scenario():
            await ports_cache.upsert(make_cache_port("Hilo"))
            await ports_cache.clear()
            return await ports_cache.load()

        assert asyncio.run(scenario()) == []
        assert KEY not in storage.keys()

    def test_touch_missing_name(self, ports_cache):
        assert asyncio.run(ports_cache.touch("Nowhere")) is False


class TestStorageFailures:
    def test_nothing_raises(self, cache_config, clock):
        cache = PortsCacheService(storage=FailingStorage(), config=cache_config, clock=clock)

        async def scenario():
            await cache.save([make_cache_port("Hilo")])
            await cache.upsert(make_cache_port("Hilo"))
            await cache.clear()
            return (
                await cache.load(),
                await cache.remove_by_name("Hilo"),
                await cache.touch("Hilo"),
            )

        assert asyncio.run(scenario()) == ([], False, False)
