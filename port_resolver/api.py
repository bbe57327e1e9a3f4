"""Consumer facade over the default container.

Screens and scripts call these functions instead of wiring services
themselves:

    from port_resolver import api

    cache = await api.load_ports_cache()
    results = await api.unified_port_search("Hilo, HI", cache)

Synchronous helpers search locally only; anything that may touch the
persistent cache or the network is a coroutine.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from .config import ports_cache_config as _ports_cache_config
from .container import get_container
from .domain.models import PortEntry
from .services import PortResolverService, PortsCacheService


def _resolver() -> PortResolverService:
    return get_container().resolve(PortResolverService)


def _cache() -> PortsCacheService:
    return get_container().resolve(PortsCacheService)


def search_ports(
    query: str,
    cache_snapshot: Sequence[PortEntry] = (),
    limit: Optional[int] = None,
) -> List[PortEntry]:
    """Local search over the cache snapshot and the bundled datasets."""
    return _resolver().search_ports(query, cache_snapshot, limit)


def resolve_port_by_name(
    name: str,
    cache_snapshot: Sequence[PortEntry] = (),
) -> Optional[PortEntry]:
    """Resolve one label locally; None when nothing matches well enough."""
    return _resolver().resolve_port_by_name(name, cache_snapshot)


async def unified_port_search(
    query: str,
    cache_snapshot: Optional[Sequence[PortEntry]] = None,
    limit: Optional[int] = None,
    allow_online: Optional[bool] = None,
) -> List[PortEntry]:
    """Local search, falling back to the online provider when unsure."""
    return await _resolver().unified_port_search(
        query, cache_snapshot, limit=limit, allow_online=allow_online
    )


async def resolve_unresolved_ports(
    names: Sequence[str],
    cache_snapshot: Optional[Sequence[PortEntry]] = None,
) -> Dict[str, Optional[PortEntry]]:
    """Resolve a batch of labels, looking misses up online."""
    return await _resolver().resolve_unresolved(names, cache_snapshot)


async def search_ports_online(query: str, limit: Optional[int] = None) -> List[PortEntry]:
    """Raw online candidates, without confidence gating or caching."""
    return await _resolver().search_online(query, limit)


async def load_ports_cache() -> List[PortEntry]:
    return await _cache().load()


async def upsert_cached_port(entry: PortEntry) -> None:
    await _cache().upsert(entry)


async def remove_cached_port_by_name(name: str) -> bool:
    return await _cache().remove_by_name(name)


async def clear_ports_cache() -> None:
    await _cache().clear()


def ports_cache_config() -> Mapping[str, Any]:
    """Read-only MAX_ENTRIES / TTL_MS / CACHE_KEY of the active cache."""
    return _ports_cache_config(get_container().config.cache)
