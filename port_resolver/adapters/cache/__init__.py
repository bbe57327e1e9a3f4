"""Lookup cache adapters - Implementations of LookupCachePort.

Available implementations:
- LookupCache: Thread-safe LRU cache with optional TTL
- NullLookupCache: No-op cache (always misses)
"""

from .memory_cache import LookupCache
from .null_cache import NullLookupCache

__all__ = ["LookupCache", "NullLookupCache"]
