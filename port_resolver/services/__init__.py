"""Services layer - Application orchestration.

This module contains the services that orchestrate the flow of data
through adapters to fulfill use cases.

Available services:
- PortsCacheService: Bounded LRU + TTL persistent cache of resolved ports
- PortResolverService: Local and online port search orchestration
"""

from .port_resolver import PortResolverService
from .ports_cache import PortsCacheService

__all__ = ["PortResolverService", "PortsCacheService"]
