"""Dependency injection container.

This module provides a simple DI container without external frameworks.
It allows registering and resolving dependencies for the application.

Design principles:
1. No magic - explicit registration and resolution
2. Testable - easy to swap implementations (e.g. in-memory storage)
3. Lazy loading - adapters instantiated on first use
4. Thread-safe - for web server contexts
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, TypeVar

from .config import AppConfig, get_config

T = TypeVar("T")


@dataclass
class Container:
    """Dependency injection container.

    Usage:
        # Production
        container = Container.create_default()
        resolver = container.resolve(PortResolverService)

        # Testing
        container = Container.create_default(config)
        container.register(KeyValueStoragePort, lambda: InMemoryStorage())
        resolver = container.resolve(PortResolverService)

    Attributes:
        config: Application configuration
    """

    config: AppConfig = field(default_factory=get_config)

    _factories: Dict[type[Any], Callable[[], Any]] = field(
        default_factory=dict, repr=False
    )
    _singletons: Dict[type[Any], Any] = field(default_factory=dict, repr=False)
    _singleton_types: set[type[Any]] = field(default_factory=set, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def register(
        self,
        port_type: type[Any],
        factory: Callable[[], Any],
        singleton: bool = True,
    ) -> None:
        """Register a factory for a type.

        Registering again replaces the factory and drops any cached
        instance of that type.

        Args:
            port_type: The type (usually a Protocol) to register.
            factory: A callable that creates instances of the type.
            singleton: If True, only one instance is created.
        """
        with self._lock:
            self._factories[port_type] = factory
            self._singletons.pop(port_type, None)
            if singleton:
                self._singleton_types.add(port_type)
            else:
                self._singleton_types.discard(port_type)

    def resolve(self, port_type: type[Any]) -> Any:
        """Resolve an instance of a type.

        Raises:
            KeyError: If the type is not registered.
        """
        with self._lock:
            if port_type not in self._factories:
                raise KeyError(f"Type not registered: {port_type}")

            if port_type in self._singleton_types:
                if port_type not in self._singletons:
                    self._singletons[port_type] = self._factories[port_type]()
                return self._singletons[port_type]

            return self._factories[port_type]()

    def is_registered(self, port_type: type[Any]) -> bool:
        return port_type in self._factories

    def clear_singletons(self) -> None:
        """Clear all cached singletons."""
        with self._lock:
            self._singletons.clear()

    def clear_all(self) -> None:
        """Clear all registrations and singletons."""
        with self._lock:
            self._factories.clear()
            self._singletons.clear()
            self._singleton_types.clear()

    @classmethod
    def create_default(cls, config: Optional[AppConfig] = None) -> Container:
        """Create a container with default production bindings.

        Storage backend and lookup cache are chosen from configuration.
        Factories resolve their dependencies through the container, so
        overriding a binding before first use rewires everything built
        on top of it.

        Args:
            config: Optional configuration override.

        Returns:
            A configured Container instance.
        """
        from .adapters.cache import LookupCache, NullLookupCache
        from .adapters.dataset import JsonPortDatasetRepository
        from .adapters.geocoding import NominatimPortGeocoder
        from .adapters.storage import InMemoryStorage, JsonFileStorage, NullStorage
        from .interfaces.dataset import PortDatasetPort
        from .interfaces.geocoding import PortGeocoderPort
        from .interfaces.storage import KeyValueStoragePort
        from .matching.dataset_index import PortDatasetIndex
        from .services import PortResolverService, PortsCacheService

        config = config or get_config()
        container = cls(config=config)

        # Storage
        def create_storage() -> KeyValueStoragePort:
            backend = config.cache.backend
            if backend == "memory":
                return InMemoryStorage()
            if backend == "none":
                return NullStorage()
            return JsonFileStorage(config.cache.storage_path)

        container.register(KeyValueStoragePort, create_storage)

        # Geocoding
        def create_geocoder() -> PortGeocoderPort:
            geo = config.geocoding
            if geo.lookup_cache_size == 0:
                return NominatimPortGeocoder(geo, NullLookupCache())
            cache: LookupCache[Any] = LookupCache(
                name="geocode",
                ttl_seconds=geo.lookup_cache_ttl_seconds,
                max_size=geo.lookup_cache_size,
            )
            return NominatimPortGeocoder(geo, cache)

        container.register(PortGeocoderPort, create_geocoder)

        # Reference data
        container.register(
            PortDatasetPort,
            lambda: JsonPortDatasetRepository(config.dataset),
        )
        container.register(
            PortDatasetIndex,
            lambda: PortDatasetIndex.from_repository(container.resolve(PortDatasetPort)),
        )

        # Services
        container.register(
            PortsCacheService,
            lambda: PortsCacheService(
                storage=container.resolve(KeyValueStoragePort),
                config=config.cache,
            ),
        )

        def create_resolver() -> PortResolverService:
            geocoder = (
                container.resolve(PortGeocoderPort)
                if config.resolver.allow_online
                else None
            )
            return PortResolverService(
                dataset_index=container.resolve(PortDatasetIndex),
                ports_cache=container.resolve(PortsCacheService),
                geocoder=geocoder,
                config=config.resolver,
            )

        container.register(PortResolverService, create_resolver)

        return container


# Global default container (lazy initialized)
_default_container: Optional[Container] = None
_container_lock = threading.Lock()


def get_container() -> Container:
    """Get the default application container (creates one if needed)."""
    global _default_container
    if _default_container is None:
        with _container_lock:
            if _default_container is None:
                _default_container = Container.create_default()
    return _default_container


def set_container(container: Optional[Container]) -> None:
    """Install a container as the process default (None resets it)."""
    global _default_container
    with _container_lock:
        _default_container = container


def reset_container() -> None:
    """Reset the default container."""
    global _default_container
    with _container_lock:
        if _default_container is not None:
            _default_container.clear_all()
        _default_container = None
