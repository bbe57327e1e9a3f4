"""Interfaces layer - Abstract contracts (Protocols) for the application.

Interfaces define the contracts between the application core and external
adapters. They enable dependency injection and make the system testable.

This module follows the Hexagonal Architecture pattern:
- Input side: how the application is driven (services, api facade)
- Output side: how the application drives external systems (adapters)
"""

from .cache import LookupCachePort
from .dataset import PortDatasetPort
from .geocoding import PortGeocoderPort
from .storage import KeyValueStoragePort

__all__ = [
    # Storage
    "KeyValueStoragePort",
    # Geocoding
    "PortGeocoderPort",
    # Datasets
    "PortDatasetPort",
    # Cache
    "LookupCachePort",
]
