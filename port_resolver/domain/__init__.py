"""Domain layer - Core port models and errors.

This module contains immutable domain models and typed errors
used throughout the application. No external dependencies.
"""

from .errors import (
    ConfigurationError,
    DatasetError,
    GeocodingError,
    PortResolverError,
    StorageError,
)
from .models import PortEntry, PortSource, ScoredPort

__all__ = [
    # Models
    "PortEntry",
    "PortSource",
    "ScoredPort",
    # Errors
    "PortResolverError",
    "StorageError",
    "GeocodingError",
    "DatasetError",
    "ConfigurationError",
]
