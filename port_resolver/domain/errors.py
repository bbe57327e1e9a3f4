"""Typed domain errors for the port resolver.

Adapters raise these errors; services catch them at their boundary and
degrade to empty or local-only results, so none of them reaches callers
of the cache or the search orchestrator.

All errors inherit from PortResolverError and can optionally
wrap a root cause exception for debugging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class PortResolverError(Exception):
    """Base error for the port resolver domain.

    Attributes:
        message: Human-readable error description
        cause: Optional underlying exception that caused this error
    """

    message: str
    cause: Optional[Exception] = field(default=None, repr=False)

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass
class StorageError(PortResolverError):
    """Reading or writing the persistent key-value store failed.

    Attributes:
        key: The storage key involved
        operation: One of 'get', 'set', 'remove'
    """

    key: str = ""
    operation: str = ""


@dataclass
class GeocodingError(PortResolverError):
    """The online geocoding provider failed.

    Attributes:
        query: The port query that failed
        is_rate_limited: Whether the failure was due to rate limiting
    """

    query: str = ""
    is_rate_limited: bool = False


@dataclass
class DatasetError(PortResolverError):
    """A reference port dataset could not be read or parsed.

    Attributes:
        file_path: Path to the dataset file
    """

    file_path: Optional[str] = None


@dataclass
class ConfigurationError(PortResolverError):
    """Invalid or missing configuration.

    Attributes:
        setting_name: Name of the problematic setting
        expected_type: Expected type or format
    """

    setting_name: str = ""
    expected_type: Optional[str] = None
