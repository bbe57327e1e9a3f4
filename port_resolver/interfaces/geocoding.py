"""Geocoding port - Abstraction for online port search.

This protocol defines the contract for online geocoding providers,
allowing different implementations (Nominatim, MapTiler, etc.) to be used.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Protocol

if TYPE_CHECKING:
    from ..domain.models import PortEntry


class PortGeocoderPort(Protocol):
    """Port for online port search.

    Implementation: adapters/geocoding/nominatim_adapter.py

    Geocoding turns a free-text port label into candidate entries with
    coordinates. It is the only network-bound step of port resolution.
    """

    async def search_ports_online(self, query: str, limit: int = 5) -> List[PortEntry]:
        """Search the provider for ports matching a query.

        Args:
            query: The port label to look up (e.g., "Hilo", "Kona cruise port").
            limit: Maximum number of candidates.

        Returns:
            Candidate entries tagged with source 'online', best first.
            An empty list when nothing matched.

        Raises:
            GeocodingError: If the provider failed or throttled the request.
        """
        ...
