"""Geocoding adapters - Implementations of PortGeocoderPort.

Available implementations:
- NominatimPortGeocoder: OpenStreetMap Nominatim online port search
"""

from .nominatim_adapter import NominatimPortGeocoder

__all__ = ["NominatimPortGeocoder"]
