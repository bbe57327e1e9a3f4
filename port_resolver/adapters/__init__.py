"""Adapters layer - Concrete implementations of interfaces.

This module contains implementations of the interface protocols,
connecting the application to external systems like:
- Key-value storage (JSON file, in-memory, null)
- Geocoding services (Nominatim)
- Reference datasets (bundled JSON files)
- Caching systems (in-memory, null)
"""
