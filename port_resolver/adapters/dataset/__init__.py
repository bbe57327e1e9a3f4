"""Dataset adapters - Implementations of PortDatasetPort.

Available implementations:
- JsonPortDatasetRepository: Loads curated and master ports from JSON files
"""

from .json_repository import JsonPortDatasetRepository

__all__ = ["JsonPortDatasetRepository"]
