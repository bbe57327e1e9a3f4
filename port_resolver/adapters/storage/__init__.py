"""Storage adapters - Implementations of KeyValueStoragePort.

Available implementations:
- JsonFileStorage: Atomic JSON file store
- InMemoryStorage: Dictionary-backed store
- NullStorage: Persists nothing
"""

from .json_file_storage import JsonFileStorage
from .memory_storage import InMemoryStorage
from .null_storage import NullStorage

__all__ = ["JsonFileStorage", "InMemoryStorage", "NullStorage"]
