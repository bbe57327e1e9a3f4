"""In-memory key-value storage.

Stands in for the on-device store in tests and in runs where nothing
should survive the process.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass
class InMemoryStorage:
    """Dictionary-backed KeyValueStoragePort implementation.

    Attributes:
        initial: Optional starting contents (copied)
    """

    initial: Optional[Dict[str, str]] = None

    _items: Dict[str, str] = field(default_factory=dict, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        if self.initial:
            self._items.update(self.initial)

    async def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._items[key] = value
        self._logger.debug("Storage item set", extra={"key": key, "size": len(value)})

    async def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        """Return the stored keys."""
        return list(self._items.keys())
