"""JSON file key-value storage.

All keys live in one JSON object on disk. Writes go to a temporary file
in the same directory which then replaces the target, so a crash never
leaves a half-written store behind. Blocking file I/O runs in a worker
thread to keep the event loop responsive.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from ...domain.errors import StorageError


@dataclass
class JsonFileStorage:
    """File-backed KeyValueStoragePort implementation.

    Attributes:
        path: Location of the JSON store (parent directories are created)
    """

    path: Path

    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.path = Path(self.path).expanduser()
        self._logger = logging.getLogger(__name__)

    async def get_item(self, key: str) -> Optional[str]:
        try:
            items = await asyncio.to_thread(self._read_all)
        except (OSError, ValueError) as e:
            raise StorageError(
                f"Failed to read storage file {self.path}",
                key=key,
                operation="get",
                cause=e,
            )
        value = items.get(key)
        return value if isinstance(value, str) else None

    async def set_item(self, key: str, value: str) -> None:
        try:
            await asyncio.to_thread(self._update, key, value)
        except OSError as e:
            raise StorageError(
                f"Failed to write storage file {self.path}",
                key=key,
                operation="set",
                cause=e,
            )

    async def remove_item(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._update, key, None)
        except OSError as e:
            raise StorageError(
                f"Failed to write storage file {self.path}",
                key=key,
                operation="remove",
                cause=e,
            )

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with self.path.open(encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Storage file is not a JSON object: {self.path}")
        return data

    def _update(self, key: str, value: Optional[str]) -> None:
        with self._lock:
            try:
                items = self._read_all()
            except ValueError as e:
                # An unreadable store cannot be repaired key by key
                self._logger.warning(
                    "Storage file corrupt, starting fresh",
                    extra={"path": str(self.path), "error": str(e)},
                )
                items = {}

            if value is None:
                if key not in items:
                    return
                del items[key]
            else:
                items[key] = value
            self._write_all(items)

    def _write_all(self, items: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=".tmp_", dir=self.path.parent, text=True)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(items, f, ensure_ascii=False)
            os.replace(tmp, self.path)
        finally:
            if os.path.exists(tmp):
                os.remove(tmp)
        self._logger.debug(
            "Storage file written",
            extra={"path": str(self.path), "keys": len(items)},
        )
