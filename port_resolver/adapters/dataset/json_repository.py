"""JSON port dataset repository.

Loads the two reference datasets shipped with the package:

- ports.curated.json: hand-vetted cruise ports,
  ``{name, country, regionCode, lat, lng, aliases, kind, isCruise}``
- cruise_ports_master.json: bulk-imported ports and terminals,
  ``{port_name, city, country_or_territory, region, latitude, longitude}``
  where the numeric fields may be strings.

Rows without a name or with unusable coordinates are skipped.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence

from ...config import DatasetConfig, get_config
from ...domain.errors import DatasetError
from ...domain.models import PortEntry, PortSource


@dataclass
class JsonPortDatasetRepository:
    """Dataset repository that loads from JSON files.

    Implements PortDatasetPort. Parsed datasets are kept in memory after
    the first load.

    Attributes:
        config: Dataset configuration (paths, file names)
    """

    config: DatasetConfig = field(default_factory=lambda: get_config().dataset)
    _logger: logging.Logger = field(init=False, repr=False)

    _curated: Optional[List[PortEntry]] = field(default=None, repr=False)
    _master: Optional[List[PortEntry]] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def load_curated(self) -> Sequence[PortEntry]:
        """Load the curated port list.

        Raises:
            DatasetError: If the file cannot be read or is not a JSON array.
        """
        if self._curated is None:
            rows = self._read_rows(self.config.curated_path)
            self._curated = self._parse_rows(rows, self._curated_entry, "curated")
        return self._curated

    def load_master(self) -> Sequence[PortEntry]:
        """Load the master port list.

        Raises:
            DatasetError: If the file cannot be read or is not a JSON array.
        """
        if self._master is None:
            rows = self._read_rows(self.config.master_path)
            self._master = self._parse_rows(rows, self._master_entry, "master")
        return self._master

    def clear_cache(self) -> None:
        """Forget parsed datasets so the next load re-reads the files."""
        self._curated = None
        self._master = None

    def _read_rows(self, path: Path) -> List[Any]:
        self._logger.debug("Loading port dataset", extra={"path": str(path)})
        try:
            with path.open(encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise DatasetError(
                f"Failed to load port dataset: {e}",
                file_path=str(path),
                cause=e,
            )
        if not isinstance(data, list):
            raise DatasetError(
                "Port dataset is not a JSON array",
                file_path=str(path),
            )
        return data

    def _parse_rows(self, rows: List[Any], build: Any, label: str) -> List[PortEntry]:
        entries: List[PortEntry] = []
        skipped = 0
        for row in rows:
            if not isinstance(row, Mapping):
                skipped += 1
                continue
            try:
                entries.append(build(row))
            except (KeyError, TypeError, ValueError):
                skipped += 1

        self._logger.info(
            "Port dataset loaded",
            extra={"dataset": label, "entries": len(entries), "skipped": skipped},
        )
        return entries

    @staticmethod
    def _curated_entry(row: Mapping[str, Any]) -> PortEntry:
        aliases = row.get("aliases") or ()
        return PortEntry(
            name=str(row.get("name") or "").strip(),
            lat=float(row["lat"]),
            lng=float(row["lng"]),
            country=row.get("country") or None,
            region_code=row.get("regionCode") or None,
            aliases=tuple(str(a) for a in aliases if a),
            source=PortSource.CURATED,
            is_cruise=row.get("isCruise"),
            kind=row.get("kind") or None,
        )

    @staticmethod
    def _master_entry(row: Mapping[str, Any]) -> PortEntry:
        name = str(row.get("port_name") or row.get("city") or "").strip()
        city = str(row.get("city") or "").strip()
        aliases = (city,) if city and city != name else ()
        return PortEntry(
            name=name,
            lat=float(row["latitude"]),
            lng=float(row["longitude"]),
            country=row.get("country_or_territory") or None,
            region_code=row.get("region") or None,
            aliases=aliases,
            source=PortSource.MASTER,
        )
