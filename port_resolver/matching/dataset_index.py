"""In-memory merged index over the curated and master port datasets.

The index is read-only reference data: it is built once from a
PortDatasetPort and never mutated afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, List, Sequence

from ..domain.errors import DatasetError
from ..domain.models import PortEntry, PortSource, ScoredPort
from .normalizer import normalize
from .scorer import best_score

if TYPE_CHECKING:
    from ..interfaces.dataset import PortDatasetPort

logger = logging.getLogger(__name__)

# Lower tier wins ties
SOURCE_TIERS = {
    PortSource.CACHE: 0,
    PortSource.CURATED: 1,
    PortSource.MASTER: 2,
    PortSource.ONLINE: 3,
    PortSource.UNKNOWN: 4,
}


def source_tier(entry: PortEntry) -> int:
    return SOURCE_TIERS.get(entry.source, len(SOURCE_TIERS))


def merge_datasets(
    curated: Iterable[PortEntry], master: Iterable[PortEntry]
) -> tuple[PortEntry, ...]:
    """Merge curated and master entries.

    A master entry whose normalized name duplicates a curated one is
    dropped, as are duplicates within the master set.
    """
    merged: List[PortEntry] = []
    seen: set[str] = set()
    for entry in list(curated) + list(master):
        key = normalize(entry.name)
        if key in seen:
            continue
        seen.add(key)
        merged.append(entry)
    return tuple(merged)


@dataclass(frozen=True)
class PortDatasetIndex:
    """Fuzzy-searchable view of the reference port datasets.

    Attributes:
        entries: Merged curated + master entries, curated first
    """

    entries: tuple[PortEntry, ...] = field(default_factory=tuple)

    @classmethod
    def from_entries(
        cls, curated: Iterable[PortEntry], master: Iterable[PortEntry] = ()
    ) -> PortDatasetIndex:
        return cls(entries=merge_datasets(curated, master))

    @classmethod
    def from_repository(cls, repository: PortDatasetPort) -> PortDatasetIndex:
        """Build the index from a dataset repository.

        A dataset that fails to load is logged and treated as empty so
        the other one remains searchable.

        Args:
            repository: Source of curated and master entries.

        Returns:
            The merged index.
        """
        curated: Sequence[PortEntry] = ()
        master: Sequence[PortEntry] = ()
        try:
            curated = repository.load_curated()
        except DatasetError as e:
            logger.warning(
                "Curated port dataset unavailable",
                extra={"file_path": e.file_path, "error": str(e)},
            )
        try:
            master = repository.load_master()
        except DatasetError as e:
            logger.warning(
                "Master port dataset unavailable",
                extra={"file_path": e.file_path, "error": str(e)},
            )

        index = cls.from_entries(curated, master)
        logger.info(
            "Port dataset index built",
            extra={"curated": len(curated), "master": len(master), "merged": len(index)},
        )
        return index

    def __len__(self) -> int:
        return len(self.entries)

    def search_scored(
        self, query: str, limit: int = 10, min_score: float = 0.0
    ) -> List[ScoredPort]:
        """Rank dataset entries against a query.

        Args:
            query: Free-text port query.
            limit: Maximum number of results.
            min_score: Results must score strictly above this value.

        Returns:
            Scored entries, best first; ties prefer curated, then the
            shorter name.
        """
        if limit <= 0 or not normalize(query):
            return []

        scored = []
        for entry in self.entries:
            score = best_score(query, (entry.name, *entry.aliases))
            if score > min_score:
                scored.append(ScoredPort(entry=entry, score=score, tier=source_tier(entry)))

        scored.sort(key=lambda s: s.sort_key)
        return scored[:limit]

    def search(self, query: str, limit: int = 10) -> List[PortEntry]:
        """Return the best-matching entries, best first."""
        return [s.entry for s in self.search_scored(query, limit)]
