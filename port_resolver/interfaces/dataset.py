"""Dataset port - Abstraction for the reference port datasets.

These protocols define how the curated and master port lists are
loaded, independently of their on-disk format.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Sequence

if TYPE_CHECKING:
    from ..domain.models import PortEntry


class PortDatasetPort(Protocol):
    """Port for loading reference port data.

    Implementation: adapters/dataset/json_repository.py

    The curated list is small and hand-vetted; the master list is large,
    bulk-imported and less precise.
    """

    def load_curated(self) -> Sequence[PortEntry]:
        """Load the curated port list.

        Returns:
            Entries tagged with source 'curated'.

        Raises:
            DatasetError: If the dataset cannot be read or parsed.
        """
        ...

    def load_master(self) -> Sequence[PortEntry]:
        """Load the master port list.

        Returns:
            Entries tagged with source 'master'.

        Raises:
            DatasetError: If the dataset cannot be read or parsed.
        """
        ...
