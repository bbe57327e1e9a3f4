"""Tests for the merged curated + master dataset index."""

from unittest.mock import MagicMock

from conftest import CURATED, MASTER

from port_resolver.domain.errors import DatasetError
from port_resolver.domain.models import PortEntry, PortSource
from port_resolver.matching.dataset_index import PortDatasetIndex, merge_datasets


def test_merge_drops_master_duplicates_of_curated():
    merged = merge_datasets(CURATED, MASTER)
    hilos = [e for e in merged if e.name == "Hilo"]
    assert len(hilos) == 1
    assert hilos[0].source is PortSource.CURATED
    assert len(merged) == len(CURATED) + len(MASTER) - 1


def test_merge_dedupes_by_normalized_name():
    master = [
        PortEntry(name="Cadiz", lat=36.5, lng=-6.3, source=PortSource.MASTER),
        PortEntry(name="CÁDIZ", lat=36.5, lng=-6.3, source=PortSource.MASTER),
    ]
    assert len(merge_datasets([], master)) == 1


class TestSearch:
    def test_hilo_with_region_suffix(self, dataset_index):
        results = dataset_index.search("Hilo, HI")
        assert results[0].name == "Hilo"
        assert results[0].source is PortSource.CURATED

    def test_alias_match(self, dataset_index):
        assert dataset_index.search("Kailua-Kona")[0].name == "Kona"
        assert dataset_index.search("Port of Seattle")[0].name == "Seattle"

    def test_typo_match(self, dataset_index):
        scored = dataset_index.search_scored("Cozuml")
        assert scored[0].entry.name == "Cozumel"
        assert scored[0].score > 0.65

    def test_results_sorted_best_first(self, dataset_index):
        scored = dataset_index.search_scored("Ha")
        scores = [s.score for s in scored]
        assert scores == sorted(scores, reverse=True)

    def test_limit(self, dataset_index):
        assert len(dataset_index.search("a", limit=2)) <= 2
        assert dataset_index.search("Hilo", limit=0) == []

    def test_empty_query(self, dataset_index):
        assert dataset_index.search("") == []
        assert dataset_index.search("   ") == []

    def test_zero_scores_never_returned(self, dataset_index):
        assert all(s.score > 0 for s in dataset_index.search_scored("zzzzzzzz"))

    def test_min_score_filters(self, dataset_index):
        scored = dataset_index.search_scored("Hilo", min_score=0.99)
        assert [s.entry.name for s in scored] == ["Hilo"]

    def test_tie_prefers_curated_then_shorter_name(self):
        index = PortDatasetIndex.from_entries(
            [],
            [
                PortEntry(name="Port Alpha Long", lat=0, lng=0, aliases=("Alpha",),
                          source=PortSource.MASTER),
                PortEntry(name="Alpha Bay", lat=0, lng=0, aliases=("Alpha",),
                          source=PortSource.MASTER),
            ],
        )
        curated = PortEntry(name="Alpha Harbour Town", lat=0, lng=0, aliases=("Alpha",),
                            source=PortSource.CURATED)
        index = PortDatasetIndex.from_entries([curated], index.entries)

        names = [e.name for e in index.search("Alpha")]
        assert names == ["Alpha Harbour Town", "Alpha Bay", "Port Alpha Long"]


class TestFromRepository:
    def test_loads_both_datasets(self):
        repo = MagicMock()
        repo.load_curated.return_value = CURATED
        repo.load_master.return_value = MASTER

        index = PortDatasetIndex.from_repository(repo)

        assert len(index) == len(CURATED) + len(MASTER) - 1

    def test_failing_dataset_is_tolerated(self):
        repo = MagicMock()
        repo.load_curated.side_effect = DatasetError("boom", file_path="curated.json")
        repo.load_master.return_value = MASTER

        index = PortDatasetIndex.from_repository(repo)

        assert len(index) == len(MASTER)
        assert index.search("Haines")[0].name == "Haines"
