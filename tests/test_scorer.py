"""Tests for fuzzy port name scoring."""

import pytest

from port_resolver.matching.scorer import best_score, score_name


@pytest.mark.parametrize("name", ["Hilo", "Icy Strait Point", "Cozumél", "port of seattle"])
def test_identical_names_score_one(name):
    assert score_name(name, name) == 1.0


def test_case_insensitive():
    assert score_name("Juneau", "juneau") == 1.0


def test_diacritics_insensitive():
    assert score_name("Torshavn", "Tórshavn") == 1.0


def test_typo_tolerance():
    assert score_name("Cozumel", "Cozuml") > 0.65
    assert score_name("Cozuml", "Cozumel") > 0.65


def test_noise_and_substring_tolerance():
    assert score_name("Port of Seattle", "Seattle") > 0.5
    assert score_name("Seattle", "Port of Seattle") > 0.5


def test_region_suffix_still_matches_strongly():
    assert score_name("Hilo, HI", "Hilo") > 0.9


def test_prefix_beats_typo():
    assert score_name("Ketch", "Ketchikan") > score_name("Ketchikn", "Ketchikan")


def test_unrelated_names_score_low():
    assert score_name("Juneau", "Barcelona") < 0.5


@pytest.mark.parametrize(
    "query, candidate",
    [("", "Hilo"), ("Hilo", ""), (None, "Hilo"), ("Hilo", None), ("!!!", "Hilo")],
)
def test_empty_input_scores_zero(query, candidate):
    assert score_name(query, candidate) == 0.0


@pytest.mark.parametrize(
    "query, candidate",
    [
        ("Hilo", "Honolulu"),
        ("St. Thomas", "Charlotte Amalie"),
        ("a", "abcdefghijklmnop"),
        ("Kailua Kona Big Island Hawaii", "Kona"),
    ],
)
def test_score_is_bounded(query, candidate):
    assert 0.0 <= score_name(query, candidate) <= 1.0


class TestBestScore:
    def test_takes_maximum_over_aliases(self):
        names = ["Charlotte Amalie", "St. Thomas"]
        assert best_score("St. Thomas", names) == 1.0

    def test_ignores_empty_names(self):
        assert best_score("Hilo", [None, "", "Hilo"]) == 1.0

    def test_no_names(self):
        assert best_score("Hilo", []) == 0.0
