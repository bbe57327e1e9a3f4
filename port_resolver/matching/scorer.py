"""Fuzzy similarity between a port query and a candidate name.

The score rewards exact, prefix and substring token matches highly and
falls back to edit-distance similarity (Levenshtein, then Jaro-Winkler)
for typos. Each query token is compared against the whole candidate and
the contributions are averaged:

    >>> score_name("Juneau", "juneau")
    1.0
    >>> score_name("Cozumel", "Cozuml") > 0.65
    True
"""

from __future__ import annotations

from typing import Iterable, Optional

from rapidfuzz.distance import JaroWinkler, Levenshtein

from .normalizer import normalize, sanitize_port_query, tokenize

EXACT_SCORE = 1.0
PREFIX_SCORE = 0.95
SUBSTRING_SCORE = 0.85
MIN_SUBSTRING_TOKEN_LEN = 3

# Below this edit similarity, Jaro-Winkler gets a chance
EDIT_SIMILARITY_FLOOR = 0.75
JARO_WINKLER_WEIGHT = 0.9
FUZZY_WEIGHT = 0.8


def _token_score(token: str, candidate: str) -> float:
    if token == candidate:
        return EXACT_SCORE
    if candidate.startswith(token):
        return PREFIX_SCORE
    if len(token) >= MIN_SUBSTRING_TOKEN_LEN and token in candidate:
        return SUBSTRING_SCORE

    max_len = max(len(token), len(candidate)) or 1
    sim = 1.0 - Levenshtein.distance(token, candidate) / max_len
    if sim < EDIT_SIMILARITY_FLOOR:
        sim = max(sim, JaroWinkler.similarity(token, candidate) * JARO_WINKLER_WEIGHT)
    return max(0.0, sim * FUZZY_WEIGHT)


def score_name(query: Optional[str], candidate: Optional[str]) -> float:
    """Score how well a candidate name matches a query.

    Args:
        query: Free-text port query.
        candidate: Candidate port name or alias.

    Returns:
        Similarity in [0, 1]; 1 for identical normalized strings.
    """
    raw_query = normalize(query)
    target = normalize(candidate)
    if not raw_query or not target:
        return 0.0
    if raw_query == target:
        return 1.0

    # Noise phrases ("Port of", "(history)") would dilute the token mean
    tokens = tokenize(sanitize_port_query(query)) or tokenize(query)
    if not tokens:
        return 0.0

    total = sum(_token_score(t, target) for t in tokens)
    return min(1.0, max(0.0, total / len(tokens)))


def best_score(query: Optional[str], names: Iterable[Optional[str]]) -> float:
    """Return the highest score of the query against several names."""
    return max((score_name(query, n) for n in names if n), default=0.0)
