"""Matching layer - normalization, fuzzy scoring and the dataset index."""

from .dataset_index import PortDatasetIndex, merge_datasets, source_tier
from .normalizer import normalize, sanitize_port_query, tokenize
from .scorer import best_score, score_name

__all__ = [
    "normalize",
    "sanitize_port_query",
    "tokenize",
    "score_name",
    "best_score",
    "PortDatasetIndex",
    "merge_datasets",
    "source_tier",
]
