"""Diff module - Difference between two sorted k-mer matrices."""

from .key_order import KMTRICKS, LEXICOGRAPHIC, lexicographic_compare, rank_compare
from .km_diff import DiffStats, km_diff, km_diff_files
from .records import KmerRecord, MalformedRowError, MatrixReader

__all__ = [
    "km_diff",
    "km_diff_files",
    "DiffStats",
    "KmerRecord",
    "MatrixReader",
    "MalformedRowError",
    "lexicographic_compare",
    "rank_compare",
    "KMTRICKS",
    "LEXICOGRAPHIC",
]
