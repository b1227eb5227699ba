"""
Key orders for sorted k-mer matrices.

Two total orders are supported:

    lexicographic   plain string order, A < C < G < T (sort, strcmp)
    kmtricks        nucleotide rank order, A < C < T < G, as used by kmtricks
                    when it writes its matrices

Both comparators follow the cmp() convention: negative, zero or positive.
For the rank order only the sign is meaningful; the magnitude is the rank
difference at the first differing position.
"""

from functools import cmp_to_key
from types import MappingProxyType
from typing import Callable, Dict

LEXICOGRAPHIC = "lexicographic"
KMTRICKS = "kmtricks"

# Every other character, lowercase included, ranks as C.
DEFAULT_RANK = 1

NUCLEOTIDE_RANK = MappingProxyType(
    {
        "A": 0,
        "C": 1,
        "T": 2,
        "G": 3,
    }
)


def lexicographic_compare(kmer_1: str, kmer_2: str) -> int:
    """Compare two k-mers in plain string order. Returns -1, 0 or 1."""
    if kmer_1 < kmer_2:
        return -1
    if kmer_1 > kmer_2:
        return 1
    return 0


def rank_compare(kmer_1: str, kmer_2: str) -> int:
    """
    Compare two k-mers in kmtricks nucleotide order (A < C < T < G).

    The keys are scanned up to the first differing position and the difference
    of the ranks found there is returned. A key that is a strict prefix of the
    other is compared against DEFAULT_RANK, which is what a terminator byte
    would rank as.

    Args:
        kmer_1: First k-mer
        kmer_2: Second k-mer

    Returns:
        int: rank(kmer_1[i]) - rank(kmer_2[i]) at the first differing index i,
             0 if the keys are identical

    Example:
        >>> rank_compare("ACT", "ACG")
        -1
        >>> rank_compare("G", "A")
        3
    """
    for char_1, char_2 in zip(kmer_1, kmer_2):
        if char_1 != char_2:
            return NUCLEOTIDE_RANK.get(char_1, DEFAULT_RANK) - NUCLEOTIDE_RANK.get(
                char_2, DEFAULT_RANK
            )

    if len(kmer_1) == len(kmer_2):
        return 0
    if len(kmer_1) < len(kmer_2):
        return DEFAULT_RANK - NUCLEOTIDE_RANK.get(kmer_2[len(kmer_1)], DEFAULT_RANK)
    return NUCLEOTIDE_RANK.get(kmer_1[len(kmer_2)], DEFAULT_RANK) - DEFAULT_RANK


KEY_ORDERS: Dict[str, Callable[[str, str], int]] = {
    LEXICOGRAPHIC: lexicographic_compare,
    KMTRICKS: rank_compare,
}


def get_key_order(name: str) -> Callable[[str, str], int]:
    """
    Look up a comparator by order name.

    Raises:
        ValueError: If the name is not a known key order
    """
    try:
        return KEY_ORDERS[name]
    except KeyError:
        raise ValueError(
            f"Unknown key order: {name} (expected one of: {', '.join(KEY_ORDERS)})"
        ) from None


# sorted(kmers, key=rank_sort_key) yields the kmtricks order
rank_sort_key = cmp_to_key(rank_compare)
