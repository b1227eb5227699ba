"""Output rows for km-diff."""

from .records import KmerRecord, sample_columns

ZERO_COLUMN = " 0"


def format_row(record: KmerRecord) -> str:
    """Return the row exactly as it was read, with a newline."""
    return f"{record.line}\n"


def format_padded_row(record: KmerRecord, pad: int) -> str:
    """
    Return the row with `pad` zero-count columns appended.

    The k-mer is written back followed by one space and the original sample
    columns; counts are copied as text and never parsed.

    Example:
        >>> format_padded_row(KmerRecord("TTT", "TTT 3 3"), 2)
        'TTT 3 3 0 0\\n'
    """
    return f"{record.kmer} {sample_columns(record.line)}{ZERO_COLUMN * pad}\n"
