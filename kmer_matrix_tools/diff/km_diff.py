#!/usr/bin/env python3
"""
km_diff.py - Difference between two sorted k-mer matrices

Removes from <matrix_1> every k-mer that also appears in <matrix_2>. Both
matrices must already be sorted on their k-mer column, either in plain
lexicographic order (A<C<G<T, what `sort` produces) or in kmtricks order
(A<C<T<G, use -z). The two files are walked once, side by side, so memory use
does not depend on the size of the matrices.

COMMAND-LINE USAGE
==================

    # Rows of m1.txt whose k-mer is not in m2.txt, to stdout
    km-diff m1.txt m2.txt

    # 21-mers, kmtricks order, write to a file
    km-diff -k 21 -z -o diff.txt m1.txt m2.txt

    # Gzipped inputs and pipelines
    km-diff m1.txt.gz m2.txt.gz | gzip > diff.txt.gz
    zcat m1.txt.gz | km-diff - m2.txt > diff.txt

MATRIX FORMAT
=============

    <kmer> <count_1> <count_2> ... <count_n>

    AAAAC 0 2 1
    AAAAG 3 0 0

OUTPUT
======

While both matrices still have rows, a k-mer found only in <matrix_1> is
written exactly as it was read. Once <matrix_2> is exhausted, the remaining
rows of <matrix_1> are written with one extra "0" column per sample of
<matrix_2>:

    m1.txt          m2.txt          output
    AAA 1 2         AAC 5 5         AAA 1 2
    AAC 0 1         GGG 0 0         TTT 3 3 0 0
    TTT 3 3

A row whose k-mer holds anything other than A, C, G or T ends the reading of
that matrix with a warning; pass --strict to fail instead.

PYTHON API
==========

    from kmer_matrix_tools.diff.km_diff import km_diff, km_diff_files

    stats = km_diff_files('m1.txt', 'm2.txt', 'diff.txt', ksize=31)
    print(f"Kept {stats.rows_kept}, dropped {stats.rows_dropped}")
"""

import argparse
import gzip
import sys
from typing import NamedTuple, TextIO

from .formatting import format_padded_row, format_row
from .key_order import KMTRICKS, LEXICOGRAPHIC, get_key_order
from .records import MatrixReader, count_samples

DEFAULT_KSIZE = 31

# Bytes that are not UTF-8 decode to lone surrogates; they fail the k-mer check
# and are written back as the original bytes.
UNDECODABLE = "surrogateescape"


class DiffStats(NamedTuple):
    """Counters reported by km_diff()."""

    samples_1: int
    samples_2: int
    rows_kept: int
    rows_padded: int
    rows_dropped: int
    rows_skipped: int
    truncated_1: bool
    truncated_2: bool

    @property
    def rows_written(self) -> int:
        return self.rows_kept + self.rows_padded


def log_progress(message, verbose=False):
    """
    Log progress message to stderr if verbose is enabled.

    Args:
        message: Message to log
        verbose: Whether to output the message
    """
    if verbose:
        print(message, file=sys.stderr)


def km_diff(
    matrix_1: TextIO,
    matrix_2: TextIO,
    output: TextIO,
    ksize: int = DEFAULT_KSIZE,
    order: str = LEXICOGRAPHIC,
    strict: bool = False,
    verbose: bool = False,
    names=("matrix_1", "matrix_2"),
) -> DiffStats:
    """
    Write to `output` the rows of matrix_1 whose k-mer is not in matrix_2.

    Two-pointer merge over two sorted streams:

        k-mer_1 == k-mer_2  present in both, drop it, advance both
        k-mer_1 <  k-mer_2  only in matrix_1, write the row as is, advance 1
        k-mer_1 >  k-mer_2  advance 2, nothing is written

    When matrix_2 runs out, every remaining row of matrix_1 is written with as
    many "0" columns appended as matrix_2 has samples. When matrix_1 runs out
    the merge stops and what is left of matrix_2 is never read.

    Args:
        matrix_1: Open handle of the matrix to filter
        matrix_2: Open handle of the matrix whose k-mers are removed
        output: Writable text handle
        ksize: k-mer length (default: 31)
        order: Key order of both inputs, "lexicographic" or "kmtricks"
        strict: Raise MalformedRowError on an invalid k-mer instead of
                treating it as the end of that matrix
        verbose: Print sample counts and statistics to stderr
        names: Labels of the two matrices used in diagnostics

    Returns:
        DiffStats

    Raises:
        ValueError: If ksize <= 0 or order is unknown
        MalformedRowError: On an invalid k-mer when strict=True
    """
    compare = get_key_order(order)

    reader_1 = MatrixReader(matrix_1, ksize, name=names[0], strict=strict)
    reader_2 = MatrixReader(matrix_2, ksize, name=names[1], strict=strict)

    record_1 = reader_1.next_record()
    samples_1 = count_samples(record_1.line) if record_1 else 0
    log_progress(f"[info] samples in 1st matrix: {samples_1}", verbose)

    record_2 = reader_2.next_record()
    samples_2 = count_samples(record_2.line) if record_2 else 0
    log_progress(f"[info] samples in 2nd matrix: {samples_2}", verbose)

    rows_kept = 0
    rows_padded = 0
    rows_dropped = 0
    rows_skipped = 0

    while record_1 is not None and record_2 is not None:
        ret_cmp = compare(record_1.kmer, record_2.kmer)
        if ret_cmp == 0:
            rows_dropped += 1
            record_1 = reader_1.next_record()
            record_2 = reader_2.next_record()
        elif ret_cmp < 0:
            output.write(format_row(record_1))
            rows_kept += 1
            record_1 = reader_1.next_record()
        else:
            rows_skipped += 1
            record_2 = reader_2.next_record()

    while record_1 is not None:
        output.write(format_padded_row(record_1, samples_2))
        rows_padded += 1
        record_1 = reader_1.next_record()

    stats = DiffStats(
        samples_1=samples_1,
        samples_2=samples_2,
        rows_kept=rows_kept,
        rows_padded=rows_padded,
        rows_dropped=rows_dropped,
        rows_skipped=rows_skipped,
        truncated_1=reader_1.malformed,
        truncated_2=reader_2.malformed,
    )
    log_progress(
        f"[DIFF] {reader_1.rows_read} rows read from {names[0]}, "
        f"{reader_2.rows_read} rows read from {names[1]}",
        verbose,
    )
    log_progress(
        f"[DIFF] Complete: {stats.rows_written} rows written "
        f"({rows_padded} zero-padded), {rows_dropped} shared k-mers removed",
        verbose,
    )
    return stats


def escape_undecodable(stream):
    """Let a standard stream carry undecodable bytes through unchanged."""
    if hasattr(stream, "reconfigure"):
        stream.reconfigure(errors=UNDECODABLE)
    return stream


def open_matrix(path: str, buffer_size: int = 1024 * 1024) -> TextIO:
    """
    Open a matrix for reading. Supports '-' (stdin) and .gz files.

    Input is decoded as UTF-8 with surrogateescape, so a stray non-UTF-8 byte
    is seen by the reader as an invalid k-mer character rather than failing
    the whole read.

    Args:
        path: File path or '-' for stdin
        buffer_size: Buffer size in bytes for plain files (default: 1MB)

    Returns:
        File handle (text mode)
    """
    if path == "-":
        return escape_undecodable(sys.stdin)
    if path.endswith(".gz"):
        return gzip.open(path, "rt", encoding="utf-8", errors=UNDECODABLE)
    return open(path, "r", encoding="utf-8", errors=UNDECODABLE, buffering=buffer_size)


def km_diff_files(
    path_1: str,
    path_2: str,
    output_path: str = "-",
    ksize: int = DEFAULT_KSIZE,
    order: str = LEXICOGRAPHIC,
    strict: bool = False,
    buffer_size: int = 1024 * 1024,
    verbose: bool = False,
) -> DiffStats:
    """
    Run km_diff() on two matrix files.

    Args:
        path_1: Matrix to filter, or '-' for stdin
        path_2: Matrix whose k-mers are removed, or '-' for stdin
        output_path: Output file, or '-' for stdout (default: stdout)
        ksize: k-mer length (default: 31)
        order: "lexicographic" (default) or "kmtricks"
        strict: Fail on an invalid k-mer instead of truncating that matrix
        buffer_size: I/O buffer size in bytes (default: 1MB)
        verbose: Print statistics to stderr

    Returns:
        DiffStats

    Raises:
        ValueError: Invalid ksize or order, or both inputs are stdin
        OSError: If an input cannot be read or the output cannot be written

    Example:
        >>> stats = km_diff_files('m1.txt', 'm2.txt', 'diff.txt', ksize=21)
        >>> print(f"Kept {stats.rows_written} rows")
    """
    if ksize <= 0:
        raise ValueError(f"Invalid value of k: {ksize}")
    get_key_order(order)
    if path_1 == "-" and path_2 == "-":
        raise ValueError("Only one of the two matrices can be read from stdin")

    matrix_1 = open_matrix(path_1, buffer_size)
    matrix_2 = None
    output = None
    try:
        matrix_2 = open_matrix(path_2, buffer_size)
        if output_path == "-":
            output = escape_undecodable(sys.stdout)
        else:
            output = open(
                output_path, "w", encoding="utf-8", errors=UNDECODABLE, buffering=buffer_size
            )

        return km_diff(
            matrix_1,
            matrix_2,
            output,
            ksize=ksize,
            order=order,
            strict=strict,
            verbose=verbose,
            names=(path_1, path_2),
        )

    finally:
        if path_1 != "-":
            matrix_1.close()
        if matrix_2 is not None and path_2 != "-":
            matrix_2.close()
        if output is not None and output_path != "-":
            output.close()


def main(argv=None):
    """Command-line interface."""
    parser = argparse.ArgumentParser(
        prog="km-diff",
        usage="%(prog)s [options] <matrix_1> <matrix_2>",
        description=(
            "Difference between two sorted k-mer matrices.\n\n"
            "Removes from <matrix_1>, the k-mers in <matrix_2>."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s m1.txt m2.txt > diff.txt
  %(prog)s -k 21 -z -o diff.txt m1.txt m2.txt
  zcat m1.txt.gz | %(prog)s - m2.txt.gz | gzip > diff.txt.gz

Both matrices must be sorted on their k-mer column, in the order selected
with -z (kmtricks order) or lexicographic order otherwise.
        """,
    )
    parser.add_argument("matrix_1", help="Sorted matrix to filter (- for stdin)")
    parser.add_argument("matrix_2", help="Sorted matrix of k-mers to remove (- for stdin)")
    parser.add_argument(
        "-k",
        "--ksize",
        type=int,
        default=DEFAULT_KSIZE,
        metavar="INT",
        help=f"size of k-mers of input matrices (default: {DEFAULT_KSIZE})",
    )
    parser.add_argument(
        "-o",
        "--output",
        default="-",
        metavar="FILE",
        help="write output matrix to FILE (default: stdout)",
    )
    parser.add_argument(
        "-z",
        "--kmtricks-order",
        dest="order",
        action="store_const",
        const=KMTRICKS,
        default=LEXICOGRAPHIC,
        help="use kmtricks order of nucleotides: A<C<T<G",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="fail on a row with an invalid k-mer instead of ignoring the rest of its matrix",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output to stderr (sample counts, statistics)",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress informational stderr output (overrides --verbose)",
    )
    args = parser.parse_args(argv)

    if args.ksize <= 0:
        print(f"Invalid value of k: {args.ksize}", file=sys.stderr)
        sys.exit(1)

    # Determine verbosity (quiet overrides verbose)
    verbose = args.verbose and not args.quiet

    try:
        stats = km_diff_files(
            args.matrix_1,
            args.matrix_2,
            args.output,
            ksize=args.ksize,
            order=args.order,
            strict=args.strict,
            verbose=verbose,
        )

        if not args.quiet:
            print(
                f"# Kept {stats.rows_written} k-mers, removed {stats.rows_dropped} "
                f"shared k-mers",
                file=sys.stderr,
            )

    except KeyboardInterrupt:
        print("\n# Interrupted by user", file=sys.stderr)
        sys.exit(1)
    except (IOError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
