"""
Record reader for sorted k-mer matrices.

A matrix row is a k-mer followed by whitespace-separated sample counts:

    AAACCGTTA 0 3 1 12
    AAACCGTTC 4 0 0 1

MatrixReader pulls one row at a time from an open handle, checks that the first
K characters are nucleotides and hands back a KmerRecord. The reader never
looks further than the current line, so memory stays bounded by the longest
line of the file.

Malformed rows
==============
A non-empty line shorter than k, or one whose key region holds anything
other than A, C, G or T, makes the reader print a warning and move to its
terminal state: that row and every row after it are ignored, and next_record()
returns None from then on. With strict=True a MalformedRowError is raised
instead. An empty read is the end of the file and stays silent.
"""

import re
import sys
from typing import NamedTuple, Optional, TextIO

NUCLEOTIDES = frozenset("ACGT")

SAMPLE_SEPARATORS = re.compile(r"[ \t\n]+")


class MalformedRowError(ValueError):
    """Raised in strict mode when a row does not start with a valid k-mer."""


class KmerRecord(NamedTuple):
    """One matrix row: the k-mer and the full line without its newline."""

    kmer: str
    line: str


def count_samples(line: str) -> int:
    """
    Count the sample columns of a matrix row.

    Tokens are split on spaces, tabs and newlines; the first token is the
    k-mer and is not counted.

    Example:
        >>> count_samples("ACGT 1 0\\t5\\n")
        3
    """
    tokens = [token for token in SAMPLE_SEPARATORS.split(line) if token]
    return max(len(tokens) - 1, 0)


def sample_columns(line: str) -> str:
    """
    Return the text after the first token and the blanks that follow it.

    Example:
        >>> sample_columns("ACGT  1 0 5")
        '1 0 5'
    """
    end = 0
    while end < len(line) and line[end] not in " \t":
        end += 1
    while end < len(line) and line[end] in " \t":
        end += 1
    return line[end:]


class MatrixReader:
    """Forward-only reader of KmerRecords from a sorted matrix."""

    def __init__(
        self,
        handle: TextIO,
        ksize: int,
        name: str = "matrix",
        strict: bool = False,
    ):
        """
        Args:
            handle: Open text handle positioned at the first row
            ksize: Length of the k-mers (must be > 0)
            name: Label used in diagnostics
            strict: Raise MalformedRowError instead of abandoning the stream
        """
        if ksize <= 0:
            raise ValueError(f"Invalid value of k: {ksize}")
        self.handle = handle
        self.ksize = ksize
        self.name = name
        self.strict = strict
        self.exhausted = False
        self.malformed = False
        self.line_number = 0
        self.rows_read = 0

    def next_record(self) -> Optional[KmerRecord]:
        """
        Read the next row.

        Returns:
            KmerRecord, or None once the stream is exhausted (end of file, a
            line shorter than k, or a malformed key)

        Raises:
            MalformedRowError: On a short line or an invalid key when strict=True
        """
        if self.exhausted:
            return None

        line = self.handle.readline()
        if not line:
            self.exhausted = True
            return None
        self.line_number += 1

        if len(line) < self.ksize:
            return self._malformed(
                f"{self.name}:{self.line_number}: line shorter than k={self.ksize}"
            )

        kmer = line[: self.ksize]
        for position, char in enumerate(kmer):
            if char not in NUCLEOTIDES:
                return self._malformed(
                    f"{self.name}:{self.line_number}: invalid character {char!r} "
                    f"at position {position + 1} of the k-mer"
                )

        if line.endswith("\n"):
            line = line[:-1]

        self.rows_read += 1
        return KmerRecord(kmer, line)

    def _malformed(self, message: str) -> None:
        """Move to the terminal state after a bad row, or raise in strict mode."""
        self.exhausted = True
        self.malformed = True
        if self.strict:
            raise MalformedRowError(message)
        print("[warning] input does not seem valid", file=sys.stderr)
        print(f"[warning] {message}; ignoring the rest of {self.name}", file=sys.stderr)
        return None

    def __iter__(self):
        record = self.next_record()
        while record is not None:
            yield record
            record = self.next_record()
