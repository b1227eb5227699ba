#!/usr/bin/env python3
"""
Test Suite for records.py - Matrix Record Reader
================================================

Covers MatrixReader (k-mer extraction and validation, end-of-stream handling,
abandon-on-malformed-row policy and strict mode), the sample column helpers
and the row formatter.

RUNNING THE TESTS
=================
    pytest tests/test_records.py -v
    python -m unittest tests.test_records -v
"""

import io
import unittest
from unittest.mock import patch

from kmer_matrix_tools.diff.formatting import format_padded_row, format_row
from kmer_matrix_tools.diff.records import (
    KmerRecord,
    MalformedRowError,
    MatrixReader,
    count_samples,
    sample_columns,
)


def reader_for(content, ksize=3, **kwargs):
    return MatrixReader(io.StringIO(content), ksize, **kwargs)


class TestMatrixReader(unittest.TestCase):
    """Reading and validating rows."""

    def test_reads_kmer_and_line(self):
        reader = reader_for("ACG 1 2\nTTT 0 4\n")

        self.assertEqual(reader.next_record(), KmerRecord("ACG", "ACG 1 2"))
        self.assertEqual(reader.next_record(), KmerRecord("TTT", "TTT 0 4"))
        self.assertIsNone(reader.next_record())
        self.assertTrue(reader.exhausted)
        self.assertFalse(reader.malformed)
        self.assertEqual(reader.rows_read, 2)

    def test_last_line_without_newline(self):
        reader = reader_for("ACG 1\nTTT 2")

        self.assertEqual(reader.next_record().line, "ACG 1")
        self.assertEqual(reader.next_record().line, "TTT 2")
        self.assertIsNone(reader.next_record())

    def test_strips_only_one_newline(self):
        record = reader_for("ACG 1 \n").next_record()
        self.assertEqual(record.line, "ACG 1 ")

    def test_empty_stream(self):
        reader = reader_for("")
        self.assertIsNone(reader.next_record())
        self.assertTrue(reader.exhausted)
        self.assertFalse(reader.malformed)

    def test_line_shorter_than_k_ends_stream_with_warning(self):
        """A short line in the middle of a file is reported, rest is ignored."""
        with patch("sys.stderr", new_callable=io.StringIO) as mock_stderr:
            reader = reader_for("ACGTA 1\nAC\nACGTC 2\n", ksize=5, name="m.txt")
            self.assertEqual(reader.next_record().kmer, "ACGTA")
            self.assertIsNone(reader.next_record())
            self.assertIsNone(reader.next_record())

        self.assertIn("[warning] input does not seem valid", mock_stderr.getvalue())
        self.assertIn("m.txt:2: line shorter than k=5", mock_stderr.getvalue())
        self.assertTrue(reader.malformed)
        self.assertEqual(reader.rows_read, 1)

    def test_blank_line_is_malformed(self):
        with patch("sys.stderr", new_callable=io.StringIO) as mock_stderr:
            reader = reader_for("ACG 1\n\nTTT 2\n")
            self.assertEqual(reader.next_record().kmer, "ACG")
            self.assertIsNone(reader.next_record())

        self.assertTrue(reader.malformed)
        self.assertIn("line shorter than k=3", mock_stderr.getvalue())

    def test_end_of_file_is_silent(self):
        with patch("sys.stderr", new_callable=io.StringIO) as mock_stderr:
            reader = reader_for("ACG 1\n")
            reader.next_record()
            self.assertIsNone(reader.next_record())

        self.assertEqual(mock_stderr.getvalue(), "")
        self.assertFalse(reader.malformed)

    def test_strict_mode_short_line_raises(self):
        reader = reader_for("ACG 1\nA\n", strict=True, name="m.txt")
        reader.next_record()

        with self.assertRaises(MalformedRowError) as ctx:
            reader.next_record()
        self.assertIn("m.txt:2", str(ctx.exception))
        self.assertTrue(reader.malformed)

    def test_undecodable_character_in_key(self):
        """A surrogate-escaped byte in the key region is an invalid character."""
        with patch("sys.stderr", new_callable=io.StringIO) as mock_stderr:
            reader = reader_for("AAA 1\nA\udcffA 2\n")
            reader.next_record()
            self.assertIsNone(reader.next_record())

        self.assertTrue(reader.malformed)
        self.assertIn("position 2", mock_stderr.getvalue())

    def test_kmer_only_row(self):
        record = reader_for("ACGT\n", ksize=4).next_record()
        self.assertEqual(record, KmerRecord("ACGT", "ACGT"))

    def test_invalid_character_abandons_stream(self):
        with patch("sys.stderr", new_callable=io.StringIO) as mock_stderr:
            reader = reader_for("AAA 1\nANA 2\nTTT 3\n", name="left.txt")
            self.assertEqual(reader.next_record().kmer, "AAA")
            self.assertIsNone(reader.next_record())
            # The valid row after the bad one is never returned
            self.assertIsNone(reader.next_record())

        self.assertTrue(reader.malformed)
        self.assertTrue(reader.exhausted)
        self.assertEqual(reader.rows_read, 1)
        self.assertIn("[warning] input does not seem valid", mock_stderr.getvalue())
        self.assertIn("left.txt:2", mock_stderr.getvalue())

    def test_lowercase_is_invalid(self):
        with patch("sys.stderr", new_callable=io.StringIO):
            reader = reader_for("acg 1\n")
            self.assertIsNone(reader.next_record())
        self.assertTrue(reader.malformed)

    def test_newline_inside_key_region_is_invalid(self):
        """'ACG\\n' has 4 characters, so it passes the length check for k=4."""
        with patch("sys.stderr", new_callable=io.StringIO):
            reader = reader_for("ACG\n", ksize=4)
            self.assertIsNone(reader.next_record())
        self.assertTrue(reader.malformed)

    def test_strict_mode_raises(self):
        reader = reader_for("AAA 1\nAXA 2\n", strict=True, name="m.txt")
        reader.next_record()

        with self.assertRaises(MalformedRowError) as ctx:
            reader.next_record()
        self.assertIn("m.txt:2", str(ctx.exception))
        self.assertIsNone(reader.next_record())

    def test_malformed_row_error_is_value_error(self):
        self.assertTrue(issubclass(MalformedRowError, ValueError))

    def test_invalid_ksize(self):
        with self.assertRaises(ValueError):
            reader_for("AAA 1\n", ksize=0)

    def test_iteration(self):
        reader = reader_for("AAA 1\nCCC 2\nGGG 3\n")
        self.assertEqual([record.kmer for record in reader], ["AAA", "CCC", "GGG"])


class TestSampleHelpers(unittest.TestCase):
    def test_count_samples(self):
        self.assertEqual(count_samples("AAA 1 2"), 2)
        self.assertEqual(count_samples("AAA 1 2\n"), 2)
        self.assertEqual(count_samples("AAA\t1  2 \t 3"), 3)
        self.assertEqual(count_samples("AAA"), 0)
        self.assertEqual(count_samples(""), 0)

    def test_sample_columns(self):
        self.assertEqual(sample_columns("AAA 1 2"), "1 2")
        self.assertEqual(sample_columns("AAA \t 1\t2"), "1\t2")
        self.assertEqual(sample_columns("AAA"), "")


class TestRowFormatter(unittest.TestCase):
    def test_format_row_verbatim(self):
        record = KmerRecord("AAA", "AAA\t1  2")
        self.assertEqual(format_row(record), "AAA\t1  2\n")

    def test_format_padded_row(self):
        record = KmerRecord("TTT", "TTT 3 3")
        self.assertEqual(format_padded_row(record, 2), "TTT 3 3 0 0\n")

    def test_format_padded_row_normalizes_key_separator(self):
        record = KmerRecord("TTT", "TTT\t\t3 3")
        self.assertEqual(format_padded_row(record, 1), "TTT 3 3 0\n")

    def test_format_padded_row_without_padding(self):
        record = KmerRecord("TTT", "TTT 3 3")
        self.assertEqual(format_padded_row(record, 0), "TTT 3 3\n")

    def test_format_padded_row_without_samples(self):
        record = KmerRecord("TTT", "TTT")
        self.assertEqual(format_padded_row(record, 2), "TTT  0 0\n")


if __name__ == "__main__":
    unittest.main()
