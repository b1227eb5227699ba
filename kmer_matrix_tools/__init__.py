"""
K-mer Matrix Tools

A Python package for operations on sorted k-mer count matrices, such as the
ones written by kmtricks. Rows are a k-mer followed by one count per sample;
files are processed as streams, one line at a time.

Modules:
    diff: Difference between two sorted k-mer matrices (km-diff)
"""

__version__ = "1.0.0"

from .diff.km_diff import km_diff, km_diff_files

__all__ = [
    "km_diff",
    "km_diff_files",
    "__version__",
]
