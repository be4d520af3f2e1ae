"""Directory comparison package for dirscope.

This package contains the DirectoryComparator, which reports the differences
between two directory trees, and the collapse_subtrees helper that keeps a
missing directory from being reported once per contained file.

Example:
    >>> from dirscope.comparison import DirectoryComparator
    >>> findings = DirectoryComparator().compare("/data/a", "/data/b")
"""

from .directory_comparator import DirectoryComparator
from .subtree_collapser import collapse_subtrees

__all__ = [
    "DirectoryComparator",
    "collapse_subtrees",
]
