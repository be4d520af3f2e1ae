"""File operations package for dirscope.

This package provides the FileOperations class that copies selected entries
from one directory tree to another after a comparison.

Example:
    >>> from dirscope.operations import FileOperations
    >>> ops = FileOperations(dry_run=False)
    >>> errors = ops.copy_entries("/data/a", "/data/b", ["notes.txt", "photos"])
    >>> print(f"{len(errors)} path(s) failed")
"""

from .file_operations import FileOperations

__all__ = ["FileOperations"]
