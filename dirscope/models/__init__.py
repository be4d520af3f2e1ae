"""
Models package for dirscope.

This package provides convenient imports for all data models:
- EntryType: Kind of entry observed at a path
- ComparisonFinding and its variants: Differences between two trees
- FileEntry, DirEntry, ErrorEntry: Disk usage tree nodes
- ProgressPayload, AnalysisResult: Disk usage analysis progress and outcome
- CopyError: Failed path from the copy step
"""

from .entry_type import EntryType
from .findings import (
    ComparisonFinding,
    CouldNotReadDirectory,
    CouldNotCalculateHash,
    DepthExceeded,
    MissingInA,
    MissingInB,
    DifferingContent,
    TypeMismatch,
)
from .usage import (
    AnalysisResult,
    DirEntry,
    Entry,
    ErrorEntry,
    ErrorKind,
    FileEntry,
    ProgressPayload,
    entry_name,
    flatten,
)
from .copy_error import CopyError

__all__ = [
    "EntryType",
    "ComparisonFinding",
    "CouldNotReadDirectory",
    "CouldNotCalculateHash",
    "DepthExceeded",
    "MissingInA",
    "MissingInB",
    "DifferingContent",
    "TypeMismatch",
    "AnalysisResult",
    "DirEntry",
    "Entry",
    "ErrorEntry",
    "ErrorKind",
    "FileEntry",
    "ProgressPayload",
    "entry_name",
    "flatten",
    "CopyError",
]
