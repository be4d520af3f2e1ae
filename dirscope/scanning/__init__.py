"""File scanning package for dirscope.

This package provides the traversal building blocks shared by the comparison
and disk usage engines:

- FileHasher: Computes SHA256 content fingerprints with caching.
- PathWalker: Collects the root-relative paths of every entry in a tree.
- DiskUsageAnalyzer: Builds a size / file-count tree for a directory.
- ProgressThrottle: Rate-limits progress notifications.
- CancellationToken: Cooperative abort flag polled by long traversals.

Example:
    >>> from dirscope.scanning import DiskUsageAnalyzer, PathWalker
    >>>
    >>> paths, errors = PathWalker().walk("/data/a")
    >>> tree, elapsed = DiskUsageAnalyzer().analyze("/data/a")
"""

from .cancellation import CancellationToken
from .file_hasher import FileHasher
from .path_walker import DEFAULT_MAX_DEPTH, PathWalker
from .progress_throttle import PROGRESS_INTERVAL, ProgressThrottle
from .usage_analyzer import ABORTED_REASON, DiskUsageAnalyzer

__all__ = [
    "ABORTED_REASON",
    "CancellationToken",
    "DEFAULT_MAX_DEPTH",
    "DiskUsageAnalyzer",
    "FileHasher",
    "PROGRESS_INTERVAL",
    "PathWalker",
    "ProgressThrottle",
]
