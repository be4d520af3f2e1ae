"""Collapsing of descendant paths under an already reported ancestor.

When a whole directory is missing from one tree, the walk yields the
directory and every path inside it. Only the directory needs reporting.

Example:
    >>> list(collapse_subtrees(["dir/b.txt", "other.txt", "dir", "dir/a.txt"], sep="/"))
    ['dir', 'other.txt']
    >>> list(collapse_subtrees(["file10", "file1"], sep="/"))
    ['file1', 'file10']
"""

import os
from typing import Iterable, Iterator, List, Optional


def collapse_subtrees(paths: Iterable[str], sep: str = os.sep) -> Iterator[str]:
    """Drop every path that lies inside another path of the collection.

    Paths are ordered by their segments, which places each ancestor directly
    before its descendants, so comparing against the last kept path is
    enough. Ancestry is decided on whole segments: ``file1`` does not
    contain ``file10``.

    Args:
        paths: Relative paths, in any order.
        sep: Path separator used in ``paths``.

    Yields:
        The paths that have no ancestor in the collection, ordered by segments.
    """
    last_kept: Optional[List[str]] = None
    for parts in sorted(path.split(sep) for path in paths):
        if last_kept is not None and parts[: len(last_kept)] == last_kept:
            continue
        last_kept = parts
        yield sep.join(parts)
