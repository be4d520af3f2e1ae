"""Recursive directory walker collecting root-relative paths.

This module provides the PathWalker class, which visits every entry below a
root directory and returns the set of their paths relative to that root,
together with the failures met on the way.

Example:
    >>> from dirscope.scanning import PathWalker
    >>> walker = PathWalker()
    >>> paths, errors = walker.walk("/data/backup")
    >>> print(f"{len(paths)} entries, {len(errors)} errors")
"""

import logging
import os
from typing import List, Set, Tuple, Union

from dirscope.models import ComparisonFinding, CouldNotReadDirectory, DepthExceeded

# Deepest directory level entered below a root (the root itself is level 0)
DEFAULT_MAX_DEPTH = 256

logger = logging.getLogger(__name__)


class PathWalker:
    """Walks a directory tree and collects root-relative entry paths.

    Every entry is recorded, whether it is a file, a directory, or something
    that turns out to be unreadable. Directories are entered without
    following symlinks. The walk uses an explicit stack, so deep trees do not
    grow the Python call stack; directories nested deeper than ``max_depth``
    are recorded but not entered.

    Attributes:
        max_depth: Deepest directory level that will be listed.

    Example:
        >>> walker = PathWalker(max_depth=10)
        >>> paths, errors = walker.walk("/data/a")
        >>> "subdir/file.txt" in paths
        True
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        """Initialize the PathWalker.

        Args:
            max_depth: Deepest directory level to list. Must not be negative.

        Raises:
            ValueError: If max_depth is negative.
        """
        if max_depth < 0:
            raise ValueError(f"max_depth must not be negative, got {max_depth}")
        self.max_depth = max_depth

    def walk(
        self, root: Union[str, "os.PathLike[str]"]
    ) -> Tuple[Set[str], List[ComparisonFinding]]:
        """Collect the relative paths of all entries below ``root``.

        Relative paths are assembled from entry names while descending, so
        each one is guaranteed to nest under ``root``. The root itself is not
        part of the result.

        Args:
            root: Directory to walk.

        Returns:
            Tuple of (paths, errors): the set of root-relative paths using
            the platform separator, and a CouldNotReadDirectory or
            DepthExceeded finding for every directory that was not listed.
            If ``root`` cannot be listed the set is empty and a single
            CouldNotReadDirectory finding names it.
        """
        root_path = os.fspath(root)
        paths: Set[str] = set()
        errors: List[ComparisonFinding] = []

        # (full path, relative path, depth) of directories still to list
        stack: List[Tuple[str, str, int]] = [(root_path, "", 0)]

        while stack:
            full_path, rel_path, depth = stack.pop()

            try:
                with os.scandir(full_path) as it:
                    entries = list(it)
            except OSError as e:
                logger.warning("Could not read directory %s: %s", full_path, e)
                errors.append(
                    CouldNotReadDirectory(path=full_path, message=e.strerror or str(e))
                )
                continue

            for entry in entries:
                child_rel = os.path.join(rel_path, entry.name) if rel_path else entry.name
                paths.add(child_rel)

                if not _is_directory(entry):
                    continue

                if depth + 1 > self.max_depth:
                    logger.warning("Not entering %s: deeper than %d levels", entry.path, self.max_depth)
                    errors.append(
                        DepthExceeded(
                            path=entry.path,
                            message=f"Maximum directory depth of {self.max_depth} exceeded",
                        )
                    )
                    continue

                stack.append((entry.path, child_rel, depth + 1))

        logger.debug("Walked %s: %d entries, %d errors", root_path, len(paths), len(errors))
        return paths, errors


def _is_directory(entry: "os.DirEntry[str]") -> bool:
    """True for real directories; symlinks to directories are not entered."""
    try:
        return entry.is_dir(follow_symlinks=False)
    except OSError:
        return False
