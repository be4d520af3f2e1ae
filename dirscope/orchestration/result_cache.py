"""Retention of the most recent disk usage tree.

The ResultCache keeps exactly one usage tree so that a caller can ask for a
depth-limited view of any directory inside it later, without walking the
filesystem again.

Example:
    >>> cache = ResultCache()
    >>> cache.store(tree)
    >>> view = cache.lookup("photos/2024", depth=2)
"""

import os
import threading
from typing import Optional

from dirscope.models import DirEntry, Entry, flatten


def lookup_and_flatten(
    tree: Entry, target_path: str, depth: int, sep: str = os.sep
) -> Optional[DirEntry]:
    """Find the directory at ``target_path`` in ``tree`` and flatten it.

    The search only descends into directories that are ancestors of
    ``target_path`` on whole path segments, so ``photos`` is never searched
    for ``photos-old/2024``.

    "" and "." name the root; empty and "." segments and trailing
    separators are ignored, so "photos/" finds "photos".

    Args:
        tree: Root of a usage tree.
        target_path: Root-relative path of the wanted directory.
        depth: Levels of content to keep in the returned copy.
        sep: Path separator used in the tree.

    Returns:
        A flattened copy of the matching directory, or None if no directory
        in the tree has that path.
    """
    if not isinstance(tree, DirEntry):
        return None
    target_path = _normalize(target_path, sep)
    if tree.path == target_path:
        return flatten(tree, depth)
    found = _find_directory(tree, target_path, sep)
    return flatten(found, depth) if found is not None else None


def _normalize(path: str, sep: str) -> str:
    return sep.join(part for part in path.split(sep) if part not in ("", "."))


def _find_directory(directory: DirEntry, target_path: str, sep: str) -> Optional[DirEntry]:
    while True:
        for child in directory.iter_directories():
            if child.path == target_path:
                return child
            if target_path.startswith(child.path + sep):
                directory = child
                break
        else:
            return None


class ResultCache:
    """Single-slot store for the latest usage tree.

    Storing replaces the previous tree atomically. Trees are immutable, so a
    reader that obtained a tree can keep using it after it was superseded.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tree: Optional[Entry] = None

    def store(self, tree: Entry) -> None:
        with self._lock:
            self._tree = tree

    def get(self) -> Optional[Entry]:
        with self._lock:
            return self._tree

    def clear(self) -> None:
        with self._lock:
            self._tree = None

    def lookup(self, path: str, depth: int) -> Optional[DirEntry]:
        """Depth-limited view of the cached directory at ``path``, if any."""
        tree = self.get()
        if tree is None:
            return None
        return lookup_and_flatten(tree, path, depth)
