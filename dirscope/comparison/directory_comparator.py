"""Comparison of two directory trees.

This module provides the DirectoryComparator class that walks two roots,
finds entries present on only one side, and checks entries present on both
sides for matching type and identical content.

Example:
    >>> from dirscope.comparison import DirectoryComparator
    >>> comparator = DirectoryComparator()
    >>> for finding in comparator.compare("/backup/a", "/backup/b"):
    ...     print(finding.KIND, finding.path)
"""

import logging
import os
from typing import Iterator, List, Optional, Set

from dirscope.errors import HashError
from dirscope.models import (
    ComparisonFinding,
    CouldNotCalculateHash,
    DifferingContent,
    EntryType,
    MissingInA,
    MissingInB,
    TypeMismatch,
)
from dirscope.scanning import FileHasher, PathWalker

from .subtree_collapser import collapse_subtrees

logger = logging.getLogger(__name__)


class DirectoryComparator:
    """Finds the differences between two directory trees.

    Coordinates a PathWalker (one walk per root), collapse_subtrees and a
    FileHasher. Every failure met on the way is reported as a finding; a
    single unreadable file or directory never stops the comparison.

    Attributes:
        _walker: PathWalker used for both roots.
        _file_hasher: FileHasher used for content comparison.

    Example:
        >>> comparator = DirectoryComparator()
        >>> findings = comparator.compare("a", "b")
        >>> findings == sorted(findings)
        True
    """

    def __init__(
        self,
        file_hasher: Optional[FileHasher] = None,
        walker: Optional[PathWalker] = None,
    ) -> None:
        """Initialize the DirectoryComparator.

        Args:
            file_hasher: Optional FileHasher instance. If not provided,
                a new instance will be created.
            walker: Optional PathWalker instance. If not provided, one with
                the default maximum depth is created.
        """
        self._file_hasher = file_hasher if file_hasher is not None else FileHasher()
        self._walker = walker if walker is not None else PathWalker()

    def compare(self, root_a: str, root_b: str) -> List[ComparisonFinding]:
        """Compare tree ``root_a`` with tree ``root_b``.

        Args:
            root_a: Root of tree A.
            root_b: Root of tree B.

        Returns:
            All findings, sorted. Empty when both trees have the same
            structure and identical file content.
        """
        root_a = os.fspath(root_a)
        root_b = os.fspath(root_b)

        paths_a, errors_a = self._walker.walk(root_a)
        paths_b, errors_b = self._walker.walk(root_b)

        findings: List[ComparisonFinding] = []
        findings.extend(errors_a)
        findings.extend(errors_b)
        findings.extend(self.find_missing_entries(paths_a, paths_b))
        findings.extend(self.compare_common_entries(paths_a, paths_b, root_a, root_b))

        # Stable order across runs
        findings.sort()

        logger.info(
            "Compared %s with %s: %d entries vs %d entries, %d findings",
            root_a, root_b, len(paths_a), len(paths_b), len(findings),
        )
        return findings

    def find_missing_entries(
        self, paths_a: Set[str], paths_b: Set[str]
    ) -> Iterator[ComparisonFinding]:
        """Report paths present on one side only, one finding per missing subtree.

        Yields:
            MissingInA for paths only in B, then MissingInB for paths only in A.
        """
        for path in collapse_subtrees(paths_b - paths_a):
            yield MissingInA(path=path)
        for path in collapse_subtrees(paths_a - paths_b):
            yield MissingInB(path=path)

    def compare_common_entries(
        self, paths_a: Set[str], paths_b: Set[str], root_a: str, root_b: str
    ) -> Iterator[ComparisonFinding]:
        """Check every path present on both sides."""
        for path in paths_a & paths_b:
            yield from self.compare_entry(root_a, root_b, path)

    def compare_entry(self, root_a: str, root_b: str, path: str) -> List[ComparisonFinding]:
        """Compare the entries at ``path`` below both roots.

        Two regular files are compared by content hash. If either hash cannot
        be computed, a CouldNotCalculateHash finding is reported for that
        side and the pair is not reported as differing. Two directories are
        equal here (their content is compared through their own paths). Any
        other combination is a TypeMismatch.

        Args:
            root_a: Root of tree A.
            root_b: Root of tree B.
            path: Relative path present in both trees.

        Returns:
            The findings for this path (empty if the entries match).
        """
        path_a = os.path.join(root_a, path)
        path_b = os.path.join(root_b, path)
        type_a = EntryType.of(path_a)
        type_b = EntryType.of(path_b)

        if type_a is EntryType.FILE and type_b is EntryType.FILE:
            return self._compare_files(path, path_a, path_b)

        if type_a is EntryType.DIRECTORY and type_b is EntryType.DIRECTORY:
            return []

        return [TypeMismatch(path=path, type_in_a=type_a, type_in_b=type_b)]

    def _compare_files(self, path: str, path_a: str, path_b: str) -> List[ComparisonFinding]:
        """Compare two regular files by SHA256 digest."""
        errors: List[ComparisonFinding] = []
        digests = []
        for full_path in (path_a, path_b):
            try:
                digests.append(self._file_hasher.hash_file(full_path))
            except HashError as e:
                errors.append(CouldNotCalculateHash(path=full_path, message=e.message))

        if errors:
            return errors

        hash_a, hash_b = digests
        if hash_a == hash_b:
            return []

        logger.debug("Content differs: %s", path)
        return [
            DifferingContent(
                path=path,
                modified_in_a=_modified_time(path_a),
                modified_in_b=_modified_time(path_b),
            )
        ]


def _modified_time(path: str) -> Optional[float]:
    try:
        return os.path.getmtime(path)
    except OSError:
        return None
