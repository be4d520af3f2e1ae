"""DirscopeSession, the entry point used by the command line and by callers.

This module provides the DirscopeSession class that ties the comparison and
disk usage engines together with the per-session state they need: the result
cache holding the last usage tree and the cancellation token of the analysis
currently in flight.

Example:
    from dirscope.orchestration import DirscopeSession

    session = DirscopeSession(view_depth=2)

    findings = session.compare("/backup/a", "/backup/b")

    analysis = session.analyze_disk_usage("/data")
    photos = session.get_subtree("photos")
"""

import logging
import os
import threading
from typing import Callable, Iterable, List, Optional

from dirscope.comparison import DirectoryComparator
from dirscope.models import (
    AnalysisResult,
    ComparisonFinding,
    CopyError,
    DirEntry,
    ProgressPayload,
    flatten,
)
from dirscope.operations import FileOperations
from dirscope.orchestration.result_cache import ResultCache
from dirscope.scanning import (
    DEFAULT_MAX_DEPTH,
    PROGRESS_INTERVAL,
    CancellationToken,
    DiskUsageAnalyzer,
    FileHasher,
    PathWalker,
)

# Levels of directory content returned by analyze_disk_usage and get_subtree
DEFAULT_VIEW_DEPTH = 2

logger = logging.getLogger(__name__)


class DirscopeSession:
    """Coordinates comparisons, disk usage analyses and copies.

    A session owns one ResultCache and tracks the CancellationToken of the
    running analysis, so several sessions can live side by side without
    sharing state. analyze_disk_usage may run on a worker thread while
    another thread calls abort_current_analysis.

    Attributes:
        max_depth: Deepest directory level either engine will list.
        view_depth: Levels of content kept in returned usage trees.
    """

    def __init__(
        self,
        file_hasher: Optional[FileHasher] = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
        progress_interval: float = PROGRESS_INTERVAL,
        view_depth: int = DEFAULT_VIEW_DEPTH,
    ) -> None:
        """Initialize the DirscopeSession.

        Args:
            file_hasher: Optional FileHasher shared by all comparisons of the
                session. If not provided, a new instance will be created.
            max_depth: Deepest directory level to list (root is level 0).
            progress_interval: Minimum seconds between progress notifications.
            view_depth: Levels of content kept in returned usage trees.

        Raises:
            ValueError: If max_depth or view_depth is negative.
        """
        if view_depth < 0:
            raise ValueError(f"view_depth must not be negative, got {view_depth}")

        self.max_depth = max_depth
        self.view_depth = view_depth

        self._comparator = DirectoryComparator(
            file_hasher=file_hasher,
            walker=PathWalker(max_depth=max_depth),
        )
        self._analyzer = DiskUsageAnalyzer(
            max_depth=max_depth,
            progress_interval=progress_interval,
        )
        self._cache = ResultCache()

        self._token_lock = threading.Lock()
        self._current_token: Optional[CancellationToken] = None

    @property
    def cache(self) -> ResultCache:
        return self._cache

    def compare(self, root_a: str, root_b: str) -> List[ComparisonFinding]:
        """Compare two directory trees; see DirectoryComparator.compare."""
        return self._comparator.compare(root_a, root_b)

    def analyze_disk_usage(
        self,
        root: str,
        on_progress: Optional[Callable[[ProgressPayload], None]] = None,
    ) -> AnalysisResult:
        """Analyze the disk usage below ``root``.

        The full tree is kept in the session cache for later get_subtree
        calls; the returned tree is flattened to ``view_depth``. An aborted
        analysis leaves the cache untouched.

        Args:
            root: Directory to analyze.
            on_progress: Optional callback for throttled ProgressPayloads.

        Returns:
            AnalysisResult with the (flattened) tree and the wall-clock
            duration in milliseconds.
        """
        token = CancellationToken()
        with self._token_lock:
            self._current_token = token

        try:
            tree, elapsed = self._analyzer.analyze(os.fspath(root), token, on_progress)
        finally:
            with self._token_lock:
                if self._current_token is token:
                    self._current_token = None

        result = AnalysisResult(result=tree, duration_ms=int(elapsed * 1000))
        if result.aborted:
            return result

        self._cache.store(tree)
        return AnalysisResult(result=flatten(tree, self.view_depth), duration_ms=result.duration_ms)

    def abort_current_analysis(self) -> None:
        """Request the running analysis to stop. Does nothing when idle."""
        with self._token_lock:
            token = self._current_token
        if token is None:
            logger.debug("Abort requested with no analysis running")
            return
        logger.info("Aborting current analysis")
        token.cancel()

    def get_subtree(self, path: str) -> Optional[DirEntry]:
        """Depth-limited view of the directory at ``path`` in the last analysis.

        Args:
            path: Path relative to the analyzed root ("" or "." for the root;
                trailing separators are ignored).

        Returns:
            The flattened directory, or None if no analysis is cached or the
            cached tree has no directory at that path.
        """
        return self._cache.lookup(path, self.view_depth)

    def apply_copy(
        self,
        source_root: str,
        destination_root: str,
        relative_paths: Iterable[str],
        dry_run: bool = False,
    ) -> List[CopyError]:
        """Copy entries between trees; see FileOperations.copy_entries.

        Raises:
            OSError: If the destination disk is full.
        """
        file_ops = FileOperations(dry_run=dry_run)
        return file_ops.copy_entries(source_root, destination_root, relative_paths)
