"""Disk usage analysis of a single directory tree.

This module provides the DiskUsageAnalyzer class, which walks a directory
depth first and builds an immutable usage tree (FileEntry / DirEntry /
ErrorEntry) whose directory nodes carry the total size and file count of
everything below them.

The walk is cancellable through a CancellationToken checked at every
directory boundary and reports progress through a throttled callback.

Example:
    >>> from dirscope.scanning import CancellationToken, DiskUsageAnalyzer
    >>> analyzer = DiskUsageAnalyzer()
    >>> tree, elapsed = analyzer.analyze("/data", CancellationToken(), print)
    >>> print(f"{tree.size} bytes in {tree.number_of_files} files ({elapsed:.2f}s)")
"""

import logging
import os
import stat
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple, Union

from dirscope.errors import CancellationError
from dirscope.models import DirEntry, Entry, ErrorEntry, ErrorKind, FileEntry, ProgressPayload

from .cancellation import CancellationToken
from .path_walker import DEFAULT_MAX_DEPTH
from .progress_throttle import PROGRESS_INTERVAL, ProgressThrottle

# Reason carried by the error entry that replaces an aborted analysis
ABORTED_REASON = "Aborted"

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressPayload], None]


@dataclass
class _WalkState:
    """Mutable bookkeeping shared by one analysis run."""
    token: CancellationToken
    throttle: Optional[ProgressThrottle]
    files_found: int = 0
    size_found: int = 0


class DiskUsageAnalyzer:
    """Builds a usage tree for a directory.

    Regular files become FileEntry leaves with their size. Directories are
    entered, up to ``max_depth`` levels below the root. Any other kind
    of entry (symlink, socket, device) is recorded as a FileEntry with its
    own size and is never followed. Entries whose metadata cannot be read,
    directories that cannot be listed and directories nested too deeply
    become ErrorEntry leaves; the walk continues with their siblings.

    Attributes:
        max_depth: Deepest directory level that will be listed.
        progress_interval: Minimum seconds between two progress notifications.
    """

    def __init__(
        self,
        max_depth: int = DEFAULT_MAX_DEPTH,
        progress_interval: float = PROGRESS_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the DiskUsageAnalyzer.

        Args:
            max_depth: Deepest directory level to list (root is level 0).
            progress_interval: Minimum delay between delivered progress
                notifications, in seconds.
            clock: Monotonic time source for progress throttling.

        Raises:
            ValueError: If max_depth is negative.
        """
        if max_depth < 0:
            raise ValueError(f"max_depth must not be negative, got {max_depth}")
        self.max_depth = max_depth
        self.progress_interval = progress_interval
        self._clock = clock

    def analyze(
        self,
        root: Union[str, "os.PathLike[str]"],
        cancel_token: Optional[CancellationToken] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> Tuple[Entry, float]:
        """Analyze the disk usage below ``root``.

        Args:
            root: Directory to analyze.
            cancel_token: Token polled before each directory is listed. If it
                is (or becomes) cancelled, the result is a single ErrorEntry
                with reason "Aborted"; no partial tree is returned.
            on_progress: Called with a ProgressPayload before directories are
                listed, at most once per ``progress_interval``. The first
                notification is always delivered.

        Returns:
            Tuple of (tree, elapsed_seconds). ``tree`` is a DirEntry for the
            root (path ""), or an ErrorEntry with path None if the root could
            not be listed or the analysis was aborted.
        """
        root_path = os.fspath(root)
        token = cancel_token if cancel_token is not None else CancellationToken()
        throttle = None
        if on_progress is not None:
            throttle = ProgressThrottle(self.progress_interval, on_progress, clock=self._clock)
        state = _WalkState(token=token, throttle=throttle)

        start = time.perf_counter()
        try:
            tree: Optional[Entry] = self._analyze_directory(state, root_path)
        except CancellationError:
            tree = None
        elapsed = time.perf_counter() - start

        if tree is None or token.is_cancelled:
            logger.info("Analysis of %s aborted after %.2fs", root_path, elapsed)
            return ErrorEntry(path=None, reason=ABORTED_REASON, kind=ErrorKind.ABORTED), elapsed

        logger.info(
            "Analyzed %s: %d files, %d bytes in %.2fs",
            root_path, tree.number_of_files, tree.size, elapsed,
        )
        return tree, elapsed

    def _analyze_directory(self, state: _WalkState, root_path: str) -> Entry:
        """Build the entry for the root and everything below it.

        Directories are kept on an explicit stack of frames. A frame is
        assembled into its DirEntry once all of its entries are consumed, and
        that entry is handed to the parent frame.

        Raises:
            CancellationError: If the token was cancelled.
        """
        root_frame = self._open_directory(state, root_path, "", 0)
        if isinstance(root_frame, ErrorEntry):
            return root_frame

        stack: List[_Frame] = [root_frame]
        while True:
            frame = stack[-1]
            if frame.position < len(frame.entries):
                entry = frame.entries[frame.position]
                frame.position += 1
                child = self._analyze_entry(state, entry, frame)
                if isinstance(child, _Frame):
                    stack.append(child)
                else:
                    frame.children.append(child)
                continue

            stack.pop()
            directory = DirEntry.from_children(frame.rel_path, frame.children)
            if not stack:
                return directory
            stack[-1].children.append(directory)

    def _open_directory(
        self, state: _WalkState, full_path: str, rel_path: str, depth: int
    ) -> Union["_Frame", ErrorEntry]:
        """List one directory, or describe why it could not be listed."""
        state.token.raise_if_cancelled(full_path)

        if state.throttle is not None:
            state.throttle.maybe_fire(
                ProgressPayload(
                    path=full_path,
                    number_of_files_found=state.files_found,
                    total_size_found=state.size_found,
                )
            )

        try:
            with os.scandir(full_path) as it:
                entries = list(it)
        except OSError as e:
            logger.warning("Could not read directory %s: %s", full_path, e)
            return ErrorEntry(
                path=rel_path or None,
                reason=e.strerror or str(e),
                kind=ErrorKind.TRAVERSAL,
            )
        return _Frame(rel_path=rel_path, depth=depth, entries=entries)

    def _analyze_entry(
        self, state: _WalkState, entry: "os.DirEntry[str]", parent: "_Frame"
    ) -> Union[Entry, "_Frame"]:
        """Build the entry for one child of ``parent``, or a frame to descend into."""
        rel_path = os.path.join(parent.rel_path, entry.name) if parent.rel_path else entry.name

        try:
            stat_result = entry.stat(follow_symlinks=False)
        except OSError as e:
            logger.warning("Could not read metadata of %s: %s", entry.path, e)
            return ErrorEntry(path=rel_path, reason=e.strerror or str(e), kind=ErrorKind.METADATA)

        if stat.S_ISDIR(stat_result.st_mode):
            if parent.depth + 1 > self.max_depth:
                return ErrorEntry(
                    path=rel_path,
                    reason=f"Maximum directory depth of {self.max_depth} exceeded",
                    kind=ErrorKind.DEPTH_EXCEEDED,
                )
            return self._open_directory(state, entry.path, rel_path, parent.depth + 1)

        state.files_found += 1
        state.size_found += stat_result.st_size
        return FileEntry(path=rel_path, size=stat_result.st_size)


@dataclass
class _Frame:
    """A listed directory whose entries are still being analyzed."""
    rel_path: str
    depth: int
    entries: List["os.DirEntry[str]"]
    position: int = 0
    children: List[Entry] = field(default_factory=list)
