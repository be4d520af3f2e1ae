"""
Disk usage tree models.

A usage tree is built bottom-up by the DiskUsageAnalyzer and is immutable
once constructed:
- FileEntry: A leaf with its own size
- DirEntry: A directory with aggregated size and file count of its content
- ErrorEntry: A leaf standing in for an entry that could not be analyzed

Paths are relative to the analyzed root; the root directory itself has the
empty path.
"""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple, Union


class ErrorKind(Enum):
    """Why an ErrorEntry replaced a regular node."""
    TRAVERSAL = "traversal"            # Directory could not be listed
    METADATA = "metadata"              # Entry type/size could not be read
    DEPTH_EXCEEDED = "depth_exceeded"  # Nested deeper than the walk allows
    ABORTED = "aborted"                # Analysis cancelled by request


@dataclass(frozen=True)
class FileEntry:
    """A file (or other non-directory entry) and its size in bytes."""
    path: str
    size: int

    @property
    def number_of_files(self) -> int:
        return 1

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "File", "path": self.path, "size": self.size}


@dataclass(frozen=True)
class ErrorEntry:
    """An entry that could not be analyzed. Counts as one file of size zero."""
    path: Optional[str]
    reason: str
    kind: ErrorKind = ErrorKind.METADATA

    @property
    def size(self) -> int:
        return 0

    @property
    def number_of_files(self) -> int:
        return 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "Error",
            "path": self.path,
            "reason": self.reason,
            "kind": self.kind.value,
        }


@dataclass(frozen=True)
class DirEntry:
    """A directory with the aggregated size and file count of its content.

    Use ``DirEntry.from_children`` to build one from analyzed children; the
    plain constructor is for copies that must keep aggregates while dropping
    content (see ``flatten``).
    """
    path: str
    size: int
    number_of_files: int
    content: Tuple["Entry", ...] = ()

    @classmethod
    def from_children(cls, path: str, children: Iterable["Entry"]) -> "DirEntry":
        content = tuple(children)
        return cls(
            path=path,
            size=sum(child.size for child in content),
            number_of_files=sum(child.number_of_files for child in content),
            content=content,
        )

    def iter_directories(self) -> Iterator["DirEntry"]:
        """Yield the directories directly contained in this one."""
        for child in self.content:
            if isinstance(child, DirEntry):
                yield child

    def walk(self) -> Iterator["Entry"]:
        """Yield every entry below this directory, depth first."""
        for child in self.content:
            yield child
            if isinstance(child, DirEntry):
                yield from child.walk()

    def depth(self) -> int:
        """Number of directory levels below this one (0 for a leaf directory)."""
        subdirs = list(self.iter_directories())
        if not subdirs:
            return 0
        return 1 + max(d.depth() for d in subdirs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "Dir",
            "path": self.path,
            "size": self.size,
            "number_of_files": self.number_of_files,
            "content": [child.to_dict() for child in self.content],
        }


Entry = Union[FileEntry, DirEntry, ErrorEntry]


def flatten(entry: Entry, depth: int) -> Entry:
    """Copy ``entry`` keeping at most ``depth`` levels of directory content.

    Directories deeper than ``depth`` levels below the copy's root keep
    their size and file count but lose their listing. Files and errors are
    returned as they are.

    Example:
        >>> flat = flatten(tree, 0)
        >>> flat.content
        ()
    """
    if not isinstance(entry, DirEntry):
        return entry
    if depth > 0:
        content = tuple(flatten(child, depth - 1) for child in entry.content)
    else:
        content = ()
    return DirEntry(
        path=entry.path,
        size=entry.size,
        number_of_files=entry.number_of_files,
        content=content,
    )


def entry_name(entry: Entry, root_label: str = ".") -> str:
    """Last path segment of an entry, or ``root_label`` for the root."""
    if not entry.path:
        return root_label
    return os.path.basename(entry.path)


@dataclass(frozen=True)
class ProgressPayload:
    """Snapshot of a running analysis, offered to the progress callback."""
    path: str
    number_of_files_found: int
    total_size_found: int


@dataclass(frozen=True)
class AnalysisResult:
    """Outcome of ``DirscopeSession.analyze_disk_usage``."""
    result: Entry
    duration_ms: int

    @property
    def aborted(self) -> bool:
        return isinstance(self.result, ErrorEntry) and self.result.kind is ErrorKind.ABORTED

    def to_dict(self) -> Dict[str, Any]:
        return {"result": self.result.to_dict(), "duration_ms": self.duration_ms}
