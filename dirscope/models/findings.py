"""
Comparison findings reported by the DirectoryComparator.

Each finding is an immutable value object describing one difference (or one
failure) observed while comparing directory tree A with directory tree B:
- CouldNotReadDirectory: A directory in either tree could not be listed
- CouldNotCalculateHash: A file in either tree could not be read for hashing
- DepthExceeded: A directory was nested deeper than the walk allows
- MissingInA: Present in B, absent from A
- MissingInB: Present in A, absent from B
- DifferingContent: A regular file on both sides with different content
- TypeMismatch: The entry is a different kind on each side

Findings are totally ordered (first by kind, in the order above, then by
their fields) so sorted output is identical across runs.
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from functools import total_ordering
from typing import Any, ClassVar, Dict, Optional, Tuple

from .entry_type import EntryType


@total_ordering
@dataclass(frozen=True)
class ComparisonFinding:
    """Base class for all comparison findings."""
    path: str                         # Root-relative path (full path for error kinds)

    KIND: ClassVar[str] = "ComparisonFinding"
    RANK: ClassVar[int] = 0
    AUTO_FIXABLE: ClassVar[bool] = False

    @property
    def sort_key(self) -> Tuple[Any, ...]:
        return (self.RANK, self.path)

    @property
    def auto_fixable(self) -> bool:
        """Whether copying the path from one tree to the other resolves it."""
        return self.AUTO_FIXABLE

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ComparisonFinding):
            return NotImplemented
        return self.sort_key < other.sort_key

    def to_dict(self) -> Dict[str, Any]:
        """Encode the finding with an explicit ``type`` discriminant."""
        data: Dict[str, Any] = {"type": self.KIND}
        for f in fields(self):
            value = getattr(self, f.name)
            data[f.name] = value.value if isinstance(value, Enum) else value
        return data


@dataclass(frozen=True)
class CouldNotReadDirectory(ComparisonFinding):
    """A directory could not be listed during the walk."""
    message: str

    KIND: ClassVar[str] = "CouldNotReadDirectory"
    RANK: ClassVar[int] = 0

    @property
    def sort_key(self) -> Tuple[Any, ...]:
        return (self.RANK, self.path, self.message)


@dataclass(frozen=True)
class CouldNotCalculateHash(ComparisonFinding):
    """A regular file could not be read to compute its digest."""
    message: str

    KIND: ClassVar[str] = "CouldNotCalculateHash"
    RANK: ClassVar[int] = 1

    @property
    def sort_key(self) -> Tuple[Any, ...]:
        return (self.RANK, self.path, self.message)


@dataclass(frozen=True)
class DepthExceeded(ComparisonFinding):
    """A directory was not entered because it is nested too deeply."""
    message: str

    KIND: ClassVar[str] = "DepthExceeded"
    RANK: ClassVar[int] = 2

    @property
    def sort_key(self) -> Tuple[Any, ...]:
        return (self.RANK, self.path, self.message)


@dataclass(frozen=True)
class MissingInA(ComparisonFinding):
    """The path exists in tree B but not in tree A."""

    KIND: ClassVar[str] = "MissingInA"
    RANK: ClassVar[int] = 3
    AUTO_FIXABLE: ClassVar[bool] = True


@dataclass(frozen=True)
class MissingInB(ComparisonFinding):
    """The path exists in tree A but not in tree B."""

    KIND: ClassVar[str] = "MissingInB"
    RANK: ClassVar[int] = 4
    AUTO_FIXABLE: ClassVar[bool] = True


@dataclass(frozen=True)
class DifferingContent(ComparisonFinding):
    """Both sides are regular files but their digests differ.

    The modification times are informational only: they take no part in
    equality or ordering.
    """
    modified_in_a: Optional[float] = field(default=None, compare=False)
    modified_in_b: Optional[float] = field(default=None, compare=False)

    KIND: ClassVar[str] = "DifferingContent"
    RANK: ClassVar[int] = 5
    AUTO_FIXABLE: ClassVar[bool] = True

    @property
    def newer_side(self) -> Optional[str]:
        """Return "A" or "B" for the more recently modified side, if known."""
        if self.modified_in_a is None or self.modified_in_b is None:
            return None
        if self.modified_in_a > self.modified_in_b:
            return "A"
        if self.modified_in_b > self.modified_in_a:
            return "B"
        return None


@dataclass(frozen=True)
class TypeMismatch(ComparisonFinding):
    """The entry is a different kind in each tree."""
    type_in_a: EntryType
    type_in_b: EntryType

    KIND: ClassVar[str] = "TypeMismatch"
    RANK: ClassVar[int] = 6

    @property
    def sort_key(self) -> Tuple[Any, ...]:
        return (self.RANK, self.path, self.type_in_a.rank, self.type_in_b.rank)
