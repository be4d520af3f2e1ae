"""
EntryType enum describing what kind of filesystem entry sits at a path.

Used by TypeMismatch findings to report what was observed on each side:
1. Directory - the path is a directory
2. File - the path is a regular file
3. Unknown - anything else (missing, broken link, socket, device, ...)
"""

import os
from enum import Enum


class EntryType(Enum):
    """Kind of entry observed at a path, in comparison order."""
    DIRECTORY = "Directory"
    FILE = "File"
    UNKNOWN = "Unknown"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    @classmethod
    def of(cls, path: str) -> "EntryType":
        """Classify the entry at ``path``, following symlinks."""
        if os.path.isdir(path):
            return cls.DIRECTORY
        if os.path.isfile(path):
            return cls.FILE
        return cls.UNKNOWN


_RANKS = {member: index for index, member in enumerate(EntryType)}
