"""CopyError record returned by the copy step."""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class CopyError:
    """A relative path that could not be copied, and why."""
    path: str                         # Relative path as requested
    message: str                      # OS error message

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path, "message": self.message}
