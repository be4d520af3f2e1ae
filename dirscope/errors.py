"""Exception types for dirscope.

Traversal failures are captured as data, never raised to the caller: a
directory that cannot be listed, an entry whose metadata cannot be read and a
directory nested too deeply become comparison findings
(CouldNotReadDirectory, DepthExceeded) or usage-tree error entries
(ErrorKind.TRAVERSAL / METADATA / DEPTH_EXCEEDED).

The exceptions below are raised inside components and converted at their
boundary:

- HashError: File content could not be read for fingerprinting.
- TypeMismatchError: An entry is a different kind on each side of a copy.
- CancellationError: The operation was aborted on request. This is a
  control signal, not a fault.
"""

from typing import Optional


class DirscopeError(Exception):
    """Base class for all dirscope errors.

    Attributes:
        path: Filesystem path the error refers to, if any.
        message: Human-readable description of the failure.
    """

    def __init__(self, path: Optional[str], message: str) -> None:
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path
        self.message = message


class HashError(DirscopeError):
    """A file's content could not be read for hashing."""


class TypeMismatchError(DirscopeError):
    """An entry is a directory on one side and something else on the other."""


class CancellationError(DirscopeError):
    """The running operation was aborted by request."""

    def __init__(self, path: Optional[str] = None, message: str = "Aborted") -> None:
        super().__init__(path, message)
