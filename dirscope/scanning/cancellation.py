"""Cooperative cancellation for long-running traversals."""

import threading
from typing import Optional

from dirscope.errors import CancellationError


class CancellationToken:
    """A shared flag set by an abort request and polled by a traversal.

    Setting the flag does not interrupt anything; the traversal checks it at
    each directory boundary, so an abort takes effect once the current
    directory listing has been read.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, path: Optional[str] = None) -> None:
        """Raise CancellationError if cancellation was requested."""
        if self._event.is_set():
            raise CancellationError(path)
