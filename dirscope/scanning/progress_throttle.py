"""Rate limiter for progress notifications.

Payloads offered while the minimum interval has not yet elapsed are dropped,
not queued.

Example:
    >>> throttle = ProgressThrottle(0.1, print)
    >>> throttle.maybe_fire("first")   # always delivered
    first
    True
    >>> throttle.maybe_fire("second")  # dropped, too soon
    False
"""

import time
from typing import Callable, Generic, Optional, TypeVar

# Minimum delay between two delivered progress notifications (seconds)
PROGRESS_INTERVAL = 0.1

T = TypeVar("T")


class ProgressThrottle(Generic[T]):
    """Deliver at most one payload per ``min_interval`` to ``callback``.

    Args:
        min_interval: Minimum number of seconds between deliveries.
        callback: Called synchronously with each delivered payload.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        min_interval: float,
        callback: Callable[[T], None],
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.min_interval = min_interval
        self._callback = callback
        self._clock = clock
        self._last_fired: Optional[float] = None

    def maybe_fire(self, payload: T) -> bool:
        """Deliver ``payload`` if enough time has passed since the last delivery.

        Returns:
            True if the callback was invoked, False if the payload was dropped.
        """
        now = self._clock()
        if self._last_fired is not None and now - self._last_fired < self.min_interval:
            return False
        self._last_fired = now
        self._callback(payload)
        return True
