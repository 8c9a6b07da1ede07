"""Minimum pause between consecutive backend requests."""

import logging
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Enforces a minimum pause between the end of one request and the start of the next.

    Call ``wait()`` before a request and ``mark()`` once it has finished.
    Holds its own timestamp; create one instance per run.
    """

    def __init__(
        self,
        min_interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.min_interval = max(0.0, min_interval)
        self._clock = clock
        self._sleep = sleep
        self._last_request: Optional[float] = None

    def wait(self) -> float:
        """
        Sleep until ``min_interval`` has passed since the previous request finished.

        Returns:
            Seconds slept (0 for the first call)
        """
        now = self._clock()
        slept = 0.0
        if self._last_request is not None and self.min_interval > 0:
            remaining = self.min_interval - (now - self._last_request)
            if remaining > 0:
                logger.debug("Rate limiting: waiting %.2fs", remaining)
                self._sleep(remaining)
                slept = remaining
                now = self._clock()
        self._last_request = now
        return slept

    def mark(self) -> None:
        """Record that the current request just finished."""
        self._last_request = self._clock()

    def reset(self) -> None:
        self._last_request = None
