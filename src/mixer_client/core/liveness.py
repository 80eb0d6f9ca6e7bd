"""Online/offline tracking based on the last successful device response."""

import logging
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 1.5


class LivenessTracker:
    """Remembers when the device last answered successfully.

    Starts offline: nothing counts as a success until the first response
    arrives.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        """Initialize the tracker.

        Args:
            clock: Monotonic time source in seconds
        """
        self._clock = clock
        self._last_success_at: Optional[float] = None

    @property
    def last_success_at(self) -> Optional[float]:
        """Clock time of the last success, or None if the device never answered."""
        return self._last_success_at

    def now(self) -> float:
        return self._clock()

    def record_success(self, now: Optional[float] = None) -> None:
        """Mark a successful read or write at ``now`` (default: the current time)."""
        if now is None:
            now = self._clock()
        # Never move backwards
        if self._last_success_at is None or now > self._last_success_at:
            self._last_success_at = now

    def is_online(self, now: Optional[float] = None, threshold: float = DEFAULT_THRESHOLD) -> bool:
        """Return True if the last success is younger than ``threshold`` seconds."""
        if self._last_success_at is None:
            return False
        if now is None:
            now = self._clock()
        return now - self._last_success_at < threshold
