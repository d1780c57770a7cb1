"""Sliding-window rate limiter shared by every caller of a throttled resource."""

import asyncio
import logging
import time
from collections import deque
from typing import Callable, Deque, Dict, Optional

from common.config import settings
from common.exceptions import RateLimiterFault

logger = logging.getLogger(__name__)

# Shortest sleep between rechecks, so a just-expiring slot is not busy-polled
MIN_WAIT_SECONDS = 0.05


class SlidingWindowRateLimiter:
    """
    Admit at most `max_per_window` acquisitions in any trailing window.

    All callers go through one asyncio.Lock, so pruning, counting and
    recording a timestamp happen as a single step and waiters are admitted
    in FIFO order.
    """

    def __init__(
        self,
        max_per_window: int,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the limiter.

        Args:
            max_per_window: Capacity of the window (must be positive)
            window_seconds: Length of the sliding window in seconds
            clock: Monotonic clock returning seconds
        """
        if max_per_window < 1:
            raise ValueError(f"max_per_window must be at least 1, got {max_per_window}")
        if window_seconds <= 0:
            raise ValueError(f"window_seconds must be positive, got {window_seconds}")

        self.max_per_window = max_per_window
        self.window_seconds = window_seconds
        self._clock = clock
        self._timestamps: Deque[float] = deque()
        self._lock: Optional[asyncio.Lock] = None

    @property
    def lock(self) -> asyncio.Lock:
        """Lazy initialization of the admission lock (must be created within event loop)."""
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    def _prune(self, now: float) -> None:
        """Drop timestamps that have left the window."""
        while self._timestamps and now - self._timestamps[0] >= self.window_seconds:
            self._timestamps.popleft()

    def _reset(self) -> None:
        """Replace the admission lock so later callers are not blocked by a fault."""
        self._lock = None

    async def acquire(self, context: str = "Download") -> int:
        """
        Wait for a free slot and claim it.

        Args:
            context: Caller label used in log messages

        Returns:
            Milliseconds spent waiting for the slot
        """
        waited = 0.0

        async with self.lock:
            try:
                while True:
                    now = self._clock()
                    self._prune(now)

                    if len(self._timestamps) < self.max_per_window:
                        self._timestamps.append(now)
                        if waited:
                            logger.debug(
                                f"[RateLimiter] {context} admitted after {waited:.2f}s"
                            )
                        return int(waited * 1000)

                    wait_seconds = max(
                        MIN_WAIT_SECONDS,
                        self.window_seconds - (now - self._timestamps[0]),
                    )
                    logger.info(
                        f"⏳ [RateLimiter] {context}: {len(self._timestamps)}/"
                        f"{self.max_per_window} slots used, waiting {wait_seconds:.2f}s"
                    )
                    waited += wait_seconds
                    await asyncio.sleep(wait_seconds)

            except Exception as e:
                fault = RateLimiterFault(f"Error while throttling ({context}): {e}")
                logger.error(f"❌ [RateLimiter] {fault}", exc_info=True)
                self._reset()
                return int(waited * 1000)

    def current_limit(self) -> Dict[str, int]:
        """
        Describe the configured budget.

        Returns:
            Dictionary with max_per_minute and window_ms
        """
        return {
            "max_per_minute": self.max_per_window,
            "window_ms": int(self.window_seconds * 1000),
        }

    def in_flight(self) -> int:
        """Number of admissions still inside the current window."""
        self._prune(self._clock())
        return len(self._timestamps)


# Process-wide limiter shared across all download providers
download_limiter = SlidingWindowRateLimiter(
    max_per_window=settings.downloads_per_minute,
    window_seconds=settings.download_window_seconds,
)


async def wait_for_download_slot(context: str = "Download") -> int:
    """Acquire a slot from the shared download limiter."""
    return await download_limiter.acquire(context)
