"""
Token bucket rate limiter for outbound CourtListener calls.

The bucket refills continuously in proportion to elapsed time. Checks never
block: a denied request is reported to the caller along with how long to wait.
"""

import math
import threading
import time
from typing import Callable, Optional


class TokenBucketRateLimiter:
    """
    Continuously refilling token bucket.

    Defaults to 4,500 calls per hour, 90% of CourtListener's 5,000/hr quota.
    """

    def __init__(
        self,
        max_tokens: int = 4500,
        refill_interval_seconds: float = 3600.0,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize the rate limiter.

        Args:
            max_tokens: Bucket capacity
            refill_interval_seconds: Time to refill an empty bucket completely
            clock: Monotonic time source in seconds (injectable for tests)
        """
        self.max_tokens = max_tokens
        self.refill_interval_seconds = refill_interval_seconds
        self._clock = clock or time.monotonic
        self._lock = threading.Lock()
        self._tokens = float(max_tokens)
        self._last_refill = self._clock()

    def try_consume(self, count: int = 1) -> bool:
        """
        Take `count` tokens if available.

        Returns:
            True if the tokens were taken, False (state unchanged) otherwise
        """
        with self._lock:
            self._refill()
            if self._tokens >= count:
                self._tokens -= count
                return True
            return False

    def ms_until_next_token(self) -> int:
        """Milliseconds until one token is available (0 if one is now)."""
        with self._lock:
            self._refill()
            if self._tokens >= 1:
                return 0
            ms_per_token = self.refill_interval_seconds * 1000 / self.max_tokens
            return max(0, math.ceil(round((1 - self._tokens) * ms_per_token, 6)))

    @property
    def remaining(self) -> int:
        """Whole tokens currently available."""
        with self._lock:
            self._refill()
            return math.floor(self._tokens)

    def reset(self) -> None:
        """Refill the bucket completely."""
        with self._lock:
            self._tokens = float(self.max_tokens)
            self._last_refill = self._clock()

    def _refill(self) -> None:
        now = self._clock()
        elapsed = now - self._last_refill
        if elapsed <= 0:
            return
        tokens_to_add = (elapsed / self.refill_interval_seconds) * self.max_tokens
        self._tokens = min(float(self.max_tokens), self._tokens + tokens_to_add)
        self._last_refill = now
