"""Token bucket limiting calls to rate-limited sources."""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class TokenBucket:
    """Async token bucket.

    Holds up to ``capacity`` tokens, refilled at ``rate`` tokens per second.
    ``acquire`` waits until a token is available.
    """

    def __init__(
        self,
        rate: float,
        capacity: int = 1,
        clock: Optional[Callable[[], float]] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        if rate <= 0:
            raise ValueError("rate must be positive")
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.rate = rate
        self.capacity = capacity
        self._clock = clock or time.monotonic
        self._sleep = sleep or asyncio.sleep
        self._tokens = float(capacity)
        self._updated = self._clock()
        self._lock = asyncio.Lock()

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self._updated)
        self._tokens = min(self.capacity, self._tokens + elapsed * self.rate)
        self._updated = now

    @property
    def tokens(self) -> float:
        self._refill()
        return self._tokens

    async def acquire(self) -> float:
        """Take one token, waiting if necessary.

        Returns:
            Seconds spent waiting
        """
        waited = 0.0
        async with self._lock:
            self._refill()
            while self._tokens < 1:
                delay = (1 - self._tokens) / self.rate
                logger.debug(f"⏳ Rate limit reached, waiting {delay:.3f}s")
                await self._sleep(delay)
                waited += delay
                self._refill()
            self._tokens -= 1
        return waited
