"""Rate limiting for GitLab and GitHub API calls."""

import asyncio
import time


class RateLimiter:
    """Token bucket rate limiter for API requests."""

    def __init__(self, requests_per_second: float = 10.0):
        """Initialize rate limiter.

        Args:
            requests_per_second: Maximum requests per second allowed
        """
        self.requests_per_second = requests_per_second
        self.tokens = requests_per_second
        self.last_update = time.monotonic()
        self._lock = asyncio.Lock()

    def _refill(self) -> None:
        now = time.monotonic()
        elapsed = now - self.last_update
        self.tokens = min(
            self.requests_per_second,
            self.tokens + elapsed * self.requests_per_second,
        )
        self.last_update = now

    async def acquire(self) -> None:
        """Acquire a token for making a request.

        Waits until a token is available.
        """
        async with self._lock:
            self._refill()

            if self.tokens >= 1:
                self.tokens -= 1
                return

            sleep_time = (1 - self.tokens) / self.requests_per_second
            await asyncio.sleep(sleep_time)
            self.tokens = 0
            self.last_update = time.monotonic()


class WriteThrottle:
    """Fixed pause taken before every GitHub write during issue replication.

    GitHub applies secondary rate limits to content creation that are not
    reported ahead of time, so the pause is unconditional rather than a
    reaction to 429 responses. The pause yields to the event loop.
    """

    def __init__(self, delay: float = 1.0):
        if delay < 0:
            raise ValueError('Write delay cannot be negative')
        self.delay = delay
        self.pauses = 0

    async def wait(self) -> None:
        """Sleep for the configured delay."""
        self.pauses += 1
        await asyncio.sleep(self.delay)
