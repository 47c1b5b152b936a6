"""
Fixed-window limiter for OTP sends.

Redis-backed when ``REDIS_URL`` is configured, otherwise an in-process
counter suitable for a single worker or tests.
"""

import time
from typing import Dict, Optional, Tuple

from app.core.exceptions import RateLimitError
from app.core.logger import logger
from app.core.redis import RedisClient


class InMemoryRateLimiter:
    def __init__(self, limit: int, window: int):
        self.limit = limit
        self.window = window
        self._buckets: Dict[str, Tuple[int, int]] = {}

    async def check(self, key: str) -> None:
        now = time.time()
        window_start = int(now // self.window) * self.window
        self._prune(window_start)
        start, count = self._buckets.get(key, (window_start, 0))

        if count >= self.limit:
            logger.warning(f"Rate limit exceeded for {key}")
            raise RateLimitError(retry_after=int(start + self.window - now))
        self._buckets[key] = (start, count + 1)

    def _prune(self, window_start: int) -> None:
        # Drop buckets from windows that have already closed
        stale = [key for key, (start, _) in self._buckets.items() if start < window_start]
        for key in stale:
            del self._buckets[key]

    def reset(self) -> None:
        self._buckets.clear()


class RedisRateLimiter:
    def __init__(self, client: RedisClient, limit: int, window: int, prefix: str = "ratelimit"):
        self.client = client
        self.limit = limit
        self.window = window
        self.prefix = prefix

    async def check(self, key: str) -> None:
        redis_key = f"{self.prefix}:{key}"
        count = await self.client.hit(redis_key, self.window)
        if count > self.limit:
            retry_after: Optional[int] = await self.client.ttl(redis_key)
            logger.warning(f"Rate limit exceeded for {key}")
            raise RateLimitError(retry_after=retry_after if retry_after and retry_after > 0 else None)
