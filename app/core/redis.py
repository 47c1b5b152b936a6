import redis.asyncio as redis
from app.core.config import settings

class RedisClient:
    def __init__(self, url: str):
        self.redis = redis.from_url(url, encoding="utf-8", decode_responses=True)

    async def hit(self, key: str, window: int) -> int:
        """Increment a fixed-window counter, starting its expiry on the first hit."""
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.incr(key)
            pipe.expire(key, window, nx=True)
            count, _ = await pipe.execute()
        return int(count)

    async def ttl(self, key: str) -> int:
        return await self.redis.ttl(key)

    async def close(self):
        await self.redis.aclose()

redis_client = RedisClient(settings.REDIS_URL) if settings.REDIS_URL else None
