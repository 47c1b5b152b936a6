import pytest

from app.core import rate_limit
from app.core.exceptions import RateLimitError
from app.core.rate_limit import InMemoryRateLimiter, RedisRateLimiter
from app.core.redis import RedisClient


class FakePipeline:
    def __init__(self, redis):
        self.redis = redis
        self.commands = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False

    def incr(self, key):
        self.commands.append(("incr", key))

    def expire(self, key, seconds, nx=False):
        self.commands.append(("expire", key, seconds, nx))

    async def execute(self):
        results = []
        for command in self.commands:
            if command[0] == "incr":
                self.redis.values[command[1]] = self.redis.values.get(command[1], 0) + 1
                results.append(self.redis.values[command[1]])
            else:
                _, key, seconds, nx = command
                if nx and key in self.redis.expiries:
                    results.append(False)
                else:
                    self.redis.expiries[key] = seconds
                    self.redis.expire_calls += 1
                    results.append(True)
        return results


class FakeRedis:
    def __init__(self):
        self.values = {}
        self.expiries = {}
        self.expire_calls = 0
        self.closed = False

    def pipeline(self, transaction=True):
        return FakePipeline(self)

    async def ttl(self, key):
        return self.expiries.get(key, -2)

    async def aclose(self):
        self.closed = True


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def redis_client(fake_redis):
    client = RedisClient("redis://localhost:6379/0")
    client.redis = fake_redis
    return client


@pytest.mark.asyncio
async def test_in_memory_limiter_blocks_after_limit():
    limiter = InMemoryRateLimiter(limit=2, window=3600)
    await limiter.check("send-otp:10.0.0.1")
    await limiter.check("send-otp:10.0.0.1")

    with pytest.raises(RateLimitError) as exc_info:
        await limiter.check("send-otp:10.0.0.1")
    assert exc_info.value.status_code == 429
    assert exc_info.value.retry_after > 0

    # Other sources are counted separately
    await limiter.check("send-otp:10.0.0.2")


@pytest.mark.asyncio
async def test_in_memory_limiter_reset():
    limiter = InMemoryRateLimiter(limit=1, window=3600)
    await limiter.check("key")
    limiter.reset()
    await limiter.check("key")


@pytest.mark.asyncio
async def test_in_memory_limiter_drops_closed_windows(monkeypatch):
    clock = {"now": 7200.0}
    monkeypatch.setattr(rate_limit.time, "time", lambda: clock["now"])
    limiter = InMemoryRateLimiter(limit=1, window=3600)

    await limiter.check("send-otp:10.0.0.1")
    await limiter.check("send-otp:10.0.0.2")
    assert len(limiter._buckets) == 2

    clock["now"] += 3600
    await limiter.check("send-otp:10.0.0.3")
    assert list(limiter._buckets) == ["send-otp:10.0.0.3"]

    # A new window starts a fresh count for earlier callers
    await limiter.check("send-otp:10.0.0.1")


@pytest.mark.asyncio
async def test_redis_hit_sets_expiry_on_first_hit_only(redis_client, fake_redis):
    assert await redis_client.hit("ratelimit:key", 3600) == 1
    assert fake_redis.expiries["ratelimit:key"] == 3600
    assert await redis_client.hit("ratelimit:key", 3600) == 2
    assert fake_redis.expire_calls == 1


@pytest.mark.asyncio
async def test_redis_limiter_blocks_after_limit(redis_client, fake_redis):
    limiter = RedisRateLimiter(redis_client, limit=2, window=3600)
    await limiter.check("send-otp:10.0.0.1")
    await limiter.check("send-otp:10.0.0.1")

    with pytest.raises(RateLimitError) as exc_info:
        await limiter.check("send-otp:10.0.0.1")
    assert exc_info.value.status_code == 429
    assert exc_info.value.retry_after == 3600
    assert fake_redis.values["ratelimit:send-otp:10.0.0.1"] == 3

    await limiter.check("send-otp:10.0.0.2")


@pytest.mark.asyncio
async def test_redis_limiter_omits_retry_after_without_ttl(redis_client, fake_redis):
    limiter = RedisRateLimiter(redis_client, limit=0, window=60)
    fake_redis.expiries["ratelimit:key"] = -1

    with pytest.raises(RateLimitError) as exc_info:
        await limiter.check("key")
    assert exc_info.value.retry_after is None


@pytest.mark.asyncio
async def test_redis_client_close_uses_aclose(redis_client, fake_redis):
    await redis_client.close()
    assert fake_redis.closed is True
