"""Redis rate-limit backend: fixed window per key via INCR + EXPIRE. Shared across workers."""

from intranet_authz.infrastructure.cache.redis_client import RedisClient


class RedisRateLimitBackend:
    """Implements RateLimitBackend. The window opens on the first hit and expires with the key."""

    def __init__(self, redis_client: RedisClient) -> None:
        self._redis = redis_client

    async def incr_window(self, key: str, window_seconds: int) -> int:
        current = await self._redis.incr(key)
        if current == 1:
            await self._redis.expire(key, window_seconds)
        return current
