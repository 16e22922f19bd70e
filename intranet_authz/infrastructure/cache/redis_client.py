# intranet_authz/infrastructure/cache/redis_client.py

from typing import Optional

import redis.asyncio as redis

from intranet_authz.config.settings import get_settings


class RedisClient:
    def __init__(self, url: Optional[str] = None):
        self.client = redis.from_url(
            url or get_settings().redis_url,
            decode_responses=True,
        )

    async def incr(self, key: str) -> int:
        """Increment key, return new value."""
        return await self.client.incr(key)

    async def expire(self, key: str, seconds: int) -> None:
        """Set TTL on key."""
        await self.client.expire(key, seconds)
