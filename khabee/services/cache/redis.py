"""
Redis View Cache

Production implementation. Values are JSON strings under
``khabee:cache:<key>`` with a TTL; each page path keeps an index set of the
keys registered under it so ``revalidate_path`` can delete them together.
"""

import json
import logging
from typing import Any, Optional

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from khabee.core.config import get_settings
from khabee.services.cache.base import BasePageCache

logger = logging.getLogger(__name__)
settings = get_settings()

KEY_PREFIX = "khabee:cache:"
PATH_PREFIX = "khabee:cache-path:"


class RedisPageCache(BasePageCache):
    """Redis-backed view cache shared by every API process."""

    def __init__(self, redis_url: Optional[str] = None):
        self.redis = aioredis.from_url(redis_url or settings.redis_url, decode_responses=True)
        logger.info("RedisPageCache initialized")

    @property
    def provider_name(self) -> str:
        return "redis"

    async def get(self, path: str, key: str) -> Optional[Any]:
        try:
            raw = await self.redis.get(KEY_PREFIX + key)
        except RedisError as e:
            logger.warning(f"Cache read failed for {key}: {e}")
            return None
        return json.loads(raw) if raw is not None else None

    async def set(self, path: str, key: str, value: Any, ttl: int) -> None:
        try:
            async with self.redis.pipeline(transaction=True) as pipe:
                pipe.set(KEY_PREFIX + key, json.dumps(value), ex=ttl)
                pipe.sadd(PATH_PREFIX + path, key)
                await pipe.execute()
        except RedisError as e:
            logger.warning(f"Cache write failed for {key}: {e}")

    async def revalidate_path(self, path: str) -> None:
        index = PATH_PREFIX + path
        try:
            keys = await self.redis.smembers(index)
            if keys:
                await self.redis.delete(*(KEY_PREFIX + k for k in keys))
            await self.redis.delete(index)
            logger.debug(f"Revalidated {path} ({len(keys)} entries)")
        except RedisError as e:
            logger.warning(f"Cache revalidation failed for {path}: {e}")

    async def health_check(self) -> bool:
        try:
            return bool(await self.redis.ping())
        except RedisError:
            return False
