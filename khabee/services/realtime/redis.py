"""
Redis Change-Feed

Production transport over Redis pub/sub, so every API process sees the
changes made by every other one. Topics map 1:1 to channel names under
the ``khabee:`` prefix.
"""

import json
import logging
from typing import Any, AsyncIterator, Optional

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from khabee.core.config import get_settings
from khabee.services.realtime.base import BaseChangeFeed, ChangeSignal, Subscription

logger = logging.getLogger(__name__)
settings = get_settings()

CHANNEL_PREFIX = "khabee:"


class RedisSubscription(Subscription):
    """One Redis pub/sub connection subscribed to a single channel."""

    def __init__(self, topic: str, pubsub):
        super().__init__(topic)
        self._pubsub = pubsub
        self._connected = True

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def __aiter__(self) -> AsyncIterator[ChangeSignal]:
        try:
            async for message in self._pubsub.listen():
                if message.get("type") != "message":
                    continue
                try:
                    payload = json.loads(message["data"])
                except (TypeError, ValueError):
                    # Unreadable payloads still mean "something changed"
                    payload = {}
                yield ChangeSignal(topic=self.topic, payload=payload)
        except RedisError as e:
            logger.warning(f"Subscription to {self.topic} lost: {e}")
        finally:
            self._connected = False

    async def close(self) -> None:
        self._connected = False
        try:
            await self._pubsub.unsubscribe()
            await self._pubsub.aclose()
        except RedisError as e:
            logger.debug(f"Error closing subscription to {self.topic}: {e}")


class RedisChangeFeed(BaseChangeFeed):
    """Redis pub/sub change-feed."""

    def __init__(self, redis_url: Optional[str] = None):
        self.redis = aioredis.from_url(redis_url or settings.redis_url, decode_responses=True)
        logger.info("RedisChangeFeed initialized")

    @property
    def provider_name(self) -> str:
        return "redis"

    async def publish(self, topic: str, payload: dict[str, Any]) -> None:
        receivers = await self.redis.publish(CHANNEL_PREFIX + topic, json.dumps(payload))
        logger.debug(f"Published to {topic} ({receivers} receivers)")

    async def subscribe(self, topic: str) -> Subscription:
        pubsub = self.redis.pubsub()
        await pubsub.subscribe(CHANNEL_PREFIX + topic)
        return RedisSubscription(topic, pubsub)

    async def health_check(self) -> bool:
        try:
            return bool(await self.redis.ping())
        except RedisError:
            return False

    async def close(self) -> None:
        await self.redis.aclose()
