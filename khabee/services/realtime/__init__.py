"""
Realtime Change-Feed Factory

Returns the in-process feed in development and the Redis pub/sub feed
otherwise, plus the helper services use to announce order changes.
"""

import logging
from functools import lru_cache
from typing import Any

from khabee.core.config import get_settings
from khabee.services.realtime.base import BaseChangeFeed, ChangeSignal, Subscription
from khabee.services.realtime.live import LiveOrderView
from khabee.services.realtime.memory import InMemoryChangeFeed
from khabee.services.realtime.redis import RedisChangeFeed
from khabee.services.realtime import topics

logger = logging.getLogger(__name__)


@lru_cache()
def get_change_feed() -> BaseChangeFeed:
    """Get the configured change-feed."""
    settings = get_settings()

    if settings.is_development:
        logger.info("Change-Feed: Using InMemoryChangeFeed (development mode)")
        return InMemoryChangeFeed()
    else:
        logger.info(f"Change-Feed: Using RedisChangeFeed ({settings.env_mode.value} mode)")
        return RedisChangeFeed()


def reset_change_feed() -> None:
    """Clear the cached feed instance."""
    get_change_feed.cache_clear()


async def announce_order_change(
    feed: BaseChangeFeed,
    event: str,
    order_id: str,
    kitchen_id: str,
    user_id: str,
    **extra: Any,
) -> None:
    """
    Publish an order change on every topic that shows the order.

    Best-effort: the change is already committed, so transport failures
    are logged and swallowed. Viewers catch up on their next query.
    """
    payload = {"event": event, "order_id": order_id, "kitchen_id": kitchen_id, **extra}

    for topic in topics.topics_for_order(order_id, kitchen_id, user_id):
        try:
            await feed.publish(topic, payload)
        except Exception as e:
            logger.warning(f"Could not publish {event} for order {order_id} on {topic}: {e}")


__all__ = [
    "get_change_feed",
    "reset_change_feed",
    "announce_order_change",
    "BaseChangeFeed",
    "ChangeSignal",
    "Subscription",
    "LiveOrderView",
    "InMemoryChangeFeed",
    "RedisChangeFeed",
    "topics",
]
