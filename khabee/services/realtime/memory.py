"""
In-Memory Change-Feed

Development and test transport: one asyncio queue per subscription,
fan-out inside the current process.
"""

import asyncio
import logging
from typing import Any, AsyncIterator

from khabee.services.realtime.base import BaseChangeFeed, ChangeSignal, Subscription

logger = logging.getLogger(__name__)

_CLOSED = object()


class MemorySubscription(Subscription):
    """Queue-backed subscription."""

    def __init__(self, feed: "InMemoryChangeFeed", topic: str):
        super().__init__(topic)
        self._feed = feed
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    @property
    def is_connected(self) -> bool:
        return not self._closed

    def deliver(self, signal: ChangeSignal) -> None:
        if not self._closed:
            self._queue.put_nowait(signal)

    async def __aiter__(self) -> AsyncIterator[ChangeSignal]:
        while True:
            item = await self._queue.get()
            if item is _CLOSED:
                return
            yield item

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._feed._detach(self)
        self._queue.put_nowait(_CLOSED)


class InMemoryChangeFeed(BaseChangeFeed):
    """Process-local change-feed."""

    def __init__(self):
        self._subscribers: dict[str, set[MemorySubscription]] = {}
        logger.info("InMemoryChangeFeed initialized")

    @property
    def provider_name(self) -> str:
        return "memory"

    def subscriber_count(self, topic: str) -> int:
        return len(self._subscribers.get(topic, ()))

    async def publish(self, topic: str, payload: dict[str, Any]) -> None:
        subscribers = list(self._subscribers.get(topic, ()))
        for subscription in subscribers:
            subscription.deliver(ChangeSignal(topic=topic, payload=dict(payload)))
        logger.debug(f"Published to {topic} ({len(subscribers)} subscribers)")

    async def subscribe(self, topic: str) -> Subscription:
        subscription = MemorySubscription(self, topic)
        self._subscribers.setdefault(topic, set()).add(subscription)
        return subscription

    def _detach(self, subscription: MemorySubscription) -> None:
        subscribers = self._subscribers.get(subscription.topic)
        if subscribers is not None:
            subscribers.discard(subscription)
            if not subscribers:
                del self._subscribers[subscription.topic]

    async def health_check(self) -> bool:
        return True
