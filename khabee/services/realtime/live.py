"""
Live Order Views

A ``LiveOrderView`` keeps a snapshot of some order query fresh. It runs
the query once on mount, then subscribes to a change-feed topic and
re-runs the full query on every signal. Signal payloads are never applied
directly, which makes duplicate, late or malformed signals harmless.

The realtime channel is optional for correctness: if subscribing fails,
the view still holds the initial snapshot and ``is_connected`` is False.
"""

import asyncio
import logging
from contextlib import suppress
from typing import Any, Awaitable, Callable, Optional

from khabee.services.realtime.base import BaseChangeFeed, Subscription

logger = logging.getLogger(__name__)

Fetch = Callable[[], Awaitable[Any]]
Listener = Callable[[Any], Awaitable[None]]


class LiveOrderView:
    """
    Subscription lifecycle bound to a view.

    Args:
        feed: Change-feed to subscribe to
        topic: Topic whose signals trigger a refresh
        fetch: Coroutine function returning a fresh snapshot
        on_update: Optional coroutine called with every new snapshot
    """

    def __init__(
        self,
        feed: BaseChangeFeed,
        topic: str,
        fetch: Fetch,
        on_update: Optional[Listener] = None,
    ):
        self.feed = feed
        self.topic = topic
        self.fetch = fetch
        self.on_update = on_update
        self.snapshot: Any = None
        self.refresh_count = 0
        self._subscription: Optional[Subscription] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def is_connected(self) -> bool:
        return self._subscription is not None and self._subscription.is_connected

    @property
    def is_mounted(self) -> bool:
        return self._task is not None

    async def refresh(self) -> Any:
        """Re-read ground truth and publish it to the listener."""
        self.snapshot = await self.fetch()
        self.refresh_count += 1
        if self.on_update is not None:
            await self.on_update(self.snapshot)
        return self.snapshot

    async def mount(self) -> None:
        await self.refresh()

        try:
            self._subscription = await self.feed.subscribe(self.topic)
        except Exception as e:
            logger.warning(f"Live updates unavailable for {self.topic}: {e}")
            return

        self._task = asyncio.create_task(self._listen())
        logger.debug(f"Live view mounted on {self.topic}")

    async def _listen(self) -> None:
        try:
            async for signal in self._subscription:
                logger.debug(f"Change on {signal.topic}: {signal.payload}")
                try:
                    await self.refresh()
                except asyncio.CancelledError:
                    raise
                except Exception:
                    # Keep the last snapshot; the next signal retries the query
                    logger.exception(f"Live view refresh on {self.topic} failed")
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception(f"Live view on {self.topic} stopped")

    async def unmount(self) -> None:
        if self._task is not None:
            self._task.cancel()
            with suppress(asyncio.CancelledError):
                await self._task
            self._task = None

        if self._subscription is not None:
            await self._subscription.close()
            self._subscription = None

        logger.debug(f"Live view unmounted from {self.topic}")

    async def __aenter__(self) -> "LiveOrderView":
        await self.mount()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.unmount()
