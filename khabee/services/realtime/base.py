"""
Realtime Change-Feed Abstract Base Class

A change-feed tells subscribers that something under a topic changed.
Signals are wake-up calls, not records: delivery is at-least-once and
best-effort, payloads may be partial, and ordering is not guaranteed.
Consumers re-read the database on every signal.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, AsyncIterator


@dataclass
class ChangeSignal:
    """One "something changed" notification."""
    topic: str
    payload: dict[str, Any] = field(default_factory=dict)
    received_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class Subscription(ABC):
    """An open subscription to one topic. Iterate it to receive signals."""

    def __init__(self, topic: str):
        self.topic = topic

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """Whether the subscription is currently receiving signals."""
        pass

    @abstractmethod
    def __aiter__(self) -> AsyncIterator[ChangeSignal]:
        pass

    @abstractmethod
    async def close(self) -> None:
        """Tear the subscription down. Iteration ends after this."""
        pass


class BaseChangeFeed(ABC):
    """Abstract base class for change-feed transports."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    async def publish(self, topic: str, payload: dict[str, Any]) -> None:
        """Announce a change under ``topic``."""
        pass

    @abstractmethod
    async def subscribe(self, topic: str) -> Subscription:
        """Open a subscription to ``topic``."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check transport connectivity."""
        pass

    async def close(self) -> None:
        """Release transport resources."""
        return None
