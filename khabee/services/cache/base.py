"""
View Cache Abstract Base Class

Path-keyed cache for rendered read models (kitchen list, kitchen pages).
Every entry is registered under the page path that displays it, so a
mutation can drop everything a page shows with one ``revalidate_path``.

Implementations must treat backend failures as misses: a broken cache
never fails the request that used it.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class BasePageCache(ABC):
    """Abstract base class for view caches."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    async def get(self, path: str, key: str) -> Optional[Any]:
        """Return the cached JSON value or None on miss/expiry/failure."""
        pass

    @abstractmethod
    async def set(self, path: str, key: str, value: Any, ttl: int) -> None:
        """Store a JSON-serializable value under ``path`` for ``ttl`` seconds."""
        pass

    @abstractmethod
    async def revalidate_path(self, path: str) -> None:
        """Drop every entry registered under ``path``."""
        pass

    async def revalidate_paths(self, *paths: str) -> None:
        for path in paths:
            await self.revalidate_path(path)

    @abstractmethod
    async def health_check(self) -> bool:
        """Check backend connectivity."""
        pass
