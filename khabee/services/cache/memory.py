"""
In-Memory View Cache

Development and test implementation. Lives in one process only.
"""

import logging
import time
from typing import Any, Optional

from khabee.services.cache.base import BasePageCache

logger = logging.getLogger(__name__)


class MemoryPageCache(BasePageCache):
    """Dictionary-backed cache with per-entry expiry."""

    def __init__(self):
        # path -> key -> (expires_at, value)
        self._entries: dict[str, dict[str, tuple[float, Any]]] = {}
        logger.info("MemoryPageCache initialized")

    @property
    def provider_name(self) -> str:
        return "memory"

    async def get(self, path: str, key: str) -> Optional[Any]:
        entry = self._entries.get(path, {}).get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if expires_at < time.monotonic():
            del self._entries[path][key]
            return None
        return value

    async def set(self, path: str, key: str, value: Any, ttl: int) -> None:
        self._entries.setdefault(path, {})[key] = (time.monotonic() + ttl, value)

    async def revalidate_path(self, path: str) -> None:
        dropped = self._entries.pop(path, {})
        logger.debug(f"Revalidated {path} ({len(dropped)} entries)")

    async def health_check(self) -> bool:
        return True
