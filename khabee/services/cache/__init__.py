"""
View Cache Factory

Returns the in-memory cache in development and the Redis cache otherwise.
"""

import logging
from functools import lru_cache

from khabee.core.config import get_settings
from khabee.services.cache.base import BasePageCache
from khabee.services.cache.memory import MemoryPageCache
from khabee.services.cache.redis import RedisPageCache

logger = logging.getLogger(__name__)


@lru_cache()
def get_page_cache() -> BasePageCache:
    """Get the configured view cache."""
    settings = get_settings()

    if settings.is_development:
        logger.info("View Cache: Using MemoryPageCache (development mode)")
        return MemoryPageCache()
    else:
        logger.info(f"View Cache: Using RedisPageCache ({settings.env_mode.value} mode)")
        return RedisPageCache()


def reset_page_cache() -> None:
    """Clear the cached instance."""
    get_page_cache.cache_clear()


__all__ = [
    "get_page_cache",
    "reset_page_cache",
    "BasePageCache",
    "MemoryPageCache",
    "RedisPageCache",
]
