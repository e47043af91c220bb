"""
Authentication Provider Factory

Returns MockAuthProvider in development and SupabaseAuthProvider otherwise.
"""

import logging
from functools import lru_cache

from khabee.core.config import get_settings
from khabee.services.auth.base import AuthSession, AuthUser, BaseAuthProvider, OtpResult
from khabee.services.auth.mock import MockAuthProvider
from khabee.services.auth.supabase import SupabaseAuthProvider

logger = logging.getLogger(__name__)


@lru_cache()
def get_auth_provider() -> BaseAuthProvider:
    """Get the configured authentication provider."""
    settings = get_settings()

    if settings.is_development:
        logger.info("Auth Provider: Using MockAuthProvider (development mode)")
        return MockAuthProvider()
    else:
        logger.info(f"Auth Provider: Using SupabaseAuthProvider ({settings.env_mode.value} mode)")
        return SupabaseAuthProvider()


def reset_auth_provider() -> None:
    """Clear the cached provider instance."""
    get_auth_provider.cache_clear()


__all__ = [
    "get_auth_provider",
    "reset_auth_provider",
    "BaseAuthProvider",
    "AuthUser",
    "AuthSession",
    "OtpResult",
    "MockAuthProvider",
    "SupabaseAuthProvider",
]
