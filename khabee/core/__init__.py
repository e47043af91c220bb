"""
Core module initialization.
Exports configuration, logging utilities and the error taxonomy.
"""

from khabee.core.config import get_settings, Settings, EnvironmentMode
from khabee.core.errors import (
    AppError,
    AuthError,
    NotFoundError,
    ValidationError,
    UnauthorizedError,
    PersistenceError,
    OrderPlacementError,
)

__all__ = [
    "get_settings",
    "Settings",
    "EnvironmentMode",
    "AppError",
    "AuthError",
    "NotFoundError",
    "ValidationError",
    "UnauthorizedError",
    "PersistenceError",
    "OrderPlacementError",
]
