"""
Client Side

Persistent shopping cart and an async API client that checks it out.
"""

from khabee.client.cart import Cart, CartItem, CartStore
from khabee.client.storage import BaseStorage, JsonFileStorage, MemoryStorage
from khabee.client.api import KhabeeClient

__all__ = [
    "Cart",
    "CartItem",
    "CartStore",
    "BaseStorage",
    "JsonFileStorage",
    "MemoryStorage",
    "KhabeeClient",
]
