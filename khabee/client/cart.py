"""
Shopping Cart

``Cart`` holds the lines a shopper has picked, keyed by menu item id in
insertion order. ``CartStore`` wraps a cart and writes it to a storage
adapter after every change, reading it back when constructed, so a cart
survives restarts the way a browser cart survives page reloads.

Stored format: a JSON array of ``{id, name, price, quantity, image}``.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Iterable, Mapping, Optional, Union

from khabee.client.storage import BaseStorage, MemoryStorage
from khabee.core.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


@dataclass
class CartItem:
    """One cart line. ``id`` is the menu item id."""
    id: str
    name: str
    price: float
    quantity: int = 1
    image: Optional[str] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "CartItem":
        quantity = int(record["quantity"])
        if quantity < 1:
            raise ValueError(f"Invalid quantity {quantity} for {record['id']}")
        return cls(
            id=str(record["id"]),
            name=str(record["name"]),
            price=float(record["price"]),
            quantity=quantity,
            image=record.get("image"),
        )


ItemLike = Union[CartItem, Mapping[str, Any]]


class Cart:
    """In-memory cart. Every line has quantity >= 1 and a unique id."""

    def __init__(self, items: Iterable[CartItem] = ()):
        self._items: dict[str, CartItem] = {}
        for item in items:
            self._items[item.id] = item

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> "Cart":
        return cls(CartItem.from_record(r) for r in records)

    @property
    def items(self) -> list[CartItem]:
        return list(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: str) -> bool:
        return item_id in self._items

    def get(self, item_id: str) -> Optional[CartItem]:
        return self._items.get(item_id)

    def add_item(self, item: ItemLike) -> CartItem:
        """
        Add one unit of a menu item.

        A known id only gains a unit; its name and price stay as first
        added. Any quantity on ``item`` is ignored.
        """
        if isinstance(item, Mapping):
            item_id, name, price, image = item["id"], item["name"], item["price"], item.get("image")
        else:
            item_id, name, price, image = item.id, item.name, item.price, item.image

        existing = self._items.get(item_id)
        if existing is not None:
            existing.quantity += 1
            return existing

        line = CartItem(id=item_id, name=name, price=float(price), quantity=1, image=image)
        self._items[item_id] = line
        return line

    def remove_item(self, item_id: str) -> None:
        self._items.pop(item_id, None)

    def update_quantity(self, item_id: str, quantity: int) -> None:
        """Set a line's quantity; zero or less removes it. Unknown ids are ignored."""
        if quantity <= 0:
            self.remove_item(item_id)
            return

        line = self._items.get(item_id)
        if line is not None:
            line.quantity = quantity

    def clear_cart(self) -> None:
        self._items.clear()

    def get_total(self) -> float:
        return sum(item.price * item.quantity for item in self._items.values())

    def get_item_count(self) -> int:
        return sum(item.quantity for item in self._items.values())

    def to_order_items(self) -> list[dict[str, Any]]:
        """Checkout payload lines: ``[{menuItemId, quantity, price}]``."""
        return [
            {"menuItemId": item.id, "quantity": item.quantity, "price": item.price}
            for item in self._items.values()
        ]

    def to_records(self) -> list[dict[str, Any]]:
        return [asdict(item) for item in self._items.values()]


class CartStore:
    """
    Persistent cart.

    Args:
        storage: Where the cart lives (defaults to process memory)
        key: Storage key (defaults to ``CART_STORAGE_KEY``)
    """

    def __init__(self, storage: Optional[BaseStorage] = None, key: Optional[str] = None):
        self.storage = storage or MemoryStorage()
        self.key = key or settings.cart_storage_key
        self.cart = self._load()

    def _load(self) -> Cart:
        try:
            records = self.storage.get_item(self.key)
            if not records:
                return Cart()
            if not isinstance(records, list):
                raise TypeError(f"expected a list, got {type(records).__name__}")
            return Cart.from_records(records)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Discarding unreadable cart under '{self.key}': {e}")
            return Cart()

    def _save(self) -> None:
        try:
            self.storage.set_item(self.key, self.cart.to_records())
        except Exception as e:
            logger.error(f"Could not persist cart: {e}")

    @property
    def items(self) -> list[CartItem]:
        return self.cart.items

    def add_item(self, item: ItemLike) -> CartItem:
        line = self.cart.add_item(item)
        self._save()
        return line

    def remove_item(self, item_id: str) -> None:
        self.cart.remove_item(item_id)
        self._save()

    def update_quantity(self, item_id: str, quantity: int) -> None:
        self.cart.update_quantity(item_id, quantity)
        self._save()

    def clear_cart(self) -> None:
        self.cart.clear_cart()
        try:
            self.storage.remove_item(self.key)
        except Exception as e:
            logger.error(f"Could not clear stored cart: {e}")

    def get_total(self) -> float:
        return self.cart.get_total()

    def get_item_count(self) -> int:
        return self.cart.get_item_count()

    def to_order_items(self) -> list[dict[str, Any]]:
        return self.cart.to_order_items()
