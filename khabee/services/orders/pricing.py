"""Order pricing."""

from typing import Iterable, Optional, Protocol

from khabee.core.config import get_settings

settings = get_settings()


class PricedLine(Protocol):
    price: float
    quantity: int


def calculate_order_totals(
    items: Iterable[PricedLine],
    delivery_fee: Optional[float] = None,
    tax_rate: Optional[float] = None,
) -> dict[str, float]:
    """
    Calculate order subtotal, delivery fee, tax, and total.

    Uses the unit prices carried by the lines themselves; current menu
    prices are never consulted.
    """
    fee = settings.delivery_fee if delivery_fee is None else delivery_fee
    rate = settings.tax_rate if tax_rate is None else tax_rate

    subtotal = sum(item.price * item.quantity for item in items)
    tax = subtotal * rate

    # Round the reported values only; the total is built from the unrounded tax
    return {
        "subtotal": round(subtotal, 2),
        "delivery_fee": fee,
        "tax": round(tax, 2),
        "total_price": round(subtotal + fee + tax, 2),
    }
