"""
Order Status Update Service

Kitchen owners move their orders through statuses. The status set is
open: any non-blank value may follow any other, and values without a
known style render with the default badge.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from khabee.core.errors import (
    AppError,
    AuthError,
    NotFoundError,
    PersistenceError,
    UnauthorizedError,
    ValidationError,
)
from khabee.models import Order, OrderStatus
from khabee.services.auth import AuthUser
from khabee.services.cache import BasePageCache, get_page_cache
from khabee.services.orders.query import OrderResult, load_order
from khabee.services.realtime import BaseChangeFeed, announce_order_change, get_change_feed
from khabee.tasks import notify_order_status

logger = logging.getLogger(__name__)

STATUS_STYLES = {
    OrderStatus.PENDING.value: "badge-pending",
    OrderStatus.CONFIRMED.value: "badge-confirmed",
    OrderStatus.COOKING.value: "badge-cooking",
    OrderStatus.READY.value: "badge-ready",
    OrderStatus.OUT_FOR_DELIVERY.value: "badge-on-the-way",
    OrderStatus.DELIVERED.value: "badge-delivered",
    OrderStatus.CANCELLED.value: "badge-cancelled",
}
DEFAULT_STATUS_STYLE = "badge-default"


def status_badge(status: Optional[str]) -> str:
    """CSS badge class for a status, falling back for unknown values."""
    return STATUS_STYLES.get((status or "").upper(), DEFAULT_STATUS_STYLE)


def status_label(status: Optional[str]) -> str:
    return (status or "UNKNOWN").replace("_", " ").title()


def normalize_status(status: Optional[str]) -> str:
    value = (status or "").strip().upper()
    if not value:
        raise ValidationError("Status is required")
    return value


def _queue_customer_sms(order: Order) -> None:
    try:
        notify_order_status.delay({
            "order_id": order.id,
            "customer_phone": order.user.phone,
            "kitchen_name": order.kitchen.name,
            "status": order.status,
            "total_price": order.total_price,
        })
    except Exception as e:
        logger.warning(f"Could not queue status SMS for order {order.id}: {e}")


async def change_order_status(
    db: AsyncSession,
    order_id: str,
    status: str,
    actor: Optional[AuthUser],
    cache: Optional[BasePageCache] = None,
    feed: Optional[BaseChangeFeed] = None,
) -> Order:
    """
    Overwrite an order's status. Only the owner of the order's kitchen may.

    Raises:
        AuthError, ValidationError, NotFoundError, UnauthorizedError,
        PersistenceError (previous status kept)
    """
    if actor is None:
        raise AuthError()
    new_status = normalize_status(status)

    order = await load_order(db, order_id)
    if order is None:
        raise NotFoundError("Order not found")
    if order.kitchen.owner_id != actor.id:
        raise UnauthorizedError()

    previous = order.status
    try:
        order.status = new_status
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.exception(f"Status update rolled back for order {order_id}: {e}")
        raise PersistenceError("Failed to update order status") from e

    logger.info(f"Order {order_id}: {previous} -> {new_status}")

    order = await load_order(db, order_id)

    cache = cache or get_page_cache()
    await cache.revalidate_paths("/orders", f"/kitchen/{order.kitchen_id}")

    await announce_order_change(
        feed or get_change_feed(),
        "UPDATE",
        order_id=order.id,
        kitchen_id=order.kitchen_id,
        user_id=order.user_id,
        status=new_status,
    )
    _queue_customer_sms(order)

    return order


async def update_order_status(
    db: AsyncSession,
    order_id: str,
    status: str,
    actor: Optional[AuthUser],
    cache: Optional[BasePageCache] = None,
    feed: Optional[BaseChangeFeed] = None,
) -> OrderResult:
    """Status update entry point: never raises, returns a success/error result."""
    try:
        order = await change_order_status(db, order_id, status, actor, cache=cache, feed=feed)
    except AppError as e:
        logger.error(f"Error updating order status: {e.message}")
        return OrderResult(success=False, error=e.message, status_code=e.status_code)
    except Exception as e:
        logger.exception(f"Unexpected error updating order {order_id}: {e}")
        return OrderResult(
            success=False,
            error="Failed to update order status",
            status_code=500,
        )

    return OrderResult(success=True, order=order)
