"""
Order Placement Service

Turns a checked-out cart into an order. The order row and all of its
line items are written in one transaction: either everything is
committed or nothing is, so a half-written order is never observable.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from khabee.core.errors import (
    AppError,
    AuthError,
    NotFoundError,
    OrderPlacementError,
    ValidationError,
)
from khabee.models import MenuItem, Order, OrderItem, OrderStatus
from khabee.schemas import OrderItemIn, PlaceOrderRequest
from khabee.services.auth import AuthUser
from khabee.services.cache import BasePageCache, get_page_cache
from khabee.services.orders.pricing import calculate_order_totals
from khabee.services.orders.query import load_order
from khabee.services.realtime import BaseChangeFeed, announce_order_change, get_change_feed

logger = logging.getLogger(__name__)


@dataclass
class OrderPlacementResult:
    success: bool
    order_id: Optional[str] = None
    order: Optional[Order] = None
    error: Optional[str] = None
    status_code: int = 200


async def resolve_kitchen_id(db: AsyncSession, items: Sequence[OrderItemIn]) -> str:
    """
    The kitchen the order belongs to, taken from the first line.

    Every other line must reference an existing menu item of the same
    kitchen; mixed-kitchen carts are rejected rather than misattributed.
    """
    first = await db.get(MenuItem, items[0].menu_item_id)
    if first is None:
        raise NotFoundError("Invalid menu item")

    ids = {item.menu_item_id for item in items}
    result = await db.execute(select(MenuItem.id, MenuItem.kitchen_id).where(MenuItem.id.in_(ids)))
    kitchen_by_item = dict(result.all())

    if ids - kitchen_by_item.keys():
        raise NotFoundError("Invalid menu item")
    if any(kitchen_id != first.kitchen_id for kitchen_id in kitchen_by_item.values()):
        raise ValidationError("All items must come from the same kitchen")

    return first.kitchen_id


async def create_order(
    db: AsyncSession,
    user: Optional[AuthUser],
    request: PlaceOrderRequest,
) -> Order:
    """
    Validate, price and persist an order. Returns the committed row.

    Raises:
        AuthError: no authenticated session
        ValidationError: empty cart or items from several kitchens
        NotFoundError: a menu item id does not resolve
        OrderPlacementError: the insert failed and was rolled back
    """
    if user is None:
        raise AuthError("Authentication required")
    if not request.items:
        raise ValidationError("Cart is empty")

    kitchen_id = await resolve_kitchen_id(db, request.items)
    totals = calculate_order_totals(request.items)

    try:
        order = Order(
            user_id=user.id,
            kitchen_id=kitchen_id,
            status=OrderStatus.PENDING.value,
            delivery_address=request.delivery_address,
            special_instructions=request.special_instructions,
            **totals,
        )
        db.add(order)
        await db.flush()

        db.add_all([
            OrderItem(
                order_id=order.id,
                menu_item_id=item.menu_item_id,
                quantity=item.quantity,
                price=item.price,
            )
            for item in request.items
        ])
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.exception(f"Order insert rolled back for user {user.id}: {e}")
        raise OrderPlacementError() from e

    logger.info(f"Order {order.id} placed: kitchen={kitchen_id} total={totals['total_price']}")
    return order


async def publish_placed_order(
    db: AsyncSession,
    order: Order,
    cache: Optional[BasePageCache] = None,
    feed: Optional[BaseChangeFeed] = None,
) -> Optional[Order]:
    """
    Follow-ups for a committed order: refresh cached pages, reload the
    order with its details and announce the INSERT.

    The order already exists, so failures here are logged and never
    reported as a failed checkout. Returns None if the reload failed.
    """
    order_id, kitchen_id, user_id = order.id, order.kitchen_id, order.user_id

    try:
        await (cache or get_page_cache()).revalidate_paths("/", "/orders", f"/kitchen/{kitchen_id}")
    except Exception as e:
        logger.warning(f"Could not revalidate pages for order {order_id}: {e}")

    placed = None
    try:
        placed = await load_order(db, order_id)
    except Exception as e:
        logger.exception(f"Order {order_id} committed but could not be reloaded: {e}")

    await announce_order_change(
        feed or get_change_feed(),
        "INSERT",
        order_id=order_id,
        kitchen_id=kitchen_id,
        user_id=user_id,
        status=OrderStatus.PENDING.value,
    )

    return placed


async def place_order(
    db: AsyncSession,
    user: Optional[AuthUser],
    request: PlaceOrderRequest,
    cache: Optional[BasePageCache] = None,
    feed: Optional[BaseChangeFeed] = None,
) -> OrderPlacementResult:
    """Checkout entry point: never raises, returns a success/error result."""
    try:
        order = await create_order(db, user, request)
    except AppError as e:
        logger.error(f"Order placement error: {e.message}")
        return OrderPlacementResult(success=False, error=e.message, status_code=e.status_code)
    except Exception as e:
        logger.exception(f"Unexpected order placement error: {e}")
        return OrderPlacementResult(
            success=False,
            error=OrderPlacementError.default_message,
            status_code=500,
        )

    order_id = order.id
    placed = await publish_placed_order(db, order, cache=cache, feed=feed)
    return OrderPlacementResult(success=True, order_id=order_id, order=placed)
