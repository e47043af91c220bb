"""
Order Query Service

Reads orders with their nested detail, newest first. The list functions
fail soft: a retrieval error yields ``success=False`` with an empty list,
which callers must read as "could not load", not "no orders".
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from khabee.core.errors import AppError, AuthError, NotFoundError, UnauthorizedError
from khabee.models import Kitchen, Order, OrderItem
from khabee.services.auth import AuthUser

logger = logging.getLogger(__name__)

FETCH_ERROR = "Failed to fetch orders"


@dataclass
class OrderListResult:
    success: bool
    orders: list[Order] = field(default_factory=list)
    error: Optional[str] = None
    status_code: int = 200


@dataclass
class OrderResult:
    success: bool
    order: Optional[Order] = None
    error: Optional[str] = None
    status_code: int = 200


def _with_items():
    return selectinload(Order.items).selectinload(OrderItem.menu_item)


async def load_order(db: AsyncSession, order_id: str) -> Optional[Order]:
    """One order with items (+ menu items), kitchen and user, read fresh."""
    result = await db.execute(
        select(Order)
        .where(Order.id == order_id)
        .options(_with_items(), selectinload(Order.kitchen), selectinload(Order.user))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def fetch_user_orders(db: AsyncSession, user_id: str) -> list[Order]:
    result = await db.execute(
        select(Order)
        .where(Order.user_id == user_id)
        .options(_with_items(), selectinload(Order.kitchen))
        .order_by(Order.created_at.desc())
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def fetch_kitchen_orders(
    db: AsyncSession,
    kitchen_id: str,
    limit: Optional[int] = None,
) -> list[Order]:
    query = (
        select(Order)
        .where(Order.kitchen_id == kitchen_id)
        .options(_with_items(), selectinload(Order.user))
        .order_by(Order.created_at.desc())
        .execution_options(populate_existing=True)
    )
    if limit is not None:
        query = query.limit(limit)

    result = await db.execute(query)
    return list(result.scalars().all())


async def require_kitchen_owner(
    db: AsyncSession,
    kitchen_id: str,
    actor: Optional[AuthUser],
) -> Kitchen:
    """Return the kitchen if ``actor`` owns it."""
    if actor is None:
        raise AuthError()

    kitchen = await db.get(Kitchen, kitchen_id)
    if kitchen is None:
        raise NotFoundError("Kitchen not found")
    if kitchen.owner_id != actor.id:
        raise UnauthorizedError()
    return kitchen


async def get_user_orders(db: AsyncSession, user_id: str) -> OrderListResult:
    """All orders of a customer with items and kitchen summary."""
    try:
        orders = await fetch_user_orders(db, user_id)
    except Exception as e:
        logger.error(f"Error fetching orders for user {user_id}: {e}")
        return OrderListResult(success=False, error=FETCH_ERROR, status_code=500)

    return OrderListResult(success=True, orders=orders)


async def get_kitchen_orders(
    db: AsyncSession,
    kitchen_id: str,
    actor: Optional[AuthUser] = None,
) -> OrderListResult:
    """
    All orders of a kitchen with items and customer summary.

    When ``actor`` is given the kitchen must belong to them.
    """
    try:
        if actor is not None:
            await require_kitchen_owner(db, kitchen_id, actor)
        orders = await fetch_kitchen_orders(db, kitchen_id)
    except AppError as e:
        logger.warning(f"Kitchen orders refused for {kitchen_id}: {e.message}")
        return OrderListResult(success=False, error=e.message, status_code=e.status_code)
    except Exception as e:
        logger.error(f"Error fetching orders for kitchen {kitchen_id}: {e}")
        return OrderListResult(success=False, error=FETCH_ERROR, status_code=500)

    return OrderListResult(success=True, orders=orders)


async def get_order(
    db: AsyncSession,
    order_id: str,
    actor: Optional[AuthUser],
) -> OrderResult:
    """One order, visible to its customer and to the kitchen's owner."""
    try:
        if actor is None:
            raise AuthError()
        order = await load_order(db, order_id)
        if order is None:
            raise NotFoundError("Order not found")
        if actor.id not in (order.user_id, order.kitchen.owner_id):
            raise UnauthorizedError()
    except AppError as e:
        return OrderResult(success=False, error=e.message, status_code=e.status_code)
    except Exception as e:
        logger.error(f"Error fetching order {order_id}: {e}")
        return OrderResult(success=False, error="Failed to fetch order", status_code=500)

    return OrderResult(success=True, order=order)
