"""
Kitchen & Menu Service

Public reads (kitchen list, kitchen page) go through the view cache.
Owner mutations check session and ownership, then drop the cached pages
that show the changed data.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from khabee.core.config import get_settings
from khabee.core.errors import AppError, AuthError, NotFoundError, PersistenceError, UnauthorizedError
from khabee.models import Kitchen, MenuItem, Order
from khabee.schemas import (
    KitchenDashboardOut,
    KitchenDetail,
    KitchenListItem,
    KitchenOrderOut,
    KitchenUpdate,
    MenuItemCreate,
    MenuItemUpdate,
    MenuStats,
)
from khabee.services.auth import AuthUser
from khabee.services.cache import BasePageCache, get_page_cache
from khabee.services.orders.query import fetch_kitchen_orders, require_kitchen_owner

logger = logging.getLogger(__name__)
settings = get_settings()

KITCHENS_CACHE_KEY = "kitchens"


@dataclass
class MenuItemResult:
    success: bool
    menu_item: Optional[MenuItem] = None
    error: Optional[str] = None
    status_code: int = 200


@dataclass
class KitchenResult:
    success: bool
    kitchen: Optional[Kitchen] = None
    error: Optional[str] = None
    status_code: int = 200


def kitchen_path(kitchen_id: str) -> str:
    return f"/kitchen/{kitchen_id}"


# =============================================================================
# READS
# =============================================================================

async def _order_counts(db: AsyncSession) -> dict[str, int]:
    result = await db.execute(
        select(Order.kitchen_id, func.count(Order.id)).group_by(Order.kitchen_id)
    )
    return dict(result.all())


async def list_kitchens(
    db: AsyncSession,
    cache: Optional[BasePageCache] = None,
) -> list[KitchenListItem]:
    """All kitchens by name, with menu and order counts. Empty on error."""
    cache = cache or get_page_cache()

    cached = await cache.get("/", KITCHENS_CACHE_KEY)
    if cached is not None:
        return [KitchenListItem.model_validate(k) for k in cached]

    try:
        result = await db.execute(
            select(Kitchen)
            .options(selectinload(Kitchen.menu_items))
            .order_by(Kitchen.name.asc())
        )
        kitchens = result.scalars().all()
        order_counts = await _order_counts(db)
    except Exception as e:
        logger.error(f"Error fetching kitchens: {e}")
        return []

    items = [
        KitchenListItem(
            id=k.id,
            name=k.name,
            description=k.description,
            logo=k.logo,
            address=k.address,
            menu_item_count=len(k.menu_items),
            order_count=order_counts.get(k.id, 0),
        )
        for k in kitchens
    ]

    await cache.set(
        "/",
        KITCHENS_CACHE_KEY,
        [item.model_dump(mode="json") for item in items],
        ttl=settings.kitchens_cache_ttl,
    )
    return items


async def get_kitchen_with_menu(
    db: AsyncSession,
    kitchen_id: str,
    cache: Optional[BasePageCache] = None,
) -> Optional[KitchenDetail]:
    """A kitchen with its menu (by name) and order count, or None."""
    cache = cache or get_page_cache()
    path = kitchen_path(kitchen_id)
    key = f"kitchen-menu:{kitchen_id}"

    cached = await cache.get(path, key)
    if cached is not None:
        return KitchenDetail.model_validate(cached)

    try:
        result = await db.execute(
            select(Kitchen)
            .where(Kitchen.id == kitchen_id)
            .options(selectinload(Kitchen.menu_items))
            .execution_options(populate_existing=True)
        )
        kitchen = result.scalar_one_or_none()
        if kitchen is None:
            return None

        count = await db.execute(
            select(func.count(Order.id)).where(Order.kitchen_id == kitchen_id)
        )
        detail = KitchenDetail.model_validate(kitchen)
        detail.order_count = count.scalar() or 0
    except Exception as e:
        logger.error(f"Error fetching kitchen with menu {kitchen_id}: {e}")
        return None

    await cache.set(path, key, detail.model_dump(mode="json"), ttl=settings.kitchen_menu_cache_ttl)
    return detail


async def get_kitchen_dashboard(
    db: AsyncSession,
    kitchen_id: str,
    actor: Optional[AuthUser],
) -> KitchenDashboardOut:
    """
    Owner overview: kitchen + menu, ten latest orders, menu statistics.

    Raises:
        AuthError, NotFoundError, UnauthorizedError
    """
    await require_kitchen_owner(db, kitchen_id, actor)

    detail = await get_kitchen_with_menu(db, kitchen_id)
    if detail is None:
        raise NotFoundError("Kitchen not found")

    recent = await fetch_kitchen_orders(db, kitchen_id, limit=10)

    stats = await db.execute(
        select(func.count(MenuItem.id), func.sum(MenuItem.price))
        .where(MenuItem.kitchen_id == kitchen_id)
    )
    total_items, price_sum = stats.one()
    average = round(price_sum / total_items, 2) if total_items else 0.0

    return KitchenDashboardOut(
        kitchen=detail,
        recent_orders=[KitchenOrderOut.model_validate(o) for o in recent],
        menu_stats=MenuStats(total_items=total_items, average_price=average),
    )


# =============================================================================
# OWNER MUTATIONS
# =============================================================================

async def _owned_menu_item(
    db: AsyncSession,
    menu_item_id: str,
    actor: Optional[AuthUser],
) -> MenuItem:
    result = await db.execute(
        select(MenuItem)
        .where(MenuItem.id == menu_item_id)
        .options(selectinload(MenuItem.kitchen))
    )
    menu_item = result.scalar_one_or_none()
    if menu_item is None:
        raise NotFoundError("Menu item not found")
    if actor is None:
        raise AuthError()
    if menu_item.kitchen.owner_id != actor.id:
        raise UnauthorizedError()
    return menu_item


async def _commit(db: AsyncSession, what: str) -> None:
    try:
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.exception(f"Error saving {what}: {e}")
        raise PersistenceError(f"Failed to save {what}") from e


async def _revalidate_kitchen(cache: Optional[BasePageCache], kitchen_id: str) -> None:
    await (cache or get_page_cache()).revalidate_paths(kitchen_path(kitchen_id), "/")


async def add_menu_item(
    db: AsyncSession,
    kitchen_id: str,
    data: MenuItemCreate,
    actor: Optional[AuthUser],
    cache: Optional[BasePageCache] = None,
) -> MenuItemResult:
    try:
        kitchen = await db.get(Kitchen, kitchen_id)
        if kitchen is None:
            raise NotFoundError("Kitchen not found")
        await require_kitchen_owner(db, kitchen_id, actor)

        menu_item = MenuItem(kitchen_id=kitchen_id, **data.model_dump())
        db.add(menu_item)
        await _commit(db, "menu item")
    except AppError as e:
        logger.error(f"Error adding menu item: {e.message}")
        return MenuItemResult(success=False, error=e.message, status_code=e.status_code)

    await _revalidate_kitchen(cache, kitchen_id)
    logger.info(f"Menu item {menu_item.id} added to kitchen {kitchen_id}")
    return MenuItemResult(success=True, menu_item=menu_item, status_code=201)


async def update_menu_item(
    db: AsyncSession,
    menu_item_id: str,
    data: MenuItemUpdate,
    actor: Optional[AuthUser],
    cache: Optional[BasePageCache] = None,
) -> MenuItemResult:
    try:
        menu_item = await _owned_menu_item(db, menu_item_id, actor)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(menu_item, field, value)
        await _commit(db, "menu item")
    except AppError as e:
        logger.error(f"Error updating menu item: {e.message}")
        return MenuItemResult(success=False, error=e.message, status_code=e.status_code)

    await _revalidate_kitchen(cache, menu_item.kitchen_id)
    return MenuItemResult(success=True, menu_item=menu_item)


async def delete_menu_item(
    db: AsyncSession,
    menu_item_id: str,
    actor: Optional[AuthUser],
    cache: Optional[BasePageCache] = None,
) -> MenuItemResult:
    try:
        menu_item = await _owned_menu_item(db, menu_item_id, actor)
        kitchen_id = menu_item.kitchen_id
        await db.delete(menu_item)
        await _commit(db, "menu item")
    except AppError as e:
        logger.error(f"Error deleting menu item: {e.message}")
        return MenuItemResult(success=False, error=e.message, status_code=e.status_code)

    await _revalidate_kitchen(cache, kitchen_id)
    logger.info(f"Menu item {menu_item_id} deleted from kitchen {kitchen_id}")
    return MenuItemResult(success=True)


async def update_kitchen_profile(
    db: AsyncSession,
    kitchen_id: str,
    data: KitchenUpdate,
    actor: Optional[AuthUser],
    cache: Optional[BasePageCache] = None,
) -> KitchenResult:
    try:
        kitchen = await require_kitchen_owner(db, kitchen_id, actor)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(kitchen, field, value)
        await _commit(db, "kitchen")
    except AppError as e:
        logger.error(f"Error updating kitchen profile: {e.message}")
        return KitchenResult(success=False, error=e.message, status_code=e.status_code)

    await _revalidate_kitchen(cache, kitchen_id)
    return KitchenResult(success=True, kitchen=kitchen)
