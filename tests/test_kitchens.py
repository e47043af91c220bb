"""Kitchen reads, owner menu management and user profiles."""

import pytest
from pydantic import ValidationError

from khabee.core.errors import UnauthorizedError
from khabee.models import MenuItem
from khabee.schemas import KitchenUpdate, MenuItemCreate, MenuItemUpdate, OrderItemIn, PlaceOrderRequest
from khabee.services import kitchens
from khabee.services.orders import place_order
from khabee.services.users import ensure_user_profile, get_user_profile


async def test_list_kitchens_by_name_with_counts(db, world, cache):
    await place_order(db, world.customer, PlaceOrderRequest(items=[
        OrderItemIn(menu_item_id=world.burger.id, quantity=1, price=180.0),
    ]))

    result = await kitchens.list_kitchens(db, cache=cache)

    assert [k.name for k in result] == ["Ammi's Kitchen", "Burger Haven"]
    assert (result[0].menu_item_count, result[0].order_count) == (2, 0)
    assert (result[1].menu_item_count, result[1].order_count) == (1, 1)


async def test_list_kitchens_served_from_cache(db, world, cache):
    await kitchens.list_kitchens(db, cache=cache)
    world.kitchen.name = "Renamed Without Revalidation"
    await db.commit()

    cached = await kitchens.list_kitchens(db, cache=cache)
    assert cached[0].name == "Ammi's Kitchen"

    await cache.revalidate_path("/")
    fresh = await kitchens.list_kitchens(db, cache=cache)
    assert "Renamed Without Revalidation" in [k.name for k in fresh]


async def test_kitchen_with_menu(db, world, cache):
    detail = await kitchens.get_kitchen_with_menu(db, world.kitchen.id, cache=cache)

    assert detail.name == "Ammi's Kitchen"
    assert [m.name for m in detail.menu_items] == ["Chicken Biryani", "Chocolate Cake"]
    assert detail.order_count == 0


async def test_missing_kitchen(db, world, cache):
    assert await kitchens.get_kitchen_with_menu(db, "nope", cache=cache) is None


async def test_owner_adds_menu_item_and_page_refreshes(db, world, cache):
    await kitchens.get_kitchen_with_menu(db, world.kitchen.id, cache=cache)

    result = await kitchens.add_menu_item(
        db,
        world.kitchen.id,
        MenuItemCreate(name="Beef Tehari", price=220.0),
        world.owner,
        cache=cache,
    )

    assert result.success
    assert result.status_code == 201
    detail = await kitchens.get_kitchen_with_menu(db, world.kitchen.id, cache=cache)
    assert "Beef Tehari" in [m.name for m in detail.menu_items]


async def test_non_owner_cannot_add(db, world, cache):
    result = await kitchens.add_menu_item(
        db, world.kitchen.id, MenuItemCreate(name="Sneaky", price=1.0), world.customer, cache=cache,
    )
    assert result.error == "Unauthorized"
    assert result.status_code == 403


async def test_add_to_missing_kitchen(db, world, cache):
    result = await kitchens.add_menu_item(
        db, "nope", MenuItemCreate(name="Ghost", price=1.0), world.owner, cache=cache,
    )
    assert result.error == "Kitchen not found"


async def test_update_menu_item(db, world, cache):
    result = await kitchens.update_menu_item(
        db, world.cake.id, MenuItemUpdate(price=150.0), world.owner, cache=cache,
    )

    assert result.success
    assert result.menu_item.price == 150.0
    assert result.menu_item.name == "Chocolate Cake"


@pytest.mark.parametrize("actor_name, error", [
    ("customer", "Unauthorized"),
    (None, "Authentication required"),
])
async def test_update_menu_item_refused(db, world, cache, actor_name, error):
    actor = getattr(world, actor_name) if actor_name else None
    result = await kitchens.update_menu_item(db, world.cake.id, MenuItemUpdate(price=1.0), actor, cache=cache)
    assert result.error == error


@pytest.mark.parametrize("schema, body", [
    (MenuItemUpdate, {"name": None}),
    (MenuItemUpdate, {"price": None}),
    (KitchenUpdate, {"name": None}),
])
def test_required_columns_cannot_be_nulled(schema, body):
    with pytest.raises(ValidationError):
        schema.model_validate(body)


def test_optional_columns_can_be_cleared():
    update = MenuItemUpdate.model_validate({"description": None})
    assert update.model_dump(exclude_unset=True) == {"description": None}


async def test_delete_menu_item(db, world, cache):
    result = await kitchens.delete_menu_item(db, world.cake.id, world.owner, cache=cache)

    assert result.success
    assert await db.get(MenuItem, world.cake.id) is None


async def test_delete_unknown_menu_item(db, world, cache):
    result = await kitchens.delete_menu_item(db, "nope", world.owner, cache=cache)
    assert result.error == "Menu item not found"
    assert result.status_code == 404


async def test_update_kitchen_profile(db, world, cache):
    await kitchens.list_kitchens(db, cache=cache)

    result = await kitchens.update_kitchen_profile(
        db, world.kitchen.id, KitchenUpdate(description="Now with breakfast"), world.owner, cache=cache,
    )

    assert result.success
    assert result.kitchen.description == "Now with breakfast"
    listing = await kitchens.list_kitchens(db, cache=cache)
    assert listing[0].description == "Now with breakfast"


async def test_dashboard(db, world):
    for _ in range(12):
        await place_order(db, world.customer, PlaceOrderRequest(items=[
            OrderItemIn(menu_item_id=world.biryani.id, quantity=1, price=100.0),
        ]))

    dashboard = await kitchens.get_kitchen_dashboard(db, world.kitchen.id, world.owner)

    assert len(dashboard.recent_orders) == 10
    assert dashboard.recent_orders[0].user.name == "Rahim"
    assert dashboard.menu_stats.total_items == 2
    assert dashboard.menu_stats.average_price == 110.0
    assert dashboard.kitchen.order_count == 12


async def test_dashboard_owner_only(db, world):
    with pytest.raises(UnauthorizedError):
        await kitchens.get_kitchen_dashboard(db, world.kitchen.id, world.customer)


async def test_profile_created_once(db):
    first = await ensure_user_profile(db, "user-1", "+8801800000000")
    again = await ensure_user_profile(db, "user-1", "+8801800000000")

    assert first.id == again.id == "user-1"
    assert first.role.value == "CUSTOMER"


async def test_profile_with_owned_kitchens(db, world):
    profile = await get_user_profile(db, world.owner.id)

    assert profile.role.value == "KITCHEN_OWNER"
    assert sorted(k.name for k in profile.kitchens) == ["Ammi's Kitchen", "Burger Haven"]
    assert profile.order_count == 0
    assert await get_user_profile(db, "nobody") is None
