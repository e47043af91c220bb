"""Order reads: per customer, per kitchen, single order."""

from datetime import datetime, timedelta, timezone

from khabee.models import Order, OrderItem
from khabee.services.orders import get_kitchen_orders, get_order, get_user_orders


async def add_order(db, world, menu_item, minutes_ago: int, user=None) -> Order:
    order = Order(
        user_id=(user or world.customer).id,
        kitchen_id=menu_item.kitchen_id,
        subtotal=menu_item.price,
        delivery_fee=50.0,
        tax=round(menu_item.price * 0.05, 2),
        total_price=round(menu_item.price * 1.05 + 50.0, 2),
        created_at=datetime.now(timezone.utc) - timedelta(minutes=minutes_ago),
    )
    db.add(order)
    await db.flush()
    db.add(OrderItem(order_id=order.id, menu_item_id=menu_item.id, quantity=1, price=menu_item.price))
    await db.commit()
    return order


async def test_user_orders_newest_first_with_kitchen(db, world):
    older = await add_order(db, world, world.biryani, minutes_ago=30)
    newer = await add_order(db, world, world.burger, minutes_ago=5)
    await add_order(db, world, world.cake, minutes_ago=1, user=world.stranger)

    result = await get_user_orders(db, world.customer.id)

    assert result.success
    assert [o.id for o in result.orders] == [newer.id, older.id]
    assert result.orders[0].kitchen.name == "Burger Haven"
    assert result.orders[1].items[0].menu_item.name == "Chicken Biryani"


async def test_user_without_orders(db, world):
    result = await get_user_orders(db, world.stranger.id)
    assert result.success
    assert result.orders == []


async def test_user_orders_fail_soft(db, world, monkeypatch):
    async def broken(*args, **kwargs):
        raise RuntimeError("connection reset")

    monkeypatch.setattr("khabee.services.orders.query.fetch_user_orders", broken)

    result = await get_user_orders(db, world.customer.id)

    assert result.success is False
    assert result.orders == []
    assert result.error == "Failed to fetch orders"


async def test_kitchen_orders_with_customer_summary(db, world):
    first = await add_order(db, world, world.biryani, minutes_ago=20)
    second = await add_order(db, world, world.cake, minutes_ago=2, user=world.stranger)
    await add_order(db, world, world.burger, minutes_ago=1)

    result = await get_kitchen_orders(db, world.kitchen.id, actor=world.owner)

    assert result.success
    assert [o.id for o in result.orders] == [second.id, first.id]
    assert result.orders[0].user.name == "Karim"


async def test_kitchen_orders_owner_only(db, world):
    await add_order(db, world, world.biryani, minutes_ago=1)

    result = await get_kitchen_orders(db, world.kitchen.id, actor=world.customer)

    assert not result.success
    assert result.orders == []
    assert result.error == "Unauthorized"
    assert result.status_code == 403


async def test_kitchen_orders_unknown_kitchen(db, world):
    result = await get_kitchen_orders(db, "nope", actor=world.owner)
    assert result.error == "Kitchen not found"
    assert result.status_code == 404


async def test_kitchen_orders_fail_soft(db, world, monkeypatch):
    async def broken(*args, **kwargs):
        raise RuntimeError("connection reset")

    monkeypatch.setattr("khabee.services.orders.query.fetch_kitchen_orders", broken)

    result = await get_kitchen_orders(db, world.kitchen.id)

    assert result.success is False
    assert result.error == "Failed to fetch orders"


async def test_single_order_visible_to_customer_and_owner(db, world):
    order = await add_order(db, world, world.biryani, minutes_ago=1)

    for actor in (world.customer, world.owner):
        result = await get_order(db, order.id, actor)
        assert result.success
        assert result.order.user.phone == world.customer.phone

    refused = await get_order(db, order.id, world.stranger)
    assert refused.status_code == 403

    anonymous = await get_order(db, order.id, None)
    assert anonymous.status_code == 401

    missing = await get_order(db, "missing", world.owner)
    assert missing.error == "Order not found"
