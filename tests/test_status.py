"""Kitchen-owner status updates."""

import pytest

from khabee.schemas import OrderItemIn, PlaceOrderRequest
from khabee.services.orders import load_order, place_order, status_badge, status_label, update_order_status
from khabee.services.orders.status import DEFAULT_STATUS_STYLE, normalize_status
from khabee.core.errors import ValidationError
from khabee.services.realtime import topics


@pytest.fixture
async def order(db, world):
    result = await place_order(db, world.customer, PlaceOrderRequest(items=[
        OrderItemIn(menu_item_id=world.biryani.id, quantity=2, price=100.0),
    ]))
    return result.order


def snapshot(order) -> dict:
    return {
        "totals": (order.subtotal, order.delivery_fee, order.tax, order.total_price),
        "user_id": order.user_id,
        "kitchen_id": order.kitchen_id,
        "delivery_address": order.delivery_address,
        "created_at": order.created_at,
        "items": [(i.id, i.menu_item_id, i.quantity, i.price) for i in order.items],
    }


async def test_owner_updates_status(db, world, order):
    await update_order_status(db, order.id, "COOKING", world.owner)
    before = snapshot(order)

    result = await update_order_status(db, order.id, "DELIVERED", world.owner)

    assert result.success
    assert result.order.status == "DELIVERED"
    assert snapshot(result.order) == before

    reloaded = await load_order(db, order.id)
    assert reloaded.status == "DELIVERED"
    assert snapshot(reloaded) == before


async def test_status_is_normalized(db, world, order):
    result = await update_order_status(db, order.id, "  out_for_delivery ", world.owner)
    assert result.order.status == "OUT_FOR_DELIVERY"


async def test_unknown_status_is_stored(db, world, order):
    result = await update_order_status(db, order.id, "REFUNDED", world.owner)

    assert result.success
    assert result.order.status == "REFUNDED"
    assert status_badge("REFUNDED") == DEFAULT_STATUS_STYLE


async def test_any_transition_is_allowed(db, world, order):
    await update_order_status(db, order.id, "DELIVERED", world.owner)
    result = await update_order_status(db, order.id, "PENDING", world.owner)
    assert result.order.status == "PENDING"


@pytest.mark.parametrize("actor_name, error, status_code", [
    ("customer", "Unauthorized", 403),
    ("stranger", "Unauthorized", 403),
    (None, "Authentication required", 401),
])
async def test_only_kitchen_owner(db, world, order, actor_name, error, status_code):
    actor = getattr(world, actor_name) if actor_name else None

    result = await update_order_status(db, order.id, "CANCELLED", actor)

    assert not result.success
    assert result.error == error
    assert result.status_code == status_code

    unchanged = await update_order_status(db, order.id, "CONFIRMED", world.owner)
    assert unchanged.success


async def test_refused_update_keeps_previous_status(db, world, order):
    await update_order_status(db, order.id, "CANCELLED", world.customer)

    again = await update_order_status(db, order.id, "", world.owner)

    assert again.error == "Status is required"
    assert order.status == "PENDING"


async def test_failed_commit_keeps_previous_status(db, world, order, feed, sms, monkeypatch):
    order_id = order.id
    await update_order_status(db, order_id, "COOKING", world.owner)
    sub = await feed.subscribe(topics.single_order(order_id))

    async def broken_commit():
        raise ConnectionError("database went away")

    monkeypatch.setattr(db, "commit", broken_commit)

    result = await update_order_status(db, order_id, "DELIVERED", world.owner, feed=feed)

    assert not result.success
    assert result.error == "Failed to update order status"
    assert result.status_code == 500
    assert sub._queue.empty()
    assert len(sms.sent) == 1

    reloaded = await load_order(db, order_id)
    assert reloaded.status == "COOKING"


async def test_missing_order(db, world):
    result = await update_order_status(db, "missing", "READY", world.owner)
    assert result.error == "Order not found"
    assert result.status_code == 404


async def test_announces_update_and_texts_customer(db, world, order, feed, sms):
    sub = await feed.subscribe(topics.single_order(order.id))

    await update_order_status(db, order.id, "READY", world.owner, feed=feed)

    signal = sub._queue.get_nowait()
    assert signal.payload == {
        "event": "UPDATE",
        "order_id": order.id,
        "kitchen_id": world.kitchen.id,
        "status": "READY",
    }
    assert len(sms.sent) == 1
    phone, message = sms.sent[0]
    assert phone == world.customer.phone
    assert "Ammi's Kitchen" in message


async def test_sms_failure_does_not_fail_update(db, world, order, monkeypatch):
    class BrokenTask:
        def delay(self, order_data):
            raise ConnectionError("broker down")

    monkeypatch.setattr("khabee.services.orders.status.notify_order_status", BrokenTask())

    result = await update_order_status(db, order.id, "READY", world.owner)
    assert result.success


def test_badges_and_labels():
    assert status_badge("PENDING") == "badge-pending"
    assert status_badge("delivered") == "badge-delivered"
    assert status_badge(None) == DEFAULT_STATUS_STYLE
    assert status_label("OUT_FOR_DELIVERY") == "Out For Delivery"


def test_blank_status_rejected():
    with pytest.raises(ValidationError):
        normalize_status("   ")
