"""Cart core, persistent cart store and storage adapters."""

import json

import pytest

from khabee.client.cart import Cart, CartItem, CartStore
from khabee.client.storage import JsonFileStorage, MemoryStorage
from khabee.schemas import PlaceOrderRequest

BIRYANI = {"id": "m1", "name": "Chicken Biryani", "price": 250.0, "image": None}
CAKE = {"id": "m2", "name": "Chocolate Cake", "price": 120.0, "image": "cake.png"}


class TestCart:

    def test_add_new_item_starts_at_one(self):
        cart = Cart()
        cart.add_item(BIRYANI)
        assert cart.items == [CartItem(id="m1", name="Chicken Biryani", price=250.0, quantity=1)]

    def test_add_existing_item_increments_and_keeps_first_price(self):
        cart = Cart()
        cart.add_item(BIRYANI)
        cart.add_item({**BIRYANI, "name": "Renamed", "price": 999.0})

        line = cart.get("m1")
        assert line.quantity == 2
        assert line.name == "Chicken Biryani"
        assert line.price == 250.0

    def test_add_ignores_quantity_on_input(self):
        cart = Cart()
        cart.add_item(CartItem(id="m1", name="Chicken Biryani", price=250.0, quantity=7))
        assert cart.get("m1").quantity == 1

    def test_items_keep_insertion_order(self):
        cart = Cart()
        cart.add_item(CAKE)
        cart.add_item(BIRYANI)
        cart.add_item(CAKE)
        assert [i.id for i in cart.items] == ["m2", "m1"]

    def test_remove_unknown_item_is_noop(self):
        cart = Cart()
        cart.add_item(BIRYANI)
        cart.remove_item("nope")
        assert len(cart) == 1

    @pytest.mark.parametrize("quantity", [0, -3])
    def test_update_quantity_to_zero_or_less_removes(self, quantity):
        cart = Cart()
        cart.add_item(BIRYANI)
        cart.update_quantity("m1", quantity)
        assert "m1" not in cart

    def test_update_quantity_sets_exact_value(self):
        cart = Cart()
        cart.add_item(BIRYANI)
        cart.update_quantity("m1", 5)
        assert cart.get("m1").quantity == 5

    def test_update_quantity_unknown_id_is_noop(self):
        cart = Cart()
        cart.update_quantity("ghost", 3)
        assert len(cart) == 0

    def test_totals(self):
        cart = Cart()
        cart.add_item(BIRYANI)
        cart.add_item(BIRYANI)
        cart.add_item(CAKE)

        assert cart.get_total() == pytest.approx(620.0)
        assert cart.get_item_count() == 3

    def test_empty_cart_totals(self):
        cart = Cart()
        assert cart.get_total() == 0
        assert cart.get_item_count() == 0

    def test_to_order_items(self):
        cart = Cart()
        cart.add_item(BIRYANI)
        cart.add_item(BIRYANI)
        assert cart.to_order_items() == [{"menuItemId": "m1", "quantity": 2, "price": 250.0}]

    def test_large_quantity_is_a_valid_checkout(self):
        cart = Cart()
        cart.add_item(BIRYANI)
        cart.update_quantity("m1", 150)

        request = PlaceOrderRequest(items=cart.to_order_items())

        assert request.items[0].quantity == 150


class TestCartStore:

    def test_persists_every_mutation(self):
        storage = MemoryStorage()
        store = CartStore(storage)

        store.add_item(BIRYANI)
        store.add_item(CAKE)
        store.update_quantity("m1", 3)

        assert storage.get_item("khabee-cart") == [
            {"id": "m1", "name": "Chicken Biryani", "price": 250.0, "quantity": 3, "image": None},
            {"id": "m2", "name": "Chocolate Cake", "price": 120.0, "quantity": 1, "image": "cake.png"},
        ]

    def test_rehydrates_from_storage(self):
        storage = MemoryStorage()
        first = CartStore(storage)
        first.add_item(BIRYANI)
        first.add_item(BIRYANI)

        second = CartStore(storage)
        assert second.get_item_count() == 2
        assert second.get_total() == pytest.approx(500.0)

    def test_clear_removes_stored_cart(self):
        storage = MemoryStorage()
        store = CartStore(storage)
        store.add_item(BIRYANI)

        store.clear_cart()

        assert store.items == []
        assert storage.get_item("khabee-cart") is None

    @pytest.mark.parametrize("stored", [
        {"not": "a list"},
        [{"id": "m1"}],
        [{"id": "m1", "name": "x", "price": "free", "quantity": 1}],
        [{"id": "m1", "name": "x", "price": 1, "quantity": 0}],
    ])
    def test_corrupt_storage_loads_empty(self, stored):
        storage = MemoryStorage()
        storage.set_item("khabee-cart", stored)

        store = CartStore(storage)
        assert store.items == []

    def test_custom_key(self):
        storage = MemoryStorage()
        store = CartStore(storage, key="other-cart")
        store.add_item(CAKE)
        assert storage.get_item("khabee-cart") is None
        assert storage.get_item("other-cart")[0]["id"] == "m2"


class TestJsonFileStorage:

    def test_round_trip_across_instances(self, tmp_path):
        path = tmp_path / "cart.json"
        store = CartStore(JsonFileStorage(path))
        store.add_item(BIRYANI)

        reopened = CartStore(JsonFileStorage(path))
        assert reopened.to_order_items() == [{"menuItemId": "m1", "quantity": 1, "price": 250.0}]

    def test_keys_share_one_document(self, tmp_path):
        path = tmp_path / "storage.json"
        storage = JsonFileStorage(path)
        storage.set_item("a", 1)
        storage.set_item("b", [2])

        assert json.loads(path.read_text(encoding="utf-8")) == {"a": 1, "b": [2]}

    def test_corrupt_file_reads_as_empty(self, tmp_path):
        path = tmp_path / "cart.json"
        path.write_text("{not json", encoding="utf-8")

        store = CartStore(JsonFileStorage(path))
        assert store.items == []

    def test_missing_file(self, tmp_path):
        storage = JsonFileStorage(tmp_path / "missing.json")
        assert storage.get_item("khabee-cart") is None
        storage.remove_item("khabee-cart")

    def test_unserializable_value_is_logged_not_raised(self, tmp_path):
        storage = JsonFileStorage(tmp_path / "cart.json")
        storage.set_item("bad", object())
        assert storage.get_item("bad") is None
