"""
Tests for the Cart Store
"""

import math
import random

import pytest

from delora.shared.domain.cart import CartLine, CartStore

CART_KEY = "deloraCart"


@pytest.fixture
def cart(memory_store):
    return CartStore.load(memory_store, CART_KEY)


class TestAddItem:
    """Tests for adding and merging lines."""

    def test_same_id_merges_into_one_line(self, cart):
        """addItem("sku1","Vase",25,1) then addItem("sku1","Vase",25,2)."""
        cart.add_item("sku1", "Vase", 25, 1)
        cart.add_item("sku1", "Vase", 25, 2)

        lines = cart.lines()
        assert len(lines) == 1
        assert lines[0].quantity == 3
        assert cart.total() == 75
        assert cart.quantity() == 3

    def test_quantity_is_sum_of_requests(self, cart):
        requested = [1, 4, 2, 7, 1]
        for quantity in requested:
            cart.add_item("sku1", "Vase", 25, quantity)

        assert cart.get("sku1").quantity == sum(requested)

    def test_new_ids_keep_insertion_order(self, cart):
        cart.add_item("b", "Bowl", 10)
        cart.add_item("a", "Acorn", 5)
        cart.add_item("b", "Bowl", 10)

        assert [line.id for line in cart.lines()] == ["b", "a"]

    def test_default_quantity_is_one(self, cart):
        cart.add_item("sku1", "Vase", 25)
        cart.add_item("sku2", "Mug", 18, None)

        assert cart.get("sku1").quantity == 1
        assert cart.get("sku2").quantity == 1

    def test_persists_after_add(self, cart, memory_store):
        cart.add_item("sku1", "Vase", 25, 2)

        assert memory_store.get(CART_KEY, []) == [
            {"id": "sku1", "name": "Vase", "price": 25.0, "quantity": 2}
        ]

    @pytest.mark.parametrize("price", [0, -5, math.nan, math.inf, "25", None, True])
    def test_rejects_invalid_price(self, cart, memory_store, price):
        assert cart.add_item("sku1", "Vase", price) is False
        assert cart.is_empty
        assert CART_KEY not in memory_store

    def test_rejects_empty_id(self, cart):
        assert cart.add_item("", "Vase", 25) is False
        assert cart.is_empty

    @pytest.mark.parametrize("item_id", [5, None, ["sku1"]])
    def test_rejects_non_string_id(self, cart, memory_store, item_id):
        assert cart.add_item(item_id, "Vase", 25) is False
        assert cart.is_empty
        assert CART_KEY not in memory_store

    @pytest.mark.parametrize("name", [None, ""])
    def test_missing_name_gets_default(self, cart, name):
        assert cart.add_item("sku1", name, 25) is True
        assert cart.get("sku1").name == "Delora Product"

    def test_non_string_name_is_stringified(self, cart):
        cart.add_item("sku1", 42, 25)
        assert cart.get("sku1").name == "42"

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, 0.0, math.inf, math.nan, True])
    def test_rejects_invalid_quantity(self, cart, quantity):
        cart.add_item("sku1", "Vase", 25, 1)

        assert cart.add_item("sku1", "Vase", 25, quantity) is False
        assert cart.get("sku1").quantity == 1

    def test_integral_float_quantity_is_accepted(self, cart, memory_store):
        assert cart.add_item("sku1", "Vase", 25, 2.0) is True

        line = cart.get("sku1")
        assert line.quantity == 2
        assert isinstance(line.quantity, int)
        assert memory_store.get(CART_KEY, [])[0]["quantity"] == 2

    def test_returned_lines_are_copies(self, cart):
        cart.add_item("sku1", "Vase", 25)
        cart.lines()[0].quantity = 99

        assert cart.get("sku1").quantity == 1


class TestRemoveItem:
    """Tests for removing lines."""

    def test_remove_is_idempotent(self, cart):
        cart.add_item("sku1", "Vase", 25)
        cart.add_item("sku2", "Mug", 18)

        assert cart.remove_item("sku1") is True
        assert cart.remove_item("sku1") is False
        assert [line.id for line in cart.lines()] == ["sku2"]

    def test_remove_missing_id_does_not_persist(self, cart, memory_store):
        assert cart.remove_item("ghost") is False
        assert CART_KEY not in memory_store

    def test_remove_persists(self, cart, memory_store):
        cart.add_item("sku1", "Vase", 25)
        cart.remove_item("sku1")

        assert memory_store.get(CART_KEY, None) == []

    def test_clear(self, cart, memory_store):
        cart.add_item("sku1", "Vase", 25)
        cart.clear()

        assert cart.is_empty
        assert cart.total() == 0
        assert memory_store.get(CART_KEY, None) == []


class TestDerivedValues:
    """Tests for total and quantity."""

    def test_empty_cart(self, cart):
        assert cart.total() == 0
        assert cart.quantity() == 0

    def test_total_matches_recomputation(self, cart):
        rng = random.Random(7)
        ids = [f"sku{i}" for i in range(6)]
        prices = {item_id: rng.choice([5, 12.5, 25, 99.99]) for item_id in ids}

        for _ in range(200):
            item_id = rng.choice(ids)
            if rng.random() < 0.7:
                cart.add_item(item_id, item_id.upper(), prices[item_id], rng.randint(1, 4))
            else:
                cart.remove_item(item_id)

            expected_total = sum(line.price * line.quantity for line in cart.lines())
            assert cart.total() == pytest.approx(expected_total)
            assert cart.quantity() == sum(line.quantity for line in cart.lines())
            assert len({line.id for line in cart.lines()}) == len(cart)
            assert all(line.quantity >= 1 for line in cart.lines())

    def test_line_total(self):
        line = CartLine(id="sku1", name="Vase", price=25, quantity=3)
        assert line.line_total == 75


class TestRestore:
    """Tests for loading the cart back from persistence."""

    def test_round_trip(self, cart, memory_store):
        cart.add_item("sku1", "Vase", 25, 3)
        cart.add_item("sku2", "Mug", 18)

        restored = CartStore.load(memory_store, CART_KEY)

        assert restored.lines() == cart.lines()
        assert restored.total() == cart.total()

    def test_round_trip_through_duckdb(self, duckdb_store):
        cart = CartStore.load(duckdb_store, CART_KEY)
        cart.add_item("sku1", "Vase", 25, 2)

        restored = CartStore.load(duckdb_store, CART_KEY)

        assert restored.lines() == cart.lines()

    def test_malformed_records_are_dropped_and_duplicates_merged(self, memory_store):
        memory_store.set(CART_KEY, [
            {"id": "a", "name": "A", "price": 10, "quantity": 2},
            {"id": "", "name": "No id", "price": 10, "quantity": 1},
            {"id": "b", "name": "Negative", "price": -1, "quantity": 1},
            {"id": "c", "name": "Zero qty", "price": 3, "quantity": 0},
            "junk",
            {"id": "a", "name": "A", "price": 10, "quantity": 1},
        ])

        cart = CartStore.load(memory_store, CART_KEY)

        assert [(line.id, line.quantity) for line in cart.lines()] == [("a", 3)]

    def test_non_list_record_starts_empty(self, memory_store):
        memory_store.set(CART_KEY, {"id": "a"})
        assert CartStore.load(memory_store, CART_KEY).is_empty
