"""
Unit tests for the CartStore.

The storage mapping is a plain dict standing in for the Flask session.
"""

import dataclasses
import json
import pytest

from models.cart import LineItem, VariantRef
from services.cart_store import CartStore, DEFAULT_STORAGE_KEY


# Fixtures

@pytest.fixture
def storage():
    return {}


@pytest.fixture
def cart(storage):
    return CartStore(storage)


@pytest.fixture
def variant_a():
    return VariantRef(id="v-a", variant_name="3 Step", product_id="p-1")


@pytest.fixture
def variant_b():
    return VariantRef(id="v-b", variant_name="10 Step", product_id="p-1")


class FailingWriteStorage(dict):
    """Mapping whose writes always fail."""

    def __setitem__(self, key, value):
        raise OSError("session backend unavailable")


class FailingReadStorage(dict):
    """Mapping whose reads always fail."""

    def get(self, key, default=None):
        raise OSError("session backend unavailable")


class TestAddToCart:
    """Adding and subtracting units."""

    def test_add_creates_line(self, cart, variant_a):
        line = cart.add_to_cart("Ladder", "ladder.png", variant_a, 3)

        assert line.quantity == 3
        assert line.product_name == "Ladder"
        assert line.variant_name == "3 Step"
        assert "v-a" in cart
        assert len(cart) == 1

    def test_quantity_is_sum_of_deltas(self, cart, variant_a):
        for delta in (3, 2, -1, 4):
            cart.add_to_cart("Ladder", None, variant_a, delta)

        assert cart.get("v-a").quantity == 8

    def test_non_positive_sum_removes_line(self, cart, variant_a):
        cart.add_to_cart("Ladder", None, variant_a, 3)
        result = cart.add_to_cart("Ladder", None, variant_a, -3)

        assert result is None
        assert "v-a" not in cart
        assert cart.is_empty

    def test_negative_delta_on_absent_variant_is_noop(self, cart, variant_a):
        assert cart.add_to_cart("Ladder", None, variant_a, -2) is None
        assert cart.is_empty

    def test_make_to_order_is_sticky(self, cart, variant_a):
        cart.add_to_cart("Ladder", None, variant_a, 3)
        cart.add_to_cart("Ladder", None, variant_a, 2, is_make_to_order=True)
        cart.add_to_cart("Ladder", None, variant_a, 1, is_make_to_order=False)

        line = cart.get("v-a")
        assert line.quantity == 6
        assert line.is_make_to_order is True

    def test_make_to_order_reset_only_by_removal(self, cart, variant_a):
        cart.add_to_cart("Ladder", None, variant_a, 2, is_make_to_order=True)
        cart.remove_from_cart("v-a")
        cart.add_to_cart("Ladder", None, variant_a, 2)

        assert cart.get("v-a").is_make_to_order is False

    def test_display_fields_refreshed_on_add(self, cart, variant_a):
        cart.add_to_cart("Old Name", "old.png", variant_a, 1)
        cart.add_to_cart("New Name", "new.png", variant_a, 1)

        line = cart.get("v-a")
        assert line.product_name == "New Name"
        assert line.product_image == "new.png"


class TestCounts:
    """item_count and mto_item_count."""

    def test_mixed_cart_counts(self, cart, variant_a, variant_b):
        cart.add_to_cart("Ladder", None, variant_a, 3)
        cart.add_to_cart("Ladder", None, variant_b, 2, is_make_to_order=True)

        assert cart.item_count == 5
        assert cart.mto_item_count == 2

    def test_counts_follow_every_mutation(self, cart, variant_a, variant_b):
        cart.add_to_cart("Ladder", None, variant_a, 3)
        cart.add_to_cart("Ladder", None, variant_b, 2, is_make_to_order=True)

        cart.update_quantity("v-b", 7)
        assert (cart.item_count, cart.mto_item_count) == (10, 7)

        cart.remove_from_cart("v-a")
        assert (cart.item_count, cart.mto_item_count) == (7, 7)

        cart.clear_cart()
        assert (cart.item_count, cart.mto_item_count) == (0, 0)

    def test_to_order_items(self, cart, variant_a, variant_b):
        cart.add_to_cart("Ladder", None, variant_a, 3)
        cart.add_to_cart("Ladder", None, variant_b, 2, is_make_to_order=True)

        assert cart.to_order_items() == [
            {"variant_id": "v-a", "quantity": 3, "is_make_to_order": False},
            {"variant_id": "v-b", "quantity": 2, "is_make_to_order": True},
        ]


class TestUpdateAndRemove:
    """Overwriting quantities and removing lines."""

    def test_update_overwrites_quantity(self, cart, variant_a):
        cart.add_to_cart("Ladder", None, variant_a, 3)
        line = cart.update_quantity("v-a", 10)

        assert line.quantity == 10
        assert cart.item_count == 10

    def test_update_to_zero_removes(self, cart, variant_a):
        cart.add_to_cart("Ladder", None, variant_a, 3)

        assert cart.update_quantity("v-a", 0) is None
        assert "v-a" not in cart

    def test_update_absent_is_noop(self, cart):
        assert cart.update_quantity("missing", 5) is None
        assert cart.is_empty

    def test_set_quantity_alias(self, cart, variant_a):
        cart.add_to_cart("Ladder", None, variant_a, 3)
        cart.set_quantity("v-a", 4)

        assert cart.get("v-a").quantity == 4

    def test_update_keeps_make_to_order(self, cart, variant_a):
        cart.add_to_cart("Ladder", None, variant_a, 3, is_make_to_order=True)
        cart.update_quantity("v-a", 1)

        assert cart.get("v-a").is_make_to_order is True

    def test_remove_absent_is_noop(self, cart, variant_a):
        cart.add_to_cart("Ladder", None, variant_a, 3)
        cart.remove_from_cart("missing")

        assert len(cart) == 1

    def test_lines_handed_out_are_read_only(self, storage, cart, variant_a):
        cart.add_to_cart("Ladder", None, variant_a, 2)
        line = cart.get("v-a")

        with pytest.raises(dataclasses.FrozenInstanceError):
            line.quantity = 50

        assert cart.item_count == 2
        assert CartStore(storage).get("v-a").quantity == 2

    def test_update_leaves_earlier_line_untouched(self, cart, variant_a):
        cart.add_to_cart("Ladder", None, variant_a, 2)
        before = cart.get("v-a")

        cart.update_quantity("v-a", 9)

        assert before.quantity == 2
        assert cart.get("v-a").quantity == 9


class TestPersistence:
    """Write-through to the storage mapping."""

    def test_mutation_writes_fixed_key(self, storage, cart, variant_a):
        cart.add_to_cart("Ladder", "ladder.png", variant_a, 3, is_make_to_order=True)

        pairs = json.loads(storage[DEFAULT_STORAGE_KEY])
        assert pairs == [[
            "v-a",
            {
                "variantId": "v-a",
                "productName": "Ladder",
                "productImage": "ladder.png",
                "variantName": "3 Step",
                "quantity": 3,
                "isMakeToOrder": True,
            },
        ]]

    def test_new_cart_restores_stored_contents(self, storage, cart, variant_a, variant_b):
        cart.add_to_cart("Ladder", None, variant_a, 3)
        cart.add_to_cart("Ladder", None, variant_b, 2, is_make_to_order=True)

        restored = CartStore(storage)

        assert [item.to_dict() for item in restored] == [item.to_dict() for item in cart]
        assert restored.item_count == 5
        assert restored.mto_item_count == 2

    def test_clear_is_persisted(self, storage, cart, variant_a):
        cart.add_to_cart("Ladder", None, variant_a, 3)
        cart.clear_cart()

        assert json.loads(storage[DEFAULT_STORAGE_KEY]) == []
        assert CartStore(storage).is_empty

    def test_custom_storage_key(self, storage, variant_a):
        cart = CartStore(storage, storage_key="other_cart")
        cart.add_to_cart("Ladder", None, variant_a, 1)

        assert "other_cart" in storage
        assert DEFAULT_STORAGE_KEY not in storage

    @pytest.mark.parametrize("blob", [
        "not json at all",
        '{"v-a": 3}',
        '[["v-a"]]',
        '[["v-a", {"variantId": "v-a"}]]',
        '[["v-a", {"variantId": "v-a", "quantity": "3"}]]',
        "[1, 2, 3]",
    ])
    def test_corrupt_blob_gives_empty_cart(self, blob):
        cart = CartStore({DEFAULT_STORAGE_KEY: blob})

        assert cart.is_empty
        assert cart.item_count == 0

    def test_non_positive_stored_lines_dropped(self):
        blob = json.dumps([
            ["v-a", {"variantId": "v-a", "productName": "A", "quantity": 0}],
            ["v-b", {"variantId": "v-b", "productName": "B", "quantity": 2}],
        ])

        cart = CartStore({DEFAULT_STORAGE_KEY: blob})

        assert list(item.variant_id for item in cart) == ["v-b"]

    def test_mismatched_stored_key_skipped(self):
        blob = json.dumps([
            ["v-a", {"variantId": "v-b", "productName": "B", "quantity": 4}],
            ["v-b", {"variantId": "v-b", "productName": "B", "quantity": 2}],
        ])

        cart = CartStore({DEFAULT_STORAGE_KEY: blob})

        assert len(cart) == 1
        assert "v-a" not in cart
        assert cart.get("v-b").quantity == 2

    def test_write_failure_keeps_working_in_memory(self, variant_a):
        cart = CartStore(FailingWriteStorage())

        cart.add_to_cart("Ladder", None, variant_a, 2)
        cart.add_to_cart("Ladder", None, variant_a, 1)

        assert cart.storage_available is False
        assert cart.get("v-a").quantity == 3

    def test_read_failure_starts_empty(self, variant_a):
        cart = CartStore(FailingReadStorage())

        assert cart.storage_available is False
        cart.add_to_cart("Ladder", None, variant_a, 1)
        assert cart.item_count == 1

    def test_no_storage_runs_in_memory(self, variant_a):
        cart = CartStore()
        cart.add_to_cart("Ladder", None, variant_a, 1)

        assert cart.storage_available is False
        assert cart.item_count == 1


class TestLineItem:
    """LineItem storage format."""

    def test_from_dict_defaults(self):
        line = LineItem.from_dict({"variantId": "v-a", "quantity": 2})

        assert line.product_name == ""
        assert line.product_image is None
        assert line.is_make_to_order is False

    def test_from_dict_rejects_bool_quantity(self):
        with pytest.raises(ValueError):
            LineItem.from_dict({"variantId": "v-a", "quantity": True})
