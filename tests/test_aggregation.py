"""
Unit tests for order aggregation (per product, per client) and stock classification.
"""

import itertools
import pytest

from models.catalog import CatalogVariant
from models.order import OrderStatus
from services.aggregation import (
    StockStatus,
    classify_stock,
    group_orders_by_status,
    orders_with_make_to_order,
    search_product_summaries,
    summarize_by_client,
    summarize_by_product,
)


def _stock(variant_id, quantity, threshold):
    return CatalogVariant(
        variant_id=variant_id,
        product_id=f"p-{variant_id}",
        product_name=f"Product {variant_id}",
        variant_name=f"Variant {variant_id}",
        stock_quantity=quantity,
        low_stock_threshold=threshold,
    )


def _summary_key(summary):
    """Comparable view of a summary, independent of list order."""
    return (
        summary.variant_id,
        summary.total_quantity,
        summary.mto_quantity,
        tuple(sorted((share.client_id, share.quantity) for share in summary.client_orders)),
    )


class TestClassifyStock:
    """Remaining-after-order stock classification."""

    @pytest.mark.parametrize("ordered, expected", [
        (0, StockStatus.IN_STOCK),
        (6, StockStatus.IN_STOCK),
        (7, StockStatus.LOW_STOCK),
        (8, StockStatus.LOW_STOCK),
        (9, StockStatus.LOW_STOCK),
        (10, StockStatus.OUT_OF_STOCK),
        (12, StockStatus.OUT_OF_STOCK),
    ])
    def test_boundaries(self, ordered, expected):
        assert classify_stock(10, 3, ordered) == expected

    def test_zero_stock_is_out(self):
        assert classify_stock(0, 10) == StockStatus.OUT_OF_STOCK


class TestSummarizeByProduct:
    """Per-variant demand against stock."""

    def test_two_client_scenario(self, make_order):
        orders = [
            make_order(order_id="o-1", client_id="c-x", client_name="Client X",
                       items=[("v", 4, False)]),
            make_order(order_id="o-2", client_id="c-y", client_name="Client Y",
                       items=[("v", 6, True)]),
        ]

        [summary] = summarize_by_product(orders, [_stock("v", 8, 2)])

        assert summary.total_quantity == 10
        assert summary.mto_quantity == 6
        assert [(s.client_id, s.quantity) for s in summary.client_orders] == [("c-x", 4), ("c-y", 6)]
        assert summary.remaining_after_order == 4
        assert summary.stock_status == StockStatus.IN_STOCK

    def test_same_client_quantities_summed(self, make_order):
        orders = [
            make_order(order_id="o-1", client_id="c-x", items=[("v", 2, False)]),
            make_order(order_id="o-2", client_id="c-x", items=[("v", 5, False)]),
        ]

        [summary] = summarize_by_product(orders)

        assert len(summary.client_orders) == 1
        assert summary.client_orders[0].quantity == 7

    def test_missing_stock_defaults(self, make_order):
        orders = [make_order(items=[("v", 1, False)])]

        [summary] = summarize_by_product(orders, [_stock("other", 50, 5)])

        assert summary.stock_quantity == 0
        assert summary.low_stock_threshold == 10
        assert summary.stock_status == StockStatus.OUT_OF_STOCK

    def test_duplicate_stock_first_match_wins(self, make_order):
        orders = [make_order(items=[("v", 1, False)])]
        stock = [_stock("v", 20, 5), _stock("v", 1, 1)]

        [summary] = summarize_by_product(orders, stock)

        assert summary.stock_quantity == 20
        assert summary.low_stock_threshold == 5

    def test_first_seen_variant_order(self, make_order):
        orders = [
            make_order(order_id="o-1", items=[("b", 1, False), ("a", 1, False)]),
            make_order(order_id="o-2", items=[("c", 1, False), ("a", 1, False)]),
        ]

        summaries = summarize_by_product(orders)

        assert [s.variant_id for s in summaries] == ["b", "a", "c"]

    def test_display_fields_from_items(self, make_order):
        orders = [make_order(items=[("v", 1, False)])]

        [summary] = summarize_by_product(orders)

        assert summary.product_name == "Product v"
        assert summary.variant_name == "Variant v"
        assert summary.product_id == "p-v"

    def test_permutation_gives_same_summaries(self, make_order):
        orders = [
            make_order(order_id="o-1", client_id="c-1", items=[("a", 2, False), ("b", 1, True)]),
            make_order(order_id="o-2", client_id="c-2", items=[("a", 3, True)]),
            make_order(order_id="o-3", client_id="c-1", items=[("b", 4, False)]),
        ]
        expected = sorted(_summary_key(s) for s in summarize_by_product(orders))

        for permutation in itertools.permutations(orders):
            result = sorted(_summary_key(s) for s in summarize_by_product(list(permutation)))
            assert result == expected

    def test_inputs_not_mutated(self, make_order):
        orders = [make_order(items=[("v", 3, False)])]

        first = summarize_by_product(orders)
        second = summarize_by_product(orders)

        assert first[0] is not second[0]
        assert first[0].total_quantity == second[0].total_quantity == 3
        assert orders[0].items[0].quantity == 3

    def test_order_without_client_snapshot(self, make_order_row):
        from models.order import Order

        row = make_order_row(items=[("v", 1, False)])
        row["client"] = None

        [summary] = summarize_by_product([Order.from_row(row)])

        assert summary.client_orders[0].client_name == "Unknown"
        assert summary.client_orders[0].company_name is None

    def test_empty_orders(self):
        assert summarize_by_product([], [_stock("v", 1, 1)]) == []


class TestSummarizeByClient:
    """Per-client grouping."""

    def test_groups_orders_and_items(self, make_order):
        orders = [
            make_order(order_id="o-1", client_id="c-x", client_name="Client X", company="X Ltd",
                       items=[("a", 2, False), ("b", 3, True)]),
            make_order(order_id="o-2", client_id="c-y", items=[("a", 1, False)]),
            make_order(order_id="o-3", client_id="c-x", client_name="Renamed",
                       items=[("c", 4, False)]),
        ]

        summaries = summarize_by_client(orders)

        assert [s.client_id for s in summaries] == ["c-x", "c-y"]
        client_x = summaries[0]
        assert client_x.client_name == "Client X"
        assert client_x.company_name == "X Ltd"
        assert client_x.order_count == 2
        assert client_x.total_items == 9
        assert [(i.variant_id, i.is_make_to_order) for i in client_x.items] == [
            ("a", False), ("b", True), ("c", False),
        ]

    def test_to_dict(self, make_order):
        [summary] = summarize_by_client([make_order(items=[("a", 2, False)])])

        data = summary.to_dict()
        assert data["total_items"] == 2
        assert data["order_count"] == 1
        assert data["items"][0]["order_number"] == "ORD-o-1"


class TestHelpers:
    """Search, make-to-order filter and status board."""

    def test_search_matches_product_or_variant(self, make_order):
        summaries = summarize_by_product([
            make_order(items=[("ladder", 1, False), ("stool", 1, False)]),
        ])

        assert [s.variant_id for s in search_product_summaries(summaries, "LADDER")] == ["ladder"]
        assert len(search_product_summaries(summaries, "variant")) == 2
        assert len(search_product_summaries(summaries, "  ")) == 2
        assert search_product_summaries(summaries, "bucket") == []

    def test_orders_with_make_to_order(self, make_order):
        plain = make_order(order_id="o-1", items=[("a", 1, False)])
        mto = make_order(order_id="o-2", items=[("a", 1, False), ("b", 1, True)])

        assert orders_with_make_to_order([plain, mto]) == [mto]

    def test_group_by_status(self, make_order):
        orders = [
            make_order(order_id="o-1", status="confirmed"),
            make_order(order_id="o-2", status="pending"),
            make_order(order_id="o-3", status="confirmed"),
        ]

        board = group_orders_by_status(orders, [OrderStatus.CONFIRMED, OrderStatus.READY])

        assert list(board) == [OrderStatus.CONFIRMED, OrderStatus.READY]
        assert [o.id for o in board[OrderStatus.CONFIRMED]] == ["o-1", "o-3"]
        assert board[OrderStatus.READY] == []

    def test_group_by_status_defaults_to_all(self, make_order):
        board = group_orders_by_status([make_order(status="delivered")])

        assert set(board) == set(OrderStatus)
        assert len(board[OrderStatus.DELIVERED]) == 1
