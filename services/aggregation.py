"""
Order aggregation.

Turns a flat list of orders (each with nested items) into the views the
admin analytics and board pages render:

- summarize_by_product(): demand per variant set against stock, with the
  contributing clients
- summarize_by_client(): every order and line per client

All functions are pure. They never mutate their inputs and keep no state
between calls, so they can be re-run against a newer order list at any time.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from models.catalog import DEFAULT_LOW_STOCK_THRESHOLD
from models.order import Order, OrderStatus
from models.summary import (
    ClientItem,
    ClientOrderShare,
    ClientSummary,
    ProductSummary,
    StockStatus,
    classify_stock,
)

__all__ = [
    "summarize_by_product",
    "summarize_by_client",
    "classify_stock",
    "search_product_summaries",
    "orders_with_make_to_order",
    "group_orders_by_status",
    "StockStatus",
]

UNKNOWN_CLIENT = "Unknown"


def _stock_lookup(stock: Optional[Iterable]) -> Dict[str, tuple]:
    """
    Index stock records by variant id.

    Records are anything with ``variant_id``, ``stock_quantity`` and
    ``low_stock_threshold`` attributes (CatalogVariant, or a CatalogSnapshot
    iterated). First match wins on duplicate ids.
    """
    lookup: Dict[str, tuple] = {}
    for record in stock or ():
        lookup.setdefault(
            record.variant_id,
            (record.stock_quantity, record.low_stock_threshold),
        )
    return lookup


def summarize_by_product(orders: Sequence[Order], stock: Optional[Iterable] = None) -> List[ProductSummary]:
    """
    Build one ProductSummary per variant that appears in ``orders``.

    Args:
        orders: Orders with their items
        stock: Stock records for the ordered variants (CatalogSnapshot or
            an iterable of CatalogVariant). Variants without a record get
            stock 0 and the default low-stock threshold.

    Returns:
        Summaries in first-encountered order. Callers must not rely on the
        ordering.
    """
    stock_by_variant = _stock_lookup(stock)
    summaries: Dict[str, ProductSummary] = {}

    for order in orders:
        client = order.client
        for item in order.items:
            summary = summaries.get(item.variant_id)
            if summary is None:
                stock_quantity, threshold = stock_by_variant.get(
                    item.variant_id, (0, DEFAULT_LOW_STOCK_THRESHOLD)
                )
                summary = ProductSummary(
                    variant_id=item.variant_id,
                    product_id=item.product_id,
                    product_name=item.product_name,
                    variant_name=item.variant_name,
                    image_url=item.image_url,
                    stock_quantity=stock_quantity,
                    low_stock_threshold=threshold,
                )
                summaries[item.variant_id] = summary

            summary.total_quantity += item.quantity
            if item.is_make_to_order:
                summary.mto_quantity += item.quantity

            share = next(
                (s for s in summary.client_orders if s.client_id == order.client_id),
                None,
            )
            if share is not None:
                share.quantity += item.quantity
            else:
                summary.client_orders.append(ClientOrderShare(
                    client_id=order.client_id,
                    client_name=client.full_name if client else UNKNOWN_CLIENT,
                    company_name=client.company_name if client else None,
                    quantity=item.quantity,
                ))

    return list(summaries.values())


def summarize_by_client(orders: Sequence[Order]) -> List[ClientSummary]:
    """
    Group orders by client.

    The first order seen for a client supplies its display name and company.

    Returns:
        Summaries in first-encountered order
    """
    summaries: Dict[str, ClientSummary] = {}

    for order in orders:
        summary = summaries.get(order.client_id)
        if summary is None:
            client = order.client
            summary = ClientSummary(
                client_id=order.client_id,
                client_name=client.full_name if client else UNKNOWN_CLIENT,
                company_name=client.company_name if client else None,
            )
            summaries[order.client_id] = summary

        summary.orders.append(order)
        summary.items.extend(
            ClientItem(
                order_id=order.id,
                order_number=order.order_number,
                variant_id=item.variant_id,
                product_name=item.product_name,
                variant_name=item.variant_name,
                quantity=item.quantity,
                is_make_to_order=item.is_make_to_order,
            )
            for item in order.items
        )

    return list(summaries.values())


def search_product_summaries(summaries: Iterable[ProductSummary], term: str) -> List[ProductSummary]:
    """Case-insensitive match on product or variant name. Empty term matches all."""
    needle = (term or "").strip().lower()
    if not needle:
        return list(summaries)
    return [
        s for s in summaries
        if needle in s.product_name.lower() or needle in s.variant_name.lower()
    ]


def orders_with_make_to_order(orders: Iterable[Order]) -> List[Order]:
    """Orders with at least one make-to-order line."""
    return [order for order in orders if order.has_make_to_order_items]


def group_orders_by_status(
    orders: Iterable[Order],
    statuses: Optional[Sequence[OrderStatus]] = None,
) -> Dict[OrderStatus, List[Order]]:
    """
    Bucket orders by status for the board view.

    Args:
        orders: Orders to bucket
        statuses: Columns to build, in order (default: every status).
            Orders in any other status are left out.
    """
    columns = list(statuses) if statuses is not None else list(OrderStatus)
    board: Dict[OrderStatus, List[Order]] = {status: [] for status in columns}
    for order in orders:
        if order.status in board:
            board[order.status].append(order)
    return board
