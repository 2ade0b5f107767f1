"""
Aggregate views derived from an order list.

Nothing here is persisted. Each aggregation call builds fresh instances,
so two callers never share (or mutate) the same summary.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Optional

from .order import Order


class StockStatus(Enum):
    """Stock level classification shown next to catalog and summary rows."""

    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"

    @property
    def label(self) -> str:
        return {
            StockStatus.IN_STOCK: "In Stock",
            StockStatus.LOW_STOCK: "Low Stock",
            StockStatus.OUT_OF_STOCK: "Out of Stock",
        }[self]


def classify_stock(stock_quantity: int, low_stock_threshold: int, ordered: int = 0) -> StockStatus:
    """
    Classify what is left of ``stock_quantity`` once ``ordered`` units are drawn.

    Args:
        stock_quantity: Units currently in stock
        low_stock_threshold: At or below this many remaining units the level is low
        ordered: Demand that will be served from stock (make-to-order excluded)

    Returns:
        OUT_OF_STOCK when nothing remains, LOW_STOCK when the remainder is
        at or below the threshold, IN_STOCK otherwise
    """
    remaining = stock_quantity - ordered
    if remaining <= 0:
        return StockStatus.OUT_OF_STOCK
    if remaining <= low_stock_threshold:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


@dataclass
class ClientOrderShare:
    """One client's summed quantity of a variant across their orders."""

    client_id: str
    client_name: str
    company_name: Optional[str]
    quantity: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "client_id": self.client_id,
            "client_name": self.client_name,
            "company_name": self.company_name,
            "quantity": self.quantity,
        }


@dataclass
class ProductSummary:
    """
    Demand for one variant across all orders, set against its stock.

    Only non make-to-order demand draws on stock; make-to-order demand is
    fulfilled by production.
    """

    variant_id: str
    product_id: str
    product_name: str
    variant_name: str
    image_url: Optional[str]
    stock_quantity: int
    low_stock_threshold: int
    total_quantity: int = 0
    mto_quantity: int = 0
    client_orders: List[ClientOrderShare] = field(default_factory=list)

    @property
    def stock_demand(self) -> int:
        """Ordered quantity that must come out of stock."""
        return self.total_quantity - self.mto_quantity

    @property
    def remaining_after_order(self) -> int:
        """Stock left once every stock-served line is shipped (may be negative)."""
        return self.stock_quantity - self.stock_demand

    @property
    def stock_status(self) -> StockStatus:
        return classify_stock(self.stock_quantity, self.low_stock_threshold, self.stock_demand)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON responses."""
        return {
            "variant_id": self.variant_id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "variant_name": self.variant_name,
            "image_url": self.image_url,
            "total_quantity": self.total_quantity,
            "mto_quantity": self.mto_quantity,
            "stock_quantity": self.stock_quantity,
            "low_stock_threshold": self.low_stock_threshold,
            "remaining_after_order": self.remaining_after_order,
            "stock_status": self.stock_status.value,
            "stock_status_label": self.stock_status.label,
            "client_orders": [share.to_dict() for share in self.client_orders],
        }


@dataclass
class ClientItem:
    """An order line flattened for the per-client view."""

    order_id: str
    order_number: str
    variant_id: str
    product_name: str
    variant_name: str
    quantity: int
    is_make_to_order: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "order_id": self.order_id,
            "order_number": self.order_number,
            "variant_id": self.variant_id,
            "product_name": self.product_name,
            "variant_name": self.variant_name,
            "quantity": self.quantity,
            "is_make_to_order": self.is_make_to_order,
        }


@dataclass
class ClientSummary:
    """All orders and lines placed by one client."""

    client_id: str
    client_name: str
    company_name: Optional[str]
    orders: List[Order] = field(default_factory=list)
    items: List[ClientItem] = field(default_factory=list)

    @property
    def total_items(self) -> int:
        """Sum of line quantities across this client's orders."""
        return sum(item.quantity for item in self.items)

    @property
    def order_count(self) -> int:
        return len(self.orders)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "client_id": self.client_id,
            "client_name": self.client_name,
            "company_name": self.company_name,
            "order_count": self.order_count,
            "total_items": self.total_items,
            "orders": [order.to_dict() for order in self.orders],
            "items": [item.to_dict() for item in self.items],
        }
