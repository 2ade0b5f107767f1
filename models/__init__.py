"""
Data models for Order Desk.

This module contains dataclasses for:
- LineItem / VariantRef: Cart entries and the variant added to the cart
- Order / OrderItem / ClientInfo / OrderStatus: Orders read from the store
- ClientProfile / ApprovalStatus: Client sign-ups awaiting admin approval
- CatalogSnapshot / CatalogVariant: Point-in-time product and stock state
- ProductSummary / ClientSummary / StockStatus: Aggregated order views

CatalogSnapshot is frozen for thread-safe reads from the refresh thread.
"""

from .cart import LineItem, VariantRef
from .order import Order, OrderItem, ClientInfo, OrderStatus, is_forward_transition
from .client import ApprovalStatus, ClientProfile
from .catalog import CatalogSnapshot, CatalogVariant
from .summary import (
    ProductSummary,
    ClientOrderShare,
    ClientSummary,
    ClientItem,
    StockStatus,
    classify_stock,
)

__all__ = [
    # Cart models
    "LineItem",
    "VariantRef",
    # Order models
    "Order",
    "OrderItem",
    "ClientInfo",
    "OrderStatus",
    "is_forward_transition",
    # Client models
    "ApprovalStatus",
    "ClientProfile",
    # Catalog models
    "CatalogSnapshot",
    "CatalogVariant",
    # Summary models
    "ProductSummary",
    "ClientOrderShare",
    "ClientSummary",
    "ClientItem",
    "StockStatus",
    "classify_stock",
]
