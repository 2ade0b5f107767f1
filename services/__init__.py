"""
Services layer for Order Desk.

This module contains the business logic services:
- CartStore: Per-session cart persisted to the session
- OrderService: Checkout, order listing and status changes
- ClientService: Client sign-up approval
- CatalogService: Background product/stock refresh thread
- aggregation: Pure order summaries (per product, per client)

Thread Model:
    Request threads (Flask)
    └── CatalogService thread (periodic catalog refresh)

Each service call creates its own OrderStoreClient.
"""

from .cart_store import CartStore
from .catalog_service import CatalogService
from .order_service import OrderService, OrderListing
from .client_service import ClientService
from .aggregation import summarize_by_product, summarize_by_client

__all__ = [
    "CartStore",
    "CatalogService",
    "OrderService",
    "OrderListing",
    "ClientService",
    "summarize_by_product",
    "summarize_by_client",
]
