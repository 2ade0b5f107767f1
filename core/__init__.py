"""
Core module for Order Desk.

Contains fundamental infrastructure components:
- exceptions: Custom exception hierarchy
- store_connection: Hosted store configuration and startup check
- store_client: Per-thread REST client for orders and products
- auth: Session user and role gating
- request_body: JSON body checks for routes
"""

from .exceptions import (
    OrderDeskError,
    StoreNotConfiguredError,
    StoreUnavailableError,
    StoreRequestError,
    StoreTimeoutError,
    CatalogNotReadyError,
    OrderNotFoundError,
    EmptyCartError,
    OrderCreationError,
    InvalidStatusTransitionError,
    ClientNotFoundError,
    InvalidRequestError,
)
from .store_connection import StoreConnection
from .store_client import OrderStoreClient

__all__ = [
    "OrderDeskError",
    "StoreNotConfiguredError",
    "StoreUnavailableError",
    "StoreRequestError",
    "StoreTimeoutError",
    "CatalogNotReadyError",
    "OrderNotFoundError",
    "EmptyCartError",
    "OrderCreationError",
    "InvalidStatusTransitionError",
    "ClientNotFoundError",
    "InvalidRequestError",
    "StoreConnection",
    "OrderStoreClient",
]
