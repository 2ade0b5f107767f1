"""
Order service: checkout and order lifecycle.

Wraps the store client calls the routes need and applies the business
rules around them:

- Checkout turns the cart into a pending order. The cart is cleared only
  after the store confirms the order; any failure leaves it as it was so
  the user can retry.
- Status changes move forward only (when ENFORCE_FORWARD_STATUS is on) and
  stamp confirmed_at / dispatched_at / delivered_at.
- Order listings degrade to the last good listing when the store is down.

Every public method creates its own OrderStoreClient and closes it before
returning.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Callable, Optional, Tuple

import bleach

from core.exceptions import (
    EmptyCartError,
    InvalidStatusTransitionError,
    OrderCreationError,
    StoreRequestError,
)
from models.order import Order, OrderStatus, STATUS_TIMESTAMP_FIELDS, is_forward_transition
from services.cart_store import CartStore
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

MAX_NOTES_LENGTH = 1000


def sanitize_text(text: Optional[str], max_length: Optional[int] = None) -> str:
    """Strip markup and surrounding whitespace from user input. Non-strings give ""."""
    if not isinstance(text, str) or not text:
        return ""
    text = text.strip()
    text = bleach.clean(text, tags=[], strip=True)
    if max_length and len(text) > max_length:
        text = text[:max_length]
    return text


@dataclass(frozen=True)
class OrderListing:
    """
    Orders as of one fetch.

    ``error`` is set when the latest fetch failed; ``orders`` then holds the
    last good listing (empty if there never was one).
    """

    orders: Tuple[Order, ...] = ()
    fetched_at: Optional[datetime] = None
    error: Optional[str] = None

    @property
    def is_stale(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict:
        return {
            "orders": [order.to_dict() for order in self.orders],
            "fetched_at": self.fetched_at.isoformat() if self.fetched_at else None,
            "error": self.error,
            "is_stale": self.is_stale,
        }


class OrderService:
    """
    Checkout and lifecycle operations against the order store.

    Attributes:
        enforce_forward_status: Reject backward status transitions
    """

    def __init__(
        self,
        client_factory: Callable,
        enforce_forward_status: bool = True,
        max_notes_length: int = MAX_NOTES_LENGTH,
    ):
        """
        Args:
            client_factory: Zero-argument callable returning a new OrderStoreClient
            enforce_forward_status: Reject status changes that move an order back
            max_notes_length: Notes are truncated to this many characters
        """
        self._client_factory = client_factory
        self._enforce_forward_status = enforce_forward_status
        self._max_notes_length = max_notes_length

        self._last_listing = OrderListing()
        self._listing_lock = threading.Lock()

    @property
    def enforce_forward_status(self) -> bool:
        return self._enforce_forward_status

    # =========================================================================
    # CHECKOUT
    # =========================================================================

    def checkout(self, cart: CartStore, client_id: str, notes: Optional[str] = "") -> Order:
        """
        Place an order for everything in the cart.

        Args:
            cart: The session's cart
            client_id: Profile id of the ordering client
            notes: Free-text notes from the client

        Returns:
            The created order

        Raises:
            EmptyCartError: If the cart has no lines
            OrderCreationError: If the store call fails (cart unchanged)
        """
        if cart.is_empty:
            raise EmptyCartError()

        items = cart.to_order_items()
        clean_notes = sanitize_text(notes, max_length=self._max_notes_length)

        logger.info(
            f"Checkout for client {client_id}: {len(items)} lines, "
            f"{cart.item_count} units ({cart.mto_item_count} make-to-order)"
        )

        client = self._client_factory()
        try:
            order = client.create_order(client_id, items, clean_notes)
        except StoreRequestError as e:
            logger.error(f"Checkout failed for client {client_id}, cart kept: {e}")
            raise OrderCreationError(
                "Failed to place order",
                item_count=cart.item_count,
                details={"cause": e.message},
            ) from e
        except (KeyError, ValueError, TypeError) as e:
            logger.error(f"Checkout got an unreadable store response for client {client_id}, cart kept: {e}")
            raise OrderCreationError(
                "Failed to place order",
                item_count=cart.item_count,
                details={"cause": f"unreadable store response: {e}"},
            ) from e
        finally:
            client.close()

        cart.clear_cart()
        logger.info(f"Checkout complete: order {order.order_number or order.id}")
        return order

    # =========================================================================
    # READS
    # =========================================================================

    def list_orders(self) -> OrderListing:
        """
        Fetch all orders.

        Never raises for store failures: the last good listing is returned
        with ``error`` set instead.
        """
        client = self._client_factory()
        try:
            orders = client.list_orders()
        except StoreRequestError as e:
            logger.warning(f"Order listing failed, serving last good listing: {e}")
            with self._listing_lock:
                return replace(self._last_listing, error=e.message)
        finally:
            client.close()

        listing = OrderListing(
            orders=tuple(orders),
            fetched_at=datetime.now(timezone.utc),
        )
        with self._listing_lock:
            self._last_listing = listing
        return listing

    def list_client_orders(self, client_id: str) -> OrderListing:
        """
        Fetch one client's orders.

        A store failure gives an empty listing with ``error`` set. The
        all-orders fallback listing is never consulted here.
        """
        client = self._client_factory()
        try:
            orders = client.list_orders(client_id=client_id)
        except StoreRequestError as e:
            logger.warning(f"Order listing for client {client_id} failed: {e}")
            return OrderListing(error=e.message)
        finally:
            client.close()

        return OrderListing(orders=tuple(orders), fetched_at=datetime.now(timezone.utc))

    def get_order(self, order_id: str) -> Order:
        """
        Raises:
            OrderNotFoundError: If no order has this id
            StoreRequestError: If the store call fails
        """
        client = self._client_factory()
        try:
            return client.get_order(order_id)
        finally:
            client.close()

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def update_status(self, order_id: str, new_status, notes: Optional[str] = None) -> Order:
        """
        Move an order to ``new_status``.

        Args:
            order_id: Order id
            new_status: OrderStatus or its string value
            notes: Admin notes to store with the change

        Returns:
            The updated order

        Raises:
            InvalidStatusTransitionError: Unknown status, or a backward move
                while enforce_forward_status is on
            OrderNotFoundError: If no order has this id
            StoreRequestError: If the store call fails
        """
        status = OrderStatus.parse(new_status)
        if status is None:
            raise InvalidStatusTransitionError(order_id, None, str(new_status))

        clean_notes = None
        if notes is not None:
            clean_notes = sanitize_text(notes, max_length=self._max_notes_length)

        client = self._client_factory()
        try:
            if self._enforce_forward_status:
                current = client.get_order(order_id)
                if not is_forward_transition(current.status, status):
                    logger.warning(
                        f"Rejected status change for order {order_id}: "
                        f"{current.status.value} -> {status.value}"
                    )
                    raise InvalidStatusTransitionError(order_id, current.status.value, status.value)

            extra = {}
            timestamp_field = STATUS_TIMESTAMP_FIELDS.get(status)
            if timestamp_field:
                extra[timestamp_field] = datetime.now(timezone.utc).isoformat()

            order = client.update_order_status(order_id, status, notes=clean_notes, extra=extra)
        finally:
            client.close()

        logger.info(f"Order {order_id} moved to {status.value}")
        return order

    def assign_worker(self, order_id: str, worker_id: Optional[str]) -> Order:
        """
        Assign an order to a worker, or unassign with None.

        Raises:
            OrderNotFoundError: If no order has this id
            StoreRequestError: If the store call fails
        """
        client = self._client_factory()
        try:
            order = client.assign_order(order_id, worker_id or None)
        finally:
            client.close()

        logger.info(f"Order {order_id} assigned to {worker_id or 'nobody'}")
        return order
