"""
REST client for the hosted order store.

Each thread (the catalog refresh thread, each request handler) creates its
own OrderStoreClient. The client owns its HTTP session and must be closed
with close() when done.

The store speaks a PostgREST dialect: tables under /rest/v1, filters as
query parameters (``id=eq.<id>``), nested selections in ``select`` and
``Prefer: return=representation`` to get written rows back.

Usage:
    client = OrderStoreClient(connection, logger)
    try:
        orders = client.list_orders()
        order = client.create_order(client_id, items, notes)
    finally:
        client.close()
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from models.client import ApprovalStatus, ClientProfile
from models.order import Order, OrderItem, OrderStatus
from .exceptions import ClientNotFoundError, OrderNotFoundError, StoreRequestError, StoreTimeoutError
from .store_connection import StoreConnection


ORDER_SELECT = (
    "*,"
    "client:profiles!orders_client_id_fkey(id,full_name,company_name,email,phone),"
    "items:order_items(id,variant_id,quantity,is_make_to_order,"
    "variant:product_variants(id,variant_name,product:products(id,name,image_url)))"
)

PRODUCT_SELECT = "*,variants:product_variants(*)"

RETURN_REPRESENTATION = {"Prefer": "return=representation"}


class OrderStoreClient:
    """
    Client for the orders, order_items, products and profiles tables.

    Errors:
        - Transport failures and HTTP >= 400 raise StoreRequestError
        - Timeouts raise StoreTimeoutError
        - Missing orders raise OrderNotFoundError
        - Missing client profiles raise ClientNotFoundError
    """

    def __init__(self, connection: StoreConnection, logger: Optional[logging.Logger] = None):
        """
        Args:
            connection: Initialized StoreConnection
            logger: Logger instance (creates default if not provided)

        Raises:
            ValueError: If the connection is not initialized
        """
        if not connection.is_initialized:
            raise ValueError("StoreConnection must be initialized before creating a client")

        self._connection = connection
        self._session = connection.build_session()
        self._timeout = connection.timeout_seconds
        self._logger = logger or logging.getLogger("order_desk.core.store_client")

    def close(self) -> None:
        """Release the HTTP session."""
        self._session.close()

    # =========================================================================
    # ORDERS
    # =========================================================================

    def list_orders(self, client_id: Optional[str] = None) -> List[Order]:
        """
        Fetch orders with client snapshot and items, newest first.

        Args:
            client_id: Only this client's orders (None fetches every order)

        Rows that cannot be parsed are skipped with a warning.
        """
        params = {"select": ORDER_SELECT, "order": "created_at.desc"}
        if client_id is not None:
            params["client_id"] = f"eq.{client_id}"

        rows = self._request("list_orders", "GET", "orders", params=params)

        orders: List[Order] = []
        for row in rows or []:
            try:
                orders.append(Order.from_row(row))
            except (ValueError, TypeError) as e:
                self._logger.warning(f"Skipping unreadable order row {row.get('id')}: {e}")

        self._logger.debug(f"Fetched {len(orders)} orders")
        return orders

    def get_order(self, order_id: str) -> Order:
        """
        Fetch one order.

        Raises:
            OrderNotFoundError: If no order has this id
        """
        rows = self._request(
            "get_order", "GET", "orders",
            params={"select": ORDER_SELECT, "id": f"eq.{order_id}"},
        )
        if not rows:
            raise OrderNotFoundError(order_id)
        return Order.from_row(rows[0])

    def create_order(
        self,
        client_id: str,
        items: List[Dict[str, Any]],
        notes: Optional[str] = None,
    ) -> Order:
        """
        Create a pending order and its items.

        The order row and item rows are two inserts. If the item insert
        fails, the order row is deleted again before the error is raised, so
        callers either get a complete order or none.

        Args:
            client_id: Profile id of the ordering client
            items: ``{"variant_id", "quantity", "is_make_to_order"}`` dicts
            notes: Client notes (already sanitized)

        Returns:
            The created order with its items

        Raises:
            StoreRequestError: If either insert fails or the order row is unreadable
        """
        self._logger.info(f"Creating order for client {client_id} with {len(items)} lines")

        rows = self._request(
            "create_order", "POST", "orders",
            json=[{"client_id": client_id, "status": OrderStatus.PENDING.value, "notes": notes or None}],
            headers=RETURN_REPRESENTATION,
        )
        order_row = rows[0] if isinstance(rows, list) and rows else None
        if not isinstance(order_row, dict) or not order_row.get("id"):
            raise StoreRequestError("create_order", "store returned no order row")
        order_id = order_row["id"]

        # Parse before the item insert so a bad row never leaves items behind
        try:
            order = Order.from_row(dict(order_row, items=[]))
        except (ValueError, TypeError, AttributeError) as e:
            self._logger.error(f"Unreadable row for new order {order_id}, rolling back: {e}")
            self._delete_order(order_id)
            raise StoreRequestError("create_order", f"store returned an unreadable order row: {e}")

        item_rows = [
            {
                "order_id": order_id,
                "variant_id": item["variant_id"],
                "quantity": item["quantity"],
                "is_make_to_order": bool(item.get("is_make_to_order", False)),
            }
            for item in items
        ]

        try:
            created_items = self._request(
                "create_order_items", "POST", "order_items",
                json=item_rows,
                headers=RETURN_REPRESENTATION,
            )
        except StoreRequestError:
            self._logger.error(f"Item insert failed for order {order_id}, rolling back order row")
            self._delete_order(order_id)
            raise

        try:
            order.items = [OrderItem.from_row(row) for row in created_items or item_rows]
        except (ValueError, TypeError, AttributeError) as e:
            # The order is stored; describe it from the rows that were sent
            self._logger.warning(f"Unreadable item rows for order {order_id}: {e}")
            order.items = [OrderItem.from_row(row) for row in item_rows]

        self._logger.info(f"Order {order.order_number or order.id} created")
        return order

    def update_order_status(
        self,
        order_id: str,
        status: OrderStatus,
        notes: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> Order:
        """
        Set an order's status.

        Args:
            order_id: Order id
            status: New status
            notes: Stored as ``admin_notes`` when given
            extra: Additional columns to write (e.g. ``confirmed_at``)

        Raises:
            OrderNotFoundError: If no order has this id
        """
        payload: Dict[str, Any] = {"status": status.value}
        if extra:
            payload.update(extra)
        if notes is not None:
            payload["admin_notes"] = notes

        return self._update_order("update_order_status", order_id, payload)

    def assign_order(self, order_id: str, worker_id: Optional[str]) -> Order:
        """Assign an order to a worker (None unassigns)."""
        return self._update_order("assign_order", order_id, {"assigned_worker_id": worker_id})

    # =========================================================================
    # CLIENTS
    # =========================================================================

    def list_pending_clients(self) -> List[ClientProfile]:
        """Client profiles awaiting approval, newest first."""
        rows = self._request(
            "list_pending_clients", "GET", "profiles",
            params={
                "select": "*",
                "approval_status": f"eq.{ApprovalStatus.PENDING.value}",
                "order": "created_at.desc",
            },
        )

        profiles: List[ClientProfile] = []
        for row in rows or []:
            try:
                profiles.append(ClientProfile.from_row(row))
            except (ValueError, TypeError, AttributeError) as e:
                self._logger.warning(f"Skipping unreadable profile row: {e}")
        return profiles

    def set_client_approval(self, client_id: str, status: ApprovalStatus) -> ClientProfile:
        """
        Record an approval decision for a client.

        Raises:
            ClientNotFoundError: If no profile has this id
        """
        rows = self._request(
            "set_client_approval", "PATCH", "profiles",
            params={"id": f"eq.{client_id}", "select": "*"},
            json={"approval_status": status.value},
            headers=RETURN_REPRESENTATION,
        )
        if not rows:
            raise ClientNotFoundError(client_id)

        self._logger.info(f"Client {client_id} marked {status.value}")
        return ClientProfile.from_row(rows[0])

    # =========================================================================
    # PRODUCTS
    # =========================================================================

    def list_products_with_stock(self) -> List[Dict[str, Any]]:
        """
        Fetch products with their variants and stock levels, by name.

        Returns:
            Raw product rows with a nested ``variants`` list
        """
        rows = self._request(
            "list_products_with_stock", "GET", "products",
            params={"select": PRODUCT_SELECT, "order": "name"},
        )
        return rows or []

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _update_order(self, operation: str, order_id: str, payload: Dict[str, Any]) -> Order:
        rows = self._request(
            operation, "PATCH", "orders",
            params={"id": f"eq.{order_id}", "select": ORDER_SELECT},
            json=payload,
            headers=RETURN_REPRESENTATION,
        )
        if not rows:
            raise OrderNotFoundError(order_id)
        return Order.from_row(rows[0])

    def _delete_order(self, order_id: str) -> None:
        try:
            self._request("delete_order", "DELETE", "orders", params={"id": f"eq.{order_id}"})
        except StoreRequestError as e:
            # Nothing more can be done here; the original failure is re-raised by the caller
            self._logger.error(f"Rollback of order {order_id} failed: {e}")

    def _request(
        self,
        operation: str,
        method: str,
        table: str,
        params: Optional[Dict[str, str]] = None,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        url = f"{self._connection.rest_url}/{table}"

        try:
            response = self._session.request(
                method,
                url,
                params=params,
                json=json,
                headers=headers,
                timeout=self._timeout,
            )
        except requests.Timeout:
            self._logger.error(f"{operation} timed out after {self._timeout}s")
            raise StoreTimeoutError(operation, self._timeout)
        except requests.RequestException as e:
            self._logger.error(f"{operation} failed: {e}")
            raise StoreRequestError(operation, str(e))

        if response.status_code >= 400:
            message = _error_message(response)
            self._logger.error(f"{operation} returned HTTP {response.status_code}: {message}")
            raise StoreRequestError(operation, message, http_status=response.status_code)

        if response.status_code == 204 or not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise StoreRequestError(operation, f"invalid JSON in response: {e}")


def _error_message(response: requests.Response) -> str:
    """Best-effort error text from a PostgREST error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason or "unknown error"
    if isinstance(body, dict):
        return body.get("message") or body.get("error") or str(body)
    return str(body)
