"""
Custom exceptions for Order Desk.

Exception Hierarchy:
    OrderDeskError (base)
    ├── StoreNotConfiguredError     - STORE_URL / STORE_API_KEY missing (startup failure)
    ├── StoreUnavailableError       - Store did not answer the startup ping (startup failure)
    ├── StoreRequestError           - A store call failed (runtime, graceful)
    │   └── StoreTimeoutError       - A store call timed out
    ├── CatalogNotReadyError        - Product/stock snapshot not loaded yet
    ├── OrderNotFoundError          - No order with the given id
    ├── ClientNotFoundError         - No client profile with the given id
    ├── EmptyCartError              - Checkout attempted with an empty cart
    ├── OrderCreationError          - Checkout failed, cart left untouched
    ├── InvalidStatusTransitionError - Unknown status or backward transition
    └── InvalidRequestError         - Request body has the wrong JSON shape

Usage:
    Startup errors (StoreNotConfiguredError, StoreUnavailableError) stop the app.
    Runtime errors are turned into JSON error responses by the routes.
"""

from typing import Optional, Dict, Any


class OrderDeskError(Exception):
    """
    Base exception for all Order Desk errors.

    Carries a human-readable message plus a details dict that is logged and
    returned to the caller alongside the message.
    """

    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional context for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Error payload for JSON responses."""
        return {
            "error": True,
            "type": type(self).__name__,
            "message": self.message,
            "details": self.details,
        }


# =============================================================================
# STARTUP ERRORS - Application will not start if these occur
# =============================================================================

class StoreNotConfiguredError(OrderDeskError):
    """
    The store URL or API key is missing from the configuration.

    Typical causes:
    - .env not present next to the application
    - STORE_URL or STORE_API_KEY left empty
    """

    def __init__(self, missing: str):
        message = f"Store configuration is incomplete: {missing} is not set"
        details = {
            "missing": missing,
            "resolution": "Set STORE_URL and STORE_API_KEY in .env"
        }
        super().__init__(message, details)
        self.missing = missing


class StoreUnavailableError(OrderDeskError):
    """
    The hosted store did not answer the startup ping.

    Typical causes:
    - Wrong STORE_URL
    - Network connectivity issues
    - API key rejected
    """

    status_code = 503

    def __init__(self, message: str = "Order store is not available"):
        details = {
            "resolution": "Check STORE_URL, STORE_API_KEY and network connectivity"
        }
        super().__init__(message, details)


# =============================================================================
# RUNTIME ERRORS - Application continues, the operation fails gracefully
# =============================================================================

class StoreRequestError(OrderDeskError):
    """
    A request to the hosted store failed.

    Raised for transport errors and for error responses (HTTP >= 400).
    """

    status_code = 502

    def __init__(
        self,
        operation: str,
        message: str,
        http_status: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        error_details = details or {}
        error_details["operation"] = operation
        if http_status is not None:
            error_details["http_status"] = http_status
        super().__init__(f"Store {operation} failed: {message}", error_details)
        self.operation = operation
        self.http_status = http_status


class StoreTimeoutError(StoreRequestError):
    """A store request did not complete within the configured timeout."""

    status_code = 504

    def __init__(self, operation: str, timeout_seconds: float):
        super().__init__(
            operation,
            f"timed out after {timeout_seconds:.1f}s",
            details={
                "timeout_seconds": timeout_seconds,
                "resolution": "The store may be busy. Try again shortly."
            }
        )
        self.timeout_seconds = timeout_seconds


class CatalogNotReadyError(OrderDeskError):
    """
    The product/stock snapshot has not been loaded yet.

    The caller should show a loading state and retry.
    """

    status_code = 503

    def __init__(self, message: str = "Catalog not yet loaded"):
        details = {
            "resolution": "Wait for the catalog refresh or check store connectivity"
        }
        super().__init__(message, details)


class OrderNotFoundError(OrderDeskError):
    """No order exists with the requested id."""

    status_code = 404

    def __init__(self, order_id: str):
        super().__init__(f"Order not found: {order_id}", {"order_id": order_id})
        self.order_id = order_id


class EmptyCartError(OrderDeskError):
    """Checkout was requested for a cart with no line items."""

    status_code = 400

    def __init__(self):
        super().__init__("Cannot place an order with an empty cart")


class OrderCreationError(OrderDeskError):
    """
    The store rejected or failed the order creation.

    The cart is never cleared when this is raised, so the user can retry
    without re-entering items.
    """

    status_code = 502

    def __init__(self, message: str, item_count: int = 0, details: Optional[Dict[str, Any]] = None):
        error_details = details or {}
        error_details["item_count"] = item_count
        error_details.setdefault("resolution", "Your cart was kept. Please try again.")
        super().__init__(message, error_details)
        self.item_count = item_count


class InvalidStatusTransitionError(OrderDeskError):
    """
    The requested order status is unknown, or moves the order backwards
    along pending -> confirmed -> in_production/ready -> dispatched -> delivered.
    """

    status_code = 409

    def __init__(self, order_id: str, current: Optional[str], requested: str):
        if current is None:
            message = f"Unknown order status: {requested}"
            self.status_code = 400
        else:
            message = f"Cannot move order {order_id} from '{current}' back to '{requested}'"
        details = {
            "order_id": order_id,
            "current_status": current,
            "requested_status": requested,
        }
        super().__init__(message, details)
        self.order_id = order_id
        self.current = current
        self.requested = requested


class ClientNotFoundError(OrderDeskError):
    """No client profile exists with the requested id."""

    status_code = 404

    def __init__(self, client_id: str):
        super().__init__(f"Client not found: {client_id}", {"client_id": client_id})
        self.client_id = client_id


class InvalidRequestError(OrderDeskError):
    """A request body is not the JSON shape the route expects."""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, {"field": field} if field else None)
        self.field = field
