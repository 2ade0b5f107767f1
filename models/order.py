"""
Order data models.

These models mirror the order rows returned by the hosted store, including
the denormalized client snapshot and the nested item -> variant -> product
fields selected alongside each order.

Lifecycle:
    pending -> confirmed -> in_production | ready -> dispatched -> delivered

The store itself does not enforce the sequence; OrderService does when
ENFORCE_FORWARD_STATUS is on (see is_forward_transition()).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Optional


class OrderStatus(Enum):
    """
    Status of an order.

    Lifecycle:
        PENDING -> CONFIRMED -> (IN_PRODUCTION | READY) -> DISPATCHED -> DELIVERED
    """

    PENDING = "pending"
    """Request for quotation placed by the client, not yet reviewed."""

    CONFIRMED = "confirmed"
    """Accepted by an admin."""

    IN_PRODUCTION = "in_production"
    """Make-to-order items are being produced."""

    READY = "ready"
    """Packed and ready to ship."""

    DISPATCHED = "dispatched"
    """Handed to the carrier."""

    DELIVERED = "delivered"
    """Received by the client."""

    @property
    def label(self) -> str:
        """Human-readable label for display."""
        return _STATUS_LABELS[self]

    @property
    def rank(self) -> int:
        """Position along the lifecycle (0 = pending)."""
        return _STATUS_SEQUENCE.index(self)

    @classmethod
    def parse(cls, value: Any) -> Optional["OrderStatus"]:
        """Return the matching status, or None for unknown values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


_STATUS_SEQUENCE = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.IN_PRODUCTION,
    OrderStatus.READY,
    OrderStatus.DISPATCHED,
    OrderStatus.DELIVERED,
]

_STATUS_LABELS = {
    OrderStatus.PENDING: "Pending",
    OrderStatus.CONFIRMED: "Confirmed",
    OrderStatus.IN_PRODUCTION: "In Production",
    OrderStatus.READY: "Ready",
    OrderStatus.DISPATCHED: "Dispatched",
    OrderStatus.DELIVERED: "Delivered",
}

# Timestamp column stamped when an order enters the status
STATUS_TIMESTAMP_FIELDS = {
    OrderStatus.CONFIRMED: "confirmed_at",
    OrderStatus.DISPATCHED: "dispatched_at",
    OrderStatus.DELIVERED: "delivered_at",
}


def is_forward_transition(current: OrderStatus, new: OrderStatus) -> bool:
    """
    Check whether moving from ``current`` to ``new`` keeps the order moving forward.

    Staying on the same status is allowed (notes-only update). Skipping
    stages is allowed; going back is not.
    """
    return new.rank >= current.rank


@dataclass
class ClientInfo:
    """Client snapshot embedded in an order row."""

    id: str
    full_name: str = "Unknown"
    company_name: Optional[str] = None
    email: str = ""
    phone: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "full_name": self.full_name,
            "company_name": self.company_name,
            "email": self.email,
            "phone": self.phone,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClientInfo":
        return cls(
            id=str(data.get("id", "")),
            full_name=data.get("full_name") or "Unknown",
            company_name=data.get("company_name") or None,
            email=data.get("email") or "",
            phone=data.get("phone") or None,
        )


@dataclass
class OrderItem:
    """
    A single line of an order.

    Variant and product display fields are flattened out of the nested
    ``variant -> product`` selection.
    """

    variant_id: str
    quantity: int
    id: str = ""
    is_make_to_order: bool = False
    variant_name: str = "Unknown"
    product_id: str = ""
    product_name: str = "Unknown"
    image_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "variant_id": self.variant_id,
            "quantity": self.quantity,
            "is_make_to_order": self.is_make_to_order,
            "variant_name": self.variant_name,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "image_url": self.image_url,
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "OrderItem":
        """Create from an ``order_items`` row with optional nested variant/product."""
        variant = row.get("variant") or {}
        product = variant.get("product") or {}
        return cls(
            id=str(row.get("id", "")),
            variant_id=str(row.get("variant_id", "")),
            quantity=int(row.get("quantity") or 0),
            is_make_to_order=bool(row.get("is_make_to_order") or False),
            variant_name=variant.get("variant_name") or "Unknown",
            product_id=str(product.get("id") or ""),
            product_name=product.get("name") or "Unknown",
            image_url=product.get("image_url") or None,
        )


@dataclass
class Order:
    """
    An order as stored by the hosted store.

    Timestamps are kept as the ISO strings the store returns.
    """

    id: str
    order_number: str
    status: OrderStatus
    client_id: str
    notes: Optional[str] = None
    admin_notes: Optional[str] = None
    created_at: str = ""
    confirmed_at: Optional[str] = None
    dispatched_at: Optional[str] = None
    delivered_at: Optional[str] = None
    assigned_worker_id: Optional[str] = None
    client: Optional[ClientInfo] = None
    items: List[OrderItem] = field(default_factory=list)

    @property
    def total_quantity(self) -> int:
        """Sum of item quantities."""
        return sum(item.quantity for item in self.items)

    @property
    def has_make_to_order_items(self) -> bool:
        """Whether any line is make-to-order."""
        return any(item.is_make_to_order for item in self.items)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON responses."""
        return {
            "id": self.id,
            "order_number": self.order_number,
            "status": self.status.value,
            "status_label": self.status.label,
            "client_id": self.client_id,
            "notes": self.notes,
            "admin_notes": self.admin_notes,
            "created_at": self.created_at,
            "confirmed_at": self.confirmed_at,
            "dispatched_at": self.dispatched_at,
            "delivered_at": self.delivered_at,
            "assigned_worker_id": self.assigned_worker_id,
            "client": self.client.to_dict() if self.client else None,
            "items": [item.to_dict() for item in self.items],
            "total_quantity": self.total_quantity,
            "has_make_to_order_items": self.has_make_to_order_items,
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Order":
        """
        Create Order from a store row.

        Args:
            row: ``orders`` row, optionally with nested ``client`` and ``items``

        Returns:
            Order instance

        Raises:
            ValueError: If the row carries an unknown status
        """
        status = OrderStatus.parse(row.get("status", "pending"))
        if status is None:
            raise ValueError(f"Unknown order status in row: {row.get('status')!r}")

        client_data = row.get("client")
        items = [OrderItem.from_row(item) for item in (row.get("items") or [])]

        return cls(
            id=str(row.get("id", "")),
            order_number=str(row.get("order_number") or ""),
            status=status,
            client_id=str(row.get("client_id", "")),
            notes=row.get("notes"),
            admin_notes=row.get("admin_notes"),
            created_at=row.get("created_at") or "",
            confirmed_at=row.get("confirmed_at"),
            dispatched_at=row.get("dispatched_at"),
            delivered_at=row.get("delivered_at"),
            assigned_worker_id=row.get("assigned_worker_id"),
            client=ClientInfo.from_dict(client_data) if client_data else None,
            items=items,
        )
