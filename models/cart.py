"""
Cart data models.

A cart line is keyed by variant id. Display fields (product name, image,
variant name) are captured when the variant is added so the cart can be
rendered without another catalog lookup.

Persistence:
    LineItem.to_dict() / LineItem.from_dict() are the session storage
    format and must round-trip exactly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Any, Optional


@dataclass(frozen=True)
class VariantRef:
    """
    The purchasable variant handed to CartStore.add_to_cart().

    Only ``id`` is required; the rest is display data copied into the line.
    """

    id: str
    """Variant id (the cart key)."""

    variant_name: str = ""
    """Variant label, e.g. '3 Step' or 'Large / Blue'."""

    product_id: str = ""
    """Owning product id."""

    sku: str = ""
    """Stock keeping unit, if the catalog has one."""

    stock_quantity: int = 0
    """Stock at the time the variant was shown to the user."""

    low_stock_threshold: int = 10
    """Threshold below which the catalog shows 'low stock'."""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VariantRef":
        """Create from a store row (``product_variants`` shape)."""
        return cls(
            id=str(data.get("id", "")),
            variant_name=data.get("variant_name") or "",
            product_id=str(data.get("product_id") or ""),
            sku=data.get("sku") or "",
            stock_quantity=int(data.get("stock_quantity") or 0),
            low_stock_threshold=int(data.get("low_stock_threshold", 10) or 0),
        )


@dataclass(frozen=True)
class LineItem:
    """
    One cart entry.

    Frozen; CartStore swaps in a new line on every change.

    A stored LineItem always has quantity > 0; reaching zero removes it.
    ``is_make_to_order`` is sticky: once true it stays true until the line
    is removed.
    """

    variant_id: str
    """Unique key within the cart."""

    product_name: str
    """Product name captured at add time."""

    product_image: Optional[str]
    """Product image URL captured at add time."""

    quantity: int
    """Net quantity of all additions and subtractions."""

    is_make_to_order: bool = False
    """Demand fulfilled by production rather than from stock."""

    variant_name: str = ""
    """Variant label captured at add time."""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for session storage."""
        return {
            "variantId": self.variant_id,
            "productName": self.product_name,
            "productImage": self.product_image,
            "variantName": self.variant_name,
            "quantity": self.quantity,
            "isMakeToOrder": self.is_make_to_order,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LineItem":
        """
        Create from dictionary (e.g., from session storage).

        Raises:
            KeyError: If variantId or quantity is missing
            ValueError: If quantity is not an integer
        """
        quantity = data["quantity"]
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValueError(f"Invalid quantity in stored line: {quantity!r}")

        return cls(
            variant_id=str(data["variantId"]),
            product_name=data.get("productName", ""),
            product_image=data.get("productImage"),
            quantity=quantity,
            is_make_to_order=bool(data.get("isMakeToOrder", False)),
            variant_name=data.get("variantName", ""),
        )
