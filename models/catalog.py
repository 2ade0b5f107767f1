"""
Catalog data models.

These models are point-in-time snapshots of the products and stock levels
held by the hosted store. The catalog service builds a new snapshot on each
refresh and swaps it in; readers never see a half-built snapshot.

Thread Safety:
    - CatalogSnapshot is a frozen dataclass (immutable)
    - Safe to read from any thread without locks
    - New snapshots replace old ones atomically
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Any, Iterable, List, Optional, Tuple

from logging_config import get_logger
from .summary import StockStatus, classify_stock


logger = get_logger(__name__)

DEFAULT_LOW_STOCK_THRESHOLD = 10

_LEADING_NUMBER = re.compile(r"^(\d+)")


def variant_sort_key(variant_name: str) -> Tuple[int, int, str]:
    """
    Sort key that orders '2 Step' before '10 Step'.

    Names starting with a number sort numerically ahead of the rest, which
    sort alphabetically (case-insensitive).
    """
    name = variant_name or ""
    match = _LEADING_NUMBER.match(name)
    if match:
        return (0, int(match.group(1)), name.lower())
    return (1, 0, name.lower())


@dataclass(frozen=True)
class CatalogVariant:
    """
    A single purchasable variant with its current stock.

    Flattened from ``products`` + nested ``product_variants`` rows.
    """

    variant_id: str
    """Variant id (cart key, stock tracking unit)."""

    product_id: str
    """Owning product id."""

    product_name: str
    """Product display name."""

    variant_name: str
    """Variant label, e.g. '3 Step'."""

    stock_quantity: int
    """Units currently in stock."""

    low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD
    """At or below this many units the variant shows as low stock."""

    image_url: Optional[str] = None
    """Product image URL."""

    sku: str = ""
    """Stock keeping unit."""

    is_active: bool = True
    """Inactive variants are hidden from clients."""

    @property
    def stock_status(self) -> StockStatus:
        """Stock level before any pending demand."""
        return classify_stock(self.stock_quantity, self.low_stock_threshold)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON responses."""
        return {
            "variant_id": self.variant_id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "variant_name": self.variant_name,
            "stock_quantity": self.stock_quantity,
            "low_stock_threshold": self.low_stock_threshold,
            "image_url": self.image_url,
            "sku": self.sku,
            "is_active": self.is_active,
            "stock_status": self.stock_status.value,
        }


@dataclass(frozen=True)
class CatalogSnapshot:
    """
    Point-in-time snapshot of the product catalog and stock levels.

    This is a FROZEN dataclass - completely immutable after creation.

    Usage:
        # In catalog service (creates new snapshot)
        snapshot = CatalogSnapshot.from_product_rows(rows)

        # In routes (reads current snapshot)
        snapshot = catalog_service.get_snapshot()
        variant = snapshot.get_variant(variant_id)
    """

    fetched_at: datetime
    """When this snapshot was fetched from the store."""

    variants: Tuple[CatalogVariant, ...]
    """Immutable tuple of variants, grouped by product."""

    stale_after_seconds: float = 600.0
    """Age after which the snapshot is reported stale."""

    def __iter__(self):
        return iter(self.variants)

    def __len__(self) -> int:
        return len(self.variants)

    @property
    def age_seconds(self) -> float:
        """How old this snapshot is in seconds."""
        now = datetime.now(timezone.utc)
        return (now - self.fetched_at).total_seconds()

    @property
    def is_stale(self) -> bool:
        return self.age_seconds > self.stale_after_seconds

    def get_variant(self, variant_id: str) -> Optional[CatalogVariant]:
        """
        Find a variant by id.

        The store should never return a variant twice; if it does, the first
        match wins.

        Args:
            variant_id: Variant id

        Returns:
            CatalogVariant if found, None otherwise
        """
        for variant in self.variants:
            if variant.variant_id == variant_id:
                return variant
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "fetched_at": self.fetched_at.isoformat(),
            "variants": [v.to_dict() for v in self.variants],
            "age_seconds": self.age_seconds,
            "is_stale": self.is_stale,
        }

    @classmethod
    def from_product_rows(
        cls,
        rows: Iterable[Dict[str, Any]],
        stale_after_seconds: float = 600.0,
    ) -> "CatalogSnapshot":
        """
        Create snapshot from ``products`` rows with nested ``variants``.

        Variants inside a product are ordered with variant_sort_key().
        Malformed variant rows are skipped with a warning.

        Args:
            rows: Product rows as returned by list_products_with_stock()
            stale_after_seconds: Age after which is_stale reports True

        Returns:
            CatalogSnapshot with parsed data
        """
        variant_list: List[CatalogVariant] = []

        for product in rows:
            product_id = str(product.get("id", ""))
            product_name = product.get("name") or "Unknown"
            image_url = product.get("image_url") or None
            product_active = product.get("is_active", True)

            variant_rows = sorted(
                product.get("variants") or [],
                key=lambda v: variant_sort_key(v.get("variant_name") or ""),
            )

            for row in variant_rows:
                try:
                    threshold = row.get("low_stock_threshold")
                    variant_list.append(CatalogVariant(
                        variant_id=str(row["id"]),
                        product_id=product_id,
                        product_name=product_name,
                        variant_name=row.get("variant_name") or "",
                        stock_quantity=int(row.get("stock_quantity") or 0),
                        low_stock_threshold=(
                            DEFAULT_LOW_STOCK_THRESHOLD if threshold is None else int(threshold)
                        ),
                        image_url=image_url,
                        sku=row.get("sku") or "",
                        is_active=bool(product_active and row.get("is_active", True)),
                    ))
                except (KeyError, TypeError, ValueError) as e:
                    logger.warning(f"Skipping malformed variant row for product {product_id}: {e}")

        return cls(
            fetched_at=datetime.now(timezone.utc),
            variants=tuple(variant_list),
            stale_after_seconds=stale_after_seconds,
        )

    @classmethod
    def create_empty(cls) -> "CatalogSnapshot":
        """
        Create an empty snapshot (for initialization before first fetch).

        Marked stale immediately so routes know data isn't ready.
        """
        old_time = datetime(2000, 1, 1, tzinfo=timezone.utc)
        return cls(fetched_at=old_time, variants=())
