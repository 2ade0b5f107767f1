"""
Cart store with durable session persistence.

The cart is what the current user intends to order. It lives in memory as a
mapping of variant id -> LineItem and is written through to a storage
mapping (the Flask session in the web app) after every mutation, under a
single fixed key.

Persistence format:
    A JSON string holding a list of ``[variant_id, line_item_dict]`` pairs.

Failure policy:
    - Corrupt or unparseable stored cart: start empty, log a warning
    - Storage read/write failure: log, then keep working in memory only
    Neither case raises to the caller.

Usage:
    # Per request, from the session
    cart = CartStore(session)
    cart.add_to_cart("Solar Panel", image_url, variant, 3)
    cart.item_count  # 3

    # After a successful checkout
    cart.clear_cart()
"""

from __future__ import annotations

import json
from dataclasses import replace
from collections.abc import MutableMapping
from typing import Any, Dict, Iterator, List, Optional

from models.cart import LineItem, VariantRef
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

DEFAULT_STORAGE_KEY = "order_desk_cart"


class CartStore:
    """
    In-memory cart mirrored to durable storage.

    One CartStore belongs to one browsing session. It is passed explicitly to
    whatever needs it (routes, OrderService.checkout) rather than reached
    through a global.

    Invariants:
        - At most one LineItem per variant id
        - A stored LineItem always has quantity > 0
        - is_make_to_order only goes from False to True while the line exists

    Attributes:
        storage_key: Key under which the cart is stored
        storage_available: False once a storage read/write has failed
    """

    def __init__(self, storage: Optional[MutableMapping] = None, storage_key: str = DEFAULT_STORAGE_KEY):
        """
        Create the cart and load any previously stored contents.

        Args:
            storage: Mutable mapping used for persistence (Flask session, dict).
                None runs the cart in memory only.
            storage_key: Key holding the serialized cart
        """
        self._storage = storage
        self._storage_key = storage_key
        self._storage_available = storage is not None
        self._items: Dict[str, LineItem] = {}

        self._load()

    # =========================================================================
    # READS
    # =========================================================================

    @property
    def storage_key(self) -> str:
        return self._storage_key

    @property
    def storage_available(self) -> bool:
        return self._storage_available

    @property
    def item_count(self) -> int:
        """Sum of quantities across all lines."""
        return sum(item.quantity for item in self._items.values())

    @property
    def mto_item_count(self) -> int:
        """Sum of quantities across make-to-order lines."""
        return sum(item.quantity for item in self._items.values() if item.is_make_to_order)

    @property
    def items(self) -> List[LineItem]:
        """Lines in insertion order."""
        return list(self._items.values())

    @property
    def is_empty(self) -> bool:
        return not self._items

    def get(self, variant_id: str) -> Optional[LineItem]:
        return self._items.get(variant_id)

    def __contains__(self, variant_id: object) -> bool:
        return variant_id in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[LineItem]:
        return iter(list(self._items.values()))

    def to_order_items(self) -> List[Dict[str, Any]]:
        """Lines in the shape expected by OrderStoreClient.create_order()."""
        return [
            {
                "variant_id": item.variant_id,
                "quantity": item.quantity,
                "is_make_to_order": item.is_make_to_order,
            }
            for item in self._items.values()
        ]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON responses."""
        return {
            "items": [item.to_dict() for item in self._items.values()],
            "item_count": self.item_count,
            "mto_item_count": self.mto_item_count,
        }

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def add_to_cart(
        self,
        product_name: str,
        product_image: Optional[str],
        variant: VariantRef,
        delta: int,
        is_make_to_order: bool = False,
    ) -> Optional[LineItem]:
        """
        Add ``delta`` units (may be negative) of a variant.

        The line is created if absent and removed if the resulting quantity
        is zero or less. The make-to-order flag is OR'd with the existing
        one, so a make-to-order line stays make-to-order until removed.

        Args:
            product_name: Product display name (refreshes the stored one)
            product_image: Product image URL (refreshes the stored one)
            variant: Variant being added
            delta: Units to add (negative to subtract)
            is_make_to_order: Whether these units are make-to-order

        Returns:
            The updated LineItem, or None if the line is now absent
        """
        existing = self._items.get(variant.id)
        new_quantity = (existing.quantity if existing else 0) + delta

        if new_quantity <= 0:
            self._items.pop(variant.id, None)
            line = None
        else:
            line = LineItem(
                variant_id=variant.id,
                product_name=product_name,
                product_image=product_image,
                quantity=new_quantity,
                is_make_to_order=bool(is_make_to_order) or (existing is not None and existing.is_make_to_order),
                variant_name=variant.variant_name,
            )
            self._items[variant.id] = line

        logger.debug(f"Cart add {variant.id}: delta={delta}, quantity={new_quantity}")
        self._persist()
        return line

    def update_quantity(self, variant_id: str, quantity: int) -> Optional[LineItem]:
        """
        Overwrite the quantity of an existing line.

        No-op if the variant is not in the cart. Zero or less removes it.

        Returns:
            The updated LineItem, or None if the line is absent afterwards
        """
        existing = self._items.get(variant_id)
        if existing is None:
            return None

        if quantity <= 0:
            del self._items[variant_id]
            line = None
        else:
            line = replace(existing, quantity=quantity)
            self._items[variant_id] = line

        self._persist()
        return line

    set_quantity = update_quantity

    def remove_from_cart(self, variant_id: str) -> None:
        """Remove a line. No-op if absent."""
        if self._items.pop(variant_id, None) is not None:
            logger.debug(f"Cart remove {variant_id}")
        self._persist()

    def clear_cart(self) -> None:
        """Remove every line."""
        self._items.clear()
        self._persist()

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def serialize(self) -> str:
        """Serialized form written to storage."""
        return json.dumps([[variant_id, item.to_dict()] for variant_id, item in self._items.items()])

    @staticmethod
    def deserialize(blob: Any) -> Dict[str, LineItem]:
        """
        Rebuild the cart mapping from its serialized form.

        Returns an empty mapping for anything that does not parse as a list
        of ``[variant_id, line]`` pairs.
        """
        if blob is None or blob == "":
            return {}

        try:
            pairs = json.loads(blob)
            if not isinstance(pairs, list):
                raise ValueError(f"expected a list, got {type(pairs).__name__}")

            items: Dict[str, LineItem] = {}
            for pair in pairs:
                variant_id, data = pair
                line = LineItem.from_dict(data)
                if str(variant_id) != line.variant_id:
                    logger.warning(
                        f"Skipping stored line keyed {variant_id} for variant {line.variant_id}"
                    )
                    continue
                if line.quantity > 0:
                    items[line.variant_id] = line
            return items

        except (TypeError, ValueError, KeyError) as e:
            logger.warning(f"Discarding corrupt stored cart: {e}")
            return {}

    def _load(self) -> None:
        if not self._storage_available:
            return

        try:
            blob = self._storage.get(self._storage_key)
        except Exception as e:
            logger.warning(f"Cart storage read failed, continuing in memory: {e}")
            self._storage_available = False
            return

        self._items = self.deserialize(blob)
        if self._items:
            logger.debug(f"Restored cart with {len(self._items)} lines")

    def _persist(self) -> None:
        if not self._storage_available:
            return

        try:
            self._storage[self._storage_key] = self.serialize()
        except Exception as e:
            logger.warning(f"Cart storage write failed, continuing in memory: {e}")
            self._storage_available = False
