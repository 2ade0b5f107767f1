"""
Cart routes.

Handles:
- GET    /cart                      - Current cart with counts
- POST   /cart/items                - Add (or subtract) units of a variant
- PUT    /cart/items/<variant_id>   - Overwrite a line's quantity
- DELETE /cart/items/<variant_id>   - Remove a line
- DELETE /cart                      - Empty the cart

The cart is rebuilt from the session on every request and written back on
every change.
"""

from flask import (
    Blueprint,
    current_app,
    session,
)

from core.auth import role_required
from core.request_body import json_object, optional_flag
from models.cart import VariantRef
from services.cart_store import CartStore
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

cart_bp = Blueprint("cart", __name__)


def get_cart() -> CartStore:
    """Cart for the current session."""
    return CartStore(session, current_app.config.get("CART_STORAGE_KEY", "order_desk_cart"))


def _error(message: str, status_code: int = 400):
    return {"error": True, "message": message}, status_code


def _parse_quantity(value, allow_negative: bool = False):
    """
    Validate a quantity from a JSON body.

    Returns:
        (quantity, error_message) - exactly one is None
    """
    if isinstance(value, bool) or not isinstance(value, int):
        return None, "Quantity must be a whole number"

    max_quantity = current_app.config.get("MAX_LINE_QUANTITY", 100000)
    if abs(value) > max_quantity:
        return None, f"Quantity cannot exceed {max_quantity}"
    if not allow_negative and value < 0:
        return None, "Quantity cannot be negative"

    return value, None


@cart_bp.route("/cart", methods=["GET"])
@role_required("client")
def view_cart():
    return get_cart().to_dict()


@cart_bp.route("/cart/items", methods=["POST"])
@role_required("client")
def add_item():
    """
    Add units of a catalog variant.

    Body: {"variant_id": str, "quantity": int, "is_make_to_order": bool}
    ``quantity`` may be negative to take units away.
    """
    data = json_object()

    variant_id = str(data.get("variant_id") or "").strip()
    if not variant_id:
        return _error("variant_id is required")

    quantity, error = _parse_quantity(data.get("quantity", 1), allow_negative=True)
    if error:
        return _error(error)
    is_make_to_order = optional_flag(data, "is_make_to_order")

    catalog_service = current_app.config.get("CATALOG_SERVICE")
    if not catalog_service:
        return _error("Catalog service unavailable", 503)

    snapshot = catalog_service.get_snapshot_or_raise()
    variant = snapshot.get_variant(variant_id)
    if variant is None or not variant.is_active:
        return _error(f"Product variant not found: {variant_id}", 404)

    cart = get_cart()
    line = cart.add_to_cart(
        variant.product_name,
        variant.image_url,
        VariantRef(
            id=variant.variant_id,
            variant_name=variant.variant_name,
            product_id=variant.product_id,
            sku=variant.sku,
            stock_quantity=variant.stock_quantity,
            low_stock_threshold=variant.low_stock_threshold,
        ),
        quantity,
        is_make_to_order=is_make_to_order,
    )
    session.modified = True

    response = cart.to_dict()
    response["line"] = line.to_dict() if line else None
    return response


@cart_bp.route("/cart/items/<variant_id>", methods=["PUT"])
@role_required("client")
def update_item(variant_id: str):
    """Body: {"quantity": int}. Zero removes the line."""
    data = json_object()

    quantity, error = _parse_quantity(data.get("quantity"))
    if error:
        return _error(error)

    cart = get_cart()
    if variant_id not in cart:
        return _error(f"Item not in cart: {variant_id}", 404)

    cart.update_quantity(variant_id, quantity)
    session.modified = True
    return cart.to_dict()


@cart_bp.route("/cart/items/<variant_id>", methods=["DELETE"])
@role_required("client")
def remove_item(variant_id: str):
    cart = get_cart()
    cart.remove_from_cart(variant_id)
    session.modified = True
    return cart.to_dict()


@cart_bp.route("/cart", methods=["DELETE"])
@role_required("client")
def clear_cart():
    cart = get_cart()
    cart.clear_cart()
    session.modified = True
    logger.info("Cart cleared")
    return cart.to_dict()
