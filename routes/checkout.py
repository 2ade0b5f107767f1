"""
Checkout route.

Turns the session cart into a pending order. Only approved clients may
check out. On failure the cart is left as it was so the client can retry.
"""

from flask import (
    Blueprint,
    current_app,
    session,
)

from core.auth import current_user, role_required
from core.request_body import json_object, optional_text
from routes.cart import get_cart
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

checkout_bp = Blueprint("checkout", __name__)


@checkout_bp.route("/checkout", methods=["POST"])
@role_required("client", approved_only=True)
def checkout():
    """
    Place the order.

    Body (optional): {"notes": str}

    Returns:
        201 with the created order and the (now empty) cart
    """
    order_service = current_app.config.get("ORDER_SERVICE")
    if not order_service:
        return {"error": True, "message": "Order service unavailable"}, 503

    notes = optional_text(json_object(), "notes")
    user = current_user()
    cart = get_cart()

    # EmptyCartError / OrderCreationError are rendered by the app error handler
    order = order_service.checkout(cart, user.id, notes)
    session.modified = True

    return {
        "order": order.to_dict(),
        "cart": cart.to_dict(),
        "message": f"Order {order.order_number} placed",
    }, 201
