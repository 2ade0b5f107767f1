"""
Order routes.

Handles:
- GET  /orders                 - All orders (?status=, ?make_to_order=1)
- GET  /my/orders              - The signed-in client's orders
- GET  /orders/board           - Orders bucketed by status
- GET  /orders/<id>            - One order
- POST /orders/<id>/status     - Move an order along its lifecycle
- POST /orders/<id>/assign     - Assign an order to a worker (admin)
"""

from flask import (
    Blueprint,
    current_app,
    request,
)

from core.auth import current_user, role_required
from core.request_body import json_object, optional_text
from models.order import OrderStatus
from services.aggregation import group_orders_by_status, orders_with_make_to_order
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

orders_bp = Blueprint("orders", __name__)

# Board columns; pending orders live in the incoming list instead
BOARD_STATUSES = (
    OrderStatus.CONFIRMED,
    OrderStatus.IN_PRODUCTION,
    OrderStatus.READY,
    OrderStatus.DISPATCHED,
    OrderStatus.DELIVERED,
)


def _order_service():
    return current_app.config["ORDER_SERVICE"]


def _listing_meta(listing) -> dict:
    return {
        "fetched_at": listing.fetched_at.isoformat() if listing.fetched_at else None,
        "error": listing.error,
        "is_stale": listing.is_stale,
    }


@orders_bp.route("/orders", methods=["GET"])
@role_required("admin", "worker")
def list_orders():
    listing = _order_service().list_orders()
    orders = list(listing.orders)

    status_filter = request.args.get("status")
    if status_filter:
        status = OrderStatus.parse(status_filter)
        if status is None:
            return {"error": True, "message": f"Unknown status: {status_filter}"}, 400
        orders = [order for order in orders if order.status == status]

    if request.args.get("make_to_order") in ("1", "true"):
        orders = orders_with_make_to_order(orders)

    response = _listing_meta(listing)
    response["orders"] = [order.to_dict() for order in orders]
    response["count"] = len(orders)
    return response


@orders_bp.route("/my/orders", methods=["GET"])
@role_required("client")
def my_orders():
    """The signed-in client's own orders, newest first."""
    listing = _order_service().list_client_orders(current_user().id)

    response = _listing_meta(listing)
    response["orders"] = [order.to_dict() for order in listing.orders]
    response["count"] = len(listing.orders)
    return response


@orders_bp.route("/orders/board", methods=["GET"])
@role_required("admin", "worker")
def order_board():
    listing = _order_service().list_orders()
    board = group_orders_by_status(listing.orders, BOARD_STATUSES)

    response = _listing_meta(listing)
    response["columns"] = [
        {
            "status": status.value,
            "label": status.label,
            "orders": [order.to_dict() for order in orders],
            "count": len(orders),
        }
        for status, orders in board.items()
    ]
    return response


@orders_bp.route("/orders/<order_id>", methods=["GET"])
@role_required("admin", "worker")
def get_order(order_id: str):
    return _order_service().get_order(order_id).to_dict()


@orders_bp.route("/orders/<order_id>/status", methods=["POST"])
@role_required("admin", "worker")
def update_status(order_id: str):
    """Body: {"status": str, "notes": str (optional)}"""
    data = json_object()

    new_status = optional_text(data, "status")
    if not new_status:
        return {"error": True, "message": "status is required"}, 400

    order = _order_service().update_status(order_id, new_status, optional_text(data, "notes"))
    return {
        "order": order.to_dict(),
        "message": f"Order {order.order_number} is now {order.status.label}",
    }


@orders_bp.route("/orders/<order_id>/assign", methods=["POST"])
@role_required("admin")
def assign_order(order_id: str):
    """Body: {"worker_id": str | null}"""
    worker_id = optional_text(json_object(), "worker_id")
    if worker_id is not None:
        worker_id = worker_id.strip() or None

    order = _order_service().assign_worker(order_id, worker_id)
    return {"order": order.to_dict()}
