"""
Admin analytics routes.

Both views aggregate the current order listing on every request:
- /analytics/products - demand per variant against the catalog stock
- /analytics/clients  - orders and items per client
"""

from flask import (
    Blueprint,
    current_app,
    request,
)

from core.auth import role_required
from models.order import OrderStatus
from services.aggregation import (
    search_product_summaries,
    summarize_by_client,
    summarize_by_product,
)
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

analytics_bp = Blueprint("analytics", __name__)


def _load_orders():
    """
    Current orders, optionally narrowed by ?status=.

    Returns:
        (listing, orders, error_response) - error_response is None on success
    """
    listing = current_app.config["ORDER_SERVICE"].list_orders()
    orders = list(listing.orders)

    status_filter = request.args.get("status")
    if status_filter:
        status = OrderStatus.parse(status_filter)
        if status is None:
            return listing, [], ({"error": True, "message": f"Unknown status: {status_filter}"}, 400)
        orders = [order for order in orders if order.status == status]

    return listing, orders, None


@analytics_bp.route("/analytics/products", methods=["GET"])
@role_required("admin")
def product_summary():
    listing, orders, error = _load_orders()
    if error:
        return error

    snapshot = current_app.config["CATALOG_SERVICE"].get_snapshot()
    summaries = summarize_by_product(orders, snapshot)
    summaries = search_product_summaries(summaries, request.args.get("search", ""))

    return {
        "products": [summary.to_dict() for summary in summaries],
        "order_count": len(orders),
        "orders_error": listing.error,
        "stock_is_stale": snapshot.is_stale,
    }


@analytics_bp.route("/analytics/clients", methods=["GET"])
@role_required("admin")
def client_summary():
    listing, orders, error = _load_orders()
    if error:
        return error

    summaries = summarize_by_client(orders)

    return {
        "clients": [summary.to_dict() for summary in summaries],
        "order_count": len(orders),
        "orders_error": listing.error,
    }
