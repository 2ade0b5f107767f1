"""
Flask route blueprints for Order Desk.

This module contains all route handlers organized by functionality:
- cart: Session cart (clients)
- checkout: Cart -> order (approved clients)
- orders: Order listing, board and lifecycle (admin, worker); own orders (clients)
- analytics: Per-product and per-client summaries (admin)
- clients: Client sign-up approval (admin)
- catalog: Product/stock snapshot
- api: Health check

Each blueprint is registered with the Flask app in create_app().
"""

from .cart import cart_bp
from .checkout import checkout_bp
from .orders import orders_bp
from .analytics import analytics_bp
from .clients import clients_bp
from .catalog import catalog_bp
from .api import api_bp

__all__ = [
    "cart_bp",
    "checkout_bp",
    "orders_bp",
    "analytics_bp",
    "clients_bp",
    "catalog_bp",
    "api_bp",
]


def register_blueprints(app):
    """
    Register all blueprints with the Flask app.

    Args:
        app: Flask application instance
    """
    app.register_blueprint(cart_bp)
    app.register_blueprint(checkout_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(analytics_bp)
    app.register_blueprint(clients_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(api_bp)
