"""
API routes.

Handles:
- /health - Health check endpoint
"""

from flask import (
    Blueprint,
    current_app,
)

from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

api_bp = Blueprint("api", __name__)


@api_bp.route("/health", methods=["GET"])
def health():
    """Health check endpoint with service status."""
    health_status = {
        "status": "ok",
        "environment": current_app.config.get("ENVIRONMENT", "unknown"),
        "checks": {}
    }

    # Check store connection
    store_connection = current_app.config.get("STORE_CONNECTION")
    if store_connection and store_connection.is_initialized:
        health_status["checks"]["store"] = "initialized"
    elif current_app.config.get("STORE_CLIENT_FACTORY"):
        health_status["checks"]["store"] = "external"
    else:
        health_status["checks"]["store"] = "not_initialized"
        health_status["status"] = "degraded"

    # Check catalog service
    catalog_service = current_app.config.get("CATALOG_SERVICE")
    if catalog_service:
        snapshot = catalog_service.get_snapshot()
        if not len(snapshot) and catalog_service.consecutive_failures:
            health_status["checks"]["catalog"] = "unavailable"
            health_status["status"] = "degraded"
        elif snapshot.is_stale:
            health_status["checks"]["catalog"] = "stale"
        else:
            health_status["checks"]["catalog"] = "ok"
        health_status["checks"]["catalog_refresh"] = (
            "running" if catalog_service.is_running else "on_demand"
        )
    else:
        health_status["checks"]["catalog"] = "not_available"
        health_status["status"] = "degraded"

    # Check order service
    if current_app.config.get("ORDER_SERVICE"):
        health_status["checks"]["order_service"] = "ok"
    else:
        health_status["checks"]["order_service"] = "not_available"
        health_status["status"] = "degraded"

    status_code = 200 if health_status["status"] == "ok" else 503
    return health_status, status_code
