"""
Catalog route.

Serves the current catalog snapshot from the background refresh thread.
Clients see active variants only; staff see everything.
"""

from flask import (
    Blueprint,
    current_app,
)

from core.auth import current_user, role_required
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

catalog_bp = Blueprint("catalog", __name__)


@catalog_bp.route("/catalog", methods=["GET"])
@role_required()
def catalog():
    catalog_service = current_app.config.get("CATALOG_SERVICE")
    if not catalog_service:
        return {"error": True, "message": "Catalog service unavailable"}, 503

    snapshot = catalog_service.get_snapshot_or_raise()
    user = current_user()

    variants = list(snapshot)
    if user.role == "client":
        variants = [v for v in variants if v.is_active]

    return {
        "variants": [v.to_dict() for v in variants],
        "fetched_at": snapshot.fetched_at.isoformat(),
        "is_stale": snapshot.is_stale,
    }
