"""
Client approval routes (admin).

Handles:
- GET  /clients/pending              - Sign-ups awaiting approval
- POST /clients/<client_id>/approve  - Approve a client
- POST /clients/<client_id>/reject   - Reject a client
"""

from flask import (
    Blueprint,
    current_app,
)

from core.auth import role_required
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

clients_bp = Blueprint("clients", __name__)


def _client_service():
    return current_app.config["CLIENT_SERVICE"]


@clients_bp.route("/clients/pending", methods=["GET"])
@role_required("admin")
def pending_clients():
    clients = _client_service().list_pending_clients()
    return {
        "clients": [profile.to_dict() for profile in clients],
        "count": len(clients),
    }


@clients_bp.route("/clients/<client_id>/approve", methods=["POST"])
@role_required("admin")
def approve_client(client_id: str):
    profile = _client_service().approve(client_id)
    return {"client": profile.to_dict(), "message": f"{profile.full_name} approved"}


@clients_bp.route("/clients/<client_id>/reject", methods=["POST"])
@role_required("admin")
def reject_client(client_id: str):
    profile = _client_service().reject(client_id)
    return {"client": profile.to_dict(), "message": f"{profile.full_name} rejected"}
