"""
Role gating for routes.

Authentication itself is handled by the hosted store; this app only reads
the resolved user from the session:

    session["user"] = {"id": "...", "role": "admin|worker|client",
                       "approval_status": "pending|approved|rejected"}
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import wraps
from typing import Optional

from flask import session

from logging_config import get_logger


logger = get_logger(__name__)

ROLES = ("admin", "worker", "client")


@dataclass(frozen=True)
class CurrentUser:
    id: str
    role: str
    approval_status: str = "pending"

    @property
    def is_approved(self) -> bool:
        return self.approval_status == "approved"


def current_user() -> Optional[CurrentUser]:
    """The signed-in user, or None."""
    data = session.get("user")
    if not isinstance(data, dict) or not data.get("id"):
        return None
    return CurrentUser(
        id=str(data["id"]),
        role=data.get("role", "client"),
        approval_status=data.get("approval_status", "pending"),
    )


def role_required(*roles: str, approved_only: bool = False):
    """
    Restrict a view to signed-in users with one of ``roles``.

    Args:
        roles: Allowed roles (empty allows any signed-in user)
        approved_only: Also require approval_status == "approved"

    Responds 401 when nobody is signed in, 403 otherwise.
    """
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            user = current_user()
            if user is None:
                return {"error": True, "message": "Sign in required"}, 401

            if roles and user.role not in roles:
                logger.warning(f"User {user.id} ({user.role}) denied access to {view.__name__}")
                return {"error": True, "message": "You do not have access to this page"}, 403

            if approved_only and not user.is_approved:
                return {"error": True, "message": "Your account is pending approval"}, 403

            return view(*args, **kwargs)
        return wrapper
    return decorator
