"""
Client profile models.

New client sign-ups start as ``pending``; an admin approves or rejects them.
Only approved clients may check out (see core.auth.role_required).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any, Optional


class ApprovalStatus(Enum):
    """Admin decision on a client sign-up."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @classmethod
    def parse(cls, value: Any) -> Optional["ApprovalStatus"]:
        """Return the matching status, or None for unknown values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


@dataclass
class ClientProfile:
    """A row of the ``profiles`` table."""

    id: str
    email: str
    full_name: str = "Unknown"
    company_name: Optional[str] = None
    phone: Optional[str] = None
    gst_number: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    approval_status: ApprovalStatus = ApprovalStatus.PENDING
    created_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "full_name": self.full_name,
            "company_name": self.company_name,
            "phone": self.phone,
            "gst_number": self.gst_number,
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "pincode": self.pincode,
            "approval_status": self.approval_status.value,
            "created_at": self.created_at,
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ClientProfile":
        """
        Create from a ``profiles`` row.

        A null approval_status reads as pending.

        Raises:
            ValueError: If the row carries an unknown approval status
        """
        raw_status = row.get("approval_status") or ApprovalStatus.PENDING.value
        status = ApprovalStatus.parse(raw_status)
        if status is None:
            raise ValueError(f"Unknown approval status in row: {raw_status!r}")

        return cls(
            id=str(row.get("id", "")),
            email=row.get("email") or "",
            full_name=row.get("full_name") or "Unknown",
            company_name=row.get("company_name") or None,
            phone=row.get("phone") or None,
            gst_number=row.get("gst_number") or None,
            address=row.get("address") or None,
            city=row.get("city") or None,
            state=row.get("state") or None,
            pincode=row.get("pincode") or None,
            approval_status=status,
            created_at=row.get("created_at") or "",
        )
