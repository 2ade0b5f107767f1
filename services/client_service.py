"""
Client approval service.

Admins review new client sign-ups and approve or reject them. Each call
creates its own OrderStoreClient and closes it before returning.
"""

from __future__ import annotations

from typing import Callable, List

from core.exceptions import InvalidRequestError
from models.client import ApprovalStatus, ClientProfile
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)


class ClientService:
    """Pending-client listing and approval decisions."""

    def __init__(self, client_factory: Callable):
        """
        Args:
            client_factory: Zero-argument callable returning a new OrderStoreClient
        """
        self._client_factory = client_factory

    def list_pending_clients(self) -> List[ClientProfile]:
        """
        Raises:
            StoreRequestError: If the store call fails
        """
        client = self._client_factory()
        try:
            return client.list_pending_clients()
        finally:
            client.close()

    def set_approval(self, client_id: str, decision) -> ClientProfile:
        """
        Approve or reject a client.

        Args:
            client_id: Profile id
            decision: ApprovalStatus.APPROVED / REJECTED or its string value

        Raises:
            InvalidRequestError: If the decision is not approved or rejected
            ClientNotFoundError: If no profile has this id
            StoreRequestError: If the store call fails
        """
        status = ApprovalStatus.parse(decision)
        if status not in (ApprovalStatus.APPROVED, ApprovalStatus.REJECTED):
            raise InvalidRequestError(f"Unknown approval decision: {decision}", field="approval_status")

        client = self._client_factory()
        try:
            profile = client.set_client_approval(client_id, status)
        finally:
            client.close()

        logger.info(f"Client {client_id} {status.value}")
        return profile

    def approve(self, client_id: str) -> ClientProfile:
        return self.set_approval(client_id, ApprovalStatus.APPROVED)

    def reject(self, client_id: str) -> ClientProfile:
        return self.set_approval(client_id, ApprovalStatus.REJECTED)
