"""
Hosted store connection lifecycle.

This module validates the store configuration and checks that the store is
reachable once, in the main thread, at application startup. Clients built
afterwards (one per thread or request) get their own ``requests.Session``
from build_session(), so no HTTP session is shared between threads.

FAIL FAST BEHAVIOR:
    - If STORE_URL or STORE_API_KEY is missing: raises StoreNotConfiguredError
    - If the startup ping fails: raises StoreUnavailableError
    - There is no offline mode

Usage:
    # At application startup (main thread)
    connection = StoreConnection(config["STORE_URL"], config["STORE_API_KEY"])
    connection.initialize()

    # Per thread / request
    client = OrderStoreClient(connection, logger)

    # At application shutdown
    connection.cleanup()
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

import requests

from .exceptions import StoreNotConfiguredError, StoreUnavailableError


REST_PATH = "/rest/v1"


class StoreConnection:
    """
    Holds the store endpoint and credentials for the lifetime of the app.

    Attributes:
        base_url: Store base URL (without the REST path)
        rest_url: Base URL of the REST tables
        timeout_seconds: Per-request timeout handed to clients
        is_initialized: True once the startup ping succeeded
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout_seconds: float = 10.0,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Args:
            base_url: Store base URL, e.g. https://project.example.co
            api_key: API key sent as ``apikey`` and bearer token
            timeout_seconds: Per-request timeout
            logger: Logger instance (optional)

        Note:
            This does NOT contact the store - call initialize() to do that.
        """
        self._base_url = (base_url or "").rstrip("/")
        self._api_key = api_key or ""
        self._timeout = timeout_seconds
        self._logger = logger or logging.getLogger("order_desk.core.store_connection")
        self._is_initialized = False

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def rest_url(self) -> str:
        return f"{self._base_url}{REST_PATH}"

    @property
    def timeout_seconds(self) -> float:
        return self._timeout

    @property
    def is_initialized(self) -> bool:
        return self._is_initialized

    def headers(self) -> Dict[str, str]:
        """Auth and content headers sent with every request."""
        return {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def build_session(self) -> requests.Session:
        """
        Create a new HTTP session carrying the store headers.

        Each client owns the session it gets here.
        """
        session = requests.Session()
        session.headers.update(self.headers())
        return session

    def initialize(self) -> None:
        """
        Validate configuration and ping the store.

        Raises:
            StoreNotConfiguredError: If the URL or API key is missing
            StoreUnavailableError: If the store does not answer
            RuntimeError: If called when already initialized
        """
        if self._is_initialized:
            raise RuntimeError("Store connection already initialized")

        if not self._base_url:
            raise StoreNotConfiguredError("STORE_URL")
        if not self._api_key:
            raise StoreNotConfiguredError("STORE_API_KEY")

        self._logger.info(f"Connecting to store: {self._base_url}")

        session = self.build_session()
        try:
            response = session.get(f"{self.rest_url}/", timeout=self._timeout)
        except requests.RequestException as e:
            self._logger.critical(f"Store ping failed: {e}")
            raise StoreUnavailableError(f"Store at {self._base_url} is not reachable: {e}")
        finally:
            session.close()

        if response.status_code >= 400:
            self._logger.critical(f"Store ping returned HTTP {response.status_code}")
            raise StoreUnavailableError(
                f"Store at {self._base_url} answered HTTP {response.status_code}"
            )

        self._is_initialized = True
        self._logger.info("Store connection initialized")

    def cleanup(self) -> None:
        """Mark the connection closed. Safe to call multiple times."""
        if not self._is_initialized:
            return
        self._is_initialized = False
        self._logger.info("Store connection closed")

    def __enter__(self) -> "StoreConnection":
        self.initialize()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.cleanup()
