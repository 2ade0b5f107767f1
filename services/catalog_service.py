"""
Catalog service with background refresh thread.

Products and stock levels are pulled from the store on a fixed interval and
kept as an immutable CatalogSnapshot. Routes read the current snapshot via
get_snapshot(); after actions that change stock, callers may force_refresh().

Thread Safety:
    - The refresh thread builds a new CatalogSnapshot on each pull
    - Readers get the current snapshot via an atomic reference
    - Each pull uses its own OrderStoreClient (own HTTP session)

Failure policy:
    A failed pull keeps the previous snapshot. The first failure logs a
    warning, the next few log errors, then only every 5th is logged.

Usage:
    # At app startup
    catalog_service = CatalogService(client_factory, refresh_interval_seconds=300)
    catalog_service.start()

    # In routes
    snapshot = catalog_service.get_snapshot()

    # At app shutdown
    catalog_service.stop()
"""

from __future__ import annotations

import threading
from typing import Callable, Optional

from core.exceptions import CatalogNotReadyError
from models.catalog import CatalogSnapshot
from logging_config import get_logger, set_thread_name


# Module logger
logger = get_logger(__name__)


class CatalogService:
    """
    Background service for catalog/stock refresh.

    Attributes:
        refresh_interval_seconds: Time between refreshes
        is_running: Whether the background thread is active
    """

    def __init__(
        self,
        client_factory: Callable,
        refresh_interval_seconds: float = 300.0,
    ):
        """
        Initialize catalog service.

        Args:
            client_factory: Zero-argument callable returning a new
                OrderStoreClient
            refresh_interval_seconds: Seconds between refreshes
        """
        self._client_factory = client_factory
        self._refresh_interval = refresh_interval_seconds

        # Thread control
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._is_running = False

        # Start empty so get_snapshot() never returns None
        self._current_snapshot: CatalogSnapshot = CatalogSnapshot.create_empty()
        self._has_loaded = False

        self._consecutive_failures = 0

        logger.info(f"CatalogService initialized (refresh interval: {refresh_interval_seconds}s)")

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def refresh_interval_seconds(self) -> float:
        return self._refresh_interval

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    def start(self) -> None:
        """
        Start the background refresh thread.

        Fetches immediately, then every refresh_interval_seconds until
        stop() is called. Safe to call multiple times.
        """
        if self._is_running:
            logger.warning("CatalogService already running")
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._refresh_loop,
            name="Catalog",
            daemon=True
        )
        self._is_running = True
        self._thread.start()

        logger.info("Catalog refresh thread started")

    def stop(self) -> None:
        """Stop the background refresh thread and wait for it to finish."""
        if not self._is_running:
            return

        self._stop_event.set()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)
            if self._thread.is_alive():
                logger.warning("Catalog thread did not stop cleanly")

        self._is_running = False
        self._thread = None

        logger.info("Catalog refresh thread stopped")

    def get_snapshot(self) -> CatalogSnapshot:
        """
        Get the current catalog snapshot (never None, may be stale or empty).
        """
        return self._current_snapshot

    def get_snapshot_or_raise(self) -> CatalogSnapshot:
        """
        Get current snapshot, raising if the catalog never loaded.

        Raises:
            CatalogNotReadyError: If no refresh has succeeded yet
        """
        if not self._has_loaded:
            raise CatalogNotReadyError(
                "Catalog not yet loaded. Please wait for the initial fetch."
            )
        return self._current_snapshot

    def force_refresh(self) -> bool:
        """
        Refresh now, in the calling thread.

        Returns:
            True if refresh succeeded, False otherwise
        """
        logger.info("Forcing catalog refresh...")
        return self._do_refresh()

    def _refresh_loop(self) -> None:
        set_thread_name("Catalog")
        logger.info("Catalog refresh loop starting")

        self._do_refresh()

        while not self._stop_event.is_set():
            if self._stop_event.wait(timeout=self._refresh_interval):
                break
            self._do_refresh()

        logger.info("Catalog refresh loop exiting")

    def _do_refresh(self) -> bool:
        """
        Perform a single catalog pull with a fresh client.

        Returns:
            True if refresh succeeded, False otherwise
        """
        logger.debug("Refreshing catalog...")

        try:
            client = self._client_factory()
            try:
                rows = client.list_products_with_stock()
            finally:
                client.close()

            new_snapshot = CatalogSnapshot.from_product_rows(
                rows,
                stale_after_seconds=max(self._refresh_interval * 2, 60.0),
            )

            # Atomic reference swap
            self._current_snapshot = new_snapshot
            self._has_loaded = True

            if self._consecutive_failures > 0:
                logger.info(
                    f"Catalog refresh recovered after {self._consecutive_failures} failures"
                )
            self._consecutive_failures = 0

            logger.debug(f"Catalog refreshed: {len(new_snapshot)} variants")
            return True

        except Exception as e:
            self._consecutive_failures += 1

            if self._consecutive_failures == 1:
                logger.warning(f"Catalog refresh failed: {e}")
            elif self._consecutive_failures <= 3:
                logger.error(f"Catalog refresh failed ({self._consecutive_failures} consecutive): {e}")
            elif self._consecutive_failures % 5 == 0:
                logger.error(
                    f"Catalog refresh still failing ({self._consecutive_failures} consecutive): {e}"
                )

            return False
