"""
Unit tests for the CatalogService refresh logic.

Refreshes are driven with force_refresh(); the background thread is only
started in the lifecycle tests.
"""

import pytest
from unittest.mock import MagicMock

from core.exceptions import CatalogNotReadyError, StoreRequestError
from services.catalog_service import CatalogService


# Fixtures

@pytest.fixture
def store_client(product_rows):
    client = MagicMock()
    client.list_products_with_stock.return_value = product_rows
    return client


@pytest.fixture
def service(store_client):
    service = CatalogService(lambda: store_client, refresh_interval_seconds=60.0)
    yield service
    service.stop()


class TestRefresh:
    """Snapshot replacement and failure handling."""

    def test_initial_snapshot_empty_and_not_ready(self, service):
        assert len(service.get_snapshot()) == 0
        with pytest.raises(CatalogNotReadyError):
            service.get_snapshot_or_raise()

    def test_force_refresh_loads_snapshot(self, service, store_client):
        assert service.force_refresh() is True

        snapshot = service.get_snapshot_or_raise()
        assert len(snapshot) == 4
        assert not snapshot.is_stale
        store_client.close.assert_called_once()

    def test_refresh_swaps_snapshot(self, service):
        service.force_refresh()
        first = service.get_snapshot()

        service.force_refresh()

        assert service.get_snapshot() is not first

    def test_failure_keeps_last_good_snapshot(self, service, store_client):
        service.force_refresh()
        good = service.get_snapshot()

        store_client.list_products_with_stock.side_effect = StoreRequestError("list_products_with_stock", "down")

        assert service.force_refresh() is False
        assert service.get_snapshot() is good
        assert service.consecutive_failures == 1
        assert store_client.close.call_count == 2

    def test_recovery_resets_failure_count(self, service, store_client, product_rows):
        store_client.list_products_with_stock.side_effect = StoreRequestError("list_products_with_stock", "down")
        for _ in range(4):
            service.force_refresh()
        assert service.consecutive_failures == 4

        store_client.list_products_with_stock.side_effect = None
        store_client.list_products_with_stock.return_value = product_rows

        assert service.force_refresh() is True
        assert service.consecutive_failures == 0

    def test_client_factory_failure_counted(self):
        def failing_factory():
            raise ValueError("store connection not initialized")

        service = CatalogService(failing_factory)

        assert service.force_refresh() is False
        assert service.consecutive_failures == 1


class TestLifecycle:
    """Background thread start/stop."""

    def test_start_and_stop(self, service, store_client):
        service.start()
        assert service.is_running

        service.stop()

        assert not service.is_running
        store_client.list_products_with_stock.assert_called()

    def test_start_twice_is_safe(self, service):
        service.start()
        service.start()

        assert service.is_running

    def test_stop_when_not_running(self, service):
        service.stop()

        assert not service.is_running
