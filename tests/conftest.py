"""Shared fixtures: store rows, order factory, and a test app wired to a mock store client."""

import pytest
from unittest.mock import MagicMock

from app import create_app
from models.order import Order


# Fixtures

@pytest.fixture
def product_rows():
    """Two products as returned by list_products_with_stock()."""
    return [
        {
            "id": "p-ladder",
            "name": "Aluminium Ladder",
            "image_url": "https://cdn.example/ladder.png",
            "is_active": True,
            "variants": [
                {"id": "v-10step", "variant_name": "10 Step", "stock_quantity": 4,
                 "low_stock_threshold": 5, "sku": "LAD-10", "is_active": True},
                {"id": "v-3step", "variant_name": "3 Step", "stock_quantity": 40,
                 "low_stock_threshold": 10, "sku": "LAD-3", "is_active": True},
            ],
        },
        {
            "id": "p-stool",
            "name": "Step Stool",
            "image_url": None,
            "is_active": True,
            "variants": [
                {"id": "v-stool", "variant_name": "Standard", "stock_quantity": 0,
                 "low_stock_threshold": None, "sku": "", "is_active": True},
                {"id": "v-stool-old", "variant_name": "Legacy", "stock_quantity": 2,
                 "low_stock_threshold": 1, "is_active": False},
            ],
        },
    ]


@pytest.fixture
def make_order_row():
    """Factory for ``orders`` rows with nested client and items."""

    def _make(order_id="o-1", client_id="c-1", client_name="Client One", company=None,
              status="pending", items=(), order_number=None):
        return {
            "id": order_id,
            "order_number": order_number or f"ORD-{order_id}",
            "status": status,
            "client_id": client_id,
            "notes": None,
            "admin_notes": None,
            "created_at": "2026-10-01T09:00:00+00:00",
            "client": {"id": client_id, "full_name": client_name, "company_name": company},
            "items": [
                {
                    "id": f"{order_id}-{variant_id}",
                    "variant_id": variant_id,
                    "quantity": quantity,
                    "is_make_to_order": mto,
                    "variant": {
                        "id": variant_id,
                        "variant_name": f"Variant {variant_id}",
                        "product": {"id": f"p-{variant_id}", "name": f"Product {variant_id}"},
                    },
                }
                for variant_id, quantity, mto in items
            ],
        }

    return _make


@pytest.fixture
def make_order(make_order_row):
    """Factory for Order instances (same arguments as make_order_row)."""

    def _make(**kwargs):
        return Order.from_row(make_order_row(**kwargs))

    return _make


@pytest.fixture
def store_client(product_rows):
    """Mock OrderStoreClient handed out by the test app's client factory."""
    client = MagicMock()
    client.list_products_with_stock.return_value = product_rows
    client.list_orders.return_value = []
    return client


@pytest.fixture
def app(store_client):
    """App built from TestingConfig; every store client is the mock above."""
    app = create_app("config.TestingConfig", store_client_factory=lambda: store_client)
    yield app
    app.config["CATALOG_SERVICE"].stop()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    """Put a user into the session: login(role="admin", approved=True)."""

    def _login(role="client", approved=True, user_id=None):
        with client.session_transaction() as sess:
            sess["user"] = {
                "id": user_id or f"{role}-1",
                "role": role,
                "approval_status": "approved" if approved else "pending",
            }

    return _login
