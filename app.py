"""
Order Desk - Flask Application Entry Point.

This is a slim app factory that:
1. Connects to the hosted store (fail-fast, no offline mode)
2. Starts the catalog service (separate thread)
3. Creates the order and client services
4. Registers route blueprints
5. Sets up JSON error handlers

ARCHITECTURE:
    Main Thread
    ├── Store connection check (startup ping)
    ├── Flask request handling
    └── Cleanup on shutdown

    Catalog Thread (background)
    └── Periodic product/stock refresh with OWN store client

Each thread (and each service call) creates its own store client, so no
HTTP session is shared between threads.
"""

from __future__ import annotations

import atexit
import logging
import os
import sys
from pathlib import Path
from typing import Callable, Optional

from dotenv import load_dotenv
from flask import Flask

from logging_config import setup_logging, get_logger
from core.exceptions import OrderDeskError, StoreNotConfiguredError, StoreUnavailableError
from core.store_connection import StoreConnection
from core.store_client import OrderStoreClient
from services.catalog_service import CatalogService
from services.order_service import OrderService
from services.client_service import ClientService
from routes import register_blueprints


# Module logger (configured after setup_logging)
logger = get_logger(__name__)


def _get_base_path() -> Path:
    """
    Get the base path for the application.

    In a frozen bundle: Returns the directory containing the executable
    In development: Returns the directory containing app.py
    """
    if getattr(sys, 'frozen', False):
        return Path(sys.executable).parent
    else:
        return Path(__file__).parent


def create_app(
    config_object: str = "config.Config",
    store_client_factory: Optional[Callable[[], OrderStoreClient]] = None,
) -> Flask:
    """
    Application factory - creates and configures Flask app.

    FAIL-FAST: If the store is not configured or does not answer, the app
    will not start.

    Args:
        config_object: Import path of the configuration class
        store_client_factory: Zero-argument callable returning a store
            client. When given, no StoreConnection is made (tests, or an
            externally managed store).

    Returns:
        Configured Flask application

    Raises:
        StoreNotConfiguredError: If STORE_URL or STORE_API_KEY is missing
        StoreUnavailableError: If the store does not answer the startup ping
    """
    # Load .env from base path (next to executable in production)
    base_path = _get_base_path()
    env_file = base_path / '.env'
    if env_file.exists():
        load_dotenv(env_file, override=True)
    else:
        load_dotenv(override=True)

    # Create Flask app
    app = Flask(__name__)
    app.config.from_object(config_object)

    # Configure logging
    log_level = logging.DEBUG if app.config.get("DEBUG") else logging.INFO
    enable_file_logging = app.config.get("ENVIRONMENT") == "production"

    root_logger = setup_logging(
        log_level=log_level,
        enable_file_logging=enable_file_logging
    )

    # Set Flask's logger to use our configured logger
    app.logger.handlers = root_logger.handlers
    app.logger.setLevel(log_level)

    logger.info(f"Starting Order Desk in {app.config.get('ENVIRONMENT')} mode")

    # =========================================================================
    # CORE INITIALIZATION (FAIL-FAST)
    # =========================================================================

    store_connection = None

    if store_client_factory is None:
        store_connection = StoreConnection(
            app.config.get("STORE_URL"),
            app.config.get("STORE_API_KEY"),
            timeout_seconds=app.config.get("STORE_TIMEOUT_SECONDS", 10.0),
        )

        try:
            store_connection.initialize()
        except (StoreNotConfiguredError, StoreUnavailableError) as e:
            logger.error(f"FATAL: Cannot start application - {e}")
            raise

        def store_client_factory() -> OrderStoreClient:
            return OrderStoreClient(store_connection)
    else:
        app.config["STORE_CLIENT_FACTORY"] = store_client_factory
        logger.info("Using externally provided store client factory")

    # Store in app config for access by routes
    app.config["STORE_CONNECTION"] = store_connection

    # =========================================================================
    # SERVICES INITIALIZATION
    # =========================================================================

    catalog_service = CatalogService(
        store_client_factory,
        refresh_interval_seconds=app.config.get("CATALOG_REFRESH_SECONDS", 300.0),
    )
    if app.config.get("CATALOG_BACKGROUND_REFRESH", True):
        catalog_service.start()
        logger.info("Catalog service started")
    else:
        catalog_service.force_refresh()
        logger.info("Catalog service loaded once (background refresh disabled)")
    app.config["CATALOG_SERVICE"] = catalog_service

    order_service = OrderService(
        store_client_factory,
        enforce_forward_status=app.config.get("ENFORCE_FORWARD_STATUS", True),
        max_notes_length=app.config.get("MAX_NOTES_LENGTH", 1000),
    )
    app.config["ORDER_SERVICE"] = order_service
    logger.info("Order service initialized")

    app.config["CLIENT_SERVICE"] = ClientService(store_client_factory)

    # =========================================================================
    # CLEANUP REGISTRATION
    # =========================================================================

    def cleanup():
        """Cleanup on application shutdown."""
        logger.info("Shutting down...")

        if catalog_service:
            catalog_service.stop()

        if store_connection:
            store_connection.cleanup()

        logger.info("Shutdown complete")

    atexit.register(cleanup)

    # =========================================================================
    # REGISTER BLUEPRINTS
    # =========================================================================

    register_blueprints(app)

    # =========================================================================
    # ERROR HANDLERS
    # =========================================================================

    @app.errorhandler(OrderDeskError)
    def handle_order_desk_error(e):
        if e.status_code >= 500:
            logger.error(f"{type(e).__name__}: {e}")
        else:
            logger.warning(f"{type(e).__name__}: {e}")
        return e.to_dict(), e.status_code

    @app.errorhandler(404)
    def handle_not_found(e):
        return {"error": True, "message": "Not found"}, 404

    @app.errorhandler(405)
    def handle_method_not_allowed(e):
        return {"error": True, "message": "Method not allowed"}, 405

    @app.errorhandler(500)
    def handle_server_error(e):
        logger.error(f"500 error: {e}", exc_info=True)
        return {"error": True, "message": "An unexpected error occurred. Please try again."}, 500

    logger.info("Application initialized successfully")
    return app


if __name__ == "__main__":
    app = create_app()
    debug_mode = os.environ.get("FLASK_DEBUG", "1") == "1"
    app.run(debug=debug_mode)
