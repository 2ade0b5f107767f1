"""
Configuration for Order Desk.

The hosted store (REST API) is required: the application fails fast at
startup when STORE_URL is missing or the store does not answer.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file early so environment variables are available for Config class
load_dotenv(override=True)

# Base directory (where this file lives)
BASE_DIR = Path(__file__).resolve().parent


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Default configuration for the Flask application."""

    # Flask settings
    SECRET_KEY = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")
    SESSION_COOKIE_NAME = "order_desk_session"
    ENVIRONMENT = os.environ.get("FLASK_ENV", "development")
    DEBUG = os.environ.get("FLASK_DEBUG", "1") == "1"

    # Hosted store (PostgREST-style API)
    STORE_URL = os.environ.get("STORE_URL", "")
    STORE_API_KEY = os.environ.get("STORE_API_KEY", "")
    STORE_TIMEOUT_SECONDS = float(os.environ.get("STORE_TIMEOUT_SECONDS", "10"))

    # ==========================================================================
    # Catalog snapshot
    # ==========================================================================
    # Products and stock are pulled from the store on a background thread.
    # CATALOG_REFRESH_SECONDS: seconds between pulls (default 300, the same
    #   five minute staleness the catalog pages tolerate)
    # CATALOG_BACKGROUND_REFRESH: set to 0 to only refresh on demand
    # ==========================================================================
    CATALOG_REFRESH_SECONDS = float(os.environ.get("CATALOG_REFRESH_SECONDS", "300"))
    CATALOG_BACKGROUND_REFRESH = _env_flag("CATALOG_BACKGROUND_REFRESH", "1")

    # Cart and orders
    CART_STORAGE_KEY = "order_desk_cart"
    ENFORCE_FORWARD_STATUS = _env_flag("ENFORCE_FORWARD_STATUS", "1")
    MAX_NOTES_LENGTH = 1000
    MAX_LINE_QUANTITY = 100000


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    TESTING = False
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    PERMANENT_SESSION_LIFETIME = 60 * 60 * 24 * 30  # carts survive for a month


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    TESTING = False


class TestingConfig(Config):
    """Testing configuration."""
    DEBUG = False
    TESTING = True
    ENVIRONMENT = "testing"
    SECRET_KEY = "testing-secret-key"
    STORE_URL = "http://store.test"
    STORE_API_KEY = "test-key"
    CATALOG_BACKGROUND_REFRESH = False
    ENFORCE_FORWARD_STATUS = True
