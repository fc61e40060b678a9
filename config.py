"""
Configuration for the order portal.

The portal has no database of its own: products, customers, orders and
logins all live behind the portal API at PORTAL_API_BASE_URL.
"""

import os

from dotenv import load_dotenv

# Load .env file early so environment variables are available for Config class
# This must happen before the Config class is defined
load_dotenv(override=True)


class Config:
    """Default configuration for the Flask application."""

    # Flask settings
    SECRET_KEY = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")
    SESSION_COOKIE_NAME = "order_portal_session"
    ENVIRONMENT = os.environ.get("FLASK_ENV", "development")

    # Debug mode
    DEBUG = os.environ.get("FLASK_DEBUG", "1") == "1"

    # ==========================================================================
    # Portal API
    # ==========================================================================
    # PORTAL_API_BASE_URL: Root of the REST API that owns all data
    #   Default: http://localhost:3001/api (local API server)
    #
    # PORTAL_API_TIMEOUT: Seconds before an API call is abandoned
    #   Default: 15. A timed-out order submission is reported as failed and
    #   is NOT retried automatically - the user decides whether to resubmit.
    # ==========================================================================
    PORTAL_API_BASE_URL = os.environ.get(
        "PORTAL_API_BASE_URL", "http://localhost:3001/api"
    )
    PORTAL_API_TIMEOUT = float(os.environ.get("PORTAL_API_TIMEOUT", "15"))

    # Input limits
    MAX_PO_NUMBER_LENGTH = 100
    MAX_SEARCH_LENGTH = 200

    # Log files are written only in production; unset means ./logs
    LOG_DIR = os.environ.get("PORTAL_LOG_DIR") or None


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    TESTING = False
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    PERMANENT_SESSION_LIFETIME = 3600  # 1 hour


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    TESTING = False


class TestingConfig(Config):
    """Testing configuration."""
    DEBUG = False
    TESTING = True
    SECRET_KEY = "test-secret-key"
    PORTAL_API_BASE_URL = "http://api.test/api"
