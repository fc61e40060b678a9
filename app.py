"""
Order Portal - Flask Application Entry Point.

This is a slim app factory that:
1. Loads configuration (fail-fast on an unusable API URL)
2. Configures thread-aware logging
3. Creates the workspace store (one workspace per browser session)
4. Registers route blueprints
5. Sets up JSON error handlers

ARCHITECTURE:
    Flask request threads
    └── WorkspaceStore (lock-guarded)
        └── Workspace per browser
            ├── PortalSession (tokens + user, persisted in the cookie)
            ├── PortalAPIClient (REST calls to the portal API)
            └── selection / submission / history / admin view state

The portal API owns every record. This process only holds view state.
"""

from __future__ import annotations

import atexit
import logging
import os
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from dotenv import load_dotenv
from flask import Flask
from werkzeug.exceptions import HTTPException

from logging_config import setup_logging, get_logger
from core.api_client import PortalAPIClient
from core.exceptions import (
    CollaboratorError,
    ConfigurationError,
    SessionExpiredError,
    SubmissionInProgressError,
    ValidationError,
)
from core.session import PortalSession
from services.workspace import ClientFactory, WorkspaceStore
from routes import register_blueprints


# Module logger (configured after setup_logging)
logger = get_logger(__name__)


def _validate_config(app: Flask) -> None:
    """
    Raises:
        ConfigurationError: If the API URL or timeout is unusable
    """
    base_url = app.config.get("PORTAL_API_BASE_URL") or ""
    parsed = urlparse(base_url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigurationError("PORTAL_API_BASE_URL", f"not an http(s) URL: {base_url!r}")

    timeout = app.config.get("PORTAL_API_TIMEOUT")
    if not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ConfigurationError("PORTAL_API_TIMEOUT", f"must be a positive number, got {timeout!r}")


def _default_client_factory(app: Flask) -> ClientFactory:
    base_url = app.config["PORTAL_API_BASE_URL"]
    timeout = float(app.config["PORTAL_API_TIMEOUT"])

    def factory(session: PortalSession) -> PortalAPIClient:
        return PortalAPIClient(
            base_url,
            session,
            timeout=timeout,
            logger=get_logger("core.api_client"),
        )

    return factory


def create_app(
    config_object: str = "config.Config",
    client_factory: Optional[ClientFactory] = None
) -> Flask:
    """
    Application factory - creates and configures Flask app.

    Args:
        config_object: Import path of the config class
        client_factory: Builds an API client for a session (tests inject fakes)

    Returns:
        Configured Flask application

    Raises:
        ConfigurationError: If the portal API settings are unusable
    """
    # Use override=True so .env file always takes precedence over shell environment
    env_file = Path(__file__).parent / ".env"
    if env_file.exists():
        load_dotenv(env_file, override=True)
    else:
        load_dotenv(override=True)

    app = Flask(__name__)
    app.config.from_object(config_object)

    # Configure logging
    log_level = logging.DEBUG if app.config.get("DEBUG") else logging.INFO
    enable_file_logging = app.config.get("ENVIRONMENT") == "production"

    root_logger = setup_logging(
        log_level=log_level,
        log_dir=app.config.get("LOG_DIR"),
        enable_file_logging=enable_file_logging
    )

    # Set Flask's logger to use our configured logger
    app.logger.handlers = root_logger.handlers
    app.logger.setLevel(log_level)

    logger.info(f"Starting order portal in {app.config.get('ENVIRONMENT')} mode")

    # =========================================================================
    # CONFIGURATION CHECK (FAIL-FAST)
    # =========================================================================

    try:
        _validate_config(app)
    except ConfigurationError as e:
        logger.error(f"FATAL: Cannot start application - {e}")
        raise

    # =========================================================================
    # WORKSPACES
    # =========================================================================

    store = WorkspaceStore(client_factory or _default_client_factory(app))
    app.config["WORKSPACE_STORE"] = store
    logger.info(f"Portal API: {app.config['PORTAL_API_BASE_URL']}")

    def cleanup():
        """Cleanup on application shutdown."""
        logger.info("Shutting down...")
        store.clear()
        logger.info("Shutdown complete")

    if not app.config.get("TESTING"):
        atexit.register(cleanup)

    register_blueprints(app)

    # =========================================================================
    # ERROR HANDLERS
    # =========================================================================

    @app.errorhandler(ValidationError)
    def handle_validation_error(e: ValidationError):
        return {"error": e.message, "field": e.field}, 400

    @app.errorhandler(SubmissionInProgressError)
    def handle_submission_in_progress(e: SubmissionInProgressError):
        return {"error": e.message}, 409

    @app.errorhandler(SessionExpiredError)
    def handle_session_expired(e: SessionExpiredError):
        # The workspace is discarded by the after_request hook
        logger.info(f"Session expired during {e.operation}")
        return {"error": "Your session has expired. Please log in again."}, 401

    @app.errorhandler(CollaboratorError)
    def handle_collaborator_error(e: CollaboratorError):
        logger.warning(f"API call failed: {e}")
        return {"error": e.message, "status_code": e.status_code}, 502

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        return {"error": e.description or e.name}, e.code

    @app.errorhandler(Exception)
    def handle_server_error(e: Exception):
        logger.error(f"500 error: {e}", exc_info=True)
        return {"error": "An unexpected error occurred. Please try again."}, 500

    logger.info("Application initialized successfully")
    return app


if __name__ == "__main__":
    app = create_app()
    debug_mode = os.environ.get("FLASK_DEBUG", "1") == "1"
    app.run(debug=debug_mode)
