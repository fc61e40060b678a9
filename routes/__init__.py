"""
Flask route blueprints for the order portal.

This module contains all route handlers organized by functionality:
- auth: Login, logout, current user
- catalog: Customer catalog, selections and order submission
- orders: Customer order history
- admin: Admin order list, status changes, CSV export, dashboard
- api: Health check

Every endpoint speaks JSON; rendering is left to the front end.
Each blueprint is registered with the Flask app in create_app().
"""

from .auth import auth_bp
from .catalog import catalog_bp
from .orders import orders_bp
from .admin import admin_bp
from .api import api_bp
from .context import sync_session_cookie

__all__ = [
    "auth_bp",
    "catalog_bp",
    "orders_bp",
    "admin_bp",
    "api_bp",
]


def register_blueprints(app):
    """
    Register all blueprints with the Flask app.

    Args:
        app: Flask application instance
    """
    app.register_blueprint(auth_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(api_bp)
    app.after_request(sync_session_cookie)
