"""
Operational endpoints.

Handles:
- /health - Health check endpoint
"""

from flask import Blueprint, current_app


api_bp = Blueprint("api", __name__)


@api_bp.route("/health", methods=["GET"])
def health():
    """Health check with workspace count. Does not call the portal API."""
    store = current_app.config.get("WORKSPACE_STORE")
    health_status = {
        "status": "ok",
        "environment": current_app.config.get("ENVIRONMENT", "unknown"),
        "checks": {
            "api_base_url": current_app.config.get("PORTAL_API_BASE_URL"),
        },
    }

    if store is not None:
        health_status["checks"]["workspaces"] = len(store)
    else:
        health_status["checks"]["workspaces"] = "not_available"
        health_status["status"] = "degraded"

    status_code = 200 if health_status["status"] == "ok" else 503
    return health_status, status_code
