"""
Admin order management routes.

Handles:
- /admin/orders - Searchable list of all orders
- /admin/orders/<id> - Detail view
- /admin/orders/<id>/status - Status change (applied after API confirms)
- /admin/orders/export.csv - CSV download of the filtered list
- /admin/dashboard - Headline counters
"""

from flask import Blueprint, Response, current_app, request

from core.exceptions import ValidationError
from models.user import UserRole
from logging_config import get_logger
from .context import require_role, sanitize_text


# Module logger
logger = get_logger(__name__)

admin_bp = Blueprint("admin", __name__, url_prefix="/admin")


def _apply_query(workspace):
    """Update the search text if the request carries one."""
    if "q" in request.args:
        workspace.admin.search(sanitize_text(
            request.args.get("q"),
            max_length=current_app.config.get("MAX_SEARCH_LENGTH"),
        ))


@admin_bp.route("/orders", methods=["GET"])
@require_role(UserRole.ADMIN)
def orders(workspace):
    manager = workspace.admin
    if not manager.loaded:
        manager.load()
    _apply_query(workspace)
    return manager.to_dict()


@admin_bp.route("/orders/refresh", methods=["POST"])
@require_role(UserRole.ADMIN)
def refresh(workspace):
    loaded = workspace.admin.load()
    return workspace.admin.to_dict(), (200 if loaded else 502)


@admin_bp.route("/orders/<order_id>", methods=["GET"])
@require_role(UserRole.ADMIN)
def detail(workspace, order_id):
    manager = workspace.admin
    if not manager.loaded:
        manager.load()
    try:
        order = manager.open_detail(order_id)
    except ValidationError as e:
        return {"error": e.message, "field": e.field}, 404
    return {"order": order.to_dict()}


@admin_bp.route("/orders/detail", methods=["DELETE"])
@require_role(UserRole.ADMIN)
def close_detail(workspace):
    workspace.admin.close_detail()
    return workspace.admin.to_dict()


@admin_bp.route("/orders/<order_id>/status", methods=["PATCH"])
@require_role(UserRole.ADMIN)
def set_status(workspace, order_id):
    """
    Change an order's status.

    The list and the open detail view change only after the API confirms;
    an API failure is reported as 502 and nothing changes.
    """
    payload = request.get_json(silent=True) or {}
    updated = workspace.admin.set_status(order_id, payload.get("status", ""))
    logger.info(f"Admin {workspace.session.user.email} set order {order_id} to {updated.status.value}")
    body = workspace.admin.to_dict()
    body["updated"] = updated.to_dict()
    return body


@admin_bp.route("/orders/export.csv", methods=["GET"])
@require_role(UserRole.ADMIN)
def export_csv(workspace):
    """Download the currently filtered orders as CSV."""
    manager = workspace.admin
    if not manager.loaded:
        manager.load()
    _apply_query(workspace)

    export = manager.export_csv()
    return Response(
        export.content,
        mimetype=export.mimetype,
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )


@admin_bp.route("/dashboard", methods=["GET"])
@require_role(UserRole.ADMIN)
def dashboard(workspace):
    stats = workspace.client.get_dashboard_stats()
    return {"stats": stats.to_dict()}
