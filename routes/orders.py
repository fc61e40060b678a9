"""
Customer order history routes.

The list is loaded on first visit and re-fetched only by an explicit
refresh; there is no background polling.
"""

from flask import Blueprint

from models.user import UserRole
from .context import require_role


orders_bp = Blueprint("orders", __name__)


@orders_bp.route("/orders", methods=["GET"])
@require_role(UserRole.CUSTOMER)
def history(workspace):
    view = workspace.history
    if not view.loaded:
        view.load()
    return view.to_dict()


@orders_bp.route("/orders/refresh", methods=["POST"])
@require_role(UserRole.CUSTOMER)
def refresh(workspace):
    """Reload on user request. A failure keeps the previous list."""
    loaded = workspace.history.load()
    return workspace.history.to_dict(), (200 if loaded else 502)


@orders_bp.route("/orders/<order_id>/toggle", methods=["POST"])
@require_role(UserRole.CUSTOMER)
def toggle(workspace, order_id):
    """Expand one order's line items (collapsing any other), or collapse it."""
    workspace.history.toggle_expand(order_id)
    return workspace.history.to_dict()
