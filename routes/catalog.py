"""
Customer catalog and order composition routes.

Handles:
- /catalog - Product list (searchable) with the current selections
- /selections/... - Color and per-size quantity edits
- /order/... - PO number, submission, confirmation dismissal

All state lives in the browser's Workspace; nothing reaches the API until
/order/submit.
"""

from flask import Blueprint, current_app, request

from core.exceptions import ValidationError
from models.user import UserRole
from services.submission import SubmissionState
from logging_config import get_logger
from .context import require_role, sanitize_text


# Module logger
logger = get_logger(__name__)

catalog_bp = Blueprint("catalog", __name__)


def _catalog_state(workspace, query: str = ""):
    """Everything the order screen renders, as one JSON document."""
    products = workspace.selection.search(query)
    return {
        "products": [p.to_dict() for p in products if p.is_orderable],
        "query": query,
        "cart": workspace.selection.to_dict(),
        "submission": workspace.submission.to_dict(),
        "notification": workspace.catalog_notification,
    }


def _product_or_error(workspace, product_id: str):
    product = workspace.selection.get_product(product_id)
    if product is None:
        raise ValidationError("product_id", "Product not found in catalog")
    return product


def _json_body():
    return request.get_json(silent=True) or {}


@catalog_bp.route("/catalog", methods=["GET"])
@require_role(UserRole.CUSTOMER)
def catalog(workspace):
    """Product list, loaded from the API on first visit."""
    workspace.ensure_catalog()
    query = sanitize_text(
        request.args.get("q", ""),
        max_length=current_app.config.get("MAX_SEARCH_LENGTH"),
    )
    return _catalog_state(workspace, query)


@catalog_bp.route("/catalog/refresh", methods=["POST"])
@require_role(UserRole.CUSTOMER)
def refresh_catalog(workspace):
    """Re-fetch products on explicit user request. Selections are kept."""
    loaded = workspace.load_catalog()
    state = _catalog_state(workspace)
    return state, (200 if loaded else 502)


@catalog_bp.route("/selections", methods=["GET"])
@require_role(UserRole.CUSTOMER)
def selections(workspace):
    return workspace.selection.to_dict()


@catalog_bp.route("/selections/<product_id>/color", methods=["POST"])
@require_role(UserRole.CUSTOMER)
def set_color(workspace, product_id):
    """Choose a color; only the product's own color labels are accepted."""
    product = _product_or_error(workspace, product_id)
    color = _json_body().get("color")
    if not isinstance(color, str):
        raise ValidationError("color", "Color is required")
    workspace.selection.set_color(product, color.strip())
    return workspace.selection.to_dict()


@catalog_bp.route("/selections/<product_id>/quantity", methods=["POST"])
@require_role(UserRole.CUSTOMER)
def set_quantity(workspace, product_id):
    """
    Set one size's quantity from the raw input text.

    Unparseable or negative input is stored as 0; only an unknown size is
    rejected.
    """
    product = _product_or_error(workspace, product_id)
    payload = _json_body()
    size = payload.get("size")

    if size is None or isinstance(size, (dict, list)) or not product.has_size(size):
        raise ValidationError("size", f"Size {size!r} is not available for {product.name}")

    workspace.selection.set_quantity(product, size, payload.get("quantity"))
    return workspace.selection.to_dict()


@catalog_bp.route("/selections/<product_id>", methods=["DELETE"])
@require_role(UserRole.CUSTOMER)
def remove_selection(workspace, product_id):
    workspace.selection.remove(product_id)
    return workspace.selection.to_dict()


@catalog_bp.route("/selections", methods=["DELETE"])
@require_role(UserRole.CUSTOMER)
def clear_selections(workspace):
    workspace.selection.clear()
    return workspace.selection.to_dict()


@catalog_bp.route("/order/po-number", methods=["PUT"])
@require_role(UserRole.CUSTOMER)
def set_po_number(workspace):
    po_number = sanitize_text(
        _json_body().get("po_number"),
        max_length=current_app.config.get("MAX_PO_NUMBER_LENGTH"),
    )
    workspace.submission.set_po_number(po_number)
    return workspace.submission.to_dict()


@catalog_bp.route("/order/submit", methods=["POST"])
@require_role(UserRole.CUSTOMER)
def submit(workspace):
    """
    Submit the composed order.

    A "po_number" in the body replaces the PO field first. Responses:
        201 - order placed; selections and PO field are now empty
        400 - validation failed; nothing was sent
        502 - the API failed; selections and PO field are unchanged
    """
    payload = _json_body()
    if "po_number" in payload:
        workspace.submission.set_po_number(sanitize_text(
            payload.get("po_number"),
            max_length=current_app.config.get("MAX_PO_NUMBER_LENGTH"),
        ))

    outcome = workspace.submission.submit()
    body = {
        "outcome": outcome.to_dict(),
        "cart": workspace.selection.to_dict(),
    }

    if outcome.state is SubmissionState.SUCCEEDED:
        logger.info(f"Order {outcome.order_id} placed from workspace {workspace.id[:8]}")
        return body, 201
    if outcome.state is SubmissionState.FAILED:
        logger.warning(f"Order submission failed: {outcome.error_message}")
        return body, 502
    logger.debug(f"Order submission rejected: {sorted(outcome.field_errors)}")
    return body, 400


@catalog_bp.route("/order/dismiss", methods=["POST"])
@require_role(UserRole.CUSTOMER)
def dismiss(workspace):
    workspace.submission.dismiss()
    return workspace.submission.to_dict()
