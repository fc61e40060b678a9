"""
Authentication routes.

Login creates the browser's Workspace; logout tears it down. Credentials are
checked by the portal API, never here.
"""

from flask import Blueprint, current_app, request

from core.exceptions import CollaboratorError
from core.session import PortalSession
from models.user import UserRole
from logging_config import get_logger
from .context import (
    forget_session,
    get_store,
    load_workspace,
    remember_session,
    require_role,
    sanitize_text,
)


# Module logger
logger = get_logger(__name__)

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")

MAX_EMAIL_LENGTH = 254


@auth_bp.route("/login", methods=["POST"])
def login():
    """
    Log in with email and password.

    Optional "role" restricts the login to admins or customers, as the
    separate admin and customer login screens do.
    """
    payload = request.get_json(silent=True) or {}
    email = sanitize_text(payload.get("email"), max_length=MAX_EMAIL_LENGTH)
    password = payload.get("password") or ""
    expected_role = payload.get("role")

    if not email or not password:
        return {"error": "Email and password are required"}, 400

    if expected_role and expected_role not in {r.value for r in UserRole}:
        return {"error": f"Unknown role: {expected_role}"}, 400

    store = get_store()
    portal = PortalSession()
    client = store.new_client(portal)

    try:
        user = client.login(email, password)
    except CollaboratorError as e:
        client.close()
        logger.info(f"Login rejected for {email}: {e.message}")
        return {"error": e.message or "Login failed"}, 401

    if expected_role and user.role != UserRole(expected_role):
        client.logout()
        client.close()
        logger.info(f"Login for {email} refused: not a {expected_role} account")
        return {"error": "Invalid credentials for this login"}, 403

    client.close()

    # Replace any previous workspace for this browser
    previous = load_workspace()
    if previous is not None:
        store.discard(previous.id)

    workspace = store.create(portal)
    remember_session(workspace)
    return {"user": user.to_dict()}


@auth_bp.route("/logout", methods=["POST"])
@require_role()
def logout(workspace):
    """Revoke tokens and discard the workspace (selections are lost)."""
    workspace.client.logout()
    get_store().discard(workspace.id)
    forget_session()
    current_app.logger.info("User logged out")
    return {"ok": True}


@auth_bp.route("/me", methods=["GET"])
@require_role()
def me(workspace):
    return {"user": workspace.session.user.to_dict()}
