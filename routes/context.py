"""
Request context helpers shared by the blueprints.

Resolves the current browser's Workspace from the Flask cookie, gates views
by role, and sanitizes free-text input.
"""

from __future__ import annotations

import html
from functools import wraps
from typing import Optional

import bleach
from flask import current_app, g, session

from core.session import PortalSession
from models.user import UserRole
from services.workspace import Workspace, WorkspaceStore


WORKSPACE_KEY = "workspace_id"
PORTAL_KEY = "portal"


def get_store() -> WorkspaceStore:
    return current_app.config["WORKSPACE_STORE"]


def sanitize_text(text: Optional[str], max_length: Optional[int] = None) -> str:
    """
    Sanitize user input text.

    Strips whitespace, removes HTML tags, and truncates to max_length.
    Characters such as "&" and "<" that are not part of a tag are kept as
    typed, not entity-escaped.
    """
    if not text:
        return ""
    text = str(text).strip()
    text = html.unescape(bleach.clean(text, tags=[], strip=True)).strip()
    if max_length and len(text) > max_length:
        text = text[:max_length]
    return text


def load_workspace() -> Optional[Workspace]:
    """Workspace for this request's cookie, rebuilt from tokens if needed."""
    workspace_id = session.get(WORKSPACE_KEY)
    if not workspace_id:
        return None
    workspace = get_store().restore(workspace_id, session.get(PORTAL_KEY))
    if workspace is None:
        forget_session()
        return None
    if not workspace.session.is_authenticated:
        get_store().discard(workspace.id)
        forget_session()
        return None
    g.workspace = workspace
    return workspace


def remember_session(workspace: Workspace) -> None:
    """Persist the workspace id and tokens in the cookie."""
    session[WORKSPACE_KEY] = workspace.id
    session[PORTAL_KEY] = workspace.session.to_dict()
    session.modified = True
    g.workspace = workspace


def forget_session() -> None:
    session.pop(WORKSPACE_KEY, None)
    session.pop(PORTAL_KEY, None)


def sync_session_cookie(response):
    """
    after_request hook: write rotated tokens back to the cookie, or drop
    the cookie payload if the session was torn down during the request.
    """
    workspace: Optional[Workspace] = g.get("workspace")
    if workspace is None:
        return response

    portal: PortalSession = workspace.session
    if not portal.is_authenticated:
        get_store().discard(workspace.id)
        forget_session()
    elif session.get(PORTAL_KEY) != portal.to_dict():
        session[PORTAL_KEY] = portal.to_dict()
        session.modified = True
    return response


def require_role(role: Optional[UserRole] = None):
    """
    Decorator: require a signed-in session, optionally with a given role.

    The resolved workspace is passed to the view as its first argument and
    the view runs under the workspace lock.
    """
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            workspace = load_workspace()
            if workspace is None:
                return {"error": "Please log in"}, 401
            if role is not None and not workspace.session.has_role(role):
                return {"error": "You do not have access to this page"}, 403
            with workspace.lock:
                return view(workspace, *args, **kwargs)
        return wrapper
    return decorator
