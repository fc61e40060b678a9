"""
Per-browser workspaces.

A Workspace bundles everything one browser session works with: its
PortalSession, an API client bound to it, the catalog selection and the
three view models. The Flask cookie only carries the workspace id and the
persisted tokens; the in-progress order lives here, server side.

Ownership:
    - Each workspace is used by exactly one browser session
    - Nothing is shared between workspaces (no shared order cache)
    - WorkspaceStore is the only shared structure, guarded by a lock

Usage:
    # At app startup
    store = WorkspaceStore(client_factory)

    # At login
    workspace = store.create(portal_session)
    flask_session["workspace_id"] = workspace.id

    # Per request
    workspace = store.get(flask_session["workspace_id"])

    # At logout
    store.discard(workspace.id)
"""

from __future__ import annotations

import threading
import uuid
from typing import Any, Callable, Dict, List, Optional

from core.api_client import PortalAPIClient
from core.exceptions import CollaboratorError
from core.session import PortalSession
from models.selection import CatalogSelection
from logging_config import get_logger, get_workspace_logger
from .order_admin import AdminOrderManager
from .order_history import OrderHistoryView
from .submission import OrderSubmissionWorkflow


logger = get_logger(__name__)

CATALOG_LOAD_FAILED_MESSAGE = "Failed to load products"

ClientFactory = Callable[[PortalSession], PortalAPIClient]


class Workspace:
    """
    View state for one browser session.

    Attributes:
        id: Random workspace id (stored in the Flask cookie)
        session: PortalSession for this browser
        client: PortalAPIClient bound to session
        selection: Customer's catalog selections
        submission: Order submission workflow over selection
        history: Customer order history view
        admin: Admin order manager
    """

    def __init__(self, workspace_id: str, session: PortalSession, client: PortalAPIClient):
        self.id = workspace_id
        self.session = session
        self.client = client
        self.logger = get_workspace_logger(workspace_id)

        self.selection = CatalogSelection()
        self.submission = OrderSubmissionWorkflow(self.selection, client, self.logger)
        self.history = OrderHistoryView(client, self.logger)
        self.admin = AdminOrderManager(client, self.logger)

        self.catalog_loaded = False
        self.catalog_notification: Optional[str] = None

        # Serializes actions from concurrent requests of the same browser
        self.lock = threading.RLock()

    def load_catalog(self) -> bool:
        """
        Fetch the product list into the selection model.

        On failure the previous catalog and all selections are kept.
        """
        try:
            products = self.client.list_products()
        except CollaboratorError as e:
            self.catalog_notification = CATALOG_LOAD_FAILED_MESSAGE
            self.logger.warning(f"Catalog load failed: {e.message}")
            return False

        self.selection.load_catalog(products)
        self.catalog_loaded = True
        self.catalog_notification = None
        self.logger.debug(f"Catalog loaded: {len(products)} products")
        return True

    def ensure_catalog(self) -> None:
        if not self.catalog_loaded:
            self.load_catalog()

    def close(self) -> None:
        self.client.close()


class WorkspaceStore:
    """
    Thread-safe registry of live workspaces.

    Thread Safety:
        - Uses threading.Lock for all registry operations
        - Workspaces are looked up by id; each carries its own lock for
          actions on its state
    """

    def __init__(self, client_factory: ClientFactory):
        self._client_factory = client_factory
        self._workspaces: Dict[str, Workspace] = {}
        self._lock = threading.Lock()

    def create(self, session: PortalSession, workspace_id: Optional[str] = None) -> Workspace:
        """Create and register a workspace for a session (new id unless given)."""
        workspace_id = workspace_id or uuid.uuid4().hex
        workspace = Workspace(workspace_id, session, self._client_factory(session))
        with self._lock:
            self._workspaces[workspace_id] = workspace
        logger.info(f"Workspace {workspace_id[:8]} created for {session!r}")
        return workspace

    def new_client(self, session: PortalSession) -> PortalAPIClient:
        """API client for a session that has no workspace yet (login)."""
        return self._client_factory(session)

    def get(self, workspace_id: Optional[str]) -> Optional[Workspace]:
        if not workspace_id:
            return None
        with self._lock:
            return self._workspaces.get(workspace_id)

    def restore(self, workspace_id: str, persisted: Optional[Dict[str, Any]]) -> Optional[Workspace]:
        """
        Return the workspace, rebuilding it from persisted tokens if the
        server lost it (e.g., after a restart). In-progress selections do
        not survive a rebuild.
        """
        workspace = self.get(workspace_id)
        if workspace is not None:
            return workspace

        session = PortalSession.from_dict(persisted)
        if not session.is_authenticated:
            return None
        logger.info(f"Workspace {workspace_id[:8]} rebuilt from persisted session")
        return self.create(session, workspace_id=workspace_id)

    def discard(self, workspace_id: Optional[str]) -> bool:
        if not workspace_id:
            return False
        with self._lock:
            workspace = self._workspaces.pop(workspace_id, None)
        if workspace is None:
            return False
        workspace.close()
        logger.info(f"Workspace {workspace_id[:8]} discarded")
        return True

    def clear(self) -> int:
        """
        Discard all workspaces.

        Returns:
            Number of workspaces removed
        """
        with self._lock:
            workspaces: List[Workspace] = list(self._workspaces.values())
            self._workspaces.clear()
        for workspace in workspaces:
            workspace.close()
        logger.info(f"Cleared {len(workspaces)} workspaces")
        return len(workspaces)

    def __len__(self) -> int:
        with self._lock:
            return len(self._workspaces)
