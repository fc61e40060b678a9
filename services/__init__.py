"""
Services layer for the order portal.

This module contains the view-state services:
- OrderSubmissionWorkflow: Validates and places the customer's order
- OrderHistoryView: Customer order list with single-select expansion
- AdminOrderManager: Admin order list, detail view, status changes, export
- export: CSV projection of order lists
- WorkspaceStore: Per-browser bundles of the above

Ownership Model:
    Main process
    └── WorkspaceStore (lock-guarded registry)
        └── Workspace (one per browser session)
            ├── PortalSession + PortalAPIClient
            ├── CatalogSelection + OrderSubmissionWorkflow
            ├── OrderHistoryView
            └── AdminOrderManager

No state is shared between workspaces.
"""

from .submission import OrderSubmissionWorkflow, SubmissionState, SubmissionOutcome
from .order_history import OrderHistoryView
from .order_admin import AdminOrderManager
from .export import CsvExport, export_orders, render_orders_csv
from .workspace import Workspace, WorkspaceStore

__all__ = [
    "OrderSubmissionWorkflow",
    "SubmissionState",
    "SubmissionOutcome",
    "OrderHistoryView",
    "AdminOrderManager",
    "CsvExport",
    "export_orders",
    "render_orders_csv",
    "Workspace",
    "WorkspaceStore",
]
