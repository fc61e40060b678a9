"""
Admin order lifecycle manager.

Backs the admin orders screen: the order list with its search box, the
order detail view, status changes and CSV export.

Status updates are PESSIMISTIC:
    1. The API is asked to change the status
    2. Only after it confirms, the returned order replaces the old one in
       the list AND in the open detail view (if it is the same order)
    3. If the API fails, nothing local changes and the error propagates

Any status may be set from any other status. The fulfilment order in
OrderStatus describes the usual progression but is not enforced here.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Protocol

from core.exceptions import CollaboratorError, ValidationError
from models.order import Order, OrderStatus
from logging_config import get_logger
from .export import CsvExport, export_orders
from .order_history import LOAD_FAILED_MESSAGE


logger = get_logger(__name__)


class OrderAdminCollaborator(Protocol):
    def list_orders(self) -> List[Order]:
        ...

    def update_order_status(self, order_id: str, status: OrderStatus) -> Order:
        ...


class AdminOrderManager:
    """
    Admin view of all orders.

    Attributes:
        orders: All loaded orders, in API order
        query: Current search text
        detail: Order open in the detail view, or None
        notification: Last transient message, or None
    """

    def __init__(
        self,
        collaborator: OrderAdminCollaborator,
        workspace_logger: Optional[logging.Logger] = None
    ):
        self._collaborator = collaborator
        self._logger = workspace_logger or logger
        self.orders: List[Order] = []
        self.query = ""
        self.detail: Optional[Order] = None
        self.notification: Optional[str] = None
        self.loaded = False

    # =========================================================================
    # LIST
    # =========================================================================

    def load(self) -> bool:
        """Fetch all orders. On failure the current list is kept."""
        try:
            fetched = self._collaborator.list_orders()
        except CollaboratorError as e:
            self.notification = LOAD_FAILED_MESSAGE
            self._logger.warning(f"Admin order list load failed: {e.message}")
            return False

        self.orders = list(fetched)
        self.notification = None
        self.loaded = True

        if self.detail is not None:
            self.detail = self.get(self.detail.id)
        return True

    def search(self, query: str) -> List[Order]:
        self.query = query or ""
        return self.filtered_orders

    @property
    def filtered_orders(self) -> List[Order]:
        return [o for o in self.orders if o.matches(self.query)]

    def get(self, order_id: str) -> Optional[Order]:
        for order in self.orders:
            if order.id == order_id:
                return order
        return None

    # =========================================================================
    # DETAIL VIEW
    # =========================================================================

    def open_detail(self, order_id: str) -> Order:
        """
        Raises:
            ValidationError: If the order is not in the loaded list
        """
        order = self.get(order_id)
        if order is None:
            raise ValidationError("order_id", f"Order {order_id} not found")
        self.detail = order
        return order

    def close_detail(self) -> None:
        self.detail = None

    # =========================================================================
    # STATUS
    # =========================================================================

    def set_status(self, order_id: str, new_status: Any) -> Order:
        """
        Change an order's status once the API confirms it.

        Args:
            order_id: Order to change
            new_status: OrderStatus or its string value

        Returns:
            The updated order

        Raises:
            ValidationError: If new_status is not a known status
            CollaboratorError: If the API rejects the change (nothing changes locally)
        """
        status = new_status if isinstance(new_status, OrderStatus) else OrderStatus.parse(new_status)
        if status is None:
            raise ValidationError("status", f"Unknown order status: {new_status!r}")

        previous = self.get(order_id)
        updated = self._collaborator.update_order_status(order_id, status)

        self.orders = [updated if o.id == order_id else o for o in self.orders]
        if self.detail is not None and self.detail.id == order_id:
            self.detail = updated

        before = previous.status.value if previous else "?"
        self._logger.info(f"Order {order_id} status: {before} -> {updated.status.value}")
        return updated

    # =========================================================================
    # EXPORT
    # =========================================================================

    def export_csv(self, today: Optional[date] = None) -> CsvExport:
        """Export the currently filtered orders."""
        export = export_orders(self.filtered_orders, today=today)
        self._logger.info(f"Exported {export.row_count} orders to {export.filename}")
        return export

    def to_dict(self) -> Dict[str, Any]:
        filtered = self.filtered_orders
        return {
            "orders": [o.to_dict() for o in filtered],
            "count": len(filtered),
            "query": self.query,
            "detail": self.detail.to_dict() if self.detail else None,
            "statusOptions": [s.value for s in OrderStatus],
            "notification": self.notification,
        }
