"""
Customer order history view model.

Holds the orders visible to the signed-in customer, newest first, and which
single order (if any) has its line items expanded.

Failure policy:
    A failed load keeps whatever list was shown before and records a
    transient notification. Stale data is preferred over an empty view.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol

from core.exceptions import CollaboratorError
from models.order import Order
from logging_config import get_logger


logger = get_logger(__name__)

LOAD_FAILED_MESSAGE = "Failed to load order history"


class OrderLister(Protocol):
    def list_orders(self) -> List[Order]:
        ...


def newest_first(orders: List[Order]) -> List[Order]:
    """
    Sort by created_at descending.

    sorted() with reverse=True is stable, so orders sharing a timestamp keep
    their input order. Orders without a timestamp go last.
    """
    dated = [o for o in orders if o.created_at is not None]
    undated = [o for o in orders if o.created_at is None]
    return sorted(dated, key=lambda o: o.created_at, reverse=True) + undated


class OrderHistoryView:
    """
    Order list plus single-select expansion.

    Attributes:
        orders: Loaded orders, newest first
        expanded_order_id: Id of the order whose items are shown, or None
        notification: Last transient message (e.g., load failure), or None
    """

    def __init__(self, lister: OrderLister, workspace_logger: Optional[logging.Logger] = None):
        self._lister = lister
        self._logger = workspace_logger or logger
        self.orders: List[Order] = []
        self.expanded_order_id: Optional[str] = None
        self.notification: Optional[str] = None
        self.loaded = False

    def load(self) -> bool:
        """
        Fetch orders from the API.

        Returns:
            True on success, False if the fetch failed (prior list kept)
        """
        try:
            fetched = self._lister.list_orders()
        except CollaboratorError as e:
            self.notification = LOAD_FAILED_MESSAGE
            self._logger.warning(f"Order history load failed: {e.message}")
            return False

        self.orders = newest_first(fetched)
        self.notification = None
        self.loaded = True

        if self.expanded_order_id and self.get(self.expanded_order_id) is None:
            self.expanded_order_id = None

        self._logger.debug(f"Order history loaded: {len(self.orders)} orders")
        return True

    def toggle_expand(self, order_id: str) -> Optional[str]:
        """
        Expand an order's line items, collapsing any other.

        Toggling the already-expanded order collapses it.

        Returns:
            The id now expanded, or None
        """
        if self.expanded_order_id == order_id:
            self.expanded_order_id = None
        else:
            self.expanded_order_id = order_id
        return self.expanded_order_id

    def is_expanded(self, order_id: str) -> bool:
        return self.expanded_order_id == order_id

    def get(self, order_id: str) -> Optional[Order]:
        for order in self.orders:
            if order.id == order_id:
                return order
        return None

    @property
    def expanded_order(self) -> Optional[Order]:
        if self.expanded_order_id is None:
            return None
        return self.get(self.expanded_order_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "orders": [
                {**o.to_dict(), "expanded": self.is_expanded(o.id)}
                for o in self.orders
            ],
            "expandedOrderId": self.expanded_order_id,
            "expandedOrder": self.expanded_order.to_dict() if self.expanded_order else None,
            "notification": self.notification,
        }
