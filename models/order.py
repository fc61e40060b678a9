"""
Order data models.

These models represent a purchase order as the portal API returns it.
Orders are created by the submission workflow and are immutable afterwards,
except for their status, which only an admin changes.

The client never computes totals for the API: total_items is always the value
the API computed from the submitted items.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Any, List, Optional, Tuple

from .timestamps import parse_timestamp, format_timestamp


class OrderStatus(Enum):
    """
    Fulfilment status of an order.

    Lifecycle (typical):
        PENDING -> CONFIRMED -> PROCESSING -> SHIPPED -> DELIVERED

    Admins may set any status directly; the order above is not enforced.
    """

    PENDING = "pending"
    """Order placed, not yet reviewed."""

    CONFIRMED = "confirmed"
    """Order accepted by an admin."""

    PROCESSING = "processing"
    """Order being picked and packed."""

    SHIPPED = "shipped"
    """Order handed to the carrier."""

    DELIVERED = "delivered"
    """Order received by the customer."""

    @property
    def label(self) -> str:
        """Display label (e.g., 'Shipped')."""
        return self.value.capitalize()

    @classmethod
    def parse(cls, value: str) -> Optional["OrderStatus"]:
        """Return the matching status, or None for an unknown value."""
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class OrderItem:
    """
    One line item: a quantity of one product in one color and one size.

    Derived from catalog selections at submission time; never edited.
    """

    product_id: str
    product_name: str
    style_number: str
    color: str
    size: str
    quantity: int

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the API's field names (request body for createOrder)."""
        return {
            "productId": self.product_id,
            "productName": self.product_name,
            "styleNumber": self.style_number,
            "color": self.color,
            "size": self.size,
            "quantity": self.quantity,
        }

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "OrderItem":
        return cls(
            product_id=str(data.get("productId", "")),
            product_name=data.get("productName", ""),
            style_number=data.get("styleNumber") or "",
            color=data.get("color", ""),
            size=str(data.get("size", "")),
            quantity=int(data.get("quantity", 0)),
        )


@dataclass(frozen=True)
class Order:
    """
    A submitted purchase order.

    Frozen: a status change arrives as a new Order from the API, so views
    holding the old instance never see a half-applied update.
    """

    id: str
    """API identifier."""

    customer_id: str
    """Owning customer account."""

    po_number: str
    """Customer's purchase-order reference."""

    status: OrderStatus
    """Current fulfilment status."""

    total_items: int
    """Sum of item quantities, computed by the API."""

    created_at: Optional[datetime]
    """When the API created the order."""

    customer_name: str = ""
    customer_email: str = ""
    items: Tuple[OrderItem, ...] = field(default_factory=tuple)


    def matches(self, query: str) -> bool:
        """Case-insensitive match on customer name, PO number or order id."""
        needle = query.strip().lower()
        if not needle:
            return True
        return (
            needle in self.customer_name.lower()
            or needle in self.po_number.lower()
            or needle in self.id.lower()
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "customerId": self.customer_id,
            "customerName": self.customer_name,
            "customerEmail": self.customer_email,
            "poNumber": self.po_number,
            "items": [item.to_dict() for item in self.items],
            "status": self.status.value,
            "statusLabel": self.status.label,
            "totalItems": self.total_items,
            "createdAt": format_timestamp(self.created_at),
        }

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Order":
        """
        Create from an API order record.

        Customer name and email come from the nested 'customer' object when
        the API includes it, otherwise from the flat fields.
        """
        customer = data.get("customer") or {}
        items: List[OrderItem] = [OrderItem.from_api(i) for i in (data.get("items") or [])]

        status = OrderStatus.parse(data.get("status", ""))
        if status is None:
            raise ValueError(f"Unknown order status: {data.get('status')!r}")

        return cls(
            id=str(data.get("id", "")),
            customer_id=str(data.get("customerId", "")),
            customer_name=customer.get("name") or data.get("customerName") or "",
            customer_email=customer.get("email") or data.get("customerEmail") or "",
            po_number=data.get("poNumber", ""),
            items=tuple(items),
            status=status,
            total_items=int(data.get("totalItems", 0)),
            created_at=parse_timestamp(data.get("createdAt")),
        )
