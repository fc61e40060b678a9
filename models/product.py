"""
Product catalog models.

Products are fetched from the portal API and never edited by this portal.
A product offers its sizes either as labels ("S", "M", "XL") or as numbers
(waist sizes, shoe sizes), or both. Everything downstream addresses a size by
its string key, produced by size_key(), so 8, 8.0 and "8" are the same size.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Union

from .timestamps import parse_timestamp, format_timestamp


SizeLabel = Union[str, int, float]


def size_key(size: SizeLabel) -> str:
    """
    Normalize a size label to its canonical string key.

    Examples:
        size_key("M")   -> "M"
        size_key(" L ") -> "L"
        size_key(32)    -> "32"
        size_key(32.0)  -> "32"
        size_key(9.5)   -> "9.5"
    """
    if isinstance(size, bool):
        raise TypeError("size label cannot be a boolean")
    if isinstance(size, float) and size.is_integer():
        return str(int(size))
    if isinstance(size, (int, float)):
        return str(size)
    return str(size).strip()


@dataclass(frozen=True)
class Product:
    """
    A catalog product as returned by the API.

    colors, sizes and sizes_in_number keep the API's order, which is the
    display order.
    """

    id: str
    """API identifier."""

    name: str
    """Display name."""

    style_number: str
    """Manufacturer style number (e.g., 'ST-1001')."""

    colors: Tuple[str, ...] = ()
    """Color labels offered for this product."""

    sizes: Tuple[str, ...] = ()
    """Size labels (e.g., 'S', 'M', 'L')."""

    sizes_in_number: Tuple[float, ...] = ()
    """Numeric sizes, offered alongside or instead of labels."""

    description: Optional[str] = None
    image_url: Optional[str] = None
    price: Optional[float] = None
    created_at: Optional[datetime] = None

    @property
    def size_keys(self) -> List[str]:
        """All orderable size keys: labels first, then numeric sizes, no duplicates."""
        keys: List[str] = []
        for size in list(self.sizes) + list(self.sizes_in_number):
            key = size_key(size)
            if key and key not in keys:
                keys.append(key)
        return keys

    @property
    def default_color(self) -> Optional[str]:
        return self.colors[0] if self.colors else None

    @property
    def is_orderable(self) -> bool:
        """A product can be ordered only with at least one color and one size."""
        return bool(self.colors) and bool(self.size_keys)

    def has_color(self, color: str) -> bool:
        return color in self.colors

    def has_size(self, size: SizeLabel) -> bool:
        return size_key(size) in self.size_keys

    def matches(self, query: str) -> bool:
        """Case-insensitive match on name or style number."""
        needle = query.strip().lower()
        if not needle:
            return True
        return needle in self.name.lower() or needle in self.style_number.lower()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "styleNumber": self.style_number,
            "description": self.description,
            "colors": list(self.colors),
            "sizes": list(self.sizes),
            "sizesInNumber": list(self.sizes_in_number),
            "sizeKeys": self.size_keys,
            "imageUrl": self.image_url,
            "price": self.price,
            "createdAt": format_timestamp(self.created_at),
        }

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Product":
        """Create from an API product record, tolerating missing optional fields."""
        price = data.get("price")
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            style_number=data.get("styleNumber") or "",
            description=data.get("description") or None,
            colors=tuple(data.get("colors") or ()),
            sizes=tuple(str(s) for s in (data.get("sizes") or ())),
            sizes_in_number=tuple(float(s) for s in (data.get("sizesInNumber") or ())),
            image_url=data.get("imageUrl") or None,
            price=float(price) if price is not None else None,
            created_at=parse_timestamp(data.get("createdAt")),
        )


@dataclass(frozen=True)
class DashboardStats:
    """Headline counters for the admin dashboard."""

    total_orders: int = 0
    pending_orders: int = 0
    total_products: int = 0
    total_customers: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "totalOrders": self.total_orders,
            "pendingOrders": self.pending_orders,
            "totalProducts": self.total_products,
            "totalCustomers": self.total_customers,
        }

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "DashboardStats":
        return cls(
            total_orders=int(data.get("totalOrders", 0)),
            pending_orders=int(data.get("pendingOrders", 0)),
            total_products=int(data.get("totalProducts", 0)),
            total_customers=int(data.get("totalCustomers", 0)),
        )
