"""
Catalog selection model.

Holds the customer's in-progress order: for each product they have touched,
the chosen color and a quantity per size. Nothing here is sent to the API
until the submission workflow turns it into OrderItems.

Lifecycle of a ProductSelection:
    1. Created on the first color or quantity edit for a product
    2. Updated on every further edit
    3. Deleted by remove() / clear(), or discarded after a successful submit

Ordering:
    Selections keep the order in which products were first touched, and
    sizes keep the order in which they were first given a quantity, so
    project_items() is deterministic for a given sequence of edits.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Any, Iterable, List, Optional

from core.exceptions import ValidationError
from .order import OrderItem
from .product import Product, SizeLabel, size_key


_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_quantity(raw_input: Any) -> int:
    """
    Parse a quantity field the way a browser number input is read.

    The leading integer is used ("12" -> 12, "3.9" -> 3, "5 pcs" -> 5).
    Empty or non-numeric input becomes 0, and negatives are clamped to 0.
    Never raises.
    """
    if raw_input is None or isinstance(raw_input, bool):
        return 0
    if isinstance(raw_input, int):
        return max(0, raw_input)
    if isinstance(raw_input, float):
        return max(0, int(raw_input)) if raw_input == raw_input else 0

    match = _LEADING_INT.match(str(raw_input))
    if not match:
        return 0
    return max(0, int(match.group(1)))


@dataclass
class ProductSelection:
    """
    Selected color and per-size quantities for one product.

    product_name and style_number are captured when the selection is created
    and are not re-read from the catalog afterwards.
    """

    product_id: str
    product_name: str
    style_number: str
    selected_color: str
    quantities: Dict[str, int] = field(default_factory=dict)
    """Size key -> quantity (>= 0). Zero entries are kept until projection."""

    @classmethod
    def start(cls, product: Product) -> "ProductSelection":
        """New selection defaulting to the product's first color."""
        return cls(
            product_id=product.id,
            product_name=product.name,
            style_number=product.style_number,
            selected_color=product.default_color or "",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "productId": self.product_id,
            "productName": self.product_name,
            "styleNumber": self.style_number,
            "selectedColor": self.selected_color,
            "quantities": dict(self.quantities),
        }


class CatalogSelection:
    """
    In-progress cart state, keyed by product id.

    Built from the fetched product list; the catalog is kept so that item
    projection can fall back to live product data and the catalog can be
    searched.
    """

    def __init__(self, products: Optional[Iterable[Product]] = None):
        self._products: Dict[str, Product] = {}
        self._selections: Dict[str, ProductSelection] = {}
        self.load_catalog(products or [])

    # =========================================================================
    # CATALOG
    # =========================================================================

    def load_catalog(self, products: Iterable[Product]) -> None:
        """
        Replace the catalog with a freshly fetched product list.

        Existing selections are kept, even for products that disappeared
        from the catalog; they still carry their own name and style number.
        """
        self._products = {p.id: p for p in products}

    def get_product(self, product_id: str) -> Optional[Product]:
        return self._products.get(product_id)

    def search(self, query: str = "") -> List[Product]:
        """Products whose name or style number contains query (case-insensitive)."""
        return [p for p in self._products.values() if p.matches(query or "")]

    # =========================================================================
    # EDITS
    # =========================================================================

    def set_color(self, product: Product, color: str) -> ProductSelection:
        """
        Choose the color for a product, keeping any quantities already entered.

        Raises:
            ValidationError: If color is not one of the product's colors
        """
        if not product.has_color(color):
            raise ValidationError("color", f"{color!r} is not available for {product.name}")

        selection = self._selections.get(product.id)
        if selection is None:
            selection = ProductSelection.start(product)
            self._selections[product.id] = selection
        selection.selected_color = color
        return selection

    def set_quantity(self, product: Product, size: SizeLabel, raw_input: Any) -> ProductSelection:
        """Set the quantity for one size from raw form input (see parse_quantity)."""
        selection = self._selections.get(product.id)
        if selection is None:
            selection = ProductSelection.start(product)
            self._selections[product.id] = selection
        selection.quantities[size_key(size)] = parse_quantity(raw_input)
        return selection

    def remove(self, product_id: str) -> bool:
        """Discard the selection for one product. Returns False if there was none."""
        return self._selections.pop(product_id, None) is not None

    def clear(self) -> None:
        self._selections.clear()

    # =========================================================================
    # READS
    # =========================================================================

    def get(self, product_id: str) -> Optional[ProductSelection]:
        return self._selections.get(product_id)

    def project_items(self) -> List[OrderItem]:
        """
        Flatten selections into order line items.

        One item per (selection, size) with a positive quantity, in selection
        order then size order. A blank captured style number falls back to
        the live product's.
        """
        items: List[OrderItem] = []
        for selection in self._selections.values():
            style_number = selection.style_number
            if not style_number:
                product = self._products.get(selection.product_id)
                style_number = product.style_number if product else ""

            for size, qty in selection.quantities.items():
                if qty > 0:
                    items.append(OrderItem(
                        product_id=selection.product_id,
                        product_name=selection.product_name,
                        style_number=style_number,
                        color=selection.selected_color,
                        size=size,
                        quantity=qty,
                    ))
        return items

    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.project_items())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "selections": [s.to_dict() for s in self._selections.values()],
            "items": [i.to_dict() for i in self.project_items()],
            "totalQuantity": self.total_quantity(),
        }
