"""
CSV export of admin order lists.

Column order and header text are fixed:

    Order ID,Customer,PO Number,Items,Status,Date

Fields containing a comma, a double quote or a line break are quoted per
RFC 4180 (embedded quotes doubled). Rows are separated by "\\n" with no
trailing newline, so N orders always give N + 1 lines.
"""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional

from models.order import Order


CSV_HEADER = ["Order ID", "Customer", "PO Number", "Items", "Status", "Date"]
DATE_FORMAT = "%Y-%m-%d"


@dataclass(frozen=True)
class CsvExport:
    """A rendered export ready to be offered as a download."""

    filename: str
    content: str
    row_count: int

    mimetype: str = "text/csv"


def order_row(order: Order) -> List[str]:
    """Map one order to its CSV fields, in header order."""
    return [
        order.id,
        order.customer_name,
        order.po_number,
        str(order.total_items),
        order.status.value,
        order.created_at.strftime(DATE_FORMAT) if order.created_at else "",
    ]


def render_orders_csv(orders: Iterable[Order]) -> str:
    """Render orders as CSV text (header plus one row per order)."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow(CSV_HEADER)
    for order in orders:
        writer.writerow(order_row(order))
    return buffer.getvalue()[:-1]


def export_filename(today: Optional[date] = None) -> str:
    """Download name for an export made on the given day (default: today)."""
    today = today or date.today()
    return f"orders-{today.strftime(DATE_FORMAT)}.csv"


def export_orders(orders: Iterable[Order], today: Optional[date] = None) -> CsvExport:
    orders = list(orders)
    return CsvExport(
        filename=export_filename(today),
        content=render_orders_csv(orders),
        row_count=len(orders),
    )
