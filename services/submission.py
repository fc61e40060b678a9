"""
Order submission workflow.

Turns the customer's catalog selections plus a PO number into one
createOrder call.

State Machine:
    IDLE ──submit()──> SUBMITTING ──ok──> SUCCEEDED
      ^                    │
      │                    └──error──> FAILED
      └── validation failure (no call made)

Rules:
    - Validation (no items, blank PO number) never reaches the API
    - Exactly one createOrder call per SUBMITTING transition
    - Selections and PO number are cleared only AFTER the call succeeds
    - A failed call leaves selections and PO number untouched for retry
    - No deduplication: submitting again places another order

Usage:
    workflow = OrderSubmissionWorkflow(selection, client)
    workflow.po_number = "PO-100"
    outcome = workflow.submit()
    if outcome.state is SubmissionState.SUCCEEDED:
        # Show confirmation for outcome.order_id / outcome.po_number
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Protocol, Sequence

from core.exceptions import CollaboratorError, SubmissionInProgressError
from models.order import Order, OrderItem
from models.selection import CatalogSelection
from logging_config import get_logger


logger = get_logger(__name__)

NO_ITEMS_MESSAGE = "Please add quantities to at least one product"
PO_REQUIRED_MESSAGE = "PO Number is required"
GENERIC_FAILURE_MESSAGE = "Failed to place order"


class OrderCreator(Protocol):
    def create_order(self, po_number: str, items: Sequence[OrderItem]) -> Order:
        ...


class SubmissionState(Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class SubmissionOutcome:
    """Snapshot of the workflow after a submit() call."""

    state: SubmissionState
    field_errors: Dict[str, str] = field(default_factory=dict)
    error_message: Optional[str] = None
    order_id: Optional[str] = None
    po_number: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.state is SubmissionState.SUCCEEDED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "fieldErrors": dict(self.field_errors),
            "error": self.error_message,
            "orderId": self.order_id,
            "poNumber": self.po_number,
        }


class OrderSubmissionWorkflow:
    """
    Validates and submits the customer's order.

    Attributes:
        po_number: Current PO number field value (untrimmed, as typed)
        state: Current SubmissionState
        last_order_id: Id of the most recently placed order
        last_po_number: PO number of the most recently placed order
    """

    def __init__(
        self,
        selection: CatalogSelection,
        creator: OrderCreator,
        workspace_logger: Optional[logging.Logger] = None
    ):
        self._selection = selection
        self._creator = creator
        self._logger = workspace_logger or logger
        self._lock = threading.Lock()

        self.po_number = ""
        self.state = SubmissionState.IDLE
        self.field_errors: Dict[str, str] = {}
        self.error_message: Optional[str] = None
        self.last_order_id: Optional[str] = None
        self.last_po_number: Optional[str] = None

    def set_po_number(self, value: str) -> None:
        """Update the PO field and drop its stale validation error."""
        self.po_number = value or ""
        self.field_errors.pop("po_number", None)

    def validate(self) -> Dict[str, str]:
        """Return field errors for the current state (empty if submittable)."""
        errors: Dict[str, str] = {}
        if self._selection.total_quantity() <= 0:
            errors["items"] = NO_ITEMS_MESSAGE
        if not self.po_number.strip():
            errors["po_number"] = PO_REQUIRED_MESSAGE
        return errors

    def submit(self) -> SubmissionOutcome:
        """
        Validate and, if valid, place the order.

        Returns:
            SubmissionOutcome describing the resulting state

        Raises:
            SubmissionInProgressError: If a submission is already running
        """
        with self._lock:
            if self.state is SubmissionState.SUBMITTING:
                raise SubmissionInProgressError()

            errors = self.validate()
            if errors:
                self.state = SubmissionState.IDLE
                self.field_errors = errors
                self.error_message = None
                self._logger.info(f"Order not submitted, validation failed: {sorted(errors)}")
                return self.outcome()

            self.state = SubmissionState.SUBMITTING
            self.field_errors = {}
            self.error_message = None

        po_number = self.po_number.strip()
        items = self._selection.project_items()
        self._logger.info(
            f"Submitting order po={po_number} lines={len(items)} "
            f"quantity={sum(i.quantity for i in items)}"
        )

        try:
            order = self._creator.create_order(po_number, items)
        except CollaboratorError as e:
            with self._lock:
                self.state = SubmissionState.FAILED
                self.error_message = e.message or GENERIC_FAILURE_MESSAGE
            self._logger.warning(f"Order submission failed for po={po_number}: {e.message}")
            return self.outcome()
        except Exception:
            with self._lock:
                self.state = SubmissionState.FAILED
                self.error_message = GENERIC_FAILURE_MESSAGE
            raise

        with self._lock:
            self.state = SubmissionState.SUCCEEDED
            self.last_order_id = order.id
            self.last_po_number = po_number
            self._selection.clear()
            self.po_number = ""
            self.field_errors = {}

        self._logger.info(f"Order placed: id={order.id} po={po_number}")
        return self.outcome()

    def dismiss(self) -> None:
        """Acknowledge a confirmation or error message and return to IDLE."""
        with self._lock:
            if self.state is SubmissionState.SUBMITTING:
                return
            self.state = SubmissionState.IDLE
            self.error_message = None

    def outcome(self) -> SubmissionOutcome:
        succeeded = self.state is SubmissionState.SUCCEEDED
        return SubmissionOutcome(
            state=self.state,
            field_errors=dict(self.field_errors),
            error_message=self.error_message,
            order_id=self.last_order_id if succeeded else None,
            po_number=self.last_po_number if succeeded else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = self.outcome().to_dict()
        data["poNumberField"] = self.po_number
        data["lastOrderId"] = self.last_order_id
        data["lastPoNumber"] = self.last_po_number
        return data
