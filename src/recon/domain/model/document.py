"""ParentDocument aggregate — an order whose lines child documents fulfill.

A sales order is fulfilled by dispatches, a purchase order by goods
receipts, and either is paid down by payments.  The aggregate only
stores the cumulative fulfilled quantity per line and the amount paid;
the trackers decide what may be added.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from recon.domain.exceptions import ValidationError
from recon.domain.model.fulfillment import LineItem
from recon.domain.model.payment import OutstandingBalance, PaymentStatus
from recon.domain.model.totals import Adjustments, PricedLineItem
from recon.domain.model.value_objects import ZERO, Money, Quantity
from recon.domain.service.document_totals import DocumentTotals
from recon.domain.service.payment_tracker import PaymentTracker


class DocumentKind(Enum):
    SALES_ORDER = "SALES_ORDER"
    PURCHASE_ORDER = "PURCHASE_ORDER"

    @property
    def child_label(self) -> str:
        return "dispatch" if self is DocumentKind.SALES_ORDER else "goods receipt"


class FulfillmentStatus(Enum):
    OPEN = "OPEN"
    PARTIALLY_FULFILLED = "PARTIALLY_FULFILLED"
    FULFILLED = "FULFILLED"


@dataclass
class DocumentLine:
    """An ordered product with its price snapshot.

    Mutable only via ``record()`` which accumulates fulfilled units.
    """

    product_id: str
    product_name: str
    quantity: Quantity
    unit_price: Money  # locked at order-creation time
    fulfilled_quantity: int = 0

    def to_line_item(self) -> LineItem:
        return LineItem(
            product_id=self.product_id,
            ordered_quantity=self.quantity.value,
            prior_fulfilled_quantity=self.fulfilled_quantity,
        )

    def to_priced_item(self) -> PricedLineItem:
        return PricedLineItem(
            quantity=self.quantity.value,
            unit_price=self.unit_price.amount,
            product_id=self.product_id,
        )

    def record(self, qty: int) -> None:
        if qty <= 0:
            raise ValidationError("Fulfilled quantity must be positive")
        self.fulfilled_quantity += qty


@dataclass
class ParentDocument:
    """Aggregate root for sales and purchase orders.

    ``version`` is owned by the repository and bumped on every save; the
    application layer passes the version it read back as
    ``expected_version`` to detect concurrent child documents.
    """

    id: str
    kind: DocumentKind
    party_name: str
    lines: list[DocumentLine]
    adjustments: Adjustments = field(default_factory=Adjustments)
    paid_amount: Decimal = ZERO
    version: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Views for the trackers -----------------------------------------------

    def line_items(self) -> list[LineItem]:
        return [line.to_line_item() for line in self.lines]

    def priced_items(self) -> list[PricedLineItem]:
        return [line.to_priced_item() for line in self.lines]

    # --- Mutations (after validation) -----------------------------------------

    def apply_fulfillment(self, quantities: Mapping[str, int]) -> None:
        """Add already-validated quantities to the fulfilled totals."""
        if not quantities:
            raise ValidationError("Must specify at least one item to fulfill")
        for product_id, qty in quantities.items():
            self._find_line(product_id).record(qty)

    def apply_payment(self, amount: Decimal) -> None:
        if amount <= ZERO:
            raise ValidationError("Payment amount must be positive")
        self.paid_amount += amount

    # --- Computed properties --------------------------------------------------

    @property
    def status(self) -> FulfillmentStatus:
        if all(line.fulfilled_quantity >= line.quantity.value for line in self.lines):
            return FulfillmentStatus.FULFILLED
        if any(line.fulfilled_quantity > 0 for line in self.lines):
            return FulfillmentStatus.PARTIALLY_FULFILLED
        return FulfillmentStatus.OPEN

    @property
    def balance(self) -> OutstandingBalance:
        totals = DocumentTotals().compute(self.priced_items(), self.adjustments)
        return PaymentTracker().outstanding(totals.grand_total, self.paid_amount)

    @property
    def payment_status(self) -> PaymentStatus:
        return self.balance.status

    # --- Internal helpers -----------------------------------------------------

    def _find_line(self, product_id: str) -> DocumentLine:
        for line in self.lines:
            if line.product_id == product_id:
                return line
        raise ValidationError(f"Product ID '{product_id}' not found on document {self.id}")
