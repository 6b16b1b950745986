"""Domain service: Document Totals.

Deterministic money figures for an order-like document:

    subtotal     = sum(quantity * unit_price)
    taxable_base = max(0, subtotal - discount)
    tax          = taxable_base * tax_rate / 100
    grand_total  = subtotal - discount + tax + shipping

Discount is applied before tax and tax never applies to a negative base.
Each figure is rounded half-up to cents once, and later figures are built
from the rounded earlier ones so the reported numbers always reconcile.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from loguru import logger

from recon.domain.exceptions import InvalidAdjustmentError
from recon.domain.model.totals import (
    Adjustments,
    LineTotal,
    PricedLineItem,
    TotalsResult,
)
from recon.domain.model.value_objects import ZERO, round_money

HUNDRED = Decimal("100")


class DocumentTotals:

    def compute(
        self,
        items: Iterable[PricedLineItem],
        adjustments: Adjustments | None = None,
    ) -> TotalsResult:
        """Compute subtotal, tax and grand total.

        Raises InvalidAdjustmentError naming the offending field if any
        monetary input or quantity is negative.
        """
        items = list(items)
        adjustments = adjustments or Adjustments()
        self._validate(items, adjustments)

        lines = tuple(
            LineTotal(
                product_id=item.product_id,
                quantity=item.quantity,
                unit_price=item.unit_price,
                line_total=round_money(item.line_total),
            )
            for item in items
        )

        subtotal = round_money(sum((item.line_total for item in items), ZERO))
        discount = adjustments.discount_amount
        base = max(ZERO, subtotal - discount)
        taxable_base = round_money(base)
        tax_amount = round_money(base * adjustments.tax_rate / HUNDRED)
        grand_total = round_money(
            subtotal - discount + tax_amount + adjustments.shipping_amount
        )

        logger.debug(
            "Totals for {} line(s): subtotal={} tax={} grand_total={}",
            len(items), subtotal, tax_amount, grand_total,
        )

        return TotalsResult(
            subtotal=subtotal,
            discount_amount=round_money(discount),
            taxable_base=taxable_base,
            tax_amount=tax_amount,
            shipping_amount=round_money(adjustments.shipping_amount),
            grand_total=grand_total,
            lines=lines,
        )

    # --- Internal helpers -----------------------------------------------------

    @staticmethod
    def _validate(items: list[PricedLineItem], adjustments: Adjustments) -> None:
        for field in ("discount_amount", "tax_rate", "shipping_amount"):
            value = getattr(adjustments, field)
            if not isinstance(value, Decimal) or not value.is_finite():
                raise InvalidAdjustmentError(
                    f"{field} must be a finite Decimal, got {value!r}", field=field
                )
            if value < ZERO:
                raise InvalidAdjustmentError(
                    f"{field} cannot be negative, got {value}", field=field
                )

        for index, item in enumerate(items):
            if not isinstance(item.quantity, int) or isinstance(item.quantity, bool):
                raise InvalidAdjustmentError(
                    f"Line {index + 1}: quantity must be an integer, "
                    f"got {type(item.quantity).__name__}",
                    field="quantity",
                )
            if item.quantity < 0:
                raise InvalidAdjustmentError(
                    f"Line {index + 1}: quantity cannot be negative, got {item.quantity}",
                    field="quantity",
                )
            if not isinstance(item.unit_price, Decimal) or not item.unit_price.is_finite():
                raise InvalidAdjustmentError(
                    f"Line {index + 1}: unit_price must be a finite Decimal, "
                    f"got {item.unit_price!r}",
                    field="unit_price",
                )
            if item.unit_price < ZERO:
                raise InvalidAdjustmentError(
                    f"Line {index + 1}: unit_price cannot be negative, "
                    f"got {item.unit_price}",
                    field="unit_price",
                )
