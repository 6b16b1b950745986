"""Value types for document totals (order creation screens)."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from recon.domain.model.value_objects import ZERO, to_decimal


@dataclass(frozen=True)
class PricedLineItem:
    """A quantity at a unit price.  Validated by ``DocumentTotals.compute``."""

    quantity: int
    unit_price: Decimal
    product_id: str | None = None

    @property
    def line_total(self) -> Decimal:
        return self.quantity * self.unit_price

    @staticmethod
    def of(
        quantity: int,
        unit_price: str | float | int | Decimal,
        product_id: str | None = None,
    ) -> PricedLineItem:
        return PricedLineItem(quantity, to_decimal(unit_price, "unit_price"), product_id)


@dataclass(frozen=True)
class Adjustments:
    """Document-level adjustments.

    ``discount_amount`` is an absolute amount, not a percentage.
    ``tax_rate`` is a percentage: 10 means 10%.
    """

    discount_amount: Decimal = ZERO
    tax_rate: Decimal = ZERO
    shipping_amount: Decimal = ZERO

    @staticmethod
    def of(
        discount_amount: str | float | int | Decimal = 0,
        tax_rate: str | float | int | Decimal = 0,
        shipping_amount: str | float | int | Decimal = 0,
    ) -> Adjustments:
        return Adjustments(
            discount_amount=to_decimal(discount_amount, "discount_amount"),
            tax_rate=to_decimal(tax_rate, "tax_rate"),
            shipping_amount=to_decimal(shipping_amount, "shipping_amount"),
        )


@dataclass(frozen=True)
class LineTotal:
    product_id: str | None
    quantity: int
    unit_price: Decimal
    line_total: Decimal  # rounded to cents


@dataclass(frozen=True)
class TotalsResult:
    """Monetary summary of a document; every figure is rounded to cents.

    Invariants:
    - ``tax_amount == round(max(0, subtotal - discount_amount) * rate / 100)``
    - ``grand_total == round(subtotal - discount_amount + tax_amount + shipping_amount)``
    """

    subtotal: Decimal
    discount_amount: Decimal
    taxable_base: Decimal
    tax_amount: Decimal
    shipping_amount: Decimal
    grand_total: Decimal
    lines: tuple[LineTotal, ...] = ()
