"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class PricedItemSpec:
    """Input: a line on an order being created (quantity at a price)."""

    quantity: int
    unit_price: str
    product_id: str | None = None


@dataclass(frozen=True)
class DocumentLineSpec:
    """Input: an ordered line on a new parent document."""

    product_id: str
    quantity: int
    unit_price: str
    product_name: str | None = None


@dataclass(frozen=True)
class RemainingLineDTO:
    product_id: str
    product_name: str
    ordered: int
    fulfilled: int
    remaining: int


@dataclass(frozen=True)
class RemainingDTO:
    document_id: str
    status: str
    lines: list[RemainingLineDTO]
    warnings: list[str]


@dataclass(frozen=True)
class FulfillmentDTO:
    """Output: what a new dispatch or goods receipt consumed."""

    document_id: str
    child_label: str
    quantities: dict[str, int]
    status: str
    version: int
    rejected: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class TotalsLineDTO:
    product_id: str | None
    quantity: int
    unit_price: str  # formatted, e.g. "$25.00"
    line_total: str


@dataclass(frozen=True)
class TotalsDTO:
    lines: list[TotalsLineDTO]
    subtotal: str
    discount: str
    tax_rate: str
    tax_amount: str
    shipping: str
    grand_total: str


@dataclass(frozen=True)
class PaymentDTO:
    document_id: str
    amount: str
    paid: str
    outstanding: str
    payment_status: str
    version: int
