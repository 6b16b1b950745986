"""Value types for fulfillment reconciliation.

A parent document's lines are progressively satisfied by child documents
(dispatches against a sales order, goods receipts against a purchase
order).  These types describe one reconciliation computation; none of
them is persisted by the engine.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass

from recon.domain.exceptions import (
    DataIntegrityError,
    ErrorKind,
    FulfillmentRejectedError,
)

# product_id -> quantity to fulfill now
FulfillmentRequest = Mapping[str, int]

# product_id -> units received but refused (goods receipts only)
RejectedUnits = Mapping[str, int]


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class LineItem:
    """One ordered line and how much of it prior child documents satisfied.

    ``prior_fulfilled_quantity`` greater than ``ordered_quantity`` is
    accepted here; the tracker reports it as a data-integrity warning
    instead of failing the whole call.
    """

    product_id: str
    ordered_quantity: int
    prior_fulfilled_quantity: int = 0

    def __post_init__(self) -> None:
        for name in ("ordered_quantity", "prior_fulfilled_quantity"):
            value = getattr(self, name)
            if not _is_int(value):
                raise DataIntegrityError(
                    f"{name} for product '{self.product_id}' must be an integer, "
                    f"got {type(value).__name__}"
                )
            if value < 0:
                raise DataIntegrityError(
                    f"{name} for product '{self.product_id}' cannot be negative, "
                    f"got {value}"
                )

    @property
    def remaining_quantity(self) -> int:
        return max(0, self.ordered_quantity - self.prior_fulfilled_quantity)

    @property
    def is_overfulfilled(self) -> bool:
        return self.prior_fulfilled_quantity > self.ordered_quantity


@dataclass(frozen=True)
class RemainingLine:
    product_id: str
    remaining_quantity: int


@dataclass(frozen=True)
class DataIntegrityWarning:
    """Non-fatal flag: a line was fulfilled beyond what was ordered."""

    product_id: str
    ordered_quantity: int
    prior_fulfilled_quantity: int

    kind = ErrorKind.DATA_INTEGRITY_WARNING

    @property
    def message(self) -> str:
        return (
            f"Product '{self.product_id}' fulfilled {self.prior_fulfilled_quantity} "
            f"of {self.ordered_quantity} ordered"
        )


@dataclass(frozen=True)
class RemainingReport:
    """Remaining quantity per line, in input order, plus integrity warnings."""

    lines: tuple[RemainingLine, ...]
    warnings: tuple[DataIntegrityWarning, ...] = ()

    def __iter__(self) -> Iterator[RemainingLine]:
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    @property
    def total_remaining(self) -> int:
        return sum(line.remaining_quantity for line in self.lines)

    def for_product(self, product_id: str) -> RemainingLine | None:
        for line in self.lines:
            if line.product_id == product_id:
                return line
        return None


@dataclass(frozen=True)
class LineFailure:
    """Why one entry of a fulfillment request was refused.

    ``product_id`` is None only for request-level failures (empty request).
    ``field`` names the offending input: ``"quantity"`` or, on a goods
    receipt, ``"rejected_quantity"``.
    """

    product_id: str | None
    kind: ErrorKind
    requested: object = None
    remaining: int | None = None
    rejected: object = 0
    field: str = "quantity"

    @property
    def message(self) -> str:
        if self.kind is ErrorKind.UNKNOWN_LINE:
            return f"Product ID '{self.product_id}' not found on this document"
        if self.kind is ErrorKind.NON_POSITIVE_QUANTITY and self.field == "rejected_quantity":
            return (
                f"Rejected quantity for product '{self.product_id}' must be a "
                f"non-negative integer, got {self.rejected!r}"
            )
        if self.kind is ErrorKind.NON_POSITIVE_QUANTITY:
            return (
                f"Quantity for product '{self.product_id}' must be a positive "
                f"integer, got {self.requested!r}"
            )
        if self.kind is ErrorKind.EXCEEDS_REMAINING and self.rejected:
            return (
                f"Cannot receive {self.requested} accepted and {self.rejected} rejected "
                f"of product '{self.product_id}' — only {self.remaining} remaining"
            )
        if self.kind is ErrorKind.EXCEEDS_REMAINING:
            return (
                f"Cannot fulfill {self.requested} of product '{self.product_id}' "
                f"— only {self.remaining} remaining"
            )
        if self.kind is ErrorKind.EMPTY_REQUEST:
            return "Must specify at least one item to fulfill"
        return self.kind.value


@dataclass(frozen=True)
class AcceptedLine:
    product_id: str
    quantity: int
    rejected_quantity: int = 0


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a fulfillment request.

    All-or-nothing: when ``failures`` is non-empty ``accepted`` is empty.
    """

    accepted: tuple[AcceptedLine, ...] = ()
    failures: tuple[LineFailure, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.failures

    def failures_for(self, product_id: str) -> list[LineFailure]:
        return [f for f in self.failures if f.product_id == product_id]

    def as_quantities(self) -> dict[str, int]:
        """Accepted pairs as a mapping, ready for the child-document writer."""
        return {line.product_id: line.quantity for line in self.accepted}

    def rejected_quantities(self) -> dict[str, int]:
        """Refused units per product; they do not count as fulfilled."""
        return {
            line.product_id: line.rejected_quantity
            for line in self.accepted
            if line.rejected_quantity
        }

    def raise_for_failures(self) -> None:
        if self.failures:
            raise FulfillmentRejectedError(self)
