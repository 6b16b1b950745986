"""Value types for payments recorded against an invoice or purchase order."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from recon.domain.exceptions import ErrorKind, PaymentRejectedError


class PaymentStatus(Enum):
    UNPAID = "UNPAID"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    PAID = "PAID"


@dataclass(frozen=True)
class OutstandingBalance:
    """Amount still payable on a document, floored at zero.

    ``overpaid`` flags upstream data where payments exceed the total.
    """

    total: Decimal
    paid: Decimal
    outstanding: Decimal
    overpaid: bool = False

    @property
    def is_settled(self) -> bool:
        return self.outstanding == 0

    @property
    def status(self) -> PaymentStatus:
        # A document with nothing left to pay counts as paid, even at total 0.
        if self.is_settled:
            return PaymentStatus.PAID
        if self.paid > 0:
            return PaymentStatus.PARTIALLY_PAID
        return PaymentStatus.UNPAID


@dataclass(frozen=True)
class PaymentValidationResult:
    amount: Decimal
    outstanding: Decimal
    failure: ErrorKind | None = None

    @property
    def is_valid(self) -> bool:
        return self.failure is None

    @property
    def message(self) -> str | None:
        if self.failure is ErrorKind.NON_POSITIVE_AMOUNT:
            return f"Payment amount must be positive, got {self.amount}"
        if self.failure is ErrorKind.SUB_CENT_AMOUNT:
            return f"Payment amount must be in whole cents, got {self.amount}"
        if self.failure is ErrorKind.EXCEEDS_OUTSTANDING:
            return (
                f"Payment of {self.amount:.2f} exceeds outstanding balance "
                f"of {self.outstanding:.2f}"
            )
        return None

    def raise_for_failure(self) -> None:
        if self.failure is not None:
            raise PaymentRejectedError(self)
