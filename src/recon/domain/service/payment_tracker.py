"""Domain service: Payment Tracker.

The money counterpart of the fulfillment tracker: payments consume a
document's grand total the way dispatches consume ordered quantities.
Stateless; the caller supplies the paid-so-far aggregate.
"""

from __future__ import annotations

from decimal import Decimal

from loguru import logger

from recon.domain.exceptions import ErrorKind, InvalidAdjustmentError
from recon.domain.model.payment import OutstandingBalance, PaymentValidationResult
from recon.domain.model.value_objects import ZERO, round_money, to_decimal


class PaymentTracker:

    def outstanding(
        self,
        total: Decimal | str | int,
        prior_paid: Decimal | str | int = ZERO,
    ) -> OutstandingBalance:
        total = to_decimal(total, "total")
        if total < ZERO:
            # Discount larger than subtotal plus shipping; nothing is owed.
            logger.warning("Document total {} is negative, treating as 0", total)
            total = ZERO
        paid = self._non_negative(prior_paid, "prior_paid")

        overpaid = paid > total
        if overpaid:
            logger.warning("Data integrity: paid {} exceeds document total {}", paid, total)

        return OutstandingBalance(
            total=round_money(total),
            paid=round_money(paid),
            outstanding=round_money(max(ZERO, total - paid)),
            overpaid=overpaid,
        )

    def validate(
        self,
        total: Decimal | str | int,
        prior_paid: Decimal | str | int,
        amount: Decimal | str | int,
    ) -> PaymentValidationResult:
        balance = self.outstanding(total, prior_paid)
        amount = to_decimal(amount, "amount")

        if amount <= ZERO:
            failure = ErrorKind.NON_POSITIVE_AMOUNT
        elif amount != round_money(amount):
            failure = ErrorKind.SUB_CENT_AMOUNT
        elif amount > balance.outstanding:
            failure = ErrorKind.EXCEEDS_OUTSTANDING
        else:
            failure = None

        result = PaymentValidationResult(
            amount=amount, outstanding=balance.outstanding, failure=failure
        )
        logger.debug(
            "Payment of {} against outstanding {}: {}",
            amount, balance.outstanding, failure.value if failure else "accepted",
        )
        return result

    @staticmethod
    def _non_negative(value: Decimal | str | int, field: str) -> Decimal:
        amount = to_decimal(value, field)
        if amount < ZERO:
            raise InvalidAdjustmentError(f"{field} cannot be negative, got {amount}", field=field)
        return amount
