"""Domain service: Fulfillment Tracker.

Answers "how much of each ordered line can still be fulfilled" and
checks a proposed child document (dispatch, goods receipt) against that
balance.

The tracker holds no state.  Every call recomputes from the
``prior_fulfilled_quantity`` the caller supplies, so the caller must read
it immediately before validating and re-validate if the commit is
retried.  Validation is two-phase like inventory reservation: check every
entry first, accept nothing unless all of them pass.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from loguru import logger

from recon.domain.exceptions import DataIntegrityError, ErrorKind
from recon.domain.model.fulfillment import (
    AcceptedLine,
    DataIntegrityWarning,
    FulfillmentRequest,
    LineFailure,
    LineItem,
    RejectedUnits,
    RemainingLine,
    RemainingReport,
    ValidationResult,
)


class FulfillmentTracker:

    def remaining(self, lines: Iterable[LineItem]) -> RemainingReport:
        """Remaining fulfillable quantity for every line, floored at 0.

        A line fulfilled beyond its ordered quantity still yields 0 but is
        also reported in ``warnings`` so the corruption can be traced.
        """
        lines = list(lines)
        self._assert_unique(lines)

        remaining: list[RemainingLine] = []
        warnings: list[DataIntegrityWarning] = []

        for line in lines:
            if line.is_overfulfilled:
                warning = DataIntegrityWarning(
                    product_id=line.product_id,
                    ordered_quantity=line.ordered_quantity,
                    prior_fulfilled_quantity=line.prior_fulfilled_quantity,
                )
                logger.warning("Data integrity: {}", warning.message)
                warnings.append(warning)
            remaining.append(RemainingLine(line.product_id, line.remaining_quantity))

        return RemainingReport(lines=tuple(remaining), warnings=tuple(warnings))

    def validate(
        self,
        lines: Iterable[LineItem],
        request: FulfillmentRequest,
        rejected: RejectedUnits | None = None,
    ) -> ValidationResult:
        """Validate a fulfillment request against current remaining balances.

        Phase 1 classifies every entry (the first failing rule wins per
        entry: unknown line, non-positive quantity, exceeds remaining).
        Phase 2 accepts the request unchanged only if phase 1 found nothing.

        *rejected* carries the units a goods receipt refused.  They must fit
        in the remaining balance together with the accepted units but are
        never added to the fulfilled quantity.
        """
        rejected = rejected or {}
        report = self.remaining(lines)
        by_product = {line.product_id: line for line in report}

        if not request:
            logger.debug("Rejected empty fulfillment request")
            return ValidationResult(failures=(LineFailure(None, ErrorKind.EMPTY_REQUEST),))

        # Phase 1: classify each entry
        failures: list[LineFailure] = []
        for product_id, qty in request.items():
            failure = self._check_entry(
                by_product.get(product_id), product_id, qty, rejected.get(product_id, 0)
            )
            if failure is not None:
                failures.append(failure)
        # Refused units with no accepted quantity: the accepted quantity is 0
        for product_id, rej in rejected.items():
            if product_id not in request:
                failures.append(
                    self._check_entry(by_product.get(product_id), product_id, 0, rej)
                )

        if failures:
            logger.debug(
                "Rejected fulfillment request: {}",
                ", ".join(f"{f.product_id}={f.kind.value}" for f in failures),
            )
            return ValidationResult(failures=tuple(failures))

        # Phase 2: pass the request through untouched
        accepted = tuple(
            AcceptedLine(pid, qty, rejected.get(pid, 0)) for pid, qty in request.items()
        )
        logger.debug("Accepted fulfillment request for {} line(s)", len(accepted))
        return ValidationResult(accepted=accepted)

    # --- Internal helpers -----------------------------------------------------

    @staticmethod
    def _check_entry(
        line: RemainingLine | None,
        product_id: str,
        qty: object,
        rejected: object = 0,
    ) -> LineFailure | None:
        if line is None:
            return LineFailure(product_id, ErrorKind.UNKNOWN_LINE, requested=qty)
        if not isinstance(qty, int) or isinstance(qty, bool) or qty <= 0:
            return LineFailure(
                product_id,
                ErrorKind.NON_POSITIVE_QUANTITY,
                requested=qty,
                remaining=line.remaining_quantity,
            )
        if not isinstance(rejected, int) or isinstance(rejected, bool) or rejected < 0:
            return LineFailure(
                product_id,
                ErrorKind.NON_POSITIVE_QUANTITY,
                requested=qty,
                remaining=line.remaining_quantity,
                rejected=rejected,
                field="rejected_quantity",
            )
        if qty + rejected > line.remaining_quantity:
            return LineFailure(
                product_id,
                ErrorKind.EXCEEDS_REMAINING,
                requested=qty,
                remaining=line.remaining_quantity,
                rejected=rejected,
            )
        return None

    @staticmethod
    def _assert_unique(lines: Sequence[LineItem]) -> None:
        seen: set[str] = set()
        for line in lines:
            if line.product_id in seen:
                raise DataIntegrityError(
                    f"Product ID '{line.product_id}' appears on more than one line"
                )
            seen.add(line.product_id)
