"""Application service: Record Payment use case.

Same read-validate-save cycle as fulfillment, with the document's grand
total as the balance being consumed.
"""

from __future__ import annotations

from loguru import logger

from recon.application.dto import PaymentDTO
from recon.config import get_settings
from recon.domain.exceptions import ConcurrencyConflictError, EntityNotFoundError
from recon.domain.model.value_objects import round_money, to_decimal
from recon.domain.repository.document_repository import DocumentRepository
from recon.domain.service.document_totals import DocumentTotals
from recon.domain.service.payment_tracker import PaymentTracker


class RecordPaymentHandler:

    def __init__(
        self,
        document_repo: DocumentRepository,
        max_attempts: int | None = None,
    ) -> None:
        self._document_repo = document_repo
        self._totals = DocumentTotals()
        self._payments = PaymentTracker()
        self._max_attempts = max_attempts or get_settings().max_commit_retries

    def handle(self, document_id: str, amount: str) -> PaymentDTO:
        value = to_decimal(amount, "amount")

        attempt = 0
        while True:
            attempt += 1
            document = self._document_repo.get_by_id(document_id)
            if document is None:
                raise EntityNotFoundError(f"Document '{document_id}' not found")
            expected_version = document.version

            totals = self._totals.compute(document.priced_items(), document.adjustments)
            result = self._payments.validate(totals.grand_total, document.paid_amount, value)
            result.raise_for_failure()

            document.apply_payment(value)
            try:
                self._document_repo.save(document, expected_version=expected_version)
            except ConcurrencyConflictError:
                if attempt >= self._max_attempts:
                    raise
                logger.info(
                    "Document {} changed during payment (attempt {}/{}), re-validating",
                    document_id, attempt, self._max_attempts,
                )
                continue

            return PaymentDTO(
                document_id=document.id,
                amount=f"${round_money(value):.2f}",
                paid=f"${round_money(document.paid_amount):.2f}",
                outstanding=f"${round_money(result.outstanding - value):.2f}",
                payment_status=document.payment_status.value,
                version=document.version,
            )
