"""Application service: Record Fulfillment use case.

Creates a child document (dispatch or goods receipt) against a parent.
The tracker only sees what it is given, so this handler owns the
concurrency contract: read the document, validate, and save with the
version that was read.  If another child document was committed in
between, the save fails and the whole read-validate-save cycle runs
again against the fresh balance.
"""

from __future__ import annotations

from collections.abc import Mapping

from loguru import logger

from recon.application.dto import FulfillmentDTO
from recon.config import get_settings
from recon.domain.exceptions import (
    ConcurrencyConflictError,
    EntityNotFoundError,
    ValidationError,
)
from recon.domain.model.document import DocumentKind, ParentDocument
from recon.domain.repository.document_repository import DocumentRepository
from recon.domain.service.fulfillment_tracker import FulfillmentTracker


class RecordFulfillmentHandler:

    def __init__(
        self,
        document_repo: DocumentRepository,
        max_attempts: int | None = None,
    ) -> None:
        self._document_repo = document_repo
        self._tracker = FulfillmentTracker()
        self._max_attempts = max_attempts or get_settings().max_commit_retries

    def handle(
        self,
        document_id: str,
        quantities: Mapping[str, int],
        rejected: Mapping[str, int] | None = None,
    ) -> FulfillmentDTO:
        """Validate and commit a fulfillment of *quantities* (product_id -> qty).

        *rejected* lists units a goods receipt refused; it is only valid on
        a purchase order and never counts toward the received quantity.

        Raises FulfillmentRejectedError carrying the per-line failures, or
        ConcurrencyConflictError once every attempt lost a race.
        """
        attempt = 0
        while True:
            attempt += 1
            document = self._load(document_id)
            expected_version = document.version
            if rejected and document.kind is not DocumentKind.PURCHASE_ORDER:
                raise ValidationError("Rejected quantities apply only to goods receipts")

            result = self._tracker.validate(document.line_items(), quantities, rejected)
            result.raise_for_failures()

            document.apply_fulfillment(result.as_quantities())
            try:
                self._document_repo.save(document, expected_version=expected_version)
            except ConcurrencyConflictError:
                if attempt >= self._max_attempts:
                    raise
                logger.info(
                    "Document {} changed during fulfillment (attempt {}/{}), re-validating",
                    document_id, attempt, self._max_attempts,
                )
                continue

            return FulfillmentDTO(
                document_id=document.id,
                child_label=document.kind.child_label,
                quantities=result.as_quantities(),
                status=document.status.value,
                version=document.version,
                rejected=result.rejected_quantities(),
            )

    def _load(self, document_id: str) -> ParentDocument:
        document = self._document_repo.get_by_id(document_id)
        if document is None:
            raise EntityNotFoundError(f"Document '{document_id}' not found")
        return document
