"""Application service: Show Remaining use case (query)."""

from __future__ import annotations

from recon.application.dto import RemainingDTO, RemainingLineDTO
from recon.domain.exceptions import EntityNotFoundError
from recon.domain.repository.document_repository import DocumentRepository
from recon.domain.service.fulfillment_tracker import FulfillmentTracker


class ShowRemainingHandler:

    def __init__(self, document_repo: DocumentRepository) -> None:
        self._document_repo = document_repo
        self._tracker = FulfillmentTracker()

    def handle(self, document_id: str) -> RemainingDTO:
        document = self._document_repo.get_by_id(document_id)
        if document is None:
            raise EntityNotFoundError(f"Document '{document_id}' not found")

        report = self._tracker.remaining(document.line_items())

        return RemainingDTO(
            document_id=document.id,
            status=document.status.value,
            lines=[
                RemainingLineDTO(
                    product_id=line.product_id,
                    product_name=line.product_name,
                    ordered=line.quantity.value,
                    fulfilled=line.fulfilled_quantity,
                    remaining=remaining.remaining_quantity,
                )
                for line, remaining in zip(document.lines, report.lines)
            ],
            warnings=[w.message for w in report.warnings],
        )
