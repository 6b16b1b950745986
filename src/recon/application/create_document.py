"""Application service: Create Document use case.

Registers a sales or purchase order so child documents can later be
reconciled against it.  Totals are computed up front so a document with
invalid adjustments is never stored.
"""

from __future__ import annotations

from recon.application.compute_totals import to_totals_dto
from recon.application.dto import DocumentLineSpec, TotalsDTO
from recon.config import get_settings
from recon.domain.exceptions import ValidationError
from recon.domain.model.document import DocumentKind, DocumentLine, ParentDocument
from recon.domain.model.totals import Adjustments
from recon.domain.model.value_objects import Money, Quantity
from recon.domain.repository.document_repository import DocumentRepository
from recon.domain.service.document_totals import DocumentTotals

MAX_LINE_ITEMS = 50


class CreateDocumentHandler:

    def __init__(self, document_repo: DocumentRepository) -> None:
        self._document_repo = document_repo
        self._totals = DocumentTotals()

    def handle(
        self,
        document_id: str,
        kind: DocumentKind,
        party_name: str,
        line_specs: list[DocumentLineSpec],
        discount: str = "0",
        tax_rate: str | None = None,
        shipping: str = "0",
    ) -> TotalsDTO:
        if not document_id or not document_id.strip():
            raise ValidationError("Document ID is required")
        if not party_name or not party_name.strip():
            raise ValidationError("Customer or supplier name is required")
        if not line_specs:
            raise ValidationError("Document must contain at least one item")
        if len(line_specs) > MAX_LINE_ITEMS:
            raise ValidationError(f"Maximum {MAX_LINE_ITEMS} items per document")
        if self._document_repo.get_by_id(document_id.strip()) is not None:
            raise ValidationError(f"Document '{document_id}' already exists")

        product_ids = [spec.product_id for spec in line_specs]
        if len(set(product_ids)) != len(product_ids):
            raise ValidationError("Each product may appear on only one line")

        if tax_rate is None:
            tax_rate = str(get_settings().default_tax_rate)

        document = ParentDocument(
            id=document_id.strip(),
            kind=kind,
            party_name=party_name.strip(),
            lines=[
                DocumentLine(
                    product_id=spec.product_id,
                    product_name=spec.product_name or spec.product_id,
                    quantity=Quantity(spec.quantity),
                    unit_price=Money.of(spec.unit_price),
                )
                for spec in line_specs
            ],
            adjustments=Adjustments.of(
                discount_amount=discount, tax_rate=tax_rate, shipping_amount=shipping
            ),
        )

        # Validates the adjustments before anything is stored
        result = self._totals.compute(document.priced_items(), document.adjustments)

        self._document_repo.save(document, expected_version=0)
        return to_totals_dto(result, document.adjustments.tax_rate)
