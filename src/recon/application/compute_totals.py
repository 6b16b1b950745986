"""Application services: document totals.

``QuoteTotalsHandler`` backs the order creation screens, recomputing
figures as lines change before anything is stored.
``ComputeTotalsHandler`` reports the totals of a stored document.
"""

from __future__ import annotations

from decimal import Decimal

from recon.application.dto import PricedItemSpec, TotalsDTO, TotalsLineDTO
from recon.config import get_settings
from recon.domain.exceptions import EntityNotFoundError
from recon.domain.model.totals import Adjustments, PricedLineItem, TotalsResult
from recon.domain.repository.document_repository import DocumentRepository
from recon.domain.service.document_totals import DocumentTotals


def _fmt(amount: Decimal) -> str:
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):.2f}"


def to_totals_dto(result: TotalsResult, tax_rate: Decimal) -> TotalsDTO:
    return TotalsDTO(
        lines=[
            TotalsLineDTO(
                product_id=line.product_id,
                quantity=line.quantity,
                unit_price=_fmt(line.unit_price),
                line_total=_fmt(line.line_total),
            )
            for line in result.lines
        ],
        subtotal=_fmt(result.subtotal),
        discount=_fmt(result.discount_amount),
        tax_rate=f"{tax_rate.normalize():f}%",
        tax_amount=_fmt(result.tax_amount),
        shipping=_fmt(result.shipping_amount),
        grand_total=_fmt(result.grand_total),
    )


class QuoteTotalsHandler:

    def __init__(self) -> None:
        self._totals = DocumentTotals()

    def handle(
        self,
        item_specs: list[PricedItemSpec],
        discount: str = "0",
        tax_rate: str | None = None,
        shipping: str = "0",
    ) -> TotalsDTO:
        """Totals for an order being drafted.

        ``tax_rate`` defaults to ``Settings.default_tax_rate``.
        """
        if tax_rate is None:
            tax_rate = str(get_settings().default_tax_rate)

        items = [
            PricedLineItem.of(spec.quantity, spec.unit_price, spec.product_id)
            for spec in item_specs
        ]
        adjustments = Adjustments.of(
            discount_amount=discount, tax_rate=tax_rate, shipping_amount=shipping
        )
        result = self._totals.compute(items, adjustments)
        return to_totals_dto(result, adjustments.tax_rate)


class ComputeTotalsHandler:

    def __init__(self, document_repo: DocumentRepository) -> None:
        self._document_repo = document_repo
        self._totals = DocumentTotals()

    def handle(self, document_id: str) -> TotalsDTO:
        document = self._document_repo.get_by_id(document_id)
        if document is None:
            raise EntityNotFoundError(f"Document '{document_id}' not found")

        result = self._totals.compute(document.priced_items(), document.adjustments)
        return to_totals_dto(result, document.adjustments.tax_rate)
