"""Integration tests for the ShowRemaining use case."""

import pytest

from recon.application.show_remaining import ShowRemainingHandler
from recon.domain.exceptions import EntityNotFoundError
from recon.domain.model.document import DocumentKind, DocumentLine, ParentDocument
from recon.domain.model.value_objects import Money, Quantity
from tests.fakes import FakeDocumentRepository


def _repo(fulfilled_widgets: int = 4):
    return FakeDocumentRepository([
        ParentDocument(
            id="PO-7",
            kind=DocumentKind.PURCHASE_ORDER,
            party_name="Supplier Co",
            lines=[
                DocumentLine(
                    "W-1", "Widget", Quantity(10), Money.of("3.00"),
                    fulfilled_quantity=fulfilled_widgets,
                ),
                DocumentLine("G-2", "Gadget", Quantity(5), Money.of("8.00")),
            ],
        )
    ])


class TestShowRemaining:

    def test_lines(self):
        dto = ShowRemainingHandler(_repo()).handle("PO-7")

        assert dto.status == "PARTIALLY_FULFILLED"
        assert [(l.product_name, l.ordered, l.fulfilled, l.remaining) for l in dto.lines] == [
            ("Widget", 10, 4, 6),
            ("Gadget", 5, 0, 5),
        ]
        assert dto.warnings == []

    def test_overreceived_line_is_flagged(self):
        dto = ShowRemainingHandler(_repo(fulfilled_widgets=12)).handle("PO-7")

        assert dto.lines[0].remaining == 0
        assert dto.warnings == ["Product 'W-1' fulfilled 12 of 10 ordered"]

    def test_missing_document(self):
        with pytest.raises(EntityNotFoundError):
            ShowRemainingHandler(_repo()).handle("PO-404")
