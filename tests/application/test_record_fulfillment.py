"""Integration tests for the RecordFulfillment use case."""

import pytest

from recon.application.record_fulfillment import RecordFulfillmentHandler
from recon.domain.exceptions import (
    ConcurrencyConflictError,
    EntityNotFoundError,
    ErrorKind,
    FulfillmentRejectedError,
    ValidationError,
)
from recon.domain.model.document import (
    DocumentKind,
    DocumentLine,
    FulfillmentStatus,
    ParentDocument,
)
from recon.domain.model.value_objects import Money, Quantity
from tests.fakes import FakeDocumentRepository


def _setup(kind: DocumentKind = DocumentKind.SALES_ORDER):
    document = ParentDocument(
        id="SO-1",
        kind=kind,
        party_name="Acme",
        lines=[
            DocumentLine("W-1", "Widget", Quantity(10), Money.of("15.00"), fulfilled_quantity=4),
            DocumentLine("G-2", "Gadget", Quantity(5), Money.of("25.00")),
        ],
        version=1,
    )
    return FakeDocumentRepository([document])


def _fulfilled(repo, product_id):
    doc = repo.get_by_id("SO-1")
    return next(l.fulfilled_quantity for l in doc.lines if l.product_id == product_id)


class TestRecordFulfillmentHappyPath:

    def test_partial_dispatch(self):
        repo = _setup()
        dto = RecordFulfillmentHandler(repo).handle("SO-1", {"W-1": 6})

        assert dto.child_label == "dispatch"
        assert dto.quantities == {"W-1": 6}
        assert dto.status == FulfillmentStatus.PARTIALLY_FULFILLED.value
        assert dto.version == 2
        assert _fulfilled(repo, "W-1") == 10

    def test_goods_receipt_completes_purchase_order(self):
        repo = _setup(DocumentKind.PURCHASE_ORDER)
        dto = RecordFulfillmentHandler(repo).handle("SO-1", {"W-1": 6, "G-2": 5})

        assert dto.child_label == "goods receipt"
        assert dto.status == FulfillmentStatus.FULFILLED.value


class TestRecordFulfillmentValidation:

    def test_exceeding_remaining_records_nothing(self):
        repo = _setup()
        with pytest.raises(FulfillmentRejectedError, match="only 6 remaining") as info:
            RecordFulfillmentHandler(repo).handle("SO-1", {"W-1": 7, "G-2": 1})

        assert [f.kind for f in info.value.result.failures] == [ErrorKind.EXCEEDS_REMAINING]
        assert _fulfilled(repo, "G-2") == 0
        assert repo.save_calls == 0

    def test_unknown_product_records_nothing(self):
        repo = _setup()
        with pytest.raises(FulfillmentRejectedError) as info:
            RecordFulfillmentHandler(repo).handle("SO-1", {"G-2": 1, "NOPE": 1})
        assert info.value.result.failures[0].kind is ErrorKind.UNKNOWN_LINE
        assert _fulfilled(repo, "G-2") == 0

    def test_missing_document(self):
        with pytest.raises(EntityNotFoundError, match="not found"):
            RecordFulfillmentHandler(_setup()).handle("SO-404", {"W-1": 1})

    def test_second_dispatch_sees_first(self):
        repo = _setup()
        handler = RecordFulfillmentHandler(repo)
        handler.handle("SO-1", {"W-1": 4})
        with pytest.raises(FulfillmentRejectedError, match="only 2 remaining"):
            handler.handle("SO-1", {"W-1": 3})


class TestGoodsReceiptRejectedUnits:

    def test_only_accepted_units_are_received(self):
        repo = _setup(DocumentKind.PURCHASE_ORDER)
        dto = RecordFulfillmentHandler(repo).handle("SO-1", {"W-1": 4}, rejected={"W-1": 2})

        assert dto.quantities == {"W-1": 4}
        assert dto.rejected == {"W-1": 2}
        assert _fulfilled(repo, "W-1") == 8
        assert dto.status == FulfillmentStatus.PARTIALLY_FULFILLED.value

    def test_accepted_plus_rejected_over_pending_records_nothing(self):
        repo = _setup(DocumentKind.PURCHASE_ORDER)
        with pytest.raises(FulfillmentRejectedError, match="5 accepted and 2 rejected") as info:
            RecordFulfillmentHandler(repo).handle("SO-1", {"W-1": 5}, rejected={"W-1": 2})

        assert info.value.result.failures[0].kind is ErrorKind.EXCEEDS_REMAINING
        assert repo.save_calls == 0

    def test_rejected_units_refused_on_dispatch(self):
        repo = _setup()
        with pytest.raises(ValidationError, match="only to goods receipts"):
            RecordFulfillmentHandler(repo).handle("SO-1", {"W-1": 1}, rejected={"W-1": 1})
        assert repo.save_calls == 0


class TestRecordFulfillmentConcurrency:

    @staticmethod
    def _competing_dispatch(quantity):
        def commit(repo):
            doc = repo.get_by_id("SO-1")
            doc.apply_fulfillment({"W-1": quantity})
            repo.save(doc, expected_version=doc.version)
        return commit

    def test_retries_and_succeeds_when_balance_still_allows(self):
        repo = _setup()
        repo.before_next_save = self._competing_dispatch(2)

        dto = RecordFulfillmentHandler(repo, max_attempts=3).handle("SO-1", {"W-1": 3})

        assert dto.version == 3
        assert _fulfilled(repo, "W-1") == 9

    def test_revalidation_rejects_when_competitor_consumed_balance(self):
        repo = _setup()
        repo.before_next_save = self._competing_dispatch(5)

        with pytest.raises(FulfillmentRejectedError, match="only 1 remaining"):
            RecordFulfillmentHandler(repo, max_attempts=3).handle("SO-1", {"W-1": 4})

        assert _fulfilled(repo, "W-1") == 9

    def test_gives_up_after_max_attempts(self):
        repo = _setup()

        class AlwaysConflicting(FakeDocumentRepository):
            def save(self, document, expected_version=None):
                raise ConcurrencyConflictError("stale")

        conflicting = AlwaysConflicting(repo.list_all())
        with pytest.raises(ConcurrencyConflictError):
            RecordFulfillmentHandler(conflicting, max_attempts=2).handle("SO-1", {"W-1": 1})
