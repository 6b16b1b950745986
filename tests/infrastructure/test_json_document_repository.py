"""Tests for the JSON-file-backed document repository."""

import json
from decimal import Decimal

import pytest

from recon.domain.exceptions import ConcurrencyConflictError, DataIntegrityError
from recon.domain.model.document import DocumentKind, DocumentLine, ParentDocument
from recon.domain.model.totals import Adjustments
from recon.domain.model.value_objects import Money, Quantity
from recon.infrastructure.persistence.json_document_repository import (
    JsonDocumentRepository,
)


@pytest.fixture
def repo(tmp_path):
    return JsonDocumentRepository(tmp_path / "data" / "documents.json")


def _document():
    return ParentDocument(
        id="SO-1",
        kind=DocumentKind.SALES_ORDER,
        party_name="Acme",
        lines=[DocumentLine("W-1", "Widget", Quantity(10), Money.of("15.00"), 3)],
        adjustments=Adjustments.of("5.00", "10", "7.50"),
        paid_amount=Decimal("12.34"),
    )


class TestJsonDocumentRepository:

    def test_creates_file_on_first_use(self, tmp_path, repo):
        assert json.loads((tmp_path / "data" / "documents.json").read_text()) == []

    def test_round_trip(self, repo):
        repo.save(_document())
        loaded = repo.get_by_id("SO-1")

        assert loaded.version == 1
        assert loaded.kind is DocumentKind.SALES_ORDER
        assert loaded.lines[0].fulfilled_quantity == 3
        assert loaded.lines[0].unit_price == Money.of("15.00")
        assert loaded.adjustments == Adjustments.of("5.00", "10", "7.50")
        assert loaded.paid_amount == Decimal("12.34")

    def test_missing_returns_none(self, repo):
        assert repo.get_by_id("nope") is None

    def test_save_bumps_version(self, repo):
        doc = _document()
        repo.save(doc)
        repo.save(doc, expected_version=1)
        assert doc.version == 2
        assert repo.get_by_id("SO-1").version == 2
        assert len(repo.list_all()) == 1

    def test_save_leaves_no_temp_file(self, tmp_path, repo):
        repo.save(_document())
        assert sorted(p.name for p in (tmp_path / "data").iterdir()) == ["documents.json"]
        assert json.loads((tmp_path / "data" / "documents.json").read_text())[0]["id"] == "SO-1"

    def test_stale_version_rejected(self, repo):
        repo.save(_document())
        first = repo.get_by_id("SO-1")
        second = repo.get_by_id("SO-1")

        first.apply_fulfillment({"W-1": 1})
        repo.save(first, expected_version=first.version)

        second.apply_fulfillment({"W-1": 2})
        with pytest.raises(ConcurrencyConflictError, match="at version 2, expected 1"):
            repo.save(second, expected_version=1)
        assert repo.get_by_id("SO-1").lines[0].fulfilled_quantity == 4

    def test_malformed_record(self, tmp_path):
        path = tmp_path / "documents.json"
        path.write_text(json.dumps([{"id": "SO-9", "kind": "SALES_ORDER"}]))
        with pytest.raises(DataIntegrityError, match="SO-9"):
            JsonDocumentRepository(path).get_by_id("SO-9")
