"""JSON-file-backed implementation of DocumentRepository."""

from __future__ import annotations

import json
import os
from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path

from recon.domain.exceptions import ConcurrencyConflictError, DataIntegrityError
from recon.domain.model.document import (
    DocumentKind,
    DocumentLine,
    ParentDocument,
)
from recon.domain.model.totals import Adjustments
from recon.domain.model.value_objects import Money, Quantity
from recon.domain.repository.document_repository import DocumentRepository


class JsonDocumentRepository(DocumentRepository):
    """Stores every document in one JSON file.

    Each save replaces the file atomically, so a reader never sees a
    half-written store.  The version check is not a cross-process lock:
    two processes that read the same version can both pass it, and the
    later write wins.
    """

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    # --- DocumentRepository interface -----------------------------------------

    def get_by_id(self, document_id: str) -> ParentDocument | None:
        for raw in self._load_raw():
            if raw["id"] == document_id:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[ParentDocument]:
        return [self._to_domain(raw) for raw in self._load_raw()]

    def save(self, document: ParentDocument, expected_version: int | None = None) -> None:
        documents = self._load_raw()

        index = next(
            (i for i, raw in enumerate(documents) if raw["id"] == document.id), None
        )
        stored_version = documents[index]["version"] if index is not None else 0
        if expected_version is not None and stored_version != expected_version:
            raise ConcurrencyConflictError(
                f"Document '{document.id}' is at version {stored_version}, "
                f"expected {expected_version}"
            )

        document.version = stored_version + 1

        # Upsert: replace if exists, otherwise append
        if index is not None:
            documents[index] = self._to_raw(document)
        else:
            documents.append(self._to_raw(document))

        self._persist_raw(documents)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(document: ParentDocument) -> dict:
        return {
            "id": document.id,
            "kind": document.kind.value,
            "party_name": document.party_name,
            "version": document.version,
            "created_at": document.created_at.isoformat(),
            "discount_amount": str(document.adjustments.discount_amount),
            "tax_rate": str(document.adjustments.tax_rate),
            "shipping_amount": str(document.adjustments.shipping_amount),
            "paid_amount": str(document.paid_amount),
            "lines": [
                {
                    "product_id": line.product_id,
                    "product_name": line.product_name,
                    "quantity": line.quantity.value,
                    "unit_price": str(line.unit_price.amount),
                    "currency": line.unit_price.currency,
                    "fulfilled_quantity": line.fulfilled_quantity,
                }
                for line in document.lines
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> ParentDocument:
        try:
            lines = [
                DocumentLine(
                    product_id=str(i["product_id"]),
                    product_name=i.get("product_name", str(i["product_id"])),
                    quantity=Quantity(i["quantity"]),
                    unit_price=Money(Decimal(i["unit_price"]), i.get("currency", "USD")),
                    fulfilled_quantity=i.get("fulfilled_quantity", 0),
                )
                for i in raw["lines"]
            ]
            return ParentDocument(
                id=raw["id"],
                kind=DocumentKind(raw["kind"]),
                party_name=raw["party_name"],
                lines=lines,
                adjustments=Adjustments.of(
                    discount_amount=raw.get("discount_amount", "0"),
                    tax_rate=raw.get("tax_rate", "0"),
                    shipping_amount=raw.get("shipping_amount", "0"),
                ),
                paid_amount=Decimal(raw.get("paid_amount", "0")),
                version=raw.get("version", 0),
                created_at=datetime.fromisoformat(raw["created_at"]),
            )
        except (KeyError, ValueError, InvalidOperation) as exc:
            raise DataIntegrityError(
                f"Malformed document record {raw.get('id')!r}: {exc}"
            ) from exc

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, documents: list[dict]) -> None:
        tmp_path = self._file_path.with_name(self._file_path.name + ".tmp")
        tmp_path.write_text(json.dumps(documents, indent=2) + "\n", encoding="utf-8")
        os.replace(tmp_path, self._file_path)

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")
