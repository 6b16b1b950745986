"""Abstract repository for the ParentDocument aggregate.

Defined in the domain layer so the domain never depends on
infrastructure.  ``save`` implements optimistic concurrency: the caller
passes the version it read and the repository refuses to overwrite a
newer one.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from recon.domain.model.document import ParentDocument


class DocumentRepository(ABC):

    @abstractmethod
    def get_by_id(self, document_id: str) -> ParentDocument | None:
        """Return a document by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[ParentDocument]:
        """Return every stored document."""

    @abstractmethod
    def save(self, document: ParentDocument, expected_version: int | None = None) -> None:
        """Persist a document and bump its version.

        Raises ConcurrencyConflictError if ``expected_version`` is given
        and differs from the stored version.
        """
