"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from pathlib import Path

from recon.config import get_settings
from recon.infrastructure.persistence.json_document_repository import (
    JsonDocumentRepository,
)


def document_repository() -> JsonDocumentRepository:
    return JsonDocumentRepository(Path(get_settings().data_dir) / "documents.json")
