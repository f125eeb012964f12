from __future__ import annotations

import copy

from domain.models import Document, new_document
from infrastructure.persistence.store import DocumentStore


class InMemoryDocumentStore(DocumentStore):
    name = "memory"

    def __init__(self, document: Document | None = None) -> None:
        self._document = document or new_document()
        self.save_count = 0

    def load(self) -> Document:
        # Callers mutate what they load; hand out a copy so unsaved edits never leak.
        return copy.deepcopy(self._document)

    def save(self, document: Document) -> None:
        self._document = copy.deepcopy(document)
        self.save_count += 1
