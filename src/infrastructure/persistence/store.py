from __future__ import annotations

from abc import ABC, abstractmethod

from domain.models import Document


class DocumentStore(ABC):
    """Whole-document storage: every write replaces the full document."""

    name: str = "store"

    @abstractmethod
    def load(self) -> Document:
        raise NotImplementedError

    @abstractmethod
    def save(self, document: Document) -> None:
        raise NotImplementedError
