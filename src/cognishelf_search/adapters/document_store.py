"""Document store boundary consumed by the search service.

The index never calls back into the store: the service reads
``get_all()`` to (re)build the index and mirrors CRUD calls onto it.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
import logging
from typing import Any, Protocol, runtime_checkable
from uuid import uuid4


logger = logging.getLogger(__name__)

Document = dict[str, Any]


@runtime_checkable
class DocumentStore(Protocol):
    """Minimal surface needed to rebuild an index."""

    def get_all(self) -> list[Document]:  # pragma: no cover - Protocol only
        """Return every stored document (each with a stable ``id``)."""


@runtime_checkable
class MutableDocumentStore(DocumentStore, Protocol):
    """Store with create/read/update/delete by id."""

    def get(self, doc_id: str) -> Document | None:  # pragma: no cover - Protocol only
        """Return the document or None."""

    def add(self, document: Mapping[str, Any]) -> Document:  # pragma: no cover - Protocol only
        """Persist a new document and return it with its assigned id."""

    def update(self, doc_id: str, changes: Mapping[str, Any]) -> Document | None:  # pragma: no cover
        """Merge ``changes`` into the document; None when the id is unknown."""

    def delete(self, doc_id: str) -> bool:  # pragma: no cover - Protocol only
        """Remove the document; True when something was deleted."""


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class InMemoryDocumentStore:
    """Dict-backed store, handy for tests and for embedding without persistence."""

    def __init__(self, documents: list[Mapping[str, Any]] | None = None) -> None:
        self._documents: dict[str, Document] = {}
        for document in documents or []:
            self.add(document)

    def get_all(self) -> list[Document]:
        return list(self._documents.values())

    def get(self, doc_id: str) -> Document | None:
        return self._documents.get(doc_id)

    def add(self, document: Mapping[str, Any]) -> Document:
        now = _utcnow_iso()
        stored: Document = {**document}
        stored.setdefault("id", uuid4().hex)
        stored.setdefault("createdAt", now)
        stored["updatedAt"] = now
        self._documents[str(stored["id"])] = stored
        return stored

    def update(self, doc_id: str, changes: Mapping[str, Any]) -> Document | None:
        current = self._documents.get(doc_id)
        if current is None:
            logger.debug("Update for unknown document %s ignored", doc_id)
            return None
        updated: Document = {**current, **changes, "id": current["id"], "updatedAt": _utcnow_iso()}
        self._documents[doc_id] = updated
        return updated

    def delete(self, doc_id: str) -> bool:
        return self._documents.pop(doc_id, None) is not None

    def __len__(self) -> int:
        return len(self._documents)
