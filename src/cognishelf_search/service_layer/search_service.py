"""Search service orchestration layer.

Owns the in-memory index for one document store and decides, per call,
whether a query goes to the inverted index, to the store's own search, or to
a linear substring scan. CRUD calls routed through the service keep the
index synchronized with the store.
"""

from __future__ import annotations

from collections.abc import Mapping
import logging
from pathlib import Path
from typing import Any, Literal

from cognishelf_search.adapters.document_store import Document, DocumentStore
from cognishelf_search.config import SearchMode, Settings
from cognishelf_search.observability.context import index_context
from cognishelf_search.observability.logging import configure_logging_from_settings
from cognishelf_search.observability.metrics import (
    INDEX_DOC_COUNT,
    INDEX_MUTATIONS,
    SEARCH_COUNT,
    SEARCH_LATENCY,
    track_latency,
)
from cognishelf_search.observability.tracing import create_span
from cognishelf_search.search.inverted_index import BulkAddResult, InvertedIndex
from cognishelf_search.search.models import IndexStats, SnapshotValidationError
from cognishelf_search.search.snapshot import load_snapshot, save_snapshot
from cognishelf_search.search.tokenizer import FieldSpec, iter_field_values, tokenize


logger = logging.getLogger(__name__)

MatchMode = Literal["all", "any"]
_MODES = ("auto", "fulltext", "simple", "persistence")


class DocumentSearchService:
    """High-level search over a document store.

    Modes:
        fulltext: inverted index (built lazily on first use)
        simple: case-insensitive substring scan over the indexed fields
        persistence: the store's own ``search(query)`` when it has one
        auto: fulltext once the index is ready, simple before that
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        settings: Settings | None = None,
        index: InvertedIndex | None = None,
        fields: FieldSpec | None = None,
        name: str = "documents",
    ) -> None:
        self.store = store
        self.settings = settings or Settings()
        self.fields: FieldSpec = fields if fields is not None else tuple(self.settings.get_index_fields())
        self.index = index or InvertedIndex(self.settings.tokenizer_options(), default_fields=self.fields)
        self.name = name
        self.index_ready = False
        # Set when the store changed while the index was not ready, so the
        # snapshot on disk no longer matches it
        self._snapshot_stale = False

    @classmethod
    def from_settings(
        cls,
        store: DocumentStore,
        settings: Settings | None = None,
        **kwargs: Any,
    ) -> DocumentSearchService:
        """Entry point for applications: configure logging from ``settings``, then build the service."""
        settings = settings or Settings()
        configure_logging_from_settings(settings)
        service = cls(store, settings=settings, **kwargs)
        logger.info(
            "Search service %s ready (mode=%s, fields=%s, snapshot=%s)",
            service.name,
            settings.search_mode,
            ",".join(settings.get_index_fields()),
            settings.snapshot_path,
        )
        return service

    # ------------------------------------------------------------------
    # Index lifecycle
    # ------------------------------------------------------------------
    def build_index(self) -> BulkAddResult:
        """Rebuild the index from scratch out of ``store.get_all()``.

        Safe to call at any time; this is the recovery path for a stale or
        corrupt index.
        """
        with (
            index_context(self.name),
            create_span("cognishelf.index.build", attributes={"index.name": self.name}),
        ):
            documents = self.store.get_all()
            self.index.clear()
            result = self.index.bulk_add(documents, self.fields, id_field=self.settings.id_field)
            self.index_ready = True
            self._snapshot_stale = False
            self._record_index_size()
            INDEX_MUTATIONS.labels(operation="rebuild").inc()
            logger.info(
                "Built %s index: %d documents, %d tokens (%d skipped)",
                self.name,
                result.added,
                self.index.get_stats().total_tokens,
                result.skipped,
            )
        return result

    def rebuild(self) -> BulkAddResult:
        return self.build_index()

    def ensure_index(self) -> None:
        """Make the index ready, preferring the snapshot cache when configured.

        The snapshot is skipped once the store has changed through this
        service (or :meth:`invalidate` was called) since it could miss those
        changes.
        """
        if self.index_ready:
            return
        snapshot_path = self.settings.snapshot_path
        if self._snapshot_stale:
            logger.info("Store changed since the %s snapshot was written; rebuilding", self.name)
        elif snapshot_path is not None and snapshot_path.exists():
            try:
                self.load_index(snapshot_path)
                return
            except SnapshotValidationError as exc:
                logger.warning("Discarding unusable snapshot %s: %s", snapshot_path, exc)
        self.build_index()

    def invalidate(self) -> None:
        """Mark the index stale; the next fulltext query rebuilds it from the store."""
        self.index_ready = False
        self._snapshot_stale = True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def search(
        self,
        query: str | None,
        *,
        mode: SearchMode | None = None,
        match: MatchMode = "all",
        limit: int | None = None,
    ) -> list[Any]:
        """Return the documents matching ``query``.

        A blank query returns every document in the store.
        """
        if not query or not query.strip():
            return self.store.get_all()

        resolved = self._resolve_mode(mode)
        effective_limit = limit if limit is not None else self.settings.search_limit
        status = "ok"
        try:
            with (
                index_context(self.name),
                create_span(
                    "cognishelf.search",
                    attributes={"search.mode": resolved, "search.match": match, "index.name": self.name},
                ),
                track_latency(SEARCH_LATENCY, mode=resolved),
            ):
                if resolved == "persistence":
                    results = list(self.store.search(query))  # type: ignore[attr-defined]
                elif resolved == "fulltext":
                    results = self._search_fulltext(query, match, effective_limit)
                else:
                    results = self._search_simple(query, effective_limit)
                logger.debug("Search %r via %s returned %d result(s)", query, resolved, len(results))
        except Exception:
            status = "error"
            raise
        finally:
            SEARCH_COUNT.labels(mode=resolved, status=status).inc()
        return results

    def _resolve_mode(self, mode: SearchMode | None) -> str:
        requested = mode or self.settings.search_mode
        if requested not in _MODES:
            msg = f"Unknown search mode {requested!r}; expected one of {_MODES}"
            raise ValueError(msg)
        if requested == "persistence":
            if callable(getattr(self.store, "search", None)):
                return "persistence"
            logger.debug("Store has no search(); falling back to auto mode")
            requested = "auto"
        if requested == "auto":
            return "fulltext" if self.index_ready else "simple"
        return requested

    def _search_fulltext(self, query: str, match: MatchMode, limit: int) -> list[Any]:
        self.ensure_index()
        if not tokenize(query, self.index.options):
            # Nothing indexable (e.g. a single kanji); substring scan still finds it
            return self._search_simple(query, limit)
        if match == "any":
            return self.index.search_or(
                query, limit=limit, min_score=self.settings.min_score, include_score=False
            )
        return self.index.search(query, limit=limit, min_score=self.settings.min_score, include_score=False)

    def _search_simple(self, query: str, limit: int) -> list[Any]:
        needle = query.lower()
        matches: list[Any] = []
        for document in self.store.get_all():
            if any(needle in value.lower() for value in iter_field_values(document, self.fields)):
                matches.append(document)
                if len(matches) >= limit:
                    break
        return matches

    # ------------------------------------------------------------------
    # CRUD kept in sync with the index
    # ------------------------------------------------------------------
    def add_document(self, document: Mapping[str, Any]) -> Document:
        stored = self.store.add(document)  # type: ignore[attr-defined]
        if self.index_ready:
            self.index.add_document(str(stored[self.settings.id_field]), stored, self.fields)
            self._record_index_size()
        else:
            self._snapshot_stale = True
        INDEX_MUTATIONS.labels(operation="add").inc()
        return stored

    def update_document(self, doc_id: str, changes: Mapping[str, Any]) -> Document | None:
        updated = self.store.update(doc_id, changes)  # type: ignore[attr-defined]
        if updated is None:
            return None
        if self.index_ready:
            self.index.update_document(doc_id, updated, self.fields)
            self._record_index_size()
        else:
            self._snapshot_stale = True
        INDEX_MUTATIONS.labels(operation="update").inc()
        return updated

    def delete_document(self, doc_id: str) -> bool:
        deleted = bool(self.store.delete(doc_id))  # type: ignore[attr-defined]
        self.index.remove_document(doc_id)
        if not self.index_ready:
            self._snapshot_stale = True
        self._record_index_size()
        INDEX_MUTATIONS.labels(operation="delete").inc()
        return deleted

    # ------------------------------------------------------------------
    # Stats, persistence and audit
    # ------------------------------------------------------------------
    def get_stats(self) -> IndexStats:
        return self.index.get_stats()

    def export_index(self) -> dict[str, Any]:
        return self.index.export()

    def import_index(self, data: Any) -> None:
        self.index.import_data(data)
        self.index_ready = True
        self._record_index_size()

    def save_index(self, path: Path | None = None) -> int:
        target = self._snapshot_target(path)
        self.ensure_index()
        return save_snapshot(self.index, target)

    def load_index(self, path: Path | None = None) -> None:
        load_snapshot(self.index, self._snapshot_target(path))
        self.index_ready = True
        self._record_index_size()

    def audit(self) -> list[str]:
        """Report index inconsistencies and drift against the store."""
        problems = self.index.check_consistency()
        if self.index_ready:
            store_ids = {
                str(doc_id)
                for document in self.store.get_all()
                if (doc_id := _read_field(document, self.settings.id_field))
            }
            indexed_ids = set(self.index.document_ids())
            problems.extend(f"document {doc_id!r} missing from index" for doc_id in sorted(store_ids - indexed_ids))
            problems.extend(f"indexed document {doc_id!r} not in store" for doc_id in sorted(indexed_ids - store_ids))
        if problems:
            logger.warning("Index audit for %s found %d problem(s)", self.name, len(problems))
        return problems

    def _snapshot_target(self, path: Path | None) -> Path:
        target = path or self.settings.snapshot_path
        if target is None:
            msg = "No snapshot path given and COGNISHELF_SNAPSHOT_PATH is not set"
            raise ValueError(msg)
        return target

    def _record_index_size(self) -> None:
        INDEX_DOC_COUNT.labels(index=self.name).set(self.index.get_stats().total_documents)


def _read_field(document: Any, field_name: str) -> Any:
    if isinstance(document, Mapping):
        return document.get(field_name)
    return getattr(document, field_name, None)
