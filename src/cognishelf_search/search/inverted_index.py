"""In-memory inverted index with AND / OR / prefix queries.

The index owns three maps that are always kept consistent with each other:

* ``token -> {doc_id}`` postings
* ``doc_id -> document`` (the caller's object, stored as-is)
* ``doc_id -> {token}`` per-document token sets

A doc id is in a token's postings exactly when that token is in the doc's
token set. Every mutation goes through :meth:`InvertedIndex.add_document` or
:meth:`InvertedIndex.remove_document`, which maintain both directions and
prune tokens whose postings become empty.

The index is single-owner and synchronous; wrap it in a lock if several
threads need to mutate it.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
import logging
from typing import Any, Literal

from cognishelf_search.search.models import IndexStats, SearchHit, parse_snapshot
from cognishelf_search.search.tokenizer import (
    DEFAULT_FIELDS,
    FieldSpec,
    TokenizerOptions,
    calculate_match_score,
    extract_tokens,
    normalize_text,
    tokenize,
)


logger = logging.getLogger(__name__)

SortBy = Literal["score", "relevance"]

# Heuristic weights for index_size_bytes (two bytes per character, fixed
# overhead per posting entry and per token reference)
_BYTES_PER_CHAR = 2
_BYTES_PER_POSTING = 50
_BYTES_PER_TOKEN_REF = 20


@dataclass(frozen=True)
class BulkAddResult:
    """Outcome of a :meth:`InvertedIndex.bulk_add` call."""

    added: int
    skipped: int
    skipped_positions: tuple[int, ...] = ()


class InvertedIndex:
    """Token -> document postings with incremental maintenance."""

    def __init__(
        self,
        options: TokenizerOptions | None = None,
        *,
        default_fields: FieldSpec = DEFAULT_FIELDS,
    ) -> None:
        self.options = options or TokenizerOptions()
        self.default_fields = default_fields
        self._postings: dict[str, set[str]] = {}
        self._documents: dict[str, Any] = {}
        self._document_tokens: dict[str, set[str]] = {}
        self._stats = IndexStats()

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def add_document(self, doc_id: str, document: Any, fields: FieldSpec | None = None) -> None:
        """Index ``document`` under ``str(doc_id)``, replacing any previous version."""
        self._insert(doc_id, document, fields)
        self._refresh_stats()

    def update_document(self, doc_id: str, document: Any, fields: FieldSpec | None = None) -> None:
        """Re-index ``doc_id``; an unknown id is simply added."""
        self.add_document(doc_id, document, fields)

    def remove_document(self, doc_id: str) -> None:
        """Drop ``doc_id`` and its postings. Unknown ids are ignored."""
        if self._discard(str(doc_id)):
            self._refresh_stats()

    def bulk_add(
        self,
        documents: Iterable[Any],
        fields: FieldSpec | None = None,
        *,
        id_field: str = "id",
    ) -> BulkAddResult:
        """Index many documents, reading each id from ``id_field``.

        Documents without an id are skipped with a warning instead of
        aborting the batch. Stats are recomputed once at the end.
        """
        added = 0
        skipped: list[int] = []
        for position, document in enumerate(documents):
            doc_id = _read_id(document, id_field)
            if not doc_id:
                logger.warning("Document at position %d has no %r, skipping", position, id_field)
                skipped.append(position)
                continue
            self._insert(str(doc_id), document, fields)
            added += 1
        self._refresh_stats()
        if skipped:
            logger.info("Bulk add indexed %d document(s), skipped %d", added, len(skipped))
        return BulkAddResult(added=added, skipped=len(skipped), skipped_positions=tuple(skipped))

    def clear(self) -> None:
        self._postings.clear()
        self._documents.clear()
        self._document_tokens.clear()
        self._refresh_stats()

    def _insert(self, doc_id: str, document: Any, fields: FieldSpec | None) -> None:
        # Ids are stored as strings so exported snapshots always validate
        doc_id = str(doc_id)
        self._discard(doc_id)
        tokens = extract_tokens(document, fields if fields is not None else self.default_fields, self.options)
        self._documents[doc_id] = document
        self._document_tokens[doc_id] = tokens
        for token in tokens:
            self._postings.setdefault(token, set()).add(doc_id)

    def _discard(self, doc_id: str) -> bool:
        tokens = self._document_tokens.pop(doc_id, None)
        if tokens is None:
            return False
        for token in tokens:
            doc_ids = self._postings.get(token)
            if doc_ids is None:
                continue
            doc_ids.discard(doc_id)
            if not doc_ids:
                del self._postings[token]
        self._documents.pop(doc_id, None)
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def search(
        self,
        query: str,
        *,
        limit: int = 100,
        min_score: float = 0.1,
        sort_by: SortBy = "score",
        include_score: bool = True,
    ) -> list[SearchHit] | list[Any]:
        """AND search: documents containing every query token."""
        _check_sort_by(sort_by)
        query_tokens = self._query_tokens(query)
        if not query_tokens:
            return []

        postings = [self._postings.get(token, set()) for token in query_tokens]
        # Intersect starting from the smallest postings list
        postings.sort(key=len)
        candidates = set(postings[0])
        for doc_ids in postings[1:]:
            if not candidates:
                break
            candidates &= doc_ids

        return self._rank(
            candidates,
            query_tokens,
            limit=limit,
            min_score=min_score,
            sort_by=sort_by,
            include_score=include_score,
        )

    def search_or(
        self,
        query: str,
        *,
        limit: int = 100,
        min_score: float = 0.1,
        include_score: bool = True,
    ) -> list[SearchHit] | list[Any]:
        """OR search: documents containing at least one query token."""
        query_tokens = self._query_tokens(query)
        if not query_tokens:
            return []

        candidates: set[str] = set()
        for token in query_tokens:
            candidates |= self._postings.get(token, set())

        return self._rank(
            candidates,
            query_tokens,
            limit=limit,
            min_score=min_score,
            sort_by="score",
            include_score=include_score,
        )

    def search_prefix(self, prefix: str, *, limit: int = 100) -> list[Any]:
        """Documents owning any token that starts with ``prefix``.

        Linear scan over the vocabulary; a sorted token list or trie would
        make this logarithmic if vocabularies grow large.
        """
        normalized = normalize_text(prefix)
        if not normalized or limit <= 0:
            return []

        found: dict[str, None] = {}
        for token, doc_ids in self._postings.items():
            if token.startswith(normalized):
                for doc_id in doc_ids:
                    found.setdefault(doc_id, None)

        results: list[Any] = []
        for doc_id in found:
            document = self._documents.get(doc_id)
            if document is None:
                continue
            results.append(document)
            if len(results) >= limit:
                break
        return results

    def _query_tokens(self, query: str) -> list[str]:
        return sorted(tokenize(query, self.options))

    def _rank(
        self,
        doc_ids: set[str],
        query_tokens: list[str],
        *,
        limit: int,
        min_score: float,
        sort_by: SortBy,
        include_score: bool,
    ) -> list[SearchHit] | list[Any]:
        scored: list[tuple[str, float, list[str]]] = []
        # Sorted ids keep tie order reproducible across export/import
        for doc_id in sorted(doc_ids):
            doc_tokens = self._document_tokens.get(doc_id, set())
            score = calculate_match_score(query_tokens, doc_tokens)
            if score < min_score:
                continue
            matched = [token for token in query_tokens if token in doc_tokens]
            scored.append((doc_id, score, matched))

        if sort_by == "score":
            scored.sort(key=lambda item: item[1], reverse=True)
        top = scored[: max(limit, 0)]

        if not include_score:
            return [self._documents[doc_id] for doc_id, _score, _matched in top]
        return [
            SearchHit(document=self._documents[doc_id], score=score, matched_tokens=matched)
            for doc_id, score, matched in top
        ]

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self._documents)

    def __contains__(self, doc_id: object) -> bool:
        return str(doc_id) in self._documents

    def get_document(self, doc_id: str) -> Any | None:
        return self._documents.get(str(doc_id))

    def document_ids(self) -> list[str]:
        return list(self._documents)

    def vocabulary(self) -> list[str]:
        return list(self._postings)

    def postings_for(self, token: str) -> frozenset[str]:
        return frozenset(self._postings.get(token, ()))

    def tokens_for(self, doc_id: str) -> frozenset[str]:
        return frozenset(self._document_tokens.get(str(doc_id), ()))

    def check_consistency(self) -> list[str]:
        """Return a description of every broken postings/token-set link."""
        problems: list[str] = []
        for doc_id, tokens in self._document_tokens.items():
            if doc_id not in self._documents:
                problems.append(f"token set for unknown document {doc_id!r}")
            for token in tokens:
                if doc_id not in self._postings.get(token, ()):
                    problems.append(f"token {token!r} of {doc_id!r} missing from postings")
        for token, doc_ids in self._postings.items():
            if not doc_ids:
                problems.append(f"empty posting list for {token!r}")
            for doc_id in doc_ids:
                if token not in self._document_tokens.get(doc_id, ()):
                    problems.append(f"posting {token!r} -> {doc_id!r} missing from token set")
        for doc_id in self._documents:
            if doc_id not in self._document_tokens:
                problems.append(f"document {doc_id!r} has no token set")
        return problems

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------
    def get_stats(self) -> IndexStats:
        return self._stats

    def estimate_index_size(self) -> int:
        """Rough byte estimate for operational dashboards, not a real measurement."""
        size = 0
        for token, doc_ids in self._postings.items():
            size += len(token) * _BYTES_PER_CHAR
            size += len(doc_ids) * _BYTES_PER_POSTING
        for doc_id, tokens in self._document_tokens.items():
            size += len(doc_id) * _BYTES_PER_CHAR
            size += len(tokens) * _BYTES_PER_TOKEN_REF
        return size

    def _refresh_stats(self) -> None:
        total_documents = len(self._documents)
        if total_documents:
            token_refs = sum(len(tokens) for tokens in self._document_tokens.values())
            average = token_refs / total_documents
        else:
            average = 0.0
        self._stats = IndexStats(
            total_documents=total_documents,
            total_tokens=len(self._postings),
            average_tokens_per_document=average,
            index_size_bytes=self.estimate_index_size(),
        )

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def export(self) -> dict[str, Any]:
        """Flatten the index into JSON-compatible records."""
        return {
            "index": [{"token": token, "docIds": list(doc_ids)} for token, doc_ids in self._postings.items()],
            "documents": [{"id": doc_id, "document": document} for doc_id, document in self._documents.items()],
            "documentTokens": [
                {"id": doc_id, "tokens": list(tokens)} for doc_id, tokens in self._document_tokens.items()
            ],
            "stats": self._stats.to_dict(),
        }

    def import_data(self, data: Any) -> None:
        """Replace the index contents with a previously exported snapshot.

        The snapshot is validated in full before any state changes; on
        :class:`SnapshotValidationError` the current contents are kept.
        Documents are restored verbatim without re-tokenization.
        """
        snapshot = parse_snapshot(data)

        postings = {record.token: set(record.doc_ids) for record in snapshot.index}
        documents = {record.id: record.document for record in snapshot.documents}
        document_tokens = {record.id: set(record.tokens) for record in snapshot.document_tokens}

        self._postings = postings
        self._documents = documents
        self._document_tokens = document_tokens
        self._refresh_stats()
        logger.debug(
            "Imported index snapshot: %d documents, %d tokens",
            self._stats.total_documents,
            self._stats.total_tokens,
        )


def _read_id(document: Any, id_field: str) -> Any:
    if isinstance(document, Mapping):
        return document.get(id_field)
    return getattr(document, id_field, None)


def _check_sort_by(sort_by: str) -> None:
    if sort_by not in ("score", "relevance"):
        msg = f"Unknown sort_by {sort_by!r}; expected 'score' or 'relevance'"
        raise ValueError(msg)
