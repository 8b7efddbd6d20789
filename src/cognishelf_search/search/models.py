"""Value objects exchanged with index callers.

Search hits and statistics are immutable pydantic models. The snapshot
models describe the serialized index format; field names are snake_case in
Python and camelCase on the wire, and unknown keys are ignored so newer
snapshots still load.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class SnapshotValidationError(ValueError):
    """Raised when serialized index data is structurally invalid."""


class SearchHit(BaseModel):
    """A matched document with its overlap score."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    document: Any
    score: float = Field(ge=0.0, le=1.0)
    matched_tokens: list[str] = Field(default_factory=list, alias="matchedTokens")


class IndexStats(BaseModel):
    """Derived index statistics, recomputed after every mutation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    total_documents: int = Field(default=0, ge=0, alias="totalDocuments")
    total_tokens: int = Field(default=0, ge=0, alias="totalTokens")
    average_tokens_per_document: float = Field(default=0.0, ge=0.0, alias="averageTokensPerDocument")
    index_size_bytes: int = Field(default=0, ge=0, alias="indexSizeBytes")

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class _SnapshotRecord(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class PostingRecord(_SnapshotRecord):
    token: str = Field(min_length=1)
    doc_ids: list[str] = Field(alias="docIds")


class DocumentRecord(_SnapshotRecord):
    id: str
    document: Any


class DocumentTokensRecord(_SnapshotRecord):
    id: str
    tokens: list[str]


class IndexSnapshot(_SnapshotRecord):
    """Serialized form produced by ``InvertedIndex.export``."""

    index: list[PostingRecord]
    documents: list[DocumentRecord]
    document_tokens: list[DocumentTokensRecord] = Field(alias="documentTokens")
    stats: IndexStats | None = None


def parse_snapshot(data: Any) -> IndexSnapshot:
    """Validate serialized index data without touching any index state.

    Beyond the shape check this verifies that the postings and the
    per-document token sets describe the same relation and that every
    token set belongs to a stored document.
    """
    try:
        snapshot = IndexSnapshot.model_validate(data)
    except ValidationError as exc:
        msg = f"Invalid index snapshot: {exc.error_count()} validation error(s): {exc}"
        raise SnapshotValidationError(msg) from exc

    problems = find_snapshot_inconsistencies(snapshot)
    if problems:
        preview = "; ".join(problems[:5])
        msg = f"Inconsistent index snapshot ({len(problems)} problem(s)): {preview}"
        raise SnapshotValidationError(msg)
    return snapshot


def find_snapshot_inconsistencies(snapshot: IndexSnapshot) -> list[str]:
    problems: list[str] = []

    document_ids = [record.id for record in snapshot.documents]
    if len(set(document_ids)) != len(document_ids):
        problems.append("duplicate document ids")
    token_set_ids = [record.id for record in snapshot.document_tokens]
    if len(set(token_set_ids)) != len(token_set_ids):
        problems.append("duplicate documentTokens ids")
    tokens_in_index = [record.token for record in snapshot.index]
    if len(set(tokens_in_index)) != len(tokens_in_index):
        problems.append("duplicate index tokens")

    known_documents = set(document_ids)
    for record in snapshot.document_tokens:
        if record.id not in known_documents:
            problems.append(f"token set for unknown document {record.id!r}")
    for doc_id in known_documents.difference(token_set_ids):
        problems.append(f"document {doc_id!r} has no token set")

    forward = {(record.token, doc_id) for record in snapshot.index for doc_id in record.doc_ids}
    backward = {(token, record.id) for record in snapshot.document_tokens for token in record.tokens}
    for token, doc_id in sorted(forward - backward):
        problems.append(f"posting {token!r} -> {doc_id!r} missing from token set")
    for token, doc_id in sorted(backward - forward):
        problems.append(f"token {token!r} of {doc_id!r} missing from postings")
    for record in snapshot.index:
        if not record.doc_ids:
            problems.append(f"empty posting list for {record.token!r}")
    return problems
