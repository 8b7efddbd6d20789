"""Adapters for external collaborators (document stores)."""

from cognishelf_search.adapters.document_store import DocumentStore, InMemoryDocumentStore, MutableDocumentStore


__all__ = ["DocumentStore", "InMemoryDocumentStore", "MutableDocumentStore"]
