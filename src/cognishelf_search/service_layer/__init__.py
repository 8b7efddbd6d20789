"""Service layer wiring the index to a document store."""

from cognishelf_search.service_layer.search_service import DocumentSearchService


__all__ = ["DocumentSearchService"]
