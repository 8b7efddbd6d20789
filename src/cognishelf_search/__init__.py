"""In-memory Japanese-aware full-text search for document collections."""

from cognishelf_search.search import InvertedIndex, SearchHit, TokenizerOptions, tokenize
from cognishelf_search.service_layer import DocumentSearchService


__all__ = ["DocumentSearchService", "InvertedIndex", "SearchHit", "TokenizerOptions", "tokenize"]
