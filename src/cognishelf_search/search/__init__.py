"""
Full-text search package.

- charsets: code-point tables for script classification
- stopwords: Japanese and English stopword sets
- tokenizer: normalization, tokenization, scoring helpers
- highlight: match-span merging for result rendering
- models: search hits, stats and snapshot records
- inverted_index: postings maintenance and AND / OR / prefix queries
- snapshot: JSON persistence of exported indexes
"""

from cognishelf_search.search.highlight import highlight, merge_match_positions
from cognishelf_search.search.inverted_index import BulkAddResult, InvertedIndex
from cognishelf_search.search.models import IndexStats, SearchHit, SnapshotValidationError
from cognishelf_search.search.tokenizer import (
    MatchPosition,
    TokenizerOptions,
    calculate_match_score,
    extract_tokens,
    find_match_positions,
    generate_prefix_tokens,
    normalize_text,
    tokenize,
)


__all__ = [
    "BulkAddResult",
    "IndexStats",
    "InvertedIndex",
    "MatchPosition",
    "SearchHit",
    "SnapshotValidationError",
    "TokenizerOptions",
    "calculate_match_score",
    "extract_tokens",
    "find_match_positions",
    "generate_prefix_tokens",
    "highlight",
    "merge_match_positions",
    "normalize_text",
    "tokenize",
]
