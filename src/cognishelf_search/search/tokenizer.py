"""Japanese-aware tokenizer for the in-memory full-text index.

Text is normalized (lowercase, fullwidth folding, whitespace collapse) and
split on whitespace plus a fixed punctuation set. ASCII words are kept whole;
words containing kana or kanji are kept whole and additionally decomposed
into character bigrams so that CJK text is searchable without a
morphological analyzer.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any

from cognishelf_search.search.charsets import (
    contains_cjk,
    is_ascii_word,
    is_cjk_bigram,
    is_numeric_word,
    is_separator,
    to_halfwidth,
)
from cognishelf_search.search.stopwords import ENGLISH_STOPWORDS, JAPANESE_STOPWORDS


DEFAULT_FIELDS: tuple[str, ...] = ("title", "content", "description", "tags")

FieldExtractor = Callable[[Any], Iterable[str]]
FieldSpec = Sequence[str] | FieldExtractor


@dataclass(frozen=True)
class TokenizerOptions:
    """Knobs controlling which words become tokens."""

    min_length: int = 2
    max_length: int = 50
    use_bigram: bool = True
    remove_stopwords: bool = True
    keep_numbers: bool = True

    def with_overrides(self, **overrides: Any) -> TokenizerOptions:
        return replace(self, **overrides) if overrides else self


DEFAULT_OPTIONS = TokenizerOptions()


@dataclass(frozen=True)
class MatchPosition:
    """Occurrence of a token inside normalized text (``end`` is exclusive)."""

    start: int
    end: int
    token: str


def normalize_text(text: Any) -> str:
    """Lowercase, fold fullwidth alphanumerics and collapse whitespace.

    Non-string and empty inputs normalize to an empty string.
    """
    if not text or not isinstance(text, str):
        return ""
    folded = "".join(to_halfwidth(char) for char in text.lower())
    # str.split() treats U+3000 as whitespace as well
    return " ".join(folded.split())


def split_words(normalized: str) -> Iterator[str]:
    """Split normalized text on whitespace and separator punctuation."""
    current: list[str] = []
    for char in normalized:
        if is_separator(char):
            if current:
                yield "".join(current)
                current = []
        else:
            current.append(char)
    if current:
        yield "".join(current)


def tokenize(text: Any, options: TokenizerOptions | None = None, **overrides: Any) -> set[str]:
    """Return the set of searchable tokens for ``text``.

    ``overrides`` accepts the same names as :class:`TokenizerOptions` and is
    applied on top of ``options``.
    """
    opts = (options or DEFAULT_OPTIONS).with_overrides(**overrides)
    normalized = normalize_text(text)
    if not normalized:
        return set()

    tokens: set[str] = set()
    for word in split_words(normalized):
        if is_ascii_word(word):
            _add_ascii_word(word, opts, tokens)
        elif contains_cjk(word):
            _add_cjk_word(word, opts, tokens)
    return tokens


def _within_bounds(word: str, opts: TokenizerOptions) -> bool:
    return opts.min_length <= len(word) <= opts.max_length


def _add_ascii_word(word: str, opts: TokenizerOptions, tokens: set[str]) -> None:
    if not _within_bounds(word, opts):
        return
    if opts.remove_stopwords and word in ENGLISH_STOPWORDS:
        return
    if not opts.keep_numbers and is_numeric_word(word):
        return
    tokens.add(word)


def _add_cjk_word(word: str, opts: TokenizerOptions, tokens: set[str]) -> None:
    if opts.remove_stopwords and word in JAPANESE_STOPWORDS:
        return
    if _within_bounds(word, opts):
        tokens.add(word)
    if not opts.use_bigram:
        return
    for idx in range(len(word) - 1):
        pair = word[idx : idx + 2]
        if is_cjk_bigram(pair):
            tokens.add(pair)


def iter_field_values(document: Any, fields: FieldSpec) -> Iterator[str]:
    """Yield the raw strings to tokenize from ``document``.

    ``fields`` is either a sequence of field names or an extractor callable.
    List-valued fields (tags) yield each string element separately; values of
    any other type are ignored.
    """
    if callable(fields):
        for value in fields(document):
            if isinstance(value, str):
                yield value
        return

    for field_name in fields:
        if isinstance(document, Mapping):
            value = document.get(field_name)
        else:
            value = getattr(document, field_name, None)

        if isinstance(value, str):
            yield value
        elif isinstance(value, (list, tuple)):
            for item in value:
                if isinstance(item, str):
                    yield item


def extract_tokens(
    document: Any,
    fields: FieldSpec = DEFAULT_FIELDS,
    options: TokenizerOptions | None = None,
) -> set[str]:
    """Union of the tokens of every requested field."""
    tokens: set[str] = set()
    for value in iter_field_values(document, fields):
        tokens |= tokenize(value, options)
    return tokens


def calculate_match_score(query_tokens: Iterable[str], doc_tokens: Iterable[str]) -> float:
    """Fraction of query tokens present in the document (0.0 - 1.0)."""
    query = list(query_tokens)
    if not query:
        return 0.0
    doc_set = doc_tokens if isinstance(doc_tokens, (set, frozenset)) else set(doc_tokens)
    matched = sum(1 for token in query if token in doc_set)
    return matched / len(query)


def generate_prefix_tokens(text: Any, min_prefix_length: int = 2) -> list[str]:
    """Increasing-length prefixes of the normalized text."""
    normalized = normalize_text(text)
    if len(normalized) < min_prefix_length:
        return []
    start = max(min_prefix_length, 1)
    return [normalized[:length] for length in range(start, len(normalized) + 1)]


def find_match_positions(text: Any, tokens: Iterable[str]) -> list[MatchPosition]:
    """Locate every token occurrence in the normalized text, ordered by start.

    Each token is scanned independently (resuming after the previous hit), so
    occurrences of different tokens may overlap.
    """
    normalized = normalize_text(text)
    positions: list[MatchPosition] = []
    for token in tokens:
        if not token:
            continue
        index = normalized.find(token)
        while index != -1:
            positions.append(MatchPosition(start=index, end=index + len(token), token=token))
            index = normalized.find(token, index + len(token))
    positions.sort(key=lambda position: position.start)
    return positions
