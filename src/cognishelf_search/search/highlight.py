"""Highlight helpers for rendering search hits.

Builds on :func:`find_match_positions`: overlapping occurrences are merged
into contiguous spans before markers are inserted, so the output never nests
tags.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from cognishelf_search.search.tokenizer import MatchPosition, find_match_positions, normalize_text


def merge_match_positions(positions: Sequence[MatchPosition]) -> list[MatchPosition]:
    """Coalesce overlapping or touching spans.

    The merged span keeps the token of the earliest occurrence in the run.
    """
    merged: list[MatchPosition] = []
    for position in sorted(positions, key=lambda p: (p.start, -p.end)):
        if merged and position.start <= merged[-1].end:
            last = merged[-1]
            if position.end > last.end:
                merged[-1] = MatchPosition(start=last.start, end=position.end, token=last.token)
            continue
        merged.append(position)
    return merged


def highlight(
    text: str,
    tokens: Iterable[str],
    *,
    open_tag: str = "<mark>",
    close_tag: str = "</mark>",
) -> str:
    """Return the normalized text with every matched span wrapped in tags."""
    normalized = normalize_text(text)
    spans = merge_match_positions(find_match_positions(normalized, tokens))
    if not spans:
        return normalized

    parts: list[str] = []
    cursor = 0
    for span in spans:
        parts.append(normalized[cursor : span.start])
        parts.append(f"{open_tag}{normalized[span.start : span.end]}{close_tag}")
        cursor = span.end
    parts.append(normalized[cursor:])
    return "".join(parts)
