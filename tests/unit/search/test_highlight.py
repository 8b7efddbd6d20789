"""Unit tests for match highlighting."""

import pytest

from cognishelf_search.search.highlight import highlight, merge_match_positions
from cognishelf_search.search.tokenizer import MatchPosition


@pytest.mark.unit
class TestMergeMatchPositions:
    def test_overlapping_spans_merge(self):
        merged = merge_match_positions(
            [MatchPosition(5, 7, "ト管"), MatchPosition(6, 8, "管理")],
        )
        assert merged == [MatchPosition(5, 8, "ト管")]

    def test_touching_spans_merge(self):
        merged = merge_match_positions([MatchPosition(2, 4, "b"), MatchPosition(0, 2, "a")])
        assert merged == [MatchPosition(0, 4, "a")]

    def test_contained_span_absorbed(self):
        merged = merge_match_positions([MatchPosition(0, 6, "outer"), MatchPosition(1, 3, "in")])
        assert merged == [MatchPosition(0, 6, "outer")]

    def test_disjoint_spans_kept(self):
        spans = [MatchPosition(0, 1, "a"), MatchPosition(3, 4, "b")]
        assert merge_match_positions(spans) == spans


@pytest.mark.unit
class TestHighlight:
    def test_wraps_matches_in_normalized_text(self):
        assert highlight("Weekly MEETING notes", ["meeting"]) == "weekly <mark>meeting</mark> notes"

    def test_overlapping_bigrams_render_once(self):
        assert highlight("プロジェクト管理", ["ト管", "管理"]) == "プロジェク<mark>ト管理</mark>"

    def test_custom_tags(self):
        assert highlight("risk plan", ["plan"], open_tag="[", close_tag="]") == "risk [plan]"

    def test_no_match_returns_normalized_text(self):
        assert highlight("  Some   Text ", ["zzz"]) == "some text"
