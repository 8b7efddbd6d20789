"""Character classification tables used by the tokenizer.

Script detection works on explicit code-point ranges rather than regular
expression classes so the behavior does not depend on a regex engine's
Unicode tables. Ranges are inclusive ``(start, end)`` pairs.
"""

from __future__ import annotations


HIRAGANA_RANGE: tuple[int, int] = (0x3040, 0x309F)
KATAKANA_RANGE: tuple[int, int] = (0x30A0, 0x30FF)
CJK_IDEOGRAPH_RANGE: tuple[int, int] = (0x4E00, 0x9FFF)

CJK_RANGES: tuple[tuple[int, int], ...] = (
    HIRAGANA_RANGE,
    KATAKANA_RANGE,
    CJK_IDEOGRAPH_RANGE,
)

# Fullwidth Latin forms, folded onto ASCII by subtracting FULLWIDTH_OFFSET
FULLWIDTH_UPPER_RANGE: tuple[int, int] = (0xFF21, 0xFF3A)
FULLWIDTH_LOWER_RANGE: tuple[int, int] = (0xFF41, 0xFF5A)
FULLWIDTH_DIGIT_RANGE: tuple[int, int] = (0xFF10, 0xFF19)
FULLWIDTH_RANGES: tuple[tuple[int, int], ...] = (
    FULLWIDTH_UPPER_RANGE,
    FULLWIDTH_LOWER_RANGE,
    FULLWIDTH_DIGIT_RANGE,
)
FULLWIDTH_OFFSET = 0xFEE0

IDEOGRAPHIC_SPACE = "　"

# Word separators besides whitespace: ASCII and CJK punctuation/brackets
SEPARATOR_CHARS: frozenset[str] = frozenset(
    {
        ",",
        ".",
        "!",
        "?",
        "(",
        ")",
        "[",
        "]",
        "、",
        "。",
        "！",
        "？",
        "（",
        "）",
        "「",
        "」",
        "『",
        "』",
        "【",
        "】",
        IDEOGRAPHIC_SPACE,
    }
)

_ASCII_WORD_CHARS: frozenset[str] = frozenset("abcdefghijklmnopqrstuvwxyz0123456789")
_ASCII_DIGITS: frozenset[str] = frozenset("0123456789")


def _in_ranges(code_point: int, ranges: tuple[tuple[int, int], ...]) -> bool:
    return any(start <= code_point <= end for start, end in ranges)


def is_cjk_char(char: str) -> bool:
    """Return True for a single Hiragana, Katakana or CJK ideograph character."""
    return len(char) == 1 and _in_ranges(ord(char), CJK_RANGES)


def is_fullwidth_alnum(char: str) -> bool:
    return len(char) == 1 and _in_ranges(ord(char), FULLWIDTH_RANGES)


def to_halfwidth(char: str) -> str:
    """Fold a fullwidth Latin letter or digit to ASCII; other characters pass through."""
    if is_fullwidth_alnum(char):
        return chr(ord(char) - FULLWIDTH_OFFSET)
    return char


def contains_cjk(word: str) -> bool:
    return any(is_cjk_char(char) for char in word)


def is_cjk_bigram(pair: str) -> bool:
    """Two characters, both in the CJK ranges (mixed-script pairs are rejected)."""
    return len(pair) == 2 and is_cjk_char(pair[0]) and is_cjk_char(pair[1])


def is_ascii_word(word: str) -> bool:
    """Match ``[a-z0-9]+`` on already-lowercased text."""
    return bool(word) and all(char in _ASCII_WORD_CHARS for char in word)


def is_numeric_word(word: str) -> bool:
    return bool(word) and all(char in _ASCII_DIGITS for char in word)


def is_separator(char: str) -> bool:
    return char.isspace() or char in SEPARATOR_CHARS
