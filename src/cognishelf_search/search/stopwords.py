"""Static stopword lists.

Japanese particles and auxiliaries are matched against whole words only;
bigrams of a stopword-bearing word are still produced when the word itself
is not an exact stopword.
"""

from __future__ import annotations


JAPANESE_STOPWORDS: frozenset[str] = frozenset(
    [
        "の",
        "に",
        "は",
        "を",
        "た",
        "が",
        "で",
        "て",
        "と",
        "し",
        "れ",
        "さ",
        "ある",
        "いる",
        "も",
        "する",
        "から",
        "な",
        "こと",
        "として",
        "い",
        "や",
        "れる",
        "など",
        "なっ",
        "ない",
        "この",
        "ため",
        "その",
        "あっ",
        "よう",
        "また",
        "もの",
        "という",
        "あり",
        "まで",
        "られ",
        "なる",
        "へ",
        "か",
        "だ",
        "これ",
        "によって",
        "により",
        "おり",
        "より",
        "による",
        "ず",
        "なり",
        "られる",
        "において",
        "ば",
        "なかっ",
        "なく",
        "しかし",
        "について",
        "せ",
        "だっ",
        "その後",
        "できる",
        "それ",
        "う",
        "ので",
        "なお",
        "のみ",
        "でき",
        "き",
        "つ",
        "における",
        "および",
        "いう",
        "さらに",
        "でも",
        "ら",
        "たり",
        "その他",
        "に関する",
        "たち",
        "ます",
        "ん",
        "なら",
        "に対して",
        "特に",
        "せる",
        "及び",
        "これら",
        "とき",
        "では",
        "にて",
        "ほか",
        "ながら",
        "うち",
        "そして",
        "とともに",
        "ただし",
        "かつて",
        "それぞれ",
        "または",
        "お",
        "ほど",
        "ものの",
        "に対する",
        "ほとんど",
        "と共に",
        "といった",
        "です",
        "とも",
        "ところ",
        "ここ",
    ]
)

ENGLISH_STOPWORDS: frozenset[str] = frozenset(
    [
        "the",
        "a",
        "an",
        "and",
        "or",
        "but",
        "in",
        "on",
        "at",
        "to",
        "for",
        "of",
        "with",
        "by",
        "from",
        "as",
        "is",
        "was",
        "are",
        "were",
        "been",
        "be",
        "have",
        "has",
        "had",
        "do",
        "does",
        "did",
        "will",
        "would",
        "should",
        "could",
        "may",
        "might",
        "must",
        "can",
        "this",
        "that",
        "these",
        "those",
        "i",
        "you",
        "he",
        "she",
        "it",
        "we",
        "they",
    ]
)
