"""
Similarity measures usable as the detector's comparison collaborator.

Any callable ``(record, record) -> float`` works; these cover the common
cases. String measures operate on ``str(record)``.
"""

from __future__ import annotations

import functools
from typing import Any, Callable

from rapidfuzz import distance  # type: ignore[import-not-found]

from .detector.tokenizer import shingles

StringSimilarity = Callable[[str, str], float]


def levenshtein_similarity(x: str, y: str) -> float:
    """Normalized edit distance similarity in [0, 1].

    ``1 - distance / max(len(x), len(y))``; two empty strings are identical,
    an empty and a non-empty string share nothing.
    """
    max_len = max(len(x), len(y))
    if max_len == 0:
        return 1.0
    if not x or not y:
        return 0.0
    dist = distance.Levenshtein.distance(x, y)
    return float(1.0 - (dist / max_len))


def jaccard_similarity(x: str, y: str, token_size: int = 2) -> float:
    """Jaccard similarity of the two strings' character shingle sets."""
    first = set(shingles(x, token_size))
    second = set(shingles(y, token_size))
    if not first and not second:
        return 1.0 if x == y else 0.0
    return len(first & second) / len(first | second)


class RecordStringSimilarity:
    """Lifts a string measure to records by comparing their serializations."""

    def __init__(self, string_similarity: StringSimilarity) -> None:
        self.string_similarity = string_similarity

    def compare(self, first: Any, second: Any) -> float:
        return self.string_similarity(str(first), str(second))

    def __call__(self, first: Any, second: Any) -> float:
        return self.compare(first, second)

    def __repr__(self) -> str:
        name = getattr(self.string_similarity, "__name__", repr(self.string_similarity))
        return f"RecordStringSimilarity({name})"


def record_similarity(string_similarity: StringSimilarity) -> RecordStringSimilarity:
    """Wrap a string measure so it accepts records."""
    return RecordStringSimilarity(string_similarity)


SIMILARITY_NAMES = ("jaccard", "levenshtein")


def build_similarity(name: str, token_size: int = 2) -> RecordStringSimilarity:
    """Build a named record measure; ``token_size`` sets the Jaccard shingle length."""
    if name == "levenshtein":
        return record_similarity(levenshtein_similarity)
    if name == "jaccard":
        return record_similarity(functools.partial(jaccard_similarity, token_size=token_size))
    raise ValueError(f"Unknown similarity {name!r}; expected one of {', '.join(SIMILARITY_NAMES)}")
