"""Coarse title and URL similarity between two resources."""
from __future__ import annotations

from .normalization import normalize_title, normalize_url
from .thresholds import (
    CONTAINED_TITLE_SIMILARITY,
    EXACT_SIMILARITY,
    MIN_TOKEN_LENGTH,
    PARTIAL_OVERLAP_RATIO,
    PARTIAL_OVERLAP_SIMILARITY,
    SAME_DOMAIN_SIMILARITY,
    STRONG_OVERLAP_RATIO,
    STRONG_OVERLAP_SIMILARITY,
)


def _significant_words(normalized: str) -> set[str]:
    return {word for word in normalized.split(" ") if len(word) >= MIN_TOKEN_LENGTH}


def word_overlap(first: str, second: str) -> float:
    """Jaccard overlap of the significant words of two normalized titles."""

    words_first = _significant_words(first)
    words_second = _significant_words(second)
    if not words_first or not words_second:
        return 0.0
    return len(words_first & words_second) / len(words_first | words_second)


def title_similarity(first: str | None, second: str | None) -> float:
    """Score two titles on the levels 1.0, 0.9, 0.8, 0.7 or 0.

    The first rule that applies wins: equal normalized titles, one contained
    in the other (a subtitle added or dropped), then word overlap.
    """

    norm_first = normalize_title(first)
    norm_second = normalize_title(second)
    if not norm_first or not norm_second:
        return 0.0

    if norm_first == norm_second:
        return EXACT_SIMILARITY

    if norm_first in norm_second or norm_second in norm_first:
        return CONTAINED_TITLE_SIMILARITY

    overlap = word_overlap(norm_first, norm_second)
    if overlap > STRONG_OVERLAP_RATIO:
        return STRONG_OVERLAP_SIMILARITY
    if overlap > PARTIAL_OVERLAP_RATIO:
        return PARTIAL_OVERLAP_SIMILARITY
    return 0.0


def _domain(normalized_url: str) -> str:
    return normalized_url.split("/", 1)[0]


def url_similarity(first: str | None, second: str | None) -> float:
    """Score two URLs: 1.0 when equal once normalized, 0.7 on the same domain, else 0."""

    norm_first = normalize_url(first)
    norm_second = normalize_url(second)
    if not norm_first or not norm_second:
        return 0.0

    if norm_first == norm_second:
        return EXACT_SIMILARITY

    if _domain(norm_first) == _domain(norm_second):
        return SAME_DOMAIN_SIMILARITY
    return 0.0
