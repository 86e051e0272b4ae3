"""Best-match search of a new resource against the prior list."""
from __future__ import annotations

from typing import Iterable, Optional

from .models import EXACT, FUZZY, NONE, WEAK, MatchResult, Resource
from .similarity import title_similarity, url_similarity
from .thresholds import (
    ACCEPT_SCORE,
    CONTAINED_TITLE_SIMILARITY,
    EXACT_SCORE,
    EXACT_SIMILARITY,
    FUZZY_SCORE,
    OVERLAP_AND_DOMAIN_SCORE,
    OVERLAP_AND_URL_SCORE,
    PARTIAL_OVERLAP_SIMILARITY,
    SAME_DOMAIN_SIMILARITY,
    STRONG_OVERLAP_SIMILARITY,
    TITLE_AND_DOMAIN_SCORE,
    TITLE_ONLY_SCORE,
)


def combine_scores(title_sim: float, url_sim: float) -> float:
    """Map a (title, url) similarity pair onto the combined score table."""

    if title_sim == EXACT_SIMILARITY and url_sim == EXACT_SIMILARITY:
        return EXACT_SCORE
    if title_sim >= CONTAINED_TITLE_SIMILARITY and url_sim >= SAME_DOMAIN_SIMILARITY:
        return TITLE_AND_DOMAIN_SCORE
    if title_sim >= CONTAINED_TITLE_SIMILARITY:
        return TITLE_ONLY_SCORE
    if title_sim >= STRONG_OVERLAP_SIMILARITY and url_sim >= SAME_DOMAIN_SIMILARITY:
        return OVERLAP_AND_DOMAIN_SCORE
    if title_sim >= PARTIAL_OVERLAP_SIMILARITY and url_sim == EXACT_SIMILARITY:
        return OVERLAP_AND_URL_SCORE
    return 0.0


def classify_score(score: float) -> str:
    if score >= EXACT_SCORE:
        return EXACT
    if score >= FUZZY_SCORE:
        return FUZZY
    if score >= ACCEPT_SCORE:
        return WEAK
    return NONE


def score_pair(new: Resource, prior: Resource) -> tuple[float, str]:
    score = combine_scores(
        title_similarity(new.title, prior.title),
        url_similarity(new.source, prior.source),
    )
    return score, classify_score(score)


def find_best_match(resource: Resource, priors: Iterable[Resource]) -> MatchResult:
    """Return the accepted best match for ``resource`` among ``priors``.

    Only a strictly higher score replaces the current candidate, so when two
    priors tie the one encountered first wins.
    """

    best: Optional[Resource] = None
    best_score = 0.0
    for prior in priors:
        score, _ = score_pair(resource, prior)
        if score > best_score:
            best, best_score = prior, score

    if best is None or best_score < ACCEPT_SCORE:
        return MatchResult(candidate=None, score=best_score, strength=NONE)
    return MatchResult(candidate=best, score=best_score, strength=classify_score(best_score))
