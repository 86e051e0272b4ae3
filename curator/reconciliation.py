"""Carry weeks-on-list counters from the prior list over to a freshly generated one."""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Sequence

from .matching import find_best_match
from .models import EXACT, MatchResult, ReconciliationStats, Resource
from .normalization import parse_weeks

LOGGER = logging.getLogger(__name__)


def _carried_weeks(match: MatchResult) -> int:
    if not match.accepted or match.candidate is None:
        return 1
    return (parse_weeks(match.candidate.weeks_on_list) or 1) + 1


def reconcile(
    prior: Sequence[Resource],
    new: Sequence[Resource],
) -> tuple[list[Resource], ReconciliationStats]:
    """Annotate every new resource with its weeks-on-list counter.

    Each new resource is matched independently against the whole prior list,
    so two new entries may claim the same prior one. Output order and length
    follow ``new``; neither input is modified.
    """

    stats = ReconciliationStats()
    annotated: List[Resource] = []
    priors = list(prior)

    for resource in new:
        match = find_best_match(resource, priors)
        weeks = _carried_weeks(match)

        if match.accepted:
            if match.strength == EXACT:
                stats.exact_matched += 1
            else:
                # weak matches are tallied with the fuzzy ones
                stats.fuzzy_matched += 1
            LOGGER.debug(
                "%s match (%.1f) %r -> %r, weeks on list %d",
                match.strength,
                match.score,
                resource.title,
                match.candidate.title if match.candidate else "",
                weeks,
            )
        else:
            stats.new_count += 1
            LOGGER.debug("No match for %r, treating as new", resource.title)

        annotated.append(replace(resource, weeks_on_list=weeks, extra=dict(resource.extra)))

    LOGGER.info(
        "Reconciled %d new against %d prior resources: %d exact, %d fuzzy, %d new",
        len(annotated),
        len(priors),
        stats.exact_matched,
        stats.fuzzy_matched,
        stats.new_count,
    )
    return annotated, stats
