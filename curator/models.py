"""Data models used by the refresh workflow."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

EXACT = "exact"
FUZZY = "fuzzy"
WEAK = "weak"
NONE = "none"

MATCH_STRENGTHS = (EXACT, FUZZY, WEAK, NONE)


@dataclass(slots=True)
class Resource:
    """A single catalog entry as found in a resource document."""

    title: str
    source: str
    type: str = ""
    weeks_on_list: Optional[int] = None
    extra: Dict[str, object] = field(default_factory=dict)

    def as_json(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "title": self.title,
            "source": self.source,
            "type": self.type,
        }
        payload.update(self.extra)
        if self.weeks_on_list is not None:
            payload["weeks_on_list"] = self.weeks_on_list
        return payload


@dataclass(slots=True)
class ResourceDocument:
    """The `{"resources": [...]}` document exchanged with the store and the generator."""

    resources: List[Resource] = field(default_factory=list)
    metadata: Dict[str, object] = field(default_factory=dict)

    def as_json(self) -> dict[str, object]:
        payload: dict[str, object] = dict(self.metadata)
        payload["resources"] = [resource.as_json() for resource in self.resources]
        return payload


@dataclass(frozen=True, slots=True)
class MatchResult:
    candidate: Optional[Resource]
    score: float
    strength: str = NONE

    @property
    def accepted(self) -> bool:
        return self.candidate is not None and self.strength != NONE


@dataclass(slots=True)
class ReconciliationStats:
    exact_matched: int = 0
    fuzzy_matched: int = 0
    new_count: int = 0

    @property
    def total(self) -> int:
        return self.exact_matched + self.fuzzy_matched + self.new_count

    def as_dict(self) -> dict[str, int]:
        return {
            "exactMatched": self.exact_matched,
            "fuzzyMatched": self.fuzzy_matched,
            "newCount": self.new_count,
        }
