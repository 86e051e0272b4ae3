"""Rendering utilities for machine-readable and human-readable outputs."""
from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Sequence

from .models import ReconciliationStats, Resource, ResourceDocument


def write_json(path: Path, document: ResourceDocument) -> None:
    import json

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(document.as_json(), handle, indent=2)


def _cell(text: str) -> str:
    return text.replace("|", "\\|")


def generate_markdown_summary(
    resources: Sequence[Resource],
    stats: ReconciliationStats,
    *,
    prior_total: int,
) -> str:
    types = Counter(resource.type or "Unspecified" for resource in resources)

    lines = ["# Resource List Refresh", ""]
    lines.append(f"Generated: {datetime.now(timezone.utc).isoformat()}")
    lines.append("")
    lines.append("## Overview")
    lines.append("")
    lines.append(f"- Prior resources: **{prior_total}**")
    lines.append(f"- Resources in refreshed list: **{len(resources)}**")
    lines.append(f"- Exact matches: **{stats.exact_matched}**")
    lines.append(f"- Fuzzy matches: **{stats.fuzzy_matched}**")
    lines.append(f"- New resources: **{stats.new_count}**")
    lines.append("")

    if types:
        lines.append("## Resources by type")
        lines.append("")
        for kind, count in sorted(types.items()):
            lines.append(f"- {kind}: {count}")
        lines.append("")

    if resources:
        lines.append("## Resources")
        lines.append("")
        lines.append("| Title | Type | Source | Weeks on list | Status |")
        lines.append("| --- | --- | --- | --- | --- |")
        for resource in resources:
            weeks = resource.weeks_on_list or 1
            lines.append(
                "| {title} | {type} | {source} | {weeks} | {status} |".format(
                    title=_cell(resource.title),
                    type=_cell(resource.type),
                    source=_cell(resource.source),
                    weeks=weeks,
                    status="New" if weeks == 1 else "Returning",
                )
            )
        lines.append("")
    else:
        lines.append("The refreshed list is empty.")

    return "\n".join(lines)


def write_markdown(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        handle.write(content)
