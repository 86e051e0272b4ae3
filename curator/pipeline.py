"""High-level orchestration of a refresh cycle."""
from __future__ import annotations

import logging
from pathlib import Path

from .llm import GenerationError, ResourceGenerator
from .models import ReconciliationStats, ResourceDocument
from .normalization import NormalizationError, load_file
from .reconciliation import reconcile
from .report import generate_markdown_summary, write_json, write_markdown
from .store import ResourceStore

LOGGER = logging.getLogger(__name__)

MERGED_FILENAME = "merged-resources.json"
REPORT_FILENAME = "refresh_report.md"
RAW_RESPONSE_FILENAME = "raw-response.txt"


def _save_raw_response(out_dir: Path, exc: GenerationError) -> None:
    if not exc.raw_text:
        return
    out_dir.mkdir(parents=True, exist_ok=True)
    raw_path = out_dir / RAW_RESPONSE_FILENAME
    raw_path.write_text(exc.raw_text, encoding="utf-8")
    LOGGER.error("Raw generative output saved to %s", raw_path)


def _generate(generator: ResourceGenerator, current: ResourceDocument, debug_dir: Path) -> ResourceDocument:
    try:
        return generator.generate(current.resources)
    except GenerationError as exc:
        _save_raw_response(debug_dir, exc)
        raise


def merge_documents(
    current: ResourceDocument,
    new: ResourceDocument,
) -> tuple[ResourceDocument, ReconciliationStats]:
    resources, stats = reconcile(current.resources, new.resources)
    return ResourceDocument(resources=resources, metadata=dict(new.metadata)), stats


def write_outputs(
    out_dir: Path,
    merged: ResourceDocument,
    stats: ReconciliationStats,
    *,
    prior_total: int,
) -> Path:
    out_dir.mkdir(parents=True, exist_ok=True)
    merged_path = out_dir / MERGED_FILENAME
    write_json(merged_path, merged)
    markdown = generate_markdown_summary(merged.resources, stats, prior_total=prior_total)
    write_markdown(out_dir / REPORT_FILENAME, markdown)
    return merged_path


def generate_to_file(
    out_path: Path,
    *,
    current_path: Path | None = None,
    generator: ResourceGenerator | None = None,
) -> ResourceDocument:
    current = ResourceDocument()
    if current_path is not None and current_path.exists():
        try:
            current = load_file(current_path, required=False)
            LOGGER.info("Current resources loaded: %d", len(current.resources))
        except NormalizationError as exc:
            LOGGER.warning("Could not parse current resources, falling back to generate mode: %s", exc)
    else:
        LOGGER.info("No current resources found; generating from scratch")

    generator = generator or ResourceGenerator.from_env()
    document = _generate(generator, current, out_path.parent)
    write_json(out_path, document)
    LOGGER.info("New resources saved to %s", out_path)
    return document


def merge_files(
    *,
    current_path: Path,
    new_path: Path,
    out_dir: Path,
) -> ReconciliationStats:
    current = load_file(current_path, required=False)
    new = load_file(new_path)
    merged, stats = merge_documents(current, new)
    merged_path = write_outputs(out_dir, merged, stats, prior_total=len(current.resources))
    LOGGER.info("Merged resources written to %s", merged_path)
    return stats


def run_refresh(
    *,
    out_dir: Path,
    store: ResourceStore | None = None,
    generator: ResourceGenerator | None = None,
    dry_run: bool = False,
) -> ReconciliationStats:
    """Run one full cycle: fetch, generate, reconcile, write and publish.

    Any failure propagates before the store is written, so the published
    list is only replaced by a complete, reconciled one.
    """

    store = store or ResourceStore.from_env()
    generator = generator or ResourceGenerator.from_env()

    current = store.fetch()
    new = _generate(generator, current, out_dir)
    merged, stats = merge_documents(current, new)
    write_outputs(out_dir, merged, stats, prior_total=len(current.resources))

    if dry_run:
        LOGGER.info("Dry run; published list left untouched")
    else:
        store.put(merged)
    return stats
