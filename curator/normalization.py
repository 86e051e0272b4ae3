"""Canonical forms for comparison and loading of resource documents."""
from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Mapping

from .models import Resource, ResourceDocument

_PROTOCOL = re.compile(r"^https?://")
_WWW_PREFIX = re.compile(r"^www\.")
_TRAILING_SLASHES = re.compile(r"/+$")
_TITLE_SEPARATORS = re.compile("[:\\-—–]")
_WHITESPACE = re.compile(r"\s+")

RESOURCE_FIELDS = ("title", "source", "type", "weeks_on_list")


class NormalizationError(RuntimeError):
    """Raised when a resource document cannot be read."""


def normalize_url(url: str | None) -> str:
    if not url:
        return ""
    normalized = url.lower()
    normalized = _PROTOCOL.sub("", normalized)
    normalized = _WWW_PREFIX.sub("", normalized)
    return _TRAILING_SLASHES.sub("", normalized)


def normalize_title(title: str | None) -> str:
    if not title:
        return ""
    normalized = title.lower().strip()
    normalized = _TITLE_SEPARATORS.sub(" ", normalized)
    normalized = _WHITESPACE.sub(" ", normalized)
    return normalized.strip()


def parse_weeks(raw: Any) -> int | None:
    """Return a usable weeks-on-list counter, or None when the value is absent or invalid."""

    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw if raw >= 1 else None
    if isinstance(raw, float):
        return int(raw) if raw.is_integer() and raw >= 1 else None
    return None


def _text(raw: Any) -> str:
    if raw is None:
        return ""
    return raw if isinstance(raw, str) else str(raw)


def parse_resource(entry: Mapping[str, Any]) -> Resource:
    return Resource(
        title=_text(entry.get("title")),
        source=_text(entry.get("source")),
        type=_text(entry.get("type")),
        weeks_on_list=parse_weeks(entry.get("weeks_on_list")),
        extra={key: value for key, value in entry.items() if key not in RESOURCE_FIELDS},
    )


def parse_document(payload: Any, *, required: bool = True) -> ResourceDocument:
    """Build a document from decoded JSON.

    Generated lists must carry a ``resources`` array. Prior lists are allowed
    to be empty or malformed at the top level (``required=False``), in which
    case nothing carries over.
    """

    if not isinstance(payload, Mapping):
        if required:
            raise NormalizationError("Resource document must be a JSON object")
        return ResourceDocument()

    entries = payload.get("resources")
    if not isinstance(entries, list):
        if required:
            raise NormalizationError("Resource document does not contain a valid resources array")
        entries = []

    resources = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, Mapping):
            raise NormalizationError(f"Resource #{index + 1} is not a JSON object")
        resources.append(parse_resource(entry))

    metadata = {key: value for key, value in payload.items() if key != "resources"}
    return ResourceDocument(resources=resources, metadata=metadata)


def load_file(path: Path, *, required: bool = True) -> ResourceDocument:
    if not path.exists():
        raise FileNotFoundError(path)

    with path.open(encoding="utf-8-sig") as handle:
        try:
            payload = json.load(handle)
        except json.JSONDecodeError as exc:
            raise NormalizationError(f"Invalid JSON in {path}: {exc}") from exc
    return parse_document(payload, required=required)
