"""HTTP key-value document store holding the published resource list."""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any

import requests

from .models import ResourceDocument
from .normalization import NormalizationError, parse_document

LOGGER = logging.getLogger(__name__)


class StoreError(RuntimeError):
    """Raised when the remote document store cannot be read or written."""


@dataclass(frozen=True)
class StoreConfig:
    url: str
    key: str = "resources"
    token: str | None = None
    timeout: float = 30.0

    @classmethod
    def from_env(cls) -> "StoreConfig":
        url = os.getenv("CURATOR_STORE_URL")
        if not url:
            raise StoreError("CURATOR_STORE_URL environment variable is required")
        try:
            timeout = float(os.getenv("CURATOR_STORE_TIMEOUT", "30"))
        except ValueError as exc:
            raise StoreError(f"Invalid CURATOR_STORE_TIMEOUT: {exc}") from exc
        return cls(
            url=url,
            key=os.getenv("CURATOR_STORE_KEY", "resources"),
            token=os.getenv("CURATOR_STORE_TOKEN") or None,
            timeout=timeout,
        )

    @property
    def document_url(self) -> str:
        return f"{self.url.rstrip('/')}/{self.key}"


class ResourceStore:
    def __init__(self, config: StoreConfig, session: Any | None = None) -> None:
        self._config = config
        self._session = session or requests.Session()

    @classmethod
    def from_env(cls) -> "ResourceStore":
        return cls(StoreConfig.from_env())

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._config.token:
            headers["Authorization"] = f"Bearer {self._config.token}"
        return headers

    def fetch(self) -> ResourceDocument:
        """Return the published list; a missing document is an empty list."""

        url = self._config.document_url
        try:
            resp = self._session.get(url, headers=self._headers(), timeout=self._config.timeout)
            if resp.status_code == 404:
                LOGGER.info("No published resource list at %s; starting fresh", url)
                return ResourceDocument()
            resp.raise_for_status()
            payload = resp.json()
        except requests.RequestException as exc:
            raise StoreError(f"Fetching {url} failed: {exc}") from exc
        except ValueError as exc:
            raise StoreError(f"Store returned invalid JSON for {url}") from exc

        try:
            document = parse_document(payload, required=False)
        except NormalizationError as exc:
            raise StoreError(f"Store document at {url} is malformed: {exc}") from exc
        LOGGER.info("Fetched %d published resources", len(document.resources))
        return document

    def put(self, document: ResourceDocument) -> None:
        url = self._config.document_url
        headers = self._headers()
        headers["Content-Type"] = "application/json"
        body = json.dumps(document.as_json())
        try:
            resp = self._session.put(url, data=body, headers=headers, timeout=self._config.timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise StoreError(f"Publishing to {url} failed: {exc}") from exc
        LOGGER.info("Published %d resources to %s", len(document.resources), url)
