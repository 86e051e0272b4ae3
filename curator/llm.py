"""Generative source that proposes a fresh resource list."""
from __future__ import annotations

import json
import logging
import math
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Protocol, Sequence

from .models import Resource, ResourceDocument
from .normalization import NormalizationError, parse_document

LOGGER = logging.getLogger(__name__)

# Share of the prior list the model is asked to keep in update mode.
KEEP_RATIO = 0.7

SYSTEM_PROMPT = (
    "You are an expert researcher who curates high-quality learning resources for developers. "
    "Generate ONLY valid JSON with no additional text."
)

DEFAULT_PROMPT = """Return a JSON object of the form:

{
  "resources": [
    {
      "title": "Full resource title",
      "source": "https://canonical.example/url",
      "type": "Book | Article | Blog | Podcast",
      "description": "One or two sentences on why the resource is worth a developer's time."
    }
  ]
}

Do not include a weeks_on_list field; it is maintained automatically."""

_GENERATE_TEMPLATE = """IMPORTANT REQUIREMENTS:
1) Generate exactly {target} diverse, high-quality resources
2) Prefer STABLE, WELL-KNOWN resources from authoritative sources:
   - Security: OWASP, NIST, SANS, Microsoft Security, AWS Security
   - Publishers: O'Reilly, Manning, Pragmatic Programmers
   - Organizations: IEEE, ACM, Mozilla, Apache, Linux Foundation
   - Industry leaders: Martin Fowler, ThoughtWorks, Stack Overflow, GitHub
3) Use REAL, ACTUAL resources with genuine, canonical URLs (never placeholder links)
4) Favor foundational/evergreen content over trendy ephemeral articles
5) Ensure all property names and string values are properly quoted with double quotes
6) Use consistent URL formats (prefer official domains and stable permalinks)
7) Maximize diversity across types (Books, Articles, Blogs, Podcasts)"""

_UPDATE_TEMPLATE = """DISCOVERY MODE INSTRUCTIONS (Temperature: {temperature}):
1) MAINTAIN STABLE CORE: Keep {min_keep}-{count} of the best resources from the current list
2) DISCOVER NEW RESOURCES: Add {max_new} new high-quality resources to reach {target} total
3) QUALITY OVER FAMILIARITY: Replace existing resources if you find significantly better alternatives
4) CAST WIDE NET: Explore diverse authoritative sources (security bodies, cloud providers,
   technical publishers, standards organizations, industry practitioners)
5) Use REAL, ACTUAL resources with genuine, canonical URLs
6) Keep the exact title and URL of every resource you keep from the current list
7) Ensure all property names and string values are properly quoted with double quotes

CURRENT RESOURCE LIST ({count} resources):
{listing}

Your task: Return {target} resources total. Keep the best {min_keep}-{count} from above, and discover {max_new} new exceptional resources. Prioritize quality and diversity."""

_RESOURCE_SCHEMA = {
    "name": "resource_list",
    "schema": {
        "type": "object",
        "properties": {
            "resources": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "title": {"type": "string"},
                        "source": {"type": "string", "description": "Canonical URL."},
                        "type": {"type": "string", "description": "Book, Article, Blog or Podcast."},
                        "description": {"type": "string"},
                    },
                    "required": ["title", "source", "type"],
                },
            },
        },
        "required": ["resources"],
    },
}

_CODE_FENCE = re.compile(r"```(?:json)?\n?")
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_BARE_PROPERTY = re.compile(r"([{,]\s*)([a-zA-Z_][a-zA-Z0-9_]*)\s*:")


class GenerationError(RuntimeError):
    """Raised when the generative source cannot produce a usable resource list."""

    def __init__(self, message: str, *, raw_text: str | None = None) -> None:
        super().__init__(message)
        self.raw_text = raw_text


class StructuredClient(Protocol):
    def request(self, *, messages: list[dict[str, Any]], schema: Dict[str, Any]) -> str:
        ...


@dataclass(frozen=True)
class LLMConfig:
    """Runtime configuration for the generative source."""

    model: str
    temperature: float
    api_key: str | None
    target_count: int = 20
    max_output_tokens: int = 16000
    prompt_path: str | None = None

    @classmethod
    def from_env(cls) -> "LLMConfig":
        model = os.getenv("CURATOR_OPENAI_MODEL", "gpt-4o-mini")
        try:
            temperature = float(os.getenv("AI_TEMPERATURE", "0.3"))
            target_count = int(os.getenv("TARGET_RESOURCE_COUNT", "20"))
            max_output_tokens = int(os.getenv("CURATOR_MAX_OUTPUT_TOKENS", "16000"))
        except ValueError as exc:
            raise GenerationError(f"Invalid generator setting: {exc}") from exc
        prompt_path = os.getenv("CURATOR_PROMPT_PATH") or None
        api_key = os.getenv("CURATOR_OPENAI_API_KEY") or os.getenv("OPENAI_API_KEY")
        return cls(
            model=model,
            temperature=temperature,
            api_key=api_key,
            target_count=target_count,
            max_output_tokens=max_output_tokens,
            prompt_path=prompt_path,
        )


def _temperature_label(temperature: float) -> str:
    if temperature < 0.5:
        return "high determinism"
    if temperature < 0.7:
        return "balanced discovery"
    return "high creativity"


def load_prompt(path: str | None) -> str:
    if path is None:
        return DEFAULT_PROMPT
    prompt_file = Path(path)
    if not prompt_file.exists():
        raise GenerationError(f"Prompt file not found: {path}")
    return prompt_file.read_text(encoding="utf-8")


def build_instruction(config: LLMConfig, prompt: str, current: Sequence[Resource] = ()) -> str:
    """Compose the user instruction.

    Without a prior list the model generates from scratch; with one it is
    asked to keep most of it and top up with new discoveries.
    """

    if current:
        count = len(current)
        min_keep = math.floor(count * KEEP_RATIO)
        listing = "\n".join(
            f"{index}. {resource.title} [{resource.type}] - {resource.source}"
            for index, resource in enumerate(current, start=1)
        )
        body = _UPDATE_TEMPLATE.format(
            temperature=config.temperature,
            min_keep=min_keep,
            count=count,
            max_new=max(config.target_count - min_keep, 0),
            target=config.target_count,
            listing=listing,
        )
    else:
        body = _GENERATE_TEMPLATE.format(target=config.target_count)
    return f"{body}\n\n{prompt}"


def build_messages(instruction: str) -> list[dict[str, Any]]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": [{"type": "input_text", "text": instruction}]},
    ]


def parse_generated_json(text: str) -> dict[str, Any]:
    """Recover the resource document from raw model output.

    Markdown fences and any prose around the outermost JSON object are
    dropped, trailing commas removed, and bare property names quoted on a
    second attempt.
    """

    cleaned = _CODE_FENCE.sub("", text.strip())
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end < start:
        raise GenerationError("No JSON object found in response", raw_text=text)

    candidate = _TRAILING_COMMA.sub(r"\1", cleaned[start : end + 1])
    try:
        payload = json.loads(candidate)
    except json.JSONDecodeError:
        LOGGER.info("First parse of generated JSON failed; quoting bare property names")
        try:
            payload = json.loads(_BARE_PROPERTY.sub(r'\1"\2":', candidate))
        except json.JSONDecodeError as exc:
            raise GenerationError(f"Invalid JSON generated: {exc}", raw_text=text) from exc

    if not isinstance(payload, dict) or not isinstance(payload.get("resources"), list):
        raise GenerationError(
            "Generated JSON does not contain a valid resources array", raw_text=text
        )
    return payload


def _block_text(block: Any) -> str | None:
    if isinstance(block, dict):
        return block.get("text")
    return getattr(block, "text", None)


def _extract_text(response: Any) -> str | None:
    """Normalise the OpenAI client response into the raw output text."""

    text = getattr(response, "output_text", None)
    if isinstance(text, str) and text:
        return text

    outputs = getattr(response, "output", None) or getattr(response, "choices", None)
    if not outputs:
        return None

    for block in outputs:
        content = getattr(block, "content", None)
        if content is None and hasattr(block, "message"):
            content = getattr(block.message, "content", None)
        if isinstance(content, str) and content:
            return content
        if isinstance(content, list):
            for item in content:
                item_text = _block_text(item)
                if item_text:
                    return item_text
    return None


class OpenAIStructuredClient:
    """Thin adapter over the OpenAI Responses API returning raw output text."""

    def __init__(self, client: Any, config: LLMConfig) -> None:
        self._client = client
        self._config = config

    def request(self, *, messages: list[dict[str, Any]], schema: Dict[str, Any]) -> str:
        response = self._client.responses.create(
            model=self._config.model,
            temperature=self._config.temperature,
            max_output_tokens=self._config.max_output_tokens,
            input=messages,
            text={
                "format": {
                    "type": "json_schema",
                    "name": schema["name"],
                    "schema": schema["schema"],
                    "strict": False,
                }
            },
        )
        text = _extract_text(response)
        if not text:
            raise GenerationError("Generative source returned an empty response")
        return text


def _load_openai_client(api_key: str):
    from openai import OpenAI  # imported lazily so tests never touch the SDK

    return OpenAI(api_key=api_key)


_CLIENT_OVERRIDE: StructuredClient | None = None


def set_structured_client_for_testing(client: StructuredClient | None) -> None:
    global _CLIENT_OVERRIDE
    _CLIENT_OVERRIDE = client


def _structured_client(config: LLMConfig) -> StructuredClient:
    if _CLIENT_OVERRIDE is not None:
        return _CLIENT_OVERRIDE
    if not config.api_key:
        raise GenerationError(
            "An OpenAI API key is required (set CURATOR_OPENAI_API_KEY or OPENAI_API_KEY)"
        )
    return OpenAIStructuredClient(_load_openai_client(config.api_key), config)


class ResourceGenerator:
    """Asks the generative source for a new resource list."""

    def __init__(self, config: LLMConfig, client: StructuredClient | None = None) -> None:
        self._config = config
        self._client = client

    @classmethod
    def from_env(cls) -> "ResourceGenerator":
        return cls(config=LLMConfig.from_env())

    @property
    def config(self) -> LLMConfig:
        return self._config

    def generate(self, current: Sequence[Resource] = ()) -> ResourceDocument:
        prompt = load_prompt(self._config.prompt_path)
        instruction = build_instruction(self._config, prompt, current)
        LOGGER.info(
            "Requesting %d resources from %s (temperature %.2f, %s, %s mode)",
            self._config.target_count,
            self._config.model,
            self._config.temperature,
            _temperature_label(self._config.temperature),
            "update" if current else "generate",
        )

        client = self._client or _structured_client(self._config)
        try:
            raw = client.request(messages=build_messages(instruction), schema=_RESOURCE_SCHEMA)
        except GenerationError:
            raise
        except Exception as exc:
            raise GenerationError(f"Generative source request failed: {exc}") from exc

        if not raw:
            raise GenerationError("Generative source returned an empty response")
        LOGGER.debug("Received %d characters from the generative source", len(raw))

        payload = parse_generated_json(raw)
        try:
            document = parse_document(payload)
        except NormalizationError as exc:
            raise GenerationError(str(exc), raw_text=raw) from exc

        LOGGER.info("Generated %d resources", len(document.resources))
        return document
