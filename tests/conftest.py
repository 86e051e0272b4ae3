import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from curator import llm


class StubClient:
    """Returns a canned resource list wrapped the way models tend to wrap JSON."""

    def __init__(self, resources=None):
        self.resources = resources if resources is not None else [
            {
                "title": "Clean Code - A Handbook",
                "source": "http://www.example.com/book/",
                "type": "Book",
            },
            {
                "title": "Totally New Resource",
                "source": "https://new.example.org",
                "type": "Article",
            },
        ]
        self.calls = []

    def request(self, *, messages, schema):  # type: ignore[override]
        assert schema.get("name") == "resource_list"
        self.calls.append(self._instruction(messages))
        body = json.dumps({"resources": self.resources}, indent=2)
        return f"Here is the list you asked for:\n```json\n{body}\n```"

    @staticmethod
    def _instruction(messages):
        for block in reversed(messages):
            content = block.get("content")
            if not isinstance(content, list):
                continue
            for item in content:
                if isinstance(item, dict) and item.get("type") in {"text", "input_text"}:
                    return item.get("text", "")
        return ""


@pytest.fixture(autouse=True)
def stubbed_llm_client():
    """Provide deterministic generator output for tests without network access."""

    stub = StubClient()
    llm.set_structured_client_for_testing(stub)
    yield stub
    llm.set_structured_client_for_testing(None)
