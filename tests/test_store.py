import json

import pytest
import requests

from curator.models import Resource, ResourceDocument
from curator.store import ResourceStore, StoreConfig, StoreError


class _FakeResponse:
    def __init__(self, status_code: int = 200, payload=None, body_error: bool = False):
        self.status_code = status_code
        self._payload = payload
        self._body_error = body_error

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if self._body_error:
            raise ValueError("no JSON")
        return self._payload


class _FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response or _FakeResponse()
        self.error = error
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append(("GET", url, kwargs))
        if self.error:
            raise self.error
        return self.response

    def put(self, url, **kwargs):
        self.calls.append(("PUT", url, kwargs))
        if self.error:
            raise self.error
        return self.response


CONFIG = StoreConfig(url="https://store.example.net/kv/", key="resources", token="secret", timeout=5)


def test_fetch_parses_published_document():
    payload = {"resources": [{"title": "Refactoring", "source": "https://refactoring.com", "type": "Book", "weeks_on_list": 4}]}
    session = _FakeSession(_FakeResponse(payload=payload))

    document = ResourceStore(CONFIG, session=session).fetch()

    assert document.resources[0].weeks_on_list == 4
    method, url, kwargs = session.calls[0]
    assert (method, url) == ("GET", "https://store.example.net/kv/resources")
    assert kwargs["headers"]["Authorization"] == "Bearer secret"
    assert kwargs["timeout"] == 5


def test_fetch_treats_missing_document_as_empty():
    session = _FakeSession(_FakeResponse(status_code=404))
    assert ResourceStore(CONFIG, session=session).fetch().resources == []


def test_fetch_tolerates_document_without_resources():
    session = _FakeSession(_FakeResponse(payload={"note": "empty"}))
    document = ResourceStore(CONFIG, session=session).fetch()
    assert document.resources == []
    assert document.metadata == {"note": "empty"}


@pytest.mark.parametrize(
    "session",
    [
        _FakeSession(_FakeResponse(status_code=500)),
        _FakeSession(error=requests.ConnectionError("refused")),
        _FakeSession(_FakeResponse(body_error=True)),
        _FakeSession(_FakeResponse(payload={"resources": [42]})),
    ],
)
def test_fetch_failures_raise_store_error(session):
    with pytest.raises(StoreError):
        ResourceStore(CONFIG, session=session).fetch()


def test_put_sends_json_document():
    session = _FakeSession()
    document = ResourceDocument(
        resources=[Resource(title="Refactoring", source="https://refactoring.com", type="Book", weeks_on_list=2)]
    )

    ResourceStore(CONFIG, session=session).put(document)

    method, url, kwargs = session.calls[0]
    assert method == "PUT"
    assert url == "https://store.example.net/kv/resources"
    assert kwargs["headers"]["Content-Type"] == "application/json"
    assert json.loads(kwargs["data"]) == {
        "resources": [{"title": "Refactoring", "source": "https://refactoring.com", "type": "Book", "weeks_on_list": 2}]
    }


def test_put_failure_raises_store_error():
    session = _FakeSession(_FakeResponse(status_code=403))
    with pytest.raises(StoreError):
        ResourceStore(CONFIG, session=session).put(ResourceDocument())


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("CURATOR_STORE_URL", "https://kv.example.net")
    monkeypatch.delenv("CURATOR_STORE_KEY", raising=False)
    monkeypatch.delenv("CURATOR_STORE_TOKEN", raising=False)
    monkeypatch.setenv("CURATOR_STORE_TIMEOUT", "12")

    config = StoreConfig.from_env()
    assert config.document_url == "https://kv.example.net/resources"
    assert config.token is None
    assert config.timeout == 12.0


def test_config_requires_url(monkeypatch):
    monkeypatch.delenv("CURATOR_STORE_URL", raising=False)
    with pytest.raises(StoreError):
        StoreConfig.from_env()


def test_config_rejects_non_numeric_timeout(monkeypatch):
    monkeypatch.setenv("CURATOR_STORE_URL", "https://kv.example.net")
    monkeypatch.setenv("CURATOR_STORE_TIMEOUT", "soon")
    with pytest.raises(StoreError):
        StoreConfig.from_env()
