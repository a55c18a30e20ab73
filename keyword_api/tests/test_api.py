import asyncio
import logging

import pytest
from fastapi.testclient import TestClient

from app import main as app_main
from app.config import settings
from app.main import app
from app.models import KeywordRecord

client = TestClient(app)


@pytest.fixture
def api_key():
    return "test-api-key"


@pytest.fixture
def headers(api_key):
    return {"X-API-Key": api_key}


@pytest.fixture
def sink():
    return []


@pytest.fixture(autouse=True)
def mock_settings(store, api_key, sink, monkeypatch):
    store.insert(KeywordRecord(keyword="run", url='ucjs:sink.append("%{searchString}")', title="Run"))
    monkeypatch.setattr(app_main.RESOLVER, "store", store)
    monkeypatch.setattr(settings, "api_key", api_key)
    monkeypatch.setattr(settings, "enable_action_execution", False)
    provider = app_main.MANAGER.get_provider("BookmarkKeywords")
    monkeypatch.setattr(provider.executor, "context", {"sink": sink})
    yield


class TestHealthEndpoint:
    def test_health_endpoint(self):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["service"] == "keyword-api"
        assert response.headers["Cache-Control"] == "no-store"


class TestSecurity:
    def test_missing_api_key_header(self):
        assert client.get("/keywords").status_code == 401

    def test_invalid_api_key(self):
        assert client.get("/keywords", headers={"X-API-Key": "nope"}).status_code == 401

    def test_no_key_configured_is_open(self, monkeypatch):
        monkeypatch.setattr(settings, "api_key", "")
        assert client.get("/keywords").status_code == 200


class TestKeywordsEndpoint:
    def test_list(self, headers):
        response = client.get("/keywords", headers=headers)
        assert response.status_code == 200
        keywords = [k["keyword"] for k in response.json()["keywords"]]
        assert "gs" in keywords
        assert "run" in keywords

    def test_markdown(self, headers):
        response = client.get("/keywords?format=markdown", headers=headers)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/markdown")
        assert "## Keywords" in response.text

    def test_html_carries_count(self, headers, store):
        response = client.get("/keywords?format=html", headers=headers)
        assert response.status_code == 200
        count = len(asyncio.run(store.list_keywords()))
        assert f'<meta name="keyword-count" content="{count}">' in response.text

    def test_bad_format(self, headers):
        assert client.get("/keywords?format=xml", headers=headers).status_code == 422


class TestResolveEndpoint:
    def test_action(self, headers):
        response = client.get("/resolve", params={"keyword": "gs", "q": "hi"}, headers=headers)
        assert response.status_code == 200
        data = response.json()
        assert data["found"] is True
        assert data["is_action"] is True
        assert data["had_placeholder"] is True
        assert data["resolved_text"] == 'console.log("hi")'

    def test_conventional(self, headers):
        response = client.get("/resolve", params={"keyword": "g", "q": "foo bar"}, headers=headers)
        data = response.json()
        assert data["is_action"] is False
        assert data["resolved_text"] == "https://example.com/search?q=foo%20bar"

    def test_not_found(self, headers):
        response = client.get("/resolve", params={"keyword": "nope"}, headers=headers)
        assert response.json() == {"found": False}

    def test_dead_template(self, headers):
        response = client.get("/resolve", params={"keyword": "form", "q": "x"}, headers=headers)
        assert response.json() == {"found": False}


class TestQueryEndpoint:
    def test_json(self, headers):
        response = client.get("/query", params={"q": "gs hi"}, headers=headers)
        assert response.status_code == 200
        data = response.json()
        assert data["keyword"] == "gs"
        assert len(data["results"]) == 1
        result = data["results"][0]
        assert result["heuristic"] is True
        assert result["payload"]["action"] is True
        assert result["payload"]["title"] == "Console log: hi"
        assert result["label"] == settings.result_action_label

    def test_no_result(self, headers):
        data = client.get("/query", params={"q": "nope"}, headers=headers).json()
        assert data["results"] == []

    def test_html(self, headers):
        response = client.get("/query", params={"q": "g foo", "format": "html"}, headers=headers)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "example.com: foo" in response.text
        assert '<meta name="keyword-results" content="1">' in response.text
        assert 'name="keyword-session-id"' in response.text

    def test_html_escapes_user_text(self, headers):
        response = client.get("/query", params={"q": "g <script>alert(1)</script>", "format": "html"}, headers=headers)
        assert response.status_code == 200
        assert "<script>" not in response.text
        assert "&lt;script&gt;" in response.text

    def test_logs_placeholder_use(self, headers, caplog):
        with caplog.at_level(logging.INFO, logger="keyword_api"):
            client.get("/query", params={"q": "gs hi"}, headers=headers)
        line = next(r.getMessage() for r in caplog.records if "Keyword query" in r.getMessage())
        assert "'had_placeholder': True" in line

    def test_empty_query(self, headers):
        assert client.get("/query?q=", headers=headers).status_code == 422


class TestPickEndpoint:
    def test_navigate(self, headers):
        response = client.post("/pick", params={"q": "g foo", "ctrl": "true"}, headers=headers)
        assert response.status_code == 200
        data = response.json()
        assert data["kind"] == "navigate"
        assert data["url"] == "https://example.com/search?q=foo"
        assert data["where"] == "tab"

    def test_action_disabled(self, headers, sink):
        response = client.post("/pick", params={"q": "run hello"}, headers=headers)
        assert response.status_code == 403
        assert sink == []

    def test_action_enabled(self, headers, sink, monkeypatch):
        monkeypatch.setattr(settings, "enable_action_execution", True)
        response = client.post("/pick", params={"q": "run hello"}, headers=headers)
        assert response.status_code == 200
        data = response.json()
        assert data["kind"] == "execute"
        assert data["status"] == "ok"
        assert sink == ["hello"]

    def test_action_needs_api_key(self, sink, monkeypatch):
        monkeypatch.setattr(settings, "enable_action_execution", True)
        monkeypatch.setattr(settings, "api_key", "")
        response = client.post(
            "/pick", params={"q": "run pwned"}, headers={"Origin": "https://elsewhere.example"}
        )
        assert response.status_code == 403
        assert sink == []

    def test_navigate_without_api_key(self, monkeypatch):
        monkeypatch.setattr(settings, "api_key", "")
        response = client.post("/pick", params={"q": "g foo"})
        assert response.status_code == 200
        assert response.json()["kind"] == "navigate"

    def test_failing_action_does_not_fail_request(self, headers, store, monkeypatch):
        monkeypatch.setattr(settings, "enable_action_execution", True)
        store.insert(KeywordRecord(keyword="boom", url="ucjs:raise ValueError('x')"))
        response = client.post("/pick", params={"q": "boom"}, headers=headers)
        assert response.status_code == 200
        assert response.json()["status"] == "error"

    def test_no_result(self, headers):
        assert client.post("/pick", params={"q": "nope"}, headers=headers).status_code == 404
