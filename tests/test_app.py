"""Tests for the FastAPI application routes."""
from __future__ import annotations

from datetime import datetime
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from conftest import FakeLLM
from vocab_relay.app import app, get_llm, make_provider
from vocab_relay.config import Settings
from vocab_relay.models import Completion


@pytest.fixture
def client_with():
    """Build a TestClient whose handlers see the given provider."""
    clients = []

    def _make(llm):
        app.dependency_overrides[get_llm] = lambda: llm
        client = TestClient(app, raise_server_exceptions=False)
        clients.append(client)
        return client

    yield _make
    for c in clients:
        c.close()
    app.dependency_overrides.clear()


class TestHealth:
    def test_healthy(self, client_with):
        client = client_with(FakeLLM())
        resp = client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "healthy"
        assert data["timestamp"].endswith("Z")
        parsed = datetime.fromisoformat(data["timestamp"].replace("Z", "+00:00"))
        assert parsed.tzinfo is not None


class TestGenerateQuestionAPI:
    def test_success(self, client_with, tool_call_llm, mitosis_question):
        client = client_with(tool_call_llm)
        resp = client.post("/generateQuestion", json={
            "domain": "biology", "seenWords": ["cell", "enzyme"],
        })
        assert resp.status_code == 200
        assert resp.json() == mitosis_question
        assert '["cell", "enzyme"]' in tool_call_llm.calls[0]["prompt"]

    def test_seen_words_optional(self, client_with, tool_call_llm):
        client = client_with(tool_call_llm)
        resp = client.post("/generateQuestion", json={"domain": "biology"})
        assert resp.status_code == 200

    def test_provider_throws(self, client_with):
        client = client_with(FakeLLM(error=RuntimeError("quota exceeded")))
        resp = client.post("/generateQuestion", json={"domain": "biology", "seenWords": []})
        assert resp.status_code == 500
        message = resp.json()["message"]
        assert message == "Error generating question: quota exceeded"

    def test_no_tool_call(self, client_with):
        client = client_with(FakeLLM(Completion(text="mitosis")))
        resp = client.post("/generateQuestion", json={"domain": "biology", "seenWords": []})
        assert resp.status_code == 500
        assert resp.json()["message"].startswith("Error generating question:")

    def test_seen_words_not_a_list(self, client_with, tool_call_llm):
        client = client_with(tool_call_llm)
        resp = client.post("/generateQuestion", json={"domain": "biology", "seenWords": "cell"})
        assert resp.status_code == 500
        assert "seenWords" in resp.json()["message"]
        assert tool_call_llm.calls == []

    def test_seen_words_non_string_rejected_before_provider(self, client_with, tool_call_llm):
        client = client_with(tool_call_llm)
        resp = client.post("/generateQuestion", json={"domain": "biology", "seenWords": [None, 3]})
        assert resp.status_code == 500
        assert "seenWords" in resp.json()["message"]
        assert tool_call_llm.calls == []

    def test_body_not_json(self, client_with, tool_call_llm):
        client = client_with(tool_call_llm)
        resp = client.post(
            "/generateQuestion", content=b"domain=biology",
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 500
        assert resp.json()["message"]


class TestScoreUserAnswerAPI:
    def test_success(self, client_with):
        llm = FakeLLM(Completion(text='{"score":0.8}'))
        client = client_with(llm)
        resp = client.post("/scoreUserAnswer", json={
            "domain": "biology", "word": "mitosis", "userAnswer": "cell division",
        })
        assert resp.status_code == 200
        assert resp.json() == {"score": 0.8}

    def test_similarity_score_normalized(self, client_with):
        client = client_with(FakeLLM(Completion(text='{"similarityScore": 0.25}')))
        resp = client.post("/scoreUserAnswer", json={
            "domain": "biology", "word": "mitosis", "userAnswer": "cell death",
        })
        assert resp.json() == {"score": 0.25}

    def test_non_json_text(self, client_with):
        client = client_with(FakeLLM(Completion(text="Pretty close!")))
        resp = client.post("/scoreUserAnswer", json={
            "domain": "biology", "word": "mitosis", "userAnswer": "cell division",
        })
        assert resp.status_code == 500
        assert resp.json()["message"].startswith("Error scoring user answer:")

    def test_provider_throws(self, client_with):
        client = client_with(FakeLLM(error=ConnectionError("upstream down")))
        resp = client.post("/scoreUserAnswer", json={
            "domain": "biology", "word": "mitosis", "userAnswer": "cell division",
        })
        assert resp.status_code == 500
        assert "upstream down" in resp.json()["message"]

    def test_missing_field_left_in_prompt(self, client_with):
        llm = FakeLLM(Completion(text='{"score": 0}'))
        client = client_with(llm)
        resp = client.post("/scoreUserAnswer", json={"domain": "biology", "word": "mitosis"})
        assert resp.status_code == 200
        assert "${userAnswer}" in llm.calls[0]["prompt"]


class TestCORS:
    def test_simple_request(self, client_with):
        client = client_with(FakeLLM())
        resp = client.get("/health", headers={"Origin": "http://example.com"})
        assert resp.headers["access-control-allow-origin"] == "*"

    def test_preflight(self, client_with):
        client = client_with(FakeLLM())
        resp = client.options("/scoreUserAnswer", headers={
            "Origin": "http://example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        })
        assert resp.status_code == 204
        assert resp.headers["access-control-allow-origin"] == "*"
        assert "POST" in resp.headers["access-control-allow-methods"]
        assert "authorization" in resp.headers["access-control-allow-headers"].lower()

    def test_preflight_unlisted_header(self, client_with):
        client = client_with(FakeLLM())
        resp = client.options("/generateQuestion", headers={
            "Origin": "http://example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "X-Requested-With",
        })
        assert resp.status_code == 204
        assert "x-requested-with" not in resp.headers["access-control-allow-headers"].lower()

    def test_bare_options(self, client_with):
        client = client_with(FakeLLM())
        resp = client.options("/generateQuestion", headers={"Origin": "http://example.com"})
        assert resp.status_code == 204
        assert resp.headers["access-control-allow-origin"] == "*"

    def test_options_any_path(self, client_with):
        client = client_with(FakeLLM())
        assert client.options("/no/such/route").status_code == 204


class TestMakeProvider:
    def test_ollama(self):
        llm = make_provider(Settings(llm_provider="ollama", llm_model="qwen3:8b"))
        assert llm.name() == "ollama/qwen3:8b"

    def test_openai(self):
        llm = make_provider(Settings(llm_provider="openai", llm_model="gpt-4o"))
        assert llm.name() == "openai/gpt-4o"

    def test_anthropic(self):
        llm = make_provider(Settings(llm_provider="anthropic", llm_model="claude-sonnet-4-20250514"))
        assert llm.name() == "anthropic/claude-sonnet-4-20250514"

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown LLM provider"):
            make_provider(Settings(llm_provider="nope"))


class TestLifespan:
    def test_provider_scoped_to_app_lifetime(self):
        fake = FakeLLM(Completion(text='{"score": 0.5}'))
        with patch("vocab_relay.app.make_provider", return_value=fake):
            with TestClient(app) as client:
                assert app.state.llm is fake
                resp = client.post("/scoreUserAnswer", json={
                    "domain": "biology", "word": "mitosis", "userAnswer": "cell division",
                })
                assert resp.json() == {"score": 0.5}
        assert app.state.llm is None
        assert not hasattr(app.state, "settings")
