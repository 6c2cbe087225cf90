# ---------------------------------------------------------------------------
# test_main.py
# ---------------------------------------------------------------------------
# Tests for the Conversational Search API (conversational_search/api/main.py).
#
# Run with:
#   pytest conversational_search/api/test_main.py -v
#
# The OpenSearch connection is replaced by a mock, so no cluster is needed.
# ---------------------------------------------------------------------------

from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from conversational_search.api import main
from conversational_search.config import Config
from conversational_search.errors import TransportError

RESPONSE = {
    "hits": {"hits": [
        {"_score": 0.92, "_source": {"text": "a"}},
        {"_score": 0.85, "_source": {"text": "b"}},
    ]},
    "ext": {"retrieval_augmented_generation": {"answer": "OpenSearch is a search engine."}},
}


@pytest.fixture
def connection():
    conn = MagicMock()
    conn.execute.return_value = json.dumps(RESPONSE)
    return conn


@pytest.fixture
def client(connection):
    config = Config.from_mapping({"opensearch.index.name": "kb"}, environ={})
    with patch.object(main, "load_config", return_value=config), \
         patch.object(main, "resolve_credentials", return_value=None), \
         patch.object(main, "connect", return_value=connection):
        with TestClient(main.app) as test_client:
            yield test_client


# ---------------------------------------------------------------------------
# /health
# ---------------------------------------------------------------------------

class TestHealth:
    def test_returns_200(self, client):
        r = client.get("/health")
        assert r.status_code == 200

    def test_body_has_status_ok(self, client):
        assert client.get("/health").json() == {"status": "ok"}


# ---------------------------------------------------------------------------
# /search: happy path
# ---------------------------------------------------------------------------

class TestSearchHappyPath:
    def test_returns_answer_and_hits(self, client):
        r = client.post("/search", json={"question": "What is OpenSearch?"})
        assert r.status_code == 200
        assert r.json() == {
            "question": "What is OpenSearch?",
            "answer": "OpenSearch is a search engine.",
            "hits": [
                {"score": 0.92, "source": {"text": "a"}},
                {"score": 0.85, "source": {"text": "b"}},
            ],
        }

    def test_uses_configured_index(self, client, connection):
        client.post("/search", json={"question": "q"})
        assert connection.execute.call_args.args == ("GET", "/kb/_search")

    def test_overrides_forwarded(self, client, connection):
        client.post("/search", json={"question": "q", "result_size": 7, "source_fields": []})
        body = json.loads(connection.execute.call_args.kwargs["body"])
        assert body["size"] == 7
        assert body["_source"] == []

    def test_missing_fields_are_null(self, client, connection):
        connection.execute.return_value = "{}"
        r = client.post("/search", json={"question": "q"})
        assert r.json() == {"question": "q", "answer": None, "hits": None}


# ---------------------------------------------------------------------------
# /search: errors and validation
# ---------------------------------------------------------------------------

class TestSearchErrors:
    def test_transport_failure_returns_502(self, client, connection):
        connection.execute.side_effect = TransportError("GET /kb/_search failed", status_code=503)
        r = client.post("/search", json={"question": "q"})
        assert r.status_code == 502
        assert "failed" in r.json()["detail"]

    def test_missing_question_returns_422(self, client):
        assert client.post("/search", json={}).status_code == 422

    def test_empty_question_returns_422(self, client):
        assert client.post("/search", json={"question": ""}).status_code == 422

    def test_k_below_min_rejected(self, client):
        assert client.post("/search", json={"question": "q", "k": 0}).status_code == 422

    def test_malformed_config_value_returns_500_with_detail(self, connection):
        config = Config.from_mapping({"opensearch.neural.k": "five"}, environ={})
        with patch.object(main, "load_config", return_value=config), \
             patch.object(main, "resolve_credentials", return_value=None), \
             patch.object(main, "connect", return_value=connection):
            with TestClient(main.app) as test_client:
                r = test_client.post("/search", json={"question": "q"})
        assert r.status_code == 500
        assert "opensearch.neural.k" in r.json()["detail"]
        connection.execute.assert_not_called()


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

class TestLifespan:
    def test_connection_closed_on_shutdown(self, connection):
        config = Config.from_mapping({}, environ={})
        with patch.object(main, "load_config", return_value=config), \
             patch.object(main, "resolve_credentials", return_value=None), \
             patch.object(main, "connect", return_value=connection):
            with TestClient(main.app):
                connection.close.assert_not_called()
        connection.close.assert_called_once()
