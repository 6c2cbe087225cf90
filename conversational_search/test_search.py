# ---------------------------------------------------------------------------
# test_search.py
# ---------------------------------------------------------------------------
# Round-trip tests for conversational_search() against a fake connection.
# ---------------------------------------------------------------------------

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest

from conversational_search.config import Config
from conversational_search.errors import SearchError, SerializationError, TransportError
from conversational_search.query import SearchOverrides, build_search_request, resolve_parameters
from conversational_search.response import extract_answer
from conversational_search.search import conversational_search, from_json, to_json

RESPONSE = {
    "hits": {"hits": [{"_score": 0.92, "_source": {"text": "a"}}]},
    "ext": {"retrieval_augmented_generation": {"answer": "OpenSearch is a search engine."}},
}


def make_config(**values) -> Config:
    return Config.from_mapping(values, environ={})


def fake_connection(raw=json.dumps(RESPONSE)) -> MagicMock:
    connection = MagicMock()
    connection.execute.return_value = raw
    return connection


def sent_body(connection: MagicMock) -> dict:
    return json.loads(connection.execute.call_args.kwargs["body"])


# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------

class TestRequest:
    def test_get_on_index_with_pipeline_param(self):
        connection = fake_connection()
        config = make_config(**{
            "opensearch.index.name": "kb",
            "opensearch.search.pipeline": "rag",
        })
        conversational_search(connection, config, "hello")
        args, kwargs = connection.execute.call_args
        assert args == ("GET", "/kb/_search")
        assert kwargs["params"] == {"search_pipeline": "rag"}

    def test_body_built_from_config_defaults(self):
        connection = fake_connection()
        config = make_config()
        conversational_search(connection, config, "hello")
        expected = build_search_request(resolve_parameters(config, "hello"))
        assert sent_body(connection) == expected

    def test_overrides_applied(self):
        connection = fake_connection()
        overrides = SearchOverrides(index_name="other", result_size=3, source_fields=("text", "title"))
        conversational_search(connection, make_config(), "hello", overrides)
        assert connection.execute.call_args.args[1] == "/other/_search"
        body = sent_body(connection)
        assert body["size"] == 3
        assert body["_source"] == ["text", "title"]

    def test_non_ascii_round_trip(self):
        question = "OpenSearch Serverless 是什么？"
        connection = fake_connection()
        conversational_search(connection, make_config(**{"opensearch.embedding.model.id": "m-1"}), question)
        raw_body = connection.execute.call_args.kwargs["body"]
        assert question in raw_body
        text_embedding = json.loads(raw_body)["query"]["neural"]["text_embedding"]
        assert text_embedding == {"query_text": question, "model_id": "m-1", "k": 5}


# ---------------------------------------------------------------------------
# Response
# ---------------------------------------------------------------------------

class TestResponse:
    def test_returned_unmodified(self):
        response = conversational_search(fake_connection(), make_config(), "hello")
        assert response == RESPONSE
        assert extract_answer(response) == "OpenSearch is a search engine."

    def test_transport_error_wrapped(self):
        connection = fake_connection()
        cause = TransportError("GET /kb/_search failed", status_code=503)
        connection.execute.side_effect = cause
        with pytest.raises(SearchError) as exc_info:
            conversational_search(connection, make_config(), "hello")
        assert exc_info.value.__cause__ is cause

    def test_invalid_json_response(self):
        with pytest.raises(SearchError):
            conversational_search(fake_connection("<html>bad gateway</html>"), make_config(), "hello")


# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------

class TestCodec:
    def test_keeps_non_ascii(self):
        assert to_json({"q": "中文"}) == '{"q": "中文"}'

    def test_unserializable_document(self):
        with pytest.raises(SerializationError):
            to_json({"q": object()})

    def test_from_json_accepts_bytes(self):
        assert from_json('{"a": 1}'.encode("utf-8")) == {"a": 1}
