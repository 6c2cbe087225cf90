# ---------------------------------------------------------------------------
# search.py
# One conversational search round trip:
#   question + config -> request body -> OpenSearch -> response document
# The response is returned as-is; use conversational_search.response to
# read the answer and the hits.
# ---------------------------------------------------------------------------

from __future__ import annotations

import json
import logging

from conversational_search.config import Config
from conversational_search.errors import SearchError, SerializationError, TransportError
from conversational_search.open_search_connect import Connection
from conversational_search.query import SearchOverrides, build_search_request, resolve_parameters

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# JSON codec (stateless)
# ---------------------------------------------------------------------------

def to_json(doc: dict) -> str:
    """Serialize a request document; non-ASCII text is kept as-is."""
    try:
        return json.dumps(doc, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"Cannot serialize request document: {exc}") from exc


def from_json(raw: str | bytes) -> dict:
    """Parse a response body into a document."""
    return json.loads(raw)


def search_path(index_name: str) -> str:
    return f"/{index_name}/_search"


# ---------------------------------------------------------------------------
# Round trip
# ---------------------------------------------------------------------------

def conversational_search(
    connection: Connection,
    config: Config,
    question: str,
    overrides: SearchOverrides | None = None,
) -> dict:
    """
    Run a neural + generative QA search and return the response document.

    Args:
        connection: Open connection to the cluster.
        config: Source of default parameters.
        question: User question, sent both as the neural query text and
            as the LLM question.
        overrides: Optional per-call replacements for configured defaults.

    Raises:
        SearchError: If the request fails or the response is not JSON.
        SerializationError: If the request body cannot be serialized.
    """
    params = resolve_parameters(config, question, overrides)
    logger.info("Performing conversational search on index: %s", params.index_name)
    logger.info("Question: %s", question)

    body = to_json(build_search_request(params))
    logger.debug("Search request body: %s", body)

    try:
        raw = connection.execute(
            "GET",
            search_path(params.index_name),
            params={"search_pipeline": params.search_pipeline},
            body=body,
        )
    except TransportError as exc:
        raise SearchError(f"Search on '{params.index_name}' failed: {exc}") from exc

    logger.info("Search completed successfully")
    logger.debug("Response: %s", raw)

    try:
        return from_json(raw)
    except ValueError as exc:
        raise SearchError(f"Search on '{params.index_name}' returned invalid JSON: {exc}") from exc
