"""
Search parameters and the conversational search request body.

The request combines a ``neural`` query clause (embedding lookup and k-NN
retrieval, done by the cluster) with ``generative_qa_parameters`` read by
the RAG search pipeline. Field names and nesting are fixed by the
pipeline and must not change.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Sequence

from conversational_search.config import Config


@dataclass(frozen=True)
class SearchParameters:
    """Every value needed to build one request. No field has a default."""

    question: str
    index_name: str
    search_pipeline: str
    embedding_model_id: str
    k: int
    result_size: int
    source_fields: tuple[str, ...]
    llm_model: str
    context_size: int
    timeout_seconds: int


@dataclass(frozen=True)
class SearchOverrides:
    """Partial SearchParameters; ``None`` means "use the configured default"."""

    index_name: str | None = None
    search_pipeline: str | None = None
    embedding_model_id: str | None = None
    k: int | None = None
    result_size: int | None = None
    source_fields: Sequence[str] | None = None
    llm_model: str | None = None
    context_size: int | None = None
    timeout_seconds: int | None = None


def resolve_parameters(
    config: Config,
    question: str,
    overrides: SearchOverrides | None = None,
) -> SearchParameters:
    """Merge *overrides* onto the defaults held by *config*."""
    values = {
        "index_name": config.index_name,
        "search_pipeline": config.search_pipeline,
        "embedding_model_id": config.embedding_model_id,
        "k": config.neural_k,
        "result_size": config.result_size,
        "source_fields": config.source_fields,
        "llm_model": config.llm_model,
        "context_size": config.context_size,
        "timeout_seconds": config.timeout,
    }
    if overrides is not None:
        for f in fields(overrides):
            value = getattr(overrides, f.name)
            if value is not None:
                values[f.name] = value
    values["source_fields"] = tuple(values["source_fields"])
    return SearchParameters(question=question, **values)


def build_search_request(params: SearchParameters) -> dict:
    """
    Build the request body for a conversational search.

    Pure and deterministic. An empty ``source_fields`` is sent as ``[]``,
    which the server reads as "no source fields".
    """
    return {
        "query": {
            "neural": {
                "text_embedding": {
                    "query_text": params.question,
                    "model_id": params.embedding_model_id,
                    "k": params.k,
                }
            }
        },
        "size": params.result_size,
        "_source": list(params.source_fields),
        "ext": {
            "generative_qa_parameters": {
                "llm_model": params.llm_model,
                "llm_question": params.question,
                "context_size": params.context_size,
                "timeout": params.timeout_seconds,
            }
        },
    }
