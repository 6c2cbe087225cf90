"""
Conversational Search API
Exposes RAG conversational search over an OpenSearch index.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from dotenv import load_dotenv

from conversational_search.config import load_config
from conversational_search.errors import ConfigError, SearchError
from conversational_search.open_search_connect import connect, resolve_credentials
from conversational_search.query import SearchOverrides
from conversational_search.response import extract_answer, extract_hits
from conversational_search.search import conversational_search

# ---------------------------------------------------------------------------
# App startup / shutdown: one connection for the life of the process
# ---------------------------------------------------------------------------
_state: dict = {}


@asynccontextmanager
async def lifespan(app: FastAPI):
    load_dotenv()
    config = load_config()
    _state["config"] = config
    _state["connection"] = connect(config, resolve_credentials(config))
    try:
        yield
    finally:
        _state.pop("connection").close()
        _state.pop("config", None)


app = FastAPI(
    title="Conversational Search API",
    description="Neural retrieval + generative QA through an OpenSearch search pipeline.",
    version="1.0.0",
    lifespan=lifespan,
)


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------
class SearchRequest(BaseModel):
    question: str = Field(..., min_length=1)
    index_name: str | None = None
    search_pipeline: str | None = None
    embedding_model_id: str | None = None
    k: int | None = Field(None, ge=1)
    result_size: int | None = Field(None, ge=0)
    source_fields: list[str] | None = None
    llm_model: str | None = None
    context_size: int | None = Field(None, ge=0)
    timeout_seconds: int | None = Field(None, ge=1)

    def overrides(self) -> SearchOverrides:
        return SearchOverrides(
            index_name=self.index_name,
            search_pipeline=self.search_pipeline,
            embedding_model_id=self.embedding_model_id,
            k=self.k,
            result_size=self.result_size,
            source_fields=self.source_fields,
            llm_model=self.llm_model,
            context_size=self.context_size,
            timeout_seconds=self.timeout_seconds,
        )


class HitResult(BaseModel):
    score: float | None
    source: dict


class SearchResponse(BaseModel):
    question: str
    answer: str | None
    hits: list[HitResult] | None


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
@app.get("/health")
def health():
    """Liveness check."""
    return {"status": "ok"}


@app.post("/search", response_model=SearchResponse)
def search(request: SearchRequest):
    """
    Conversational search: retrieve with the neural query, answer with the LLM.

    ``hits`` is null when the response carried no hit list at all.
    """
    try:
        response = conversational_search(
            _state["connection"], _state["config"], request.question, request.overrides()
        )
    except SearchError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    except ConfigError as exc:
        raise HTTPException(status_code=500, detail=str(exc))

    hits = extract_hits(response)
    return {
        "question": request.question,
        "answer": extract_answer(response),
        "hits": None if hits is None else [
            {"score": hit.score, "source": hit.source} for hit in hits
        ],
    }
