"""
Read the generated answer and the ranked hits out of a search response.

Both extractors tolerate partial or degenerate responses: a missing,
null, or wrongly-typed node yields ``None`` instead of an exception.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

ANSWER_PATH = ("ext", "retrieval_augmented_generation", "answer")
HITS_PATH = ("hits", "hits")


@dataclass(frozen=True)
class Hit:
    score: float | None
    source: dict = field(default_factory=dict)


def _lookup(doc: Any, path: tuple[str, ...]) -> Any:
    """Follow *path* through nested mappings; None at the first missing link."""
    node = doc
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
        if node is None:
            return None
    return node


def _as_score(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return None


def extract_answer(doc: Any) -> str | None:
    """Return ``ext.retrieval_augmented_generation.answer``, or None."""
    answer = _lookup(doc, ANSWER_PATH)
    return answer if isinstance(answer, str) else None


def extract_hits(doc: Any) -> list[Hit] | None:
    """
    Return ``hits.hits`` as Hit objects in response order.

    None when the path is absent, ``[]`` when the cluster returned zero
    hits. Entries that are not objects are skipped.
    """
    raw_hits = _lookup(doc, HITS_PATH)
    if not isinstance(raw_hits, list):
        return None
    hits = []
    for raw in raw_hits:
        if not isinstance(raw, dict):
            continue
        source = raw.get("_source")
        hits.append(Hit(
            score=_as_score(raw.get("_score")),
            source=source if isinstance(source, dict) else {},
        ))
    return hits


# ---------------------------------------------------------------------------
# Presentation
# ---------------------------------------------------------------------------

def format_results(doc: Any) -> str:
    """Render the answer and the retrieved documents for a terminal."""
    lines = ["", "=== Conversational Search Results ===", ""]

    answer = extract_answer(doc)
    if answer is not None:
        lines += ["Generated Answer:", answer, ""]

    hits = extract_hits(doc)
    if hits:
        lines.append("Retrieved Documents:")
        for i, hit in enumerate(hits, start=1):
            score = "n/a" if hit.score is None else f"{hit.score}"
            lines += [
                "",
                f"Document {i}:",
                f"Score: {score}",
                f"Content: {json.dumps(hit.source, ensure_ascii=False)}",
            ]

    lines += ["", "=" * 36, ""]
    return "\n".join(lines)
