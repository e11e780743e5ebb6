"""Dense retrieval: cosine similarity over stored chunk embeddings.

Brute force: every candidate row is scored, then sorted
best-first (stable, so ties keep storage order) and truncated to the limit.
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Iterable, Sequence

from mcpland.db.models import Chunk, SearchResult

logger = logging.getLogger(__name__)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two equal-length vectors.

    Returns 0.0 when either vector has zero magnitude.

    Raises:
        ValueError: If the vectors differ in length.
    """
    if len(a) != len(b):
        raise ValueError(f"Vectors must have the same length ({len(a)} != {len(b)})")
    dot = math.fsum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(math.fsum(x * x for x in a))
    norm_b = math.sqrt(math.fsum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


def rank(
    query_embedding: Sequence[float],
    chunks: Iterable[Chunk],
    limit: int = 20,
) -> list[SearchResult]:
    """Score *chunks* against *query_embedding* and return the top *limit*.

    Rows whose stored embedding cannot be decoded or compared (invalid JSON,
    non-numeric values, wrong dimension, NaN or infinite components) are
    skipped.
    """
    scored: list[SearchResult] = []
    for chunk in chunks:
        try:
            score = cosine_similarity(query_embedding, chunk.vector)
        except (json.JSONDecodeError, TypeError, ValueError) as exc:
            logger.debug("Skipping chunk %s (%s#%d): %s", chunk.id, chunk.source_id, chunk.idx, exc)
            continue
        if not math.isfinite(score):
            logger.debug("Skipping chunk %s (%s#%d): non-finite score", chunk.id, chunk.source_id, chunk.idx)
            continue
        scored.append(
            SearchResult(content=chunk.content, score=score, source_id=chunk.source_id, idx=chunk.idx)
        )

    scored.sort(key=lambda r: r.score, reverse=True)
    return scored[: max(limit, 0)]
