"""Shared pytest fixtures."""

from __future__ import annotations

import math

import pytest

from mcpland.db.connection import open_store_db
from mcpland.ingest.store import EmbeddingStore


@pytest.fixture
def tmp_db(tmp_path):
    """File-based DB in tmp_path with schema initialized, closed after test."""
    conn = open_store_db(tmp_path / "context.sqlite")
    yield conn
    conn.close()


def keyword_embedding(text: str) -> list[float]:
    """Deterministic 3-d embedding: counts of 'alpha', 'beta', 'gamma'."""
    lowered = text.lower()
    vec = [float(lowered.count(word)) for word in ("alpha", "beta", "gamma")]
    if not any(vec):
        vec = [0.01, 0.01, 0.01]
    norm = math.sqrt(sum(v * v for v in vec))
    return [v / norm for v in vec]


class FakeEmbedder:
    """Async embedding function that records every text it embeds."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    async def __call__(self, text: str) -> list[float]:
        self.calls.append(text)
        return keyword_embedding(text)


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def store(tmp_path, embedder):
    """EmbeddingStore backed by tmp_path and the keyword embedder."""
    s = EmbeddingStore(tmp_path / "context.sqlite", embed_fn=embedder)
    yield s
    s.close()
