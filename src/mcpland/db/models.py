"""Domain models for the embedding store."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any


@dataclass
class Source:
    id: str
    meta: dict[str, Any] | None = None
    updated_at: int | None = None


@dataclass
class Chunk:
    source_id: str
    idx: int
    content: str
    hash: str
    embedding: str = "[]"  # JSON-encoded list of floats
    id: str | None = None
    created_at: int | None = None

    @property
    def vector(self) -> list[float]:
        return json.loads(self.embedding)


@dataclass
class SearchResult:
    content: str
    score: float
    source_id: str
    idx: int


@dataclass
class SourceStats:
    """A stored source together with the number of chunks it owns."""

    source: Source
    chunk_count: int = 0
