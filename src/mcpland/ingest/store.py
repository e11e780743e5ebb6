"""Content-addressed embedding store on SQLite.

Ingestion contract:
- The source row is upserted first (metadata replaced, updated_at bumped).
- Chunks are processed strictly in order: hash -> dedup check -> embed -> insert.
- A chunk whose SHA-256 hash already exists for the source is skipped; it is
  neither re-embedded nor re-inserted. Re-running an ingest is idempotent.
- Cancellation is cooperative: the stop flag is checked at every chunk
  boundary. Chunks inserted before the stop stay committed, and a later
  ingest resumes through the dedup check.

Storage and embedding errors propagate to the caller; nothing is retried here.
"""

from __future__ import annotations

import hashlib
import json
import logging
import weakref
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, ClassVar

from mcpland.db.connection import open_store_db
from mcpland.db.models import Chunk, SearchResult, Source, SourceStats
from mcpland.db.repository import Repository
from mcpland.ingest.embedding import EmbedFn, EmbeddingConfig, make_embed_fn
from mcpland.rag.retriever import rank

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 20


def content_hash(content: str) -> str:
    """Deterministic hash used to deduplicate chunks within a source."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


@dataclass
class IngestReport:
    """Outcome of a single ``EmbeddingStore.ingest`` call."""

    source_id: str
    total: int
    inserted: int = 0
    skipped: int = 0
    cancelled: bool = False


class EmbeddingStore:
    """Persistent store of sources and embedded chunks with similarity search.

    Every open store is tracked process-wide so that ``EmbeddingStore.shutdown()``
    can ask all in-flight ingestions to stop.

    Args:
        db_path: SQLite file; parent directories are created if missing.
        embed_fn: Async ``text -> vector`` function. Defaults to LiteLLM
            with *config*.
        config: Embedding configuration used to build the default embed_fn.
    """

    _instances: ClassVar[weakref.WeakSet[EmbeddingStore]] = weakref.WeakSet()

    def __init__(
        self,
        db_path: Path | str,
        *,
        embed_fn: EmbedFn | None = None,
        config: EmbeddingConfig | None = None,
    ) -> None:
        self.db_path = Path(db_path)
        self._embed_fn = embed_fn or make_embed_fn(config)
        self._conn = open_store_db(self.db_path)
        self._repo = Repository(self._conn)
        self._stop_requested = False
        self._closed = False
        EmbeddingStore._instances.add(self)
        logger.info("Embedding store opened at %s", self.db_path)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @classmethod
    def shutdown(cls) -> None:
        """Signal every live store to stop ingesting at the next chunk boundary.

        Connections are left open; in-flight embedding calls complete.
        """
        for store in list(cls._instances):
            store.stop_ingestion()

    def stop_ingestion(self) -> None:
        self._stop_requested = True

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested

    def close(self) -> None:
        """Close the connection and stop tracking this store (idempotent)."""
        if self._closed:
            return
        self._closed = True
        self._conn.close()
        EmbeddingStore._instances.discard(self)

    def __enter__(self) -> EmbeddingStore:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    def get_chunk_count_by_source(self, source_id: str) -> int:
        return self._repo.count_chunks_by_source(source_id)

    def has_ingested(self, source_id: str) -> bool:
        return self.get_chunk_count_by_source(source_id) > 0

    def get_source(self, source_id: str) -> Source | None:
        return self._repo.get_source(source_id)

    def list_sources(self) -> list[SourceStats]:
        return self._repo.list_sources()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def upsert_source(self, source: Source) -> None:
        self._repo.upsert_source(source)

    async def embed_text(self, text: str) -> list[float]:
        return await self._embed_fn(text)

    async def ingest(self, source: Source, chunks: Sequence[str]) -> IngestReport:
        """Upsert *source* and embed every chunk not already stored for it.

        Returns:
            IngestReport with inserted / skipped counts and whether the run
            was cancelled before the last chunk.
        """
        self.upsert_source(source)
        report = IngestReport(source_id=source.id, total=len(chunks))
        logger.info("Ingesting %d chunks into %s", len(chunks), source.id)

        for idx, content in enumerate(chunks):
            if self._stop_requested:
                logger.warning("Ingestion of %s cancelled at chunk %d", source.id, idx)
                report.cancelled = True
                break

            digest = content_hash(content)
            if self._repo.has_chunk_by_hash(source.id, digest):
                report.skipped += 1
                continue

            logger.debug("Embedding chunk %d of %s", idx, source.id)
            vector = await self.embed_text(content)
            self._repo.add_chunk(
                Chunk(
                    source_id=source.id,
                    idx=idx,
                    content=content,
                    hash=digest,
                    embedding=json.dumps(vector),
                )
            )
            report.inserted += 1

        logger.info(
            "Ingested %s: %d inserted, %d skipped%s",
            source.id,
            report.inserted,
            report.skipped,
            " (cancelled)" if report.cancelled else "",
        )
        return report

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(
        self,
        query: str,
        *,
        limit: int = DEFAULT_SEARCH_LIMIT,
        source_id: str | None = None,
    ) -> list[SearchResult]:
        """Return the *limit* chunks most similar to *query*, best first.

        Args:
            query: Natural-language query; embedded once.
            limit: Maximum number of results.
            source_id: Restrict the search to one source.
        """
        query_embedding = await self.embed_text(query)
        return rank(query_embedding, self._repo.list_chunks(source_id), limit)

    def describe(self) -> dict[str, Any]:
        """Small summary used by the CLI status view."""
        sources = self.list_sources()
        return {
            "db_path": str(self.db_path),
            "sources": len(sources),
            "chunks": sum(s.chunk_count for s in sources),
        }
