"""Repository for all embedding store database operations.

Single interface for sources and chunks. Every write commits immediately so a
cancelled ingestion leaves all previously inserted chunks durable.
"""

from __future__ import annotations

import json
import sqlite3
import time
import uuid

from mcpland.db.models import Chunk, Source, SourceStats


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class Repository:
    """Data access layer for sources and chunks.

    Wraps an open sqlite3.Connection. The connection is owned by the caller
    and must be closed after use.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Initialise with an open database connection.

        Args:
            conn: An open sqlite3.Connection with the schema initialised
                (see mcpland.db.schema.initialize).
        """
        self._conn = conn

    # ------------------------------------------------------------------
    # Sources
    # ------------------------------------------------------------------

    def upsert_source(self, source: Source) -> None:
        """Insert *source* or replace the metadata of the existing row.

        ``updated_at`` is bumped on every call.
        """
        meta = json.dumps(source.meta) if source.meta else None
        updated_at = now_ms()
        self._conn.execute(
            """
            INSERT INTO sources (id, meta, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                meta = excluded.meta,
                updated_at = excluded.updated_at
            """,
            (source.id, meta, updated_at),
        )
        self._conn.commit()
        source.updated_at = updated_at

    def get_source(self, source_id: str) -> Source | None:
        """Return a source by ID, or None if not found."""
        row = self._conn.execute(
            "SELECT id, meta, updated_at FROM sources WHERE id = ?", (source_id,)
        ).fetchone()
        return _row_to_source(row) if row else None

    def list_sources(self) -> list[SourceStats]:
        """Return every source with its chunk count, ordered by id."""
        rows = self._conn.execute(
            """
            SELECT s.id, s.meta, s.updated_at, COUNT(c.id) AS chunk_count
            FROM sources s LEFT JOIN chunks c ON c.source_id = s.id
            GROUP BY s.id
            ORDER BY s.id
            """
        ).fetchall()
        return [SourceStats(source=_row_to_source(r), chunk_count=r["chunk_count"]) for r in rows]

    # ------------------------------------------------------------------
    # Chunks
    # ------------------------------------------------------------------

    def has_chunk_by_hash(self, source_id: str, content_hash: str) -> bool:
        row = self._conn.execute(
            "SELECT id FROM chunks WHERE source_id = ? AND hash = ? LIMIT 1",
            (source_id, content_hash),
        ).fetchone()
        return row is not None

    def add_chunk(self, chunk: Chunk) -> str:
        """Insert *chunk* and return its generated id."""
        chunk.id = chunk.id or uuid.uuid4().hex
        chunk.created_at = chunk.created_at or now_ms()
        self._conn.execute(
            """
            INSERT INTO chunks (id, source_id, idx, content, hash, embedding, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                chunk.id,
                chunk.source_id,
                chunk.idx,
                chunk.content,
                chunk.hash,
                chunk.embedding,
                chunk.created_at,
            ),
        )
        self._conn.commit()
        return chunk.id

    def count_chunks_by_source(self, source_id: str) -> int:
        """Return the number of chunks belonging to *source_id* (0 if unknown)."""
        row = self._conn.execute(
            "SELECT COUNT(1) FROM chunks WHERE source_id = ?", (source_id,)
        ).fetchone()
        return int(row[0]) if row else 0

    def list_chunks(self, source_id: str | None = None) -> list[Chunk]:
        """Return chunks in storage order, optionally restricted to one source."""
        sql = "SELECT id, source_id, idx, content, hash, embedding, created_at FROM chunks"
        params: tuple[str, ...] = ()
        if source_id is not None:
            sql += " WHERE source_id = ?"
            params = (source_id,)
        sql += " ORDER BY rowid"
        return [_row_to_chunk(r) for r in self._conn.execute(sql, params).fetchall()]


# ------------------------------------------------------------------
# Row → model helpers
# ------------------------------------------------------------------

def _row_to_source(row: sqlite3.Row) -> Source:
    return Source(
        id=row["id"],
        meta=json.loads(row["meta"]) if row["meta"] else None,
        updated_at=row["updated_at"],
    )


def _row_to_chunk(row: sqlite3.Row) -> Chunk:
    return Chunk(
        id=row["id"],
        source_id=row["source_id"],
        idx=row["idx"],
        content=row["content"],
        hash=row["hash"],
        embedding=row["embedding"],
        created_at=row["created_at"],
    )
