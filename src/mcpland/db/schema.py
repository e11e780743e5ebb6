"""Database schema DDL and initialization."""

from __future__ import annotations

import sqlite3

# Stored in PRAGMA user_version. Bump when the tables below change shape.
SCHEMA_VERSION = 1


class SchemaVersionError(RuntimeError):
    """The database file was written with a newer schema than this mcpland knows."""


_CREATE_SOURCES = """
CREATE TABLE IF NOT EXISTS sources (
    id          TEXT PRIMARY KEY,
    meta        TEXT,
    updated_at  INTEGER NOT NULL
)
"""

# Chunks reference their source but are not cascade-deleted with it.
_CREATE_CHUNKS = """
CREATE TABLE IF NOT EXISTS chunks (
    id          TEXT PRIMARY KEY,
    source_id   TEXT NOT NULL REFERENCES sources(id),
    idx         INTEGER NOT NULL,
    content     TEXT NOT NULL,
    hash        TEXT NOT NULL,
    embedding   TEXT NOT NULL,
    created_at  INTEGER NOT NULL
)
"""

_CREATE_INDEXES = (
    "CREATE INDEX IF NOT EXISTS idx_chunks_source ON chunks(source_id)",
    "CREATE INDEX IF NOT EXISTS idx_chunks_hash ON chunks(hash)",
)


def schema_version(conn: sqlite3.Connection) -> int:
    return conn.execute("PRAGMA user_version").fetchone()[0]


def initialize(conn: sqlite3.Connection) -> None:
    """Create tables and indexes if they do not exist yet (idempotent).

    Raises:
        SchemaVersionError: If the database reports a newer SCHEMA_VERSION.
    """
    found = schema_version(conn)
    if found > SCHEMA_VERSION:
        raise SchemaVersionError(
            f"Database schema version {found} is newer than supported version {SCHEMA_VERSION}; "
            "upgrade mcpland or point MCPLAND_DB_PATH at another file."
        )
    conn.execute(_CREATE_SOURCES)
    conn.execute(_CREATE_CHUNKS)
    for ddl in _CREATE_INDEXES:
        conn.execute(ddl)
    if found < SCHEMA_VERSION:
        conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
    conn.commit()
