"""Opening the SQLite file behind an embedding store."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from mcpland.db.schema import initialize

logger = logging.getLogger(__name__)


def open_store_db(db_path: Path | str) -> sqlite3.Connection:
    """Open *db_path* ready for use by an EmbeddingStore.

    Parent directories are created, rows come back as ``sqlite3.Row``,
    foreign keys and WAL journaling are switched on and the schema is
    applied. WAL lets ``mcpland search`` read while a stdio server ingests.

    Raises:
        SchemaVersionError: If the file was written by a newer mcpland.
    """
    path = Path(db_path)
    created = not path.exists()
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    conn.execute("PRAGMA journal_mode = WAL")
    try:
        initialize(conn)
    except Exception:
        conn.close()
        raise
    if created:
        logger.debug("Created store database %s", path)
    return conn
