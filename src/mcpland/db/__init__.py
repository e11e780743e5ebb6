"""mcpland database layer."""

from mcpland.db.connection import open_store_db
from mcpland.db.models import Chunk, SearchResult, Source, SourceStats
from mcpland.db.repository import Repository
from mcpland.db.schema import SCHEMA_VERSION, SchemaVersionError, initialize

__all__ = [
    "SCHEMA_VERSION",
    "Chunk",
    "Repository",
    "SchemaVersionError",
    "SearchResult",
    "Source",
    "SourceStats",
    "initialize",
    "open_store_db",
]
