"""mcpland ingest pipeline: chunker, retry fetcher, embedding store."""

from mcpland.ingest.chunker import ChunkOptions, chunk_text
from mcpland.ingest.embedding import EmbeddingConfig, make_embed_fn
from mcpland.ingest.fetch import FetchError, fetch_with_retry
from mcpland.ingest.store import EmbeddingStore, IngestReport, content_hash

__all__ = [
    "ChunkOptions",
    "EmbeddingConfig",
    "EmbeddingStore",
    "FetchError",
    "IngestReport",
    "chunk_text",
    "content_hash",
    "fetch_with_retry",
    "make_embed_fn",
]
