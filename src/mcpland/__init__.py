"""mcpland: retrieval-augmented MCP tool plugins."""

import importlib.metadata

try:
    __version__ = importlib.metadata.version("mcpland")
except importlib.metadata.PackageNotFoundError:
    __version__ = "dev"

from mcpland.config import ConfigError, McpLandConfig, load_config  # noqa: E402
from mcpland.core import (  # noqa: E402
    LoaderError,
    McpLand,
    McpRegistry,
    McpSpec,
    McpTool,
    McpToolSpec,
    load_available_mcps,
)
from mcpland.ingest import ChunkOptions, EmbeddingStore, chunk_text, fetch_with_retry  # noqa: E402

__all__ = [
    "ChunkOptions",
    "ConfigError",
    "EmbeddingStore",
    "LoaderError",
    "McpLand",
    "McpLandConfig",
    "McpRegistry",
    "McpSpec",
    "McpTool",
    "McpToolSpec",
    "__version__",
    "chunk_text",
    "fetch_with_retry",
    "load_available_mcps",
    "load_config",
]
