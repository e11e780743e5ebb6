"""Wire configuration, embedding store, registry and loader together."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from mcpland.config import DEFAULT_SOURCE, McpLandConfig, load_config
from mcpland.core.loader import load_available_mcps
from mcpland.core.registry import McpRegistry
from mcpland.ingest.embedding import EmbedFn, EmbeddingConfig
from mcpland.ingest.store import EmbeddingStore

BUNDLED_SOURCE_DIR: Path = Path(__file__).parent / "mcps"


@dataclass
class Runtime:
    config: McpLandConfig
    registry: McpRegistry
    store: EmbeddingStore

    def close(self) -> None:
        self.store.close()


def resolve_source_dir(config: McpLandConfig) -> Path:
    """Configured source folder, or the bundled MCPs when the default is absent."""
    if not config.source_dir.is_dir() and config.source == DEFAULT_SOURCE:
        return BUNDLED_SOURCE_DIR
    return config.source_dir


def build_runtime(
    root_dir: Path | str | None = None,
    *,
    embed_fn: EmbedFn | None = None,
) -> Runtime:
    """Load config, open the store and load every enabled MCP.

    Raises:
        ConfigError: Invalid ``mcpland.json``.
        LoaderError: Discovery or registration failure (the store is closed).
    """
    config = load_config(root_dir)
    store = EmbeddingStore(
        config.db_file,
        embed_fn=embed_fn,
        config=EmbeddingConfig(model=config.embedding_model),
    )
    registry = McpRegistry()
    try:
        load_available_mcps(registry, config, store=store, source_dir=resolve_source_dir(config))
    except Exception:
        store.close()
        raise
    return Runtime(config=config, registry=registry, store=store)
