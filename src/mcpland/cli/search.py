"""mcpland search command.

Runs a similarity search against the embedding store without starting a
server. Useful for checking what a tool would return for a query.

Usage:
    mcpland search "standalone components" --source angular-llm-context --limit 5
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from mcpland.cli.common import RootOption
from mcpland.cli.errors import err_config, err_no_api_key, err_schema
from mcpland.config import CONFIG_FILE_NAME, ConfigError, load_config
from mcpland.db.schema import SchemaVersionError
from mcpland.ingest.embedding import EmbeddingConfig
from mcpland.ingest.store import DEFAULT_SEARCH_LIMIT, EmbeddingStore

console = Console()


def search_cmd(
    query: Annotated[str, typer.Argument(help="Natural-language query.")],
    source: Annotated[
        str | None,
        typer.Option("--source", "-s", help="Restrict results to one source id."),
    ] = None,
    limit: Annotated[
        int,
        typer.Option("--limit", "-n", min=1, help="Maximum number of chunks."),
    ] = DEFAULT_SEARCH_LIMIT,
    root: RootOption = Path("."),
) -> None:
    """Search stored chunks by semantic similarity."""
    try:
        config = load_config(root)
    except ConfigError as exc:
        console.print(err_config(exc, str(root / CONFIG_FILE_NAME)))
        raise typer.Exit(1) from exc

    if not config.db_file.exists():
        console.print(
            f"[yellow]No database at '{escape(str(config.db_file))}'.[/]\n"
            "  Run:  mcpland ingest"
        )
        raise typer.Exit(1)

    try:
        store = EmbeddingStore(config.db_file, config=EmbeddingConfig(model=config.embedding_model))
    except SchemaVersionError as exc:
        console.print(err_schema(exc))
        raise typer.Exit(1) from exc
    try:
        try:
            results = asyncio.run(store.search(query, limit=limit, source_id=source))
        except RuntimeError as exc:
            if "API key" not in str(exc):
                raise
            console.print(err_no_api_key(config.embedding_model))
            raise typer.Exit(1) from exc
    finally:
        store.close()

    if not results:
        console.print("[yellow]No relevant context found.[/]")
        return

    for i, result in enumerate(results, start=1):
        console.print(
            f"[bold]{i}.[/] [cyan]{escape(result.source_id)}[/] #{result.idx}  "
            f"score={result.score:.3f}"
        )
        console.print(escape(result.content), highlight=False)
        console.print()
