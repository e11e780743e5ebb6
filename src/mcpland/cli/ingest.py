"""mcpland ingest command.

Fetches, chunks and embeds the context of every enabled tool once, then
prints one row per tool with its chunk count. Already stored chunks are
skipped, so an interrupted run resumes where it stopped.

Exit codes:
  0  every MCP initialized
  1  configuration, loader or initialization failure
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from mcpland.bootstrap import Runtime, resolve_source_dir
from mcpland.cli.common import RootOption, VerboseOption, load_runtime_or_exit
from mcpland.cli.errors import err_init_failed, warn_no_mcps
from mcpland.core.registry import InitializationError
from mcpland.logging_utils import configure_logging

console = Console()


def ingest_cmd(
    root: RootOption = Path("."),
    verbose: VerboseOption = False,
) -> None:
    """Fetch and embed the context of every enabled tool."""
    configure_logging(verbose)
    runtime = load_runtime_or_exit(root, console)
    try:
        if not len(runtime.registry):
            console.print(warn_no_mcps(str(resolve_source_dir(runtime.config))))
            return

        failures: dict[str, BaseException] = {}
        try:
            asyncio.run(runtime.registry.initialize_all())
        except InitializationError as exc:
            failures = exc.failures

        console.print(_tools_table(runtime, failures))
        if failures:
            console.print(err_init_failed(failures))
            raise typer.Exit(1)
        console.print(f"[green]✓[/] {len(runtime.registry)} MCP(s) ready.")
    finally:
        runtime.close()


def _tools_table(runtime: Runtime, failures: dict[str, BaseException]) -> Table:
    table = Table(title="Ingested context")
    table.add_column("MCP", style="bold")
    table.add_column("Tool")
    table.add_column("Source")
    table.add_column("Chunks", justify="right")
    table.add_column("Status")

    for entry in runtime.registry.get_all():
        status = "[red]failed[/]" if entry.name in failures else "[green]ready[/]"
        for tool in entry.mcp.tools:
            source_id = tool.spec.source_id
            count = runtime.store.get_chunk_count_by_source(source_id)
            table.add_row(entry.name, tool.spec.name, source_id, str(count), status)
    return table
