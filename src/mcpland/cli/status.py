"""mcpland status command.

Shows the loaded MCPs and their tools, whether each tool's source has been
ingested, the MCPs and tools switched off in mcpland.json, and a summary of
the embedding store. Nothing is fetched.
"""

from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from mcpland.bootstrap import Runtime, resolve_source_dir
from mcpland.cli.common import RootOption, load_runtime_or_exit

console = Console()


def status_cmd(
    root: RootOption = Path("."),
) -> None:
    """Show loaded MCPs, tools and stored chunk counts."""
    runtime = load_runtime_or_exit(root, console)
    try:
        _show_store_panel(runtime)

        if not len(runtime.registry):
            console.print("[yellow]No enabled MCPs.[/]")

        table = _mcps_table(runtime)
        if table.row_count:
            console.print(table)
    finally:
        runtime.close()


def _show_store_panel(runtime: Runtime) -> None:
    info = runtime.store.describe()
    console.print(
        Panel(
            f"Name:        {runtime.config.name}\n"
            f"Source:      {resolve_source_dir(runtime.config)}\n"
            f"Database:    {info['db_path']}\n"
            f"Model:       {runtime.config.embedding_model}\n"
            f"Sources:     {info['sources']}\n"
            f"Chunks:      {info['chunks']}",
            title="[bold]mcpland[/]",
            expand=False,
        )
    )


def _mcps_table(runtime: Runtime) -> Table:
    table = Table(title="MCPs")
    table.add_column("MCP", style="bold")
    table.add_column("Tool")
    table.add_column("Source")
    table.add_column("Chunks", justify="right")

    for entry in runtime.registry.get_all():
        for tool in entry.mcp.tools:
            source_id = tool.spec.source_id
            count = runtime.store.get_chunk_count_by_source(source_id)
            shown = str(count) if count else "[yellow]not ingested[/]"
            table.add_row(entry.name, tool.spec.name, source_id, shown)

    # Switched off in mcpland.json
    for mcp_name, mcp_cfg in runtime.config.registry.items():
        if mcp_cfg.enabled is False:
            table.add_row(mcp_name, "*", "-", "[dim]disabled[/]")
            continue
        for tool_name, tool_cfg in mcp_cfg.tools.items():
            if tool_cfg.enabled is False:
                table.add_row(mcp_name, tool_name, "-", "[dim]disabled[/]")
    return table
