"""mcpland rich error messages with actionable fixes.

Every error shown to the user must contain:
  1. What went wrong (clear cause)
  2. The exact action the user should take to fix it

Usage:
    from mcpland.cli.errors import err_loader
    console.print(err_loader(exc))
    raise typer.Exit(1)
"""

from __future__ import annotations

from rich.markup import escape

from mcpland.ingest.embedding import provider_of


def err_config(exc: Exception, config_path: str = "mcpland.json") -> str:
    """mcpland.json is unreadable or contains a forbidden value."""
    return (
        f"[red]Error:[/] Invalid configuration in '{escape(config_path)}'.\n"
        f"  {escape(str(exc))}\n"
        "  Fix the file (it must be a JSON object) and run the command again."
    )


def err_loader(exc: Exception) -> str:
    """An MCP or tool could not be discovered or registered."""
    cause = f"\n  Caused by: {escape(str(exc.__cause__))}" if exc.__cause__ else ""
    return (
        f"[red]Error:[/] Failed to load MCPs.\n"
        f"  {escape(str(exc))}{cause}\n"
        "  Each <source>/<mcp>/__init__.py must export `mcp` (an McpLand instance) and\n"
        "  each <source>/<mcp>/tools/<tool>/__init__.py must export `tool`.\n"
        "  To switch a tool off instead, set registry.<mcp>.tools.<tool>.enabled = false."
    )


def err_no_api_key(model: str) -> str:
    """No API key for the embedding provider of *model*.

    Example:
        No API key for 'openai'. Set:  export OPENAI_API_KEY=sk-...
    """
    provider = provider_of(model) or model
    env_var = f"{provider.upper()}_API_KEY"
    return (
        f"[red]Error:[/] No API key for '{escape(provider)}'.\n"
        f"  Set:  export {env_var}=sk-..."
    )


def err_init_failed(failures: dict[str, BaseException]) -> str:
    """One or more MCPs failed to fetch or ingest their context."""
    lines = "\n".join(f"    ✗ {escape(name)}: {escape(str(exc))}" for name, exc in failures.items())
    return (
        "[red]Error:[/] MCP initialization failed.\n"
        f"{lines}\n"
        "  Chunks ingested before the failure are kept; run  mcpland ingest  again to resume."
    )


def warn_no_mcps(source_dir: str) -> str:
    """The source folder holds no enabled MCP."""
    return (
        f"[yellow]No enabled MCPs found in '{escape(source_dir)}'.[/]\n"
        "  Add <mcp>/__init__.py with an `mcp` export, or check registry.<mcp>.enabled in mcpland.json."
    )


def err_schema(exc: Exception) -> str:
    """The store database was written by a newer mcpland."""
    return (
        f"[red]Error:[/] Cannot open the context database.\n"
        f"  {escape(str(exc))}"
    )
