"""mcpland CLI entry point."""

from __future__ import annotations

from typing import Annotated

import typer

from mcpland import __version__
from mcpland.cli.ingest import ingest_cmd
from mcpland.cli.search import search_cmd
from mcpland.cli.status import status_cmd
from mcpland.cli.stdio import stdio_cmd


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"mcpland {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="mcpland",
    help=(
        "mcpland: retrieval-augmented MCP tools.\n\n"
        "  mcpland stdio   Serve every enabled tool to an MCP host over stdio.\n"
        "  mcpland ingest  Fetch and embed tool context ahead of time."
    ),
    add_completion=False,
)


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
) -> None:
    """mcpland: retrieval-augmented MCP tools."""


app.command("stdio")(stdio_cmd)
app.command("ingest")(ingest_cmd)
app.command("status")(status_cmd)
app.command("search")(search_cmd)


@app.command("version")
def version_cmd() -> None:
    """Show the installed mcpland version."""
    typer.echo(f"mcpland {__version__}")


if __name__ == "__main__":
    app()
