"""mcpland stdio command.

Loads every enabled MCP from the source folder and serves their tools to an
MCP host over stdin/stdout. Context ingestion runs in the background.

Logging goes to stderr; stdout carries the protocol only.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from rich.console import Console

from mcpland.cli.common import RootOption, VerboseOption, load_runtime_or_exit
from mcpland.logging_utils import configure_logging
from mcpland.server import run_stdio

console = Console(stderr=True)


def stdio_cmd(
    root: RootOption = Path("."),
    verbose: VerboseOption = False,
) -> None:
    """Serve all enabled MCP tools over stdio."""
    configure_logging(verbose)
    runtime = load_runtime_or_exit(root, console)
    try:
        asyncio.run(run_stdio(runtime.config, runtime.registry))
    except KeyboardInterrupt:
        pass
    finally:
        runtime.close()
