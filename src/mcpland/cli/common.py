"""Options and runtime loading shared by the mcpland commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from mcpland.bootstrap import Runtime, build_runtime
from mcpland.cli.errors import err_config, err_loader, err_schema
from mcpland.config import CONFIG_FILE_NAME, ConfigError
from mcpland.core.loader import LoaderError
from mcpland.db.schema import SchemaVersionError

RootOption = Annotated[
    Path,
    typer.Option("--root", help="Project root holding mcpland.json."),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Log per-chunk progress."),
]


def load_runtime_or_exit(root: Path, console: Console) -> Runtime:
    """Build the runtime; print an actionable error and exit 1 on failure."""
    try:
        return build_runtime(root)
    except ConfigError as exc:
        console.print(err_config(exc, str(root / CONFIG_FILE_NAME)))
        raise typer.Exit(1) from exc
    except LoaderError as exc:
        console.print(err_loader(exc))
        raise typer.Exit(1) from exc
    except SchemaVersionError as exc:
        console.print(err_schema(exc))
        raise typer.Exit(1) from exc
