"""Logging bootstrap: rich-formatted records on stderr.

stdout is reserved for the stdio protocol, so every handler writes to stderr.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(verbose: bool = False) -> None:
    """Route ``mcpland.*`` loggers to a stderr RichHandler.

    Args:
        verbose: Log at DEBUG (per-chunk progress) instead of INFO.
    """
    level = logging.DEBUG if verbose else logging.INFO
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    app_logger = logging.getLogger("mcpland")
    app_logger.handlers.clear()
    app_logger.addHandler(handler)
    app_logger.setLevel(level)
    app_logger.propagate = False

    # LiteLLM is chatty at INFO.
    logging.getLogger("LiteLLM").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
