"""Directory-driven discovery of MCPs and their tools.

Layout under the configured source folder::

    <source>/<mcp>/__init__.py               module attribute ``mcp``: McpLand instance
    <source>/<mcp>/tools/<tool>/__init__.py  module attribute ``tool``: McpTool instance or class

Entries whose name starts with ``_`` or ``.`` are ignored. Every other
problem (missing export, blank name, identity mismatch, import error,
duplicate MCP name) aborts the whole load with a LoaderError.

Each load executes the package modules afresh, so repeated loads yield
independent MCP and tool instances.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING

from mcpland.config import McpLandConfig, is_mcp_enabled, is_tool_enabled
from mcpland.core.mcp import McpLand
from mcpland.core.registry import McpRegistry

if TYPE_CHECKING:
    from mcpland.ingest.store import EmbeddingStore

logger = logging.getLogger(__name__)

MCP_EXPORT = "mcp"
TOOL_EXPORT = "tool"
TOOLS_DIR = "tools"

_MODULE_PREFIX = "mcpland_sources"


class LoaderError(RuntimeError):
    """Raised when an MCP or tool cannot be discovered or registered."""


def discover_dirs(parent: Path) -> list[Path]:
    """Sorted candidate package directories directly under *parent*."""
    if not parent.is_dir():
        return []
    return sorted(
        p for p in parent.iterdir() if p.is_dir() and not p.name.startswith(("_", "."))
    )


def load_available_mcps(
    registry: McpRegistry,
    config: McpLandConfig,
    *,
    store: EmbeddingStore | None = None,
    source_dir: Path | None = None,
) -> list[McpLand]:
    """Discover, build and register every enabled MCP.

    Args:
        registry: Registry receiving the MCPs.
        config: Loaded configuration (enable/disable table, source folder).
        store: Embedding store attached to every registered tool.
        source_dir: Override of ``config.source_dir``.

    Returns:
        The registered MCPs, in discovery order.

    Raises:
        LoaderError: On any discovery or registration failure.
    """
    root = source_dir if source_dir is not None else config.source_dir
    if not root.is_dir():
        raise LoaderError(f"MCP source folder '{root}' does not exist")

    logger.info("Loading MCPs from %s", root)
    loaded: list[McpLand] = []

    for mcp_dir in discover_dirs(root):
        module = _import_package(f"{_MODULE_PREFIX}.{mcp_dir.name}", mcp_dir)
        instance = getattr(module, MCP_EXPORT, None)
        if not isinstance(instance, McpLand):
            raise LoaderError(
                f"MCP at '{mcp_dir}' must export an McpLand instance named '{MCP_EXPORT}'"
            )

        name = instance.spec.name
        if not isinstance(name, str) or not name.strip():
            raise LoaderError(f"MCP at '{mcp_dir}' is missing required spec.name")

        if not is_mcp_enabled(config, name):
            logger.info("Skipping disabled MCP %s", name)
            continue

        for tool_dir in discover_dirs(mcp_dir / TOOLS_DIR):
            if not is_tool_enabled(config, name, tool_dir.name):
                logger.info("Skipping disabled tool %s/%s", name, tool_dir.name)
                continue
            _register_tool(instance, tool_dir, module.__name__, config)

        if store is not None:
            instance.attach_store(store)

        try:
            registry.register(instance)
        except ValueError as exc:
            raise LoaderError(f"Failed to register MCP {name}: {exc}") from exc
        loaded.append(instance)

    logger.info("Loaded %d MCP(s): %s", len(loaded), ", ".join(m.name for m in loaded) or "-")
    return loaded


def _register_tool(instance: McpLand, tool_dir: Path, parent_module: str, config: McpLandConfig) -> None:
    tool_module = _import_package(f"{parent_module}.{TOOLS_DIR}.{tool_dir.name}", tool_dir)
    export = getattr(tool_module, TOOL_EXPORT, None)
    if export is None:
        raise LoaderError(
            f"Tool {instance.name}/{tool_dir.name} is missing a '{TOOL_EXPORT}' export"
        )
    try:
        tool = export() if inspect.isclass(export) else export
        instance.register_tool(tool, tool_dir.name, config)
    except Exception as exc:
        raise LoaderError(f"Failed to register tool {instance.name}/{tool_dir.name}: {exc}") from exc


def _import_package(module_name: str, directory: Path) -> ModuleType:
    """Execute ``directory/__init__.py`` as a fresh package named *module_name*."""
    init_file = directory / "__init__.py"
    if not init_file.is_file():
        raise LoaderError(f"'{directory}' is not a Python package (missing __init__.py)")

    spec = importlib.util.spec_from_file_location(
        module_name, init_file, submodule_search_locations=[str(directory)]
    )
    if spec is None or spec.loader is None:
        raise LoaderError(f"Cannot load '{init_file}'")

    module = importlib.util.module_from_spec(spec)
    # Registered before execution so relative imports inside the package resolve.
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        sys.modules.pop(module_name, None)
        raise LoaderError(f"Failed to import '{init_file}': {exc}") from exc
    return module
