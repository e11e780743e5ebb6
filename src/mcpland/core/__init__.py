"""MCP plugin model: base classes, registry and loader."""

from mcpland.core.loader import LoaderError, load_available_mcps
from mcpland.core.mcp import (
    McpLand,
    McpSpec,
    McpTool,
    McpToolDefinition,
    McpToolSpec,
    ToolRegistrationError,
    error_result,
    format_search_results,
    text_result,
)
from mcpland.core.registry import DuplicateMcpError, InitializationError, McpRegistry, RegistryEntry

__all__ = [
    "DuplicateMcpError",
    "InitializationError",
    "LoaderError",
    "McpLand",
    "McpRegistry",
    "McpSpec",
    "McpTool",
    "McpToolDefinition",
    "McpToolSpec",
    "RegistryEntry",
    "ToolRegistrationError",
    "error_result",
    "format_search_results",
    "load_available_mcps",
    "text_result",
]
