"""Host boundary: expose registered tools over the MCP stdio protocol.

The protocol handshake itself is handled by the ``mcp`` SDK. This module
lists tool surfaces, dispatches calls by exact name, and turns unknown
names and handler failures into error payloads instead of exceptions.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import signal
from collections.abc import Sequence
from typing import Any

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from mcpland import __version__
from mcpland.config import McpLandConfig
from mcpland.core.mcp import McpToolDefinition, ToolResult, error_result
from mcpland.core.registry import McpRegistry
from mcpland.ingest.store import EmbeddingStore

logger = logging.getLogger(__name__)

_SHUTDOWN_GRACE = 5.0  # seconds


async def dispatch_tool_call(
    tools: Sequence[McpToolDefinition], name: str, arguments: Any
) -> ToolResult:
    """Call the tool named *name*; never raises."""
    tool = next((t for t in tools if t.name == name), None)
    if tool is None:
        return error_result(f"Unknown tool: {name}")
    try:
        return await tool.call(arguments)
    except Exception as exc:
        logger.exception("Tool %s failed", name)
        return error_result("Tool execution failed", str(exc))


def to_content(result: ToolResult) -> list[types.TextContent]:
    """Convert a tool result dict into MCP text content blocks."""
    blocks: list[types.TextContent] = []
    for item in result.get("content", []):
        if item.get("type") == "text":
            blocks.append(types.TextContent(type="text", text=str(item.get("text", ""))))
        else:
            blocks.append(types.TextContent(type="text", text=json.dumps(item, default=str)))
    return blocks


def create_mcp_server(config: McpLandConfig, tools: Sequence[McpToolDefinition]) -> Server:
    """Build an MCP server listing *tools* and routing calls to them."""
    server = Server(config.name, version=__version__, instructions=config.description)
    listed = [
        types.Tool(name=t.name, description=t.description, inputSchema=t.input_schema)
        for t in tools
    ]

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return listed

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any] | None) -> list[types.TextContent]:
        return to_content(await dispatch_tool_call(tools, name, arguments or {}))

    return server


def _log_init_outcome(task: asyncio.Task[None]) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("MCP initialization failed: %s", exc)
    else:
        logger.info("All MCPs initialized")


async def run_stdio(config: McpLandConfig, registry: McpRegistry) -> None:
    """Serve every registered tool over stdio.

    MCP initialization (fetch + ingest) runs in the background so the host
    handshake is not delayed; an initialization failure is logged and the
    server keeps serving. SIGTERM and SIGINT ask every store to stop
    ingesting, then stop the server; the in-flight chunk is given
    ``_SHUTDOWN_GRACE`` seconds to land before initialization is cancelled.
    """
    tools = registry.get_all_tools()
    server = create_mcp_server(config, tools)

    loop = asyncio.get_running_loop()
    serve_task = asyncio.current_task()
    signalled: list[str] = []

    def _on_signal(signame: str) -> None:
        logger.warning("Received %s, stopping", signame)
        signalled.append(signame)
        EmbeddingStore.shutdown()
        if serve_task is not None:
            serve_task.cancel()

    installed: list[signal.Signals] = []
    for sig in (signal.SIGTERM, signal.SIGINT):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, _on_signal, sig.name)
            installed.append(sig)

    init_task = asyncio.create_task(registry.initialize_all())
    init_task.add_done_callback(_log_init_outcome)

    logger.info("MCP server running on stdio with %d tools", len(tools))
    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())
    except asyncio.CancelledError:
        if not signalled:
            raise
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)
        EmbeddingStore.shutdown()
        await asyncio.wait({init_task}, timeout=_SHUTDOWN_GRACE)
        if not init_task.done():
            init_task.cancel()
        await asyncio.gather(init_task, return_exceptions=True)
        logger.info("MCP server stopped")
