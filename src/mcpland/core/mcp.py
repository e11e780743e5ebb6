"""MCP plugin and tool base classes.

An ``McpLand`` is a named bundle of tools. An ``McpTool`` fetches its
reference text once, ingests it into the embedding store under its own
source id, and answers queries by similarity search over that source.

Results handed to the host use the MCP tool-result shape::

    {"content": [{"type": "text", "text": "..."}]}
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from mcpland.config import McpLandConfig, is_tool_enabled
from mcpland.db.models import SearchResult, Source
from mcpland.ingest.chunker import ChunkOptions, chunk_text
from mcpland.ingest.store import DEFAULT_SEARCH_LIMIT, IngestReport

if TYPE_CHECKING:
    from mcpland.ingest.store import EmbeddingStore

logger = logging.getLogger(__name__)

ToolResult = dict[str, Any]
# Sync or async: (arguments) -> ToolResult
ToolHandler = Callable[[Any], Any]


class ToolRegistrationError(ValueError):
    """Raised when a tool cannot be registered into an MCP."""


# ---------------------------------------------------------------------------
# Specs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class McpSpec:
    name: str
    description: str = ""


@dataclass
class McpToolSpec:
    """Declarative description of a tool.

    Attributes:
        name: Tool name; the owning MCP name is prefixed at registration.
        description: Short description shown to the host.
        schema: Pydantic model validating the tool input.
        source_id: Store source for the tool context. Defaults to
            ``<mcp>-<tool>-context`` at registration.
        mcp_id: Owning MCP (plugin folder name). Defaults to the MCP name.
        tool_id: Tool folder name under ``<mcp>/tools``.
        context_url: URL fetched once at initialization.
        chunk_options: Chunking parameters for the fetched context.
    """

    name: str
    description: str
    schema: type[BaseModel]
    source_id: str = ""
    mcp_id: str | None = None
    tool_id: str | None = None
    context_url: str | None = None
    chunk_options: ChunkOptions = field(default_factory=ChunkOptions)


@dataclass
class McpToolDefinition:
    """What the host boundary sees of a tool."""

    name: str
    description: str
    input_schema: dict[str, Any]
    handler: ToolHandler

    async def call(self, arguments: Any) -> ToolResult:
        result = self.handler(arguments)
        if inspect.isawaitable(result):
            result = await result
        return result


# ---------------------------------------------------------------------------
# Result helpers
# ---------------------------------------------------------------------------


def text_result(text: str) -> ToolResult:
    return {"content": [{"type": "text", "text": text}]}


def error_result(error: str, details: Any = None) -> ToolResult:
    payload: dict[str, Any] = {"error": error}
    if details is not None:
        payload["details"] = details
    return text_result(json.dumps(payload, default=str))


def format_search_results(results: Sequence[SearchResult]) -> str:
    """Render search hits as numbered, scored blocks separated by blank lines."""
    return "\n\n".join(
        f"[[Chunk {i} | score={r.score:.3f}]]\n{r.content}" for i, r in enumerate(results, start=1)
    )


# ---------------------------------------------------------------------------
# Tool
# ---------------------------------------------------------------------------


class McpTool(ABC):
    """Base class for retrieval-backed tools.

    Subclasses implement ``fetch_context()`` (called once per initialization)
    and ``handle_context()`` (called per host request).
    """

    def __init__(self, spec: McpToolSpec, store: EmbeddingStore | None = None) -> None:
        self.spec = spec
        self._store = store

    def attach_store(self, store: EmbeddingStore) -> None:
        self._store = store

    @property
    def store(self) -> EmbeddingStore:
        if self._store is None:
            raise RuntimeError(f"Tool '{self.spec.name}' has no embedding store attached.")
        return self._store

    @abstractmethod
    async def fetch_context(self) -> str:
        """Return the reference text to ingest."""

    @abstractmethod
    async def handle_context(self, args: Any) -> ToolResult:
        """Answer a host request."""

    async def init(self, config: McpLandConfig | None = None) -> IngestReport | None:
        """Fetch, chunk and ingest the tool context.

        Always fetches; the store skips chunks already ingested. Returns None
        when the tool is disabled by *config*.
        """
        mcp_id = self.spec.mcp_id or "unknown-mcp"
        tool_id = self.spec.tool_id or self.spec.name

        if config is not None and not is_tool_enabled(config, mcp_id, tool_id):
            logger.warning("Tool disabled by config: %s/%s", mcp_id, tool_id)
            return None

        logger.info("Initializing %s/%s", mcp_id, tool_id)
        text = await self.fetch_context()
        logger.info("Fetched context for %s (%d chars)", self.spec.name, len(text))

        chunks = chunk_text(text, self.spec.chunk_options)
        if not self.spec.source_id.strip():
            self.spec.source_id = f"{mcp_id}-{tool_id}-context"

        return await self.store.ingest(
            Source(
                id=self.spec.source_id,
                meta={"name": self.spec.name, "url": self.spec.context_url},
            ),
            chunks,
        )

    async def search_context(self, query: str, limit: int = DEFAULT_SEARCH_LIMIT) -> list[SearchResult]:
        return await self.store.search(query, limit=limit, source_id=self.spec.source_id)

    def get_tool(self) -> McpToolDefinition:
        return McpToolDefinition(
            name=self.spec.name,
            description=self.spec.description,
            input_schema=self.spec.schema.model_json_schema(),
            handler=self.handle_context,
        )


# ---------------------------------------------------------------------------
# MCP (plugin)
# ---------------------------------------------------------------------------


class McpLand:
    """A named bundle of tools sharing one identity namespace."""

    def __init__(self, spec: McpSpec) -> None:
        self.spec = spec
        self._tools: list[McpTool] = []

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def tools(self) -> tuple[McpTool, ...]:
        return tuple(self._tools)

    def register_tool(
        self,
        tool: McpTool,
        discovered_tool_id: str | None = None,
        config: McpLandConfig | None = None,
    ) -> bool:
        """Validate, normalise and add *tool*.

        Fills ``mcp_id`` / ``tool_id`` when missing, prefixes the tool name
        with ``<mcp>-`` and defaults ``source_id``.

        Returns:
            False if *config* disables the tool (it is not added), else True.

        Raises:
            ToolRegistrationError: On a missing spec, blank name or
                description, or a tool that belongs to another MCP.
        """
        spec = getattr(tool, "spec", None)
        if not isinstance(spec, McpToolSpec):
            raise ToolRegistrationError("Tool is missing required spec")
        if not spec.name or not spec.name.strip():
            raise ToolRegistrationError("Tool is missing required spec.name")
        if not spec.description or not spec.description.strip():
            raise ToolRegistrationError("Tool is missing required spec.description")

        mcp_id = spec.mcp_id = spec.mcp_id or self.spec.name
        tool_id = spec.tool_id = spec.tool_id or discovered_tool_id or spec.name

        if mcp_id != self.spec.name:
            raise ToolRegistrationError(
                f"Tool MCP mismatch: expected {self.spec.name}, got {mcp_id}"
            )

        base_name = spec.name.strip()
        if not base_name.startswith(f"{mcp_id}-"):
            base_name = f"{mcp_id}-{base_name}"
        spec.name = base_name
        if not spec.source_id or not spec.source_id.strip():
            spec.source_id = f"{mcp_id}-{tool_id}-context"

        if config is not None and not is_tool_enabled(config, self.spec.name, tool_id):
            logger.warning("Skipping disabled tool %s/%s", self.spec.name, tool_id)
            return False

        self._tools.append(tool)
        return True

    def attach_store(self, store: EmbeddingStore) -> None:
        for tool in self._tools:
            tool.attach_store(store)

    async def init(self, config: McpLandConfig | None = None) -> None:
        """Initialize every tool concurrently; the first failure propagates."""
        await asyncio.gather(*(tool.init(config) for tool in self._tools))

    def get_tools(self) -> list[McpToolDefinition]:
        return [tool.get_tool() for tool in self._tools]
