"""Angular documentation search over the official ``llms-full.txt`` context."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, ValidationError

from mcpland.core.mcp import (
    McpTool,
    McpToolSpec,
    ToolResult,
    error_result,
    format_search_results,
    text_result,
)
from mcpland.ingest.chunker import ChunkOptions
from mcpland.ingest.fetch import fetch_with_retry
from mcpland.ingest.store import DEFAULT_SEARCH_LIMIT

CONTEXT_URL = "https://angular.dev/context/llm-files/llms-full.txt"


class DocsQuery(BaseModel):
    query: str = Field(
        min_length=2,
        description="Natural language query to search for Angular context",
    )
    limit: int | None = Field(
        default=None,
        ge=1,
        le=50,
        description=f"Number of chunks to return (default {DEFAULT_SEARCH_LIMIT})",
    )


class AngularDocsTool(McpTool):
    def __init__(self) -> None:
        super().__init__(
            McpToolSpec(
                name="docs",
                description="Angular docs context search tool.",
                schema=DocsQuery,
                source_id="angular-llm-context",
                context_url=CONTEXT_URL,
                chunk_options=ChunkOptions(max_chars=1200, overlap=200),
            )
        )

    async def fetch_context(self) -> str:
        response = await fetch_with_retry(self.spec.context_url or CONTEXT_URL)
        return response.text

    async def handle_context(self, args: Any) -> ToolResult:
        try:
            params = DocsQuery.model_validate(args if args is not None else {})
        except ValidationError as exc:
            return error_result(
                "Invalid arguments",
                exc.errors(include_url=False, include_context=False),
            )

        results = await self.search_context(params.query, params.limit or DEFAULT_SEARCH_LIMIT)
        if not results:
            return text_result("No relevant context found.")
        return text_result(format_search_results(results))


tool = AngularDocsTool
