"""Fixtures for CLI tests: a project root with one local MCP and a fake provider."""

from __future__ import annotations

import textwrap
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

_MCP_MODULE = """
from mcpland.core.mcp import McpLand, McpSpec

mcp = McpLand(McpSpec(name="demo", description="Demo MCP"))
"""

_TOOL_MODULE = """
from pydantic import BaseModel

from mcpland.core.mcp import McpTool, McpToolSpec, text_result
from mcpland.ingest.chunker import ChunkOptions


class Query(BaseModel):
    query: str


class EchoTool(McpTool):
    def __init__(self):
        super().__init__(
            McpToolSpec(
                name="echo",
                description="Echo tool.",
                schema=Query,
                chunk_options=ChunkOptions(max_chars=20, overlap=0),
            )
        )

    async def fetch_context(self):
        {body}

    async def handle_context(self, args):
        return text_result(args["query"])


tool = EchoTool
"""


def write_project(root: Path, body: str = 'return "first paragraph\\nsecond paragraph"') -> Path:
    mcp_dir = root / "mcps" / "demo"
    (mcp_dir / "tools" / "echo").mkdir(parents=True)
    (mcp_dir / "__init__.py").write_text(textwrap.dedent(_MCP_MODULE), encoding="utf-8")
    (mcp_dir / "tools" / "echo" / "__init__.py").write_text(
        textwrap.dedent(_TOOL_MODULE).replace("{body}", body), encoding="utf-8"
    )
    return root


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in ("MCPLAND_DB_PATH", "MCPLAND_EMBEDDING_MODEL", "MCPLAND_SOURCE"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def project(tmp_path) -> Path:
    return write_project(tmp_path)


@pytest.fixture
def make_project():
    """Factory writing a project whose tool runs *body* as fetch_context."""
    return write_project


@pytest.fixture
def fake_embeddings(monkeypatch):
    """Patch the LiteLLM embedding call; every text embeds to the same vector."""
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    mock = AsyncMock(return_value=MagicMock(data=[{"embedding": [1.0, 0.0]}]))
    with patch("mcpland.ingest.embedding.litellm.aembedding", mock):
        yield mock
