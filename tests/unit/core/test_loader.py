"""Tests for directory-driven MCP discovery."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from mcpland.bootstrap import BUNDLED_SOURCE_DIR
from mcpland.config import McpEntryCfg, McpLandConfig, ToolEntryCfg
from mcpland.core.loader import LoaderError, discover_dirs, load_available_mcps
from mcpland.core.mcp import ToolRegistrationError
from mcpland.core.registry import DuplicateMcpError, McpRegistry

_MCP_MODULE = """
from mcpland.core.mcp import McpLand, McpSpec

mcp = McpLand(McpSpec(name={name!r}, description="Demo MCP"))
"""

_TOOL_MODULE = """
from pydantic import BaseModel

from mcpland.core.mcp import McpTool, McpToolSpec, text_result


class Query(BaseModel):
    query: str


class EchoTool(McpTool):
    def __init__(self):
        super().__init__(McpToolSpec(name={name!r}, description="Echo tool.", schema=Query{extra}))

    async def fetch_context(self):
        return "alpha\\nbeta"

    async def handle_context(self, args):
        return text_result(args["query"])


tool = {export}
"""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(text), encoding="utf-8")


def _add_mcp(source: Path, dirname: str, name: str | None = None) -> Path:
    mcp_dir = source / dirname
    _write(mcp_dir / "__init__.py", _MCP_MODULE.format(name=name if name is not None else dirname))
    return mcp_dir


def _add_tool(mcp_dir: Path, dirname: str, name: str = "echo", export: str = "EchoTool", extra: str = "") -> None:
    _write(
        mcp_dir / "tools" / dirname / "__init__.py",
        _TOOL_MODULE.format(name=name, export=export, extra=extra),
    )


def _load(source: Path, config: McpLandConfig | None = None, **kwargs):
    registry = McpRegistry()
    cfg = config or McpLandConfig(root_dir=source.parent)
    loaded = load_available_mcps(registry, cfg, source_dir=source, **kwargs)
    return registry, loaded


@pytest.fixture
def source(tmp_path) -> Path:
    path = tmp_path / "mcps"
    path.mkdir()
    return path


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


def test_discover_dirs_sorted_and_filtered(tmp_path):
    for name in ("zeta", "alpha", "_private", ".hidden"):
        (tmp_path / name).mkdir()
    (tmp_path / "file.py").write_text("", encoding="utf-8")
    assert [p.name for p in discover_dirs(tmp_path)] == ["alpha", "zeta"]


def test_discover_dirs_missing_parent(tmp_path):
    assert discover_dirs(tmp_path / "missing") == []


def test_loads_mcp_with_class_export(source):
    _add_tool(_add_mcp(source, "demo"), "echo")
    registry, loaded = _load(source)

    assert [m.name for m in loaded] == ["demo"]
    assert registry.get_names() == ["demo"]
    (tool,) = loaded[0].tools
    assert tool.spec.name == "demo-echo"
    assert tool.spec.tool_id == "echo"
    assert tool.spec.source_id == "demo-echo-context"


def test_loads_instance_export(source):
    _add_tool(_add_mcp(source, "demo"), "echo", export="EchoTool()")
    _, loaded = _load(source)
    assert [t.spec.name for t in loaded[0].tools] == ["demo-echo"]


def test_tool_id_comes_from_folder(source):
    _add_tool(_add_mcp(source, "demo"), "echo_dir", name="echo")
    _, loaded = _load(source)
    assert loaded[0].tools[0].spec.tool_id == "echo_dir"


def test_mcp_without_tools_folder(source):
    _add_mcp(source, "bare")
    registry, _ = _load(source)
    assert registry.get_names() == ["bare"]
    assert registry.get_all_tools() == []


def test_hidden_and_private_entries_ignored(source):
    _add_mcp(source, "demo")
    _write(source / "_skip" / "__init__.py", "raise RuntimeError('not loaded')\n")
    _write(source / ".cache" / "__init__.py", "raise RuntimeError('not loaded')\n")
    (source / "README.md").write_text("notes", encoding="utf-8")
    registry, _ = _load(source)
    assert registry.get_names() == ["demo"]


def test_store_attached_to_every_tool(source, store):
    mcp_dir = _add_mcp(source, "demo")
    _add_tool(mcp_dir, "one", name="one")
    _add_tool(mcp_dir, "two", name="two")
    _, loaded = _load(source, store=store)
    assert all(t.store is store for t in loaded[0].tools)


def test_repeated_loads_yield_fresh_instances(source):
    _add_tool(_add_mcp(source, "demo"), "echo")
    _, first = _load(source)
    _, second = _load(source)
    assert first[0] is not second[0]
    assert first[0].tools[0] is not second[0].tools[0]


# ---------------------------------------------------------------------------
# Config switches
# ---------------------------------------------------------------------------


def test_disabled_mcp_not_registered(source):
    _add_tool(_add_mcp(source, "demo"), "echo")
    _add_mcp(source, "other")
    cfg = McpLandConfig(root_dir=source.parent, registry={"demo": McpEntryCfg(enabled=False)})
    registry, _ = _load(source, cfg)
    assert registry.get_names() == ["other"]


def test_disabled_tool_not_imported(source):
    mcp_dir = _add_mcp(source, "demo")
    _add_tool(mcp_dir, "echo")
    _write(mcp_dir / "tools" / "broken" / "__init__.py", "raise RuntimeError('must not import')\n")
    cfg = McpLandConfig(
        root_dir=source.parent,
        registry={"demo": McpEntryCfg(tools={"broken": ToolEntryCfg(enabled=False)})},
    )
    _, loaded = _load(source, cfg)
    assert [t.spec.tool_id for t in loaded[0].tools] == ["echo"]


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


def test_missing_source_folder(tmp_path):
    with pytest.raises(LoaderError, match="does not exist"):
        _load(tmp_path / "nope")


def test_missing_mcp_export(source):
    _write(source / "demo" / "__init__.py", "value = 1\n")
    with pytest.raises(LoaderError, match="must export an McpLand instance"):
        _load(source)


def test_mcp_export_of_wrong_type(source):
    _write(source / "demo" / "__init__.py", "mcp = object()\n")
    with pytest.raises(LoaderError, match="McpLand"):
        _load(source)


def test_blank_mcp_name(source):
    _add_mcp(source, "demo", name="  ")
    with pytest.raises(LoaderError, match="spec.name"):
        _load(source)


def test_package_without_init(source):
    (source / "demo").mkdir()
    with pytest.raises(LoaderError, match="missing __init__.py"):
        _load(source)


def test_import_error_wrapped(source):
    _write(source / "demo" / "__init__.py", "import definitely_not_a_module\n")
    with pytest.raises(LoaderError, match="Failed to import") as exc_info:
        _load(source)
    assert isinstance(exc_info.value.__cause__, ImportError)


def test_missing_tool_export(source):
    mcp_dir = _add_mcp(source, "demo")
    _write(mcp_dir / "tools" / "echo" / "__init__.py", "value = 1\n")
    with pytest.raises(LoaderError, match="missing a 'tool' export"):
        _load(source)


def test_tool_for_other_mcp_rejected(source):
    _add_tool(_add_mcp(source, "demo"), "echo", extra=", mcp_id='other'")
    with pytest.raises(LoaderError, match="demo/echo") as exc_info:
        _load(source)
    assert isinstance(exc_info.value.__cause__, ToolRegistrationError)


def test_duplicate_mcp_names(source):
    _add_mcp(source, "first", name="same")
    _add_mcp(source, "second", name="same")
    with pytest.raises(LoaderError, match="same") as exc_info:
        _load(source)
    assert isinstance(exc_info.value.__cause__, DuplicateMcpError)


# ---------------------------------------------------------------------------
# Bundled MCPs
# ---------------------------------------------------------------------------


def test_bundled_angular_mcp_loads():
    registry = McpRegistry()
    load_available_mcps(registry, McpLandConfig(), source_dir=BUNDLED_SOURCE_DIR)
    assert "angular" in registry
    (tool,) = registry.get("angular").mcp.tools
    assert tool.spec.name == "angular-docs"
    assert tool.spec.source_id == "angular-llm-context"
