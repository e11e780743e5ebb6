"""mcpland configuration loader.

Priority (high → low):
  1. CLI flags             (handled at the call site, not in this module)
  2. Environment variables (MCPLAND_DB_PATH, MCPLAND_EMBEDDING_MODEL, MCPLAND_SOURCE)
  3. Project mcpland.json  (in the project root)
  4. Hardcoded defaults

The document is JSON; it is read with yaml.safe_load(), which accepts JSON.
Config files must never contain API keys; use environment variables instead.
The configuration is loaded once at startup and passed explicitly to the
components that need it. Reloading means calling load_config() again.
"""

from __future__ import annotations

import os
import re
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from mcpland.ingest.embedding import DEFAULT_EMBEDDING_MODEL

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

CONFIG_FILE_NAME: str = "mcpland.json"
DEFAULT_SOURCE: str = "mcps"
DEFAULT_DB_PATH: str = ".data/context.sqlite"

_API_KEY_RE: re.Pattern[str] = re.compile(
    r"api[_\-]?(?:key|secret)"
    r"|_token$"
    r"|^token$"
    r"|_secret$"
    r"|^secret$"
    r"|passw(?:ord|d)"
    r"|credential",
    re.IGNORECASE,
)

_KNOWN_KEYS: frozenset[str] = frozenset(["name", "description", "source", "registry"])


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(ValueError):
    """Raised when the config document is unreadable or contains a forbidden value."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class ToolEntryCfg:
    """Per-tool switch (mcpland.json: registry.<mcp>.tools.<tool>)."""

    enabled: bool | None = None


@dataclass
class McpEntryCfg:
    """Per-MCP switch and tool table (mcpland.json: registry.<mcp>)."""

    enabled: bool | None = None
    tools: dict[str, ToolEntryCfg] = field(default_factory=dict)


@dataclass
class McpLandConfig:
    """Root configuration object, built by load_config().

    Attributes:
        root_dir: Project root; relative paths below resolve against it.
        name: Server name announced to the host.
        description: Server description announced to the host.
        source: Folder holding MCP plugin packages.
        registry: Enable/disable table keyed by MCP name.
        db_path: SQLite file of the embedding store.
        embedding_model: LiteLLM embedding model (provider/model format).
    """

    root_dir: Path = field(default_factory=Path.cwd)
    name: str = "McpLand"
    description: str = "Aggregated MCP tools"
    source: str = DEFAULT_SOURCE
    registry: dict[str, McpEntryCfg] = field(default_factory=dict)
    db_path: str = DEFAULT_DB_PATH
    embedding_model: str = DEFAULT_EMBEDDING_MODEL

    @property
    def source_dir(self) -> Path:
        return self.root_dir / self.source

    @property
    def db_file(self) -> Path:
        return self.root_dir / self.db_path


def is_mcp_enabled(config: McpLandConfig, mcp_name: str) -> bool:
    """An MCP is enabled unless its registry entry says ``enabled: false``."""
    entry = config.registry.get(mcp_name)
    if entry is None or entry.enabled is None:
        return True
    return entry.enabled


def is_tool_enabled(config: McpLandConfig, mcp_name: str, tool_name: str) -> bool:
    """A tool is enabled unless its registry entry says ``enabled: false``."""
    entry = config.registry.get(mcp_name)
    if entry is None:
        return True
    tool_entry = entry.tools.get(tool_name)
    if tool_entry is None or tool_entry.enabled is None:
        return True
    return tool_entry.enabled


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _check_no_api_keys(data: dict[str, Any], source: Path) -> None:
    """Raise ConfigError if *data* contains any API-key-like setting keys.

    MCP and tool names under ``registry`` are plugin identifiers, not
    settings, so only the keys inside their entries are checked.
    """

    def _reject(key: Any, full: str) -> None:
        if _API_KEY_RE.search(str(key)):
            raise ConfigError(
                f"Config '{source}' contains a forbidden key '{full}'.\n"
                f"  API keys must be set via environment variables, not config files.\n"
                f"  Remove '{full}' from {source.name} and use:\n"
                f"    export {str(key).upper().replace('-', '_')}=<value>"
            )

    def _scan(obj: Any, path: str) -> None:
        if isinstance(obj, dict):
            for k, v in obj.items():
                full = f"{path}.{k}" if path else str(k)
                _reject(k, full)
                _scan(v, full)

    def _scan_named(entries: Any, path: str, nested: str | None = None) -> None:
        if not isinstance(entries, dict):
            return
        for name, entry in entries.items():
            if not isinstance(entry, dict):
                continue
            for k, v in entry.items():
                full = f"{path}.{name}.{k}"
                if k == nested:
                    _scan_named(v, full)
                    continue
                _reject(k, full)
                _scan(v, full)

    for k, v in data.items():
        if k == "registry":
            _scan_named(v, "registry", nested="tools")
            continue
        _reject(k, str(k))
        _scan(v, str(k))


def _warn_unknown_keys(data: dict[str, Any], source: Path) -> None:
    """Emit a UserWarning for unrecognised top-level keys."""
    for key in data:
        if key not in _KNOWN_KEYS:
            warnings.warn(
                f"Unknown config key '{key}' in '{source}'; ignored.",
                UserWarning,
                stacklevel=4,
            )


def _expect_mapping(value: Any, where: str, source: Path) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{where}' in '{source}' must be an object, got {type(value).__name__}.")
    return value


def _parse_enabled(value: Any, where: str, source: Path) -> bool | None:
    if value is None or isinstance(value, bool):
        return value
    raise ConfigError(
        f"'{where}.enabled' in '{source}' must be true or false, got {value!r}."
    )


# ---------------------------------------------------------------------------
# Build
# ---------------------------------------------------------------------------


def _parse_registry(raw: Any, source: Path) -> dict[str, McpEntryCfg]:
    registry: dict[str, McpEntryCfg] = {}
    for mcp_name, mcp_raw in _expect_mapping(raw, "registry", source).items():
        entry = _expect_mapping(mcp_raw, f"registry.{mcp_name}", source)
        tools_raw = _expect_mapping(entry.get("tools"), f"registry.{mcp_name}.tools", source)
        tools: dict[str, ToolEntryCfg] = {}
        for tool_name, t in tools_raw.items():
            where = f"registry.{mcp_name}.tools.{tool_name}"
            tool_entry = _expect_mapping(t, where, source)
            tools[tool_name] = ToolEntryCfg(enabled=_parse_enabled(tool_entry.get("enabled"), where, source))
        registry[mcp_name] = McpEntryCfg(
            enabled=_parse_enabled(entry.get("enabled"), f"registry.{mcp_name}", source),
            tools=tools,
        )
    return registry


def _cfg_from_dict(data: dict[str, Any], root_dir: Path, source: Path) -> McpLandConfig:
    """Build a *McpLandConfig* from a raw config document."""
    cfg = McpLandConfig(root_dir=root_dir)

    if data.get("name"):
        cfg.name = str(data["name"])
    if data.get("description"):
        cfg.description = str(data["description"])
    src = data.get("source")
    if isinstance(src, str) and src.strip():
        cfg.source = src.strip()
    cfg.registry = _parse_registry(data.get("registry"), source)
    return cfg


def _apply_env_overrides(cfg: McpLandConfig) -> McpLandConfig:
    """Apply MCPLAND_* environment variable overrides."""
    if db_path := os.environ.get("MCPLAND_DB_PATH"):
        cfg.db_path = db_path
    if model := os.environ.get("MCPLAND_EMBEDDING_MODEL"):
        cfg.embedding_model = model
    if source := os.environ.get("MCPLAND_SOURCE"):
        cfg.source = source
    return cfg


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(root_dir: Path | str | None = None) -> McpLandConfig:
    """Load and return a *McpLandConfig* for the project at *root_dir*.

    Args:
        root_dir: Directory holding ``mcpland.json``. Defaults to CWD.

    Returns:
        Config with env var overrides applied. A missing file yields defaults.

    Raises:
        ConfigError: If the document cannot be parsed, is not an object, has
            malformed registry entries, or contains API-key-like fields.
    """
    root = Path(root_dir) if root_dir is not None else Path.cwd()
    config_path = root / CONFIG_FILE_NAME

    data: dict[str, Any] = {}
    if config_path.exists():
        try:
            raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ConfigError(f"Cannot parse '{config_path}': {exc}") from exc
        data = _expect_mapping(raw, "<root>", config_path)
        _check_no_api_keys(data, config_path)
        _warn_unknown_keys(data, config_path)

    cfg = _cfg_from_dict(data, root, config_path)
    return _apply_env_overrides(cfg)
