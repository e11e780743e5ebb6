"""In-memory catalog of MCPs and their one-shot initialization state.

A registry is a plain value: build one per process (or per test) and pass it
to the loader and the host boundary.

Entry lifecycle: registered (initialized=False) -> initialized=True. The flag
flips once, after the MCP's ``init()`` succeeds, and never reverts.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mcpland.core.mcp import McpLand, McpToolDefinition

logger = logging.getLogger(__name__)


class DuplicateMcpError(ValueError):
    """Raised when an MCP with the same name is already registered."""


class InitializationError(RuntimeError):
    """Raised by ``initialize_all`` when one or more MCPs failed to initialize.

    Attributes:
        failures: MCP name -> exception raised by its ``init()``.
    """

    def __init__(self, failures: dict[str, BaseException]) -> None:
        self.failures = failures
        details = "; ".join(f"{name}: {exc}" for name, exc in failures.items())
        super().__init__(f"{len(failures)} MCP(s) failed to initialize: {details}")


@dataclass
class RegistryEntry:
    mcp: McpLand
    initialized: bool = False
    initialized_at: datetime | None = None

    @property
    def name(self) -> str:
        return self.mcp.spec.name


class McpRegistry:
    """Name-keyed catalog of MCPs. Insertion order is preserved."""

    def __init__(self) -> None:
        self._entries: dict[str, RegistryEntry] = {}
        self._init_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, mcp: McpLand) -> RegistryEntry:
        """Add *mcp* under its spec name.

        Raises:
            DuplicateMcpError: If the name is already registered, whatever
                the object identity.
        """
        name = mcp.spec.name
        if name in self._entries:
            raise DuplicateMcpError(f"MCP '{name}' is already registered")
        entry = RegistryEntry(mcp=mcp)
        self._entries[name] = entry
        logger.info("Registered MCP %s", name)
        return entry

    def unregister(self, name: str) -> bool:
        return self._entries.pop(name, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, name: str) -> RegistryEntry | None:
        return self._entries.get(name)

    def has(self, name: str) -> bool:
        return name in self._entries

    def size(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def get_names(self) -> list[str]:
        return list(self._entries)

    def get_all(self) -> list[RegistryEntry]:
        return list(self._entries.values())

    def get_initialized(self) -> list[RegistryEntry]:
        return [e for e in self._entries.values() if e.initialized]

    def get_uninitialized(self) -> list[RegistryEntry]:
        return [e for e in self._entries.values() if not e.initialized]

    def is_ready(self, name: str) -> bool:
        entry = self._entries.get(name)
        return entry is not None and entry.initialized

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    async def initialize_all(self) -> None:
        """Run ``init()`` of every uninitialized MCP, concurrently.

        Already-initialized entries are left untouched, so repeated calls
        initialize each MCP exactly once. Concurrent calls are serialized.
        A failing MCP does not stop its siblings: every init is awaited,
        successes are marked, then failures are reported together.

        Raises:
            InitializationError: If at least one MCP's ``init()`` raised.
        """
        async with self._init_lock:
            pending = self.get_uninitialized()
            if not pending:
                return

            results = await asyncio.gather(
                *(self._initialize(entry) for entry in pending),
                return_exceptions=True,
            )

        failures = {
            entry.name: result
            for entry, result in zip(pending, results)
            if isinstance(result, BaseException)
        }
        if failures:
            first = next(iter(failures.values()))
            raise InitializationError(failures) from first

    async def _initialize(self, entry: RegistryEntry) -> None:
        logger.info("Initializing MCP %s", entry.name)
        try:
            await entry.mcp.init()
        except Exception as exc:
            logger.error("MCP %s failed to initialize: %s", entry.name, exc)
            raise
        entry.initialized = True
        entry.initialized_at = datetime.now(timezone.utc)
        logger.info("MCP %s initialized", entry.name)

    # ------------------------------------------------------------------
    # Tool aggregation and status
    # ------------------------------------------------------------------

    def get_all_tools(self) -> list[McpToolDefinition]:
        """Tool definitions of every registered MCP, in registration order."""
        return [tool for entry in self._entries.values() for tool in entry.mcp.get_tools()]

    def get_tools_by_mcp(self, name: str) -> dict[str, Any] | None:
        entry = self._entries.get(name)
        if entry is None:
            return None
        return {
            "mcp_name": name,
            "initialized": entry.initialized,
            "initialized_at": entry.initialized_at,
            "tools": entry.mcp.get_tools(),
        }

    def get_summary(self) -> dict[str, Any]:
        """Counts plus the name/description of tools of initialized MCPs."""
        initialized = self.get_initialized()
        return {
            "total_mcps": len(self._entries),
            "initialized": len(initialized),
            "uninitialized": len(self._entries) - len(initialized),
            "mcp_names": self.get_names(),
            "tools": [
                {"name": tool.name, "description": tool.description}
                for entry in initialized
                for tool in entry.mcp.get_tools()
            ],
        }

    def get_statuses(self) -> list[dict[str, Any]]:
        return [
            {
                "name": entry.name,
                "description": entry.mcp.spec.description,
                "initialized": entry.initialized,
                "initialized_at": entry.initialized_at,
                "tool_count": len(entry.mcp.get_tools()),
            }
            for entry in self._entries.values()
        ]
