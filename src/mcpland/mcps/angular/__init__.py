"""Angular MCP. Tools live under ``tools/`` and are discovered by the loader;
enable or disable them in ``mcpland.json``.
"""

from mcpland.core.mcp import McpLand, McpSpec


class AngularMcp(McpLand):
    def __init__(self) -> None:
        super().__init__(McpSpec(name="angular", description="Angular MCP"))


mcp = AngularMcp()
