"""MCPs bundled with mcpland; used when the project has no ``mcps/`` folder."""
