"""conduit: expose a GraphQL API as MCP tools."""

__version__ = "1.0.0"
