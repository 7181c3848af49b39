"""MCP protocol session and JSON-RPC envelope handling."""

from conduit.mcp.jsonrpc import ErrorCode
from conduit.mcp.session import ProtocolSession, ServerIdentity

__all__ = ["ErrorCode", "ProtocolSession", "ServerIdentity"]
