"""Stdio JSON-RPC front end for the p4 tool dispatcher."""

from p4_mcp.server.transport import ProtocolError, StdioServer

__all__ = ["ProtocolError", "StdioServer"]
