"""
p4-mcp - Perforce tools over the Model Context Protocol.

A stdio server that accepts JSON-RPC tool calls, runs the matching ``p4``
command, and answers with a uniform success/message/data envelope.

Modes:
- Live: spawns the ``p4`` client for every call
- Mock: canned, deterministic p4 output (set P4_MOCK_MODE=1)
"""

__version__ = "0.1.0"
__license__ = "Apache-2.0"

from p4_mcp.tools.catalog import CommandCatalog
from p4_mcp.tools.dispatcher import Dispatcher
from p4_mcp.tools.schema import ExecutionMode, ToolResult

__all__ = [
    "CommandCatalog",
    "Dispatcher",
    "ExecutionMode",
    "ToolResult",
    "__version__",
]
