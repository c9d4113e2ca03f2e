"""MCP server communication over stdin/stdout (line-delimited JSON-RPC)."""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, Callable, Dict, Optional, TextIO

from p4_mcp import __version__
from p4_mcp.tools.dispatcher import Dispatcher
from p4_mcp.tools.schema import ToolRequest

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "p4-mcp"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class ProtocolError(Exception):
    """Raised by a method handler to answer with a JSON-RPC error."""

    def __init__(self, code: int, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


class StdioServer:
    """
    Serve MCP requests read from a text stream, one JSON object per line.

    Requests are handled strictly one after another; a reply is written
    and flushed before the next line is read. Messages without an ``id``
    are notifications and never get a reply.
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        input_stream: Optional[TextIO] = None,
        output_stream: Optional[TextIO] = None,
    ):
        self.dispatcher = dispatcher
        self._input = input_stream or sys.stdin
        self._output = output_stream or sys.stdout
        self._methods: Dict[str, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
            "initialize": self._initialize,
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
            "ping": self._ping,
        }

    # ── Loop ──────────────────────────────────────────────────────────────

    def serve(self) -> None:
        """Read requests until EOF."""
        logger.info("Starting p4-mcp server (%s mode)", self.dispatcher.mode.value)
        for line in self._input:
            response = self.handle_line(line)
            if response is not None:
                self._write(response)
        logger.info("p4-mcp server shutting down")

    def _write(self, response: Dict[str, Any]) -> None:
        self._output.write(json.dumps(response) + "\n")
        self._output.flush()

    def handle_line(self, line: str) -> Optional[Dict[str, Any]]:
        """Handle one raw input line; returns the reply, if any."""
        line = line.strip()
        if not line:
            return None
        try:
            message = json.loads(line)
        except json.JSONDecodeError as exc:
            logger.warning("Failed to parse message: %s", line)
            return _error(None, PARSE_ERROR, f"Parse error: {exc.msg}")
        return self.handle_message(message)

    # ── JSON-RPC ──────────────────────────────────────────────────────────

    def handle_message(self, message: Any) -> Optional[Dict[str, Any]]:
        """Handle one decoded JSON-RPC message."""
        if not isinstance(message, dict) or not isinstance(message.get("method"), str):
            request_id = message.get("id") if isinstance(message, dict) else None
            return _error(request_id, INVALID_REQUEST, "Invalid request")

        method = message["method"]
        is_notification = "id" not in message
        request_id = message.get("id")
        logger.debug("Handling %s (id=%s)", method, request_id)

        handler = self._methods.get(method)
        if is_notification:
            if handler is None:
                logger.debug("Ignoring notification %s", method)
            return None
        if handler is None:
            return _error(request_id, METHOD_NOT_FOUND, f"Method not found: {method}")

        params = message.get("params") or {}
        if not isinstance(params, dict):
            return _error(request_id, INVALID_PARAMS, "params must be an object")

        try:
            result = handler(params)
        except ProtocolError as exc:
            return _error(request_id, exc.code, exc.message)
        except Exception as exc:
            logger.exception("Error handling %s", method)
            return _error(request_id, INTERNAL_ERROR, f"Internal error: {exc}")

        return {"jsonrpc": "2.0", "id": request_id, "result": result}

    # ── MCP Protocol ──────────────────────────────────────────────────────

    def _initialize(self, params: Dict[str, Any]) -> Dict[str, Any]:
        logger.info("Received initialize request with client info: %s", params.get("clientInfo"))
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {"tools": {"listChanged": False}},
            "serverInfo": {"name": SERVER_NAME, "version": __version__},
        }

    def _list_tools(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {"tools": [spec.to_tool() for spec in self.dispatcher.catalog.list_specs()]}

    def _call_tool(self, params: Dict[str, Any]) -> Dict[str, Any]:
        name = params.get("name")
        if not isinstance(name, str) or not name:
            raise ProtocolError(INVALID_PARAMS, "tools/call requires a tool name")
        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise ProtocolError(INVALID_PARAMS, "tools/call arguments must be an object")

        result = self.dispatcher.dispatch(ToolRequest(name=name, arguments=arguments))
        return result.to_mcp()

    def _ping(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {}


def _error(request_id: Any, code: int, message: str) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "error": {"code": code, "message": message}}
