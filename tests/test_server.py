"""Tests for the stdio JSON-RPC server."""

import io
import json

import pytest

from p4_mcp import __version__
from p4_mcp.server.transport import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    StdioServer,
)
from p4_mcp.tools.catalog import CommandCatalog
from p4_mcp.tools.dispatcher import Dispatcher
from p4_mcp.tools.schema import ExecutionMode


@pytest.fixture
def server():
    return StdioServer(Dispatcher(CommandCatalog.default(), ExecutionMode.MOCK))


def _call(name, arguments=None, request_id="3"):
    params = {"name": name}
    if arguments is not None:
        params["arguments"] = arguments
    return {"jsonrpc": "2.0", "id": request_id, "method": "tools/call", "params": params}


class TestProtocolMethods:
    def test_initialize(self, server):
        response = server.handle_message({
            "jsonrpc": "2.0",
            "id": "1",
            "method": "initialize",
            "params": {
                "protocolVersion": "2024-11-05",
                "capabilities": {},
                "clientInfo": {"name": "test", "version": "1.0"},
            },
        })

        assert response["id"] == "1"
        result = response["result"]
        assert result["protocolVersion"] == "2024-11-05"
        assert result["capabilities"] == {"tools": {"listChanged": False}}
        assert result["serverInfo"] == {"name": "p4-mcp", "version": __version__}

    def test_list_tools(self, server):
        response = server.handle_message({"jsonrpc": "2.0", "id": 2, "method": "tools/list"})

        tools = response["result"]["tools"]
        names = [tool["name"] for tool in tools]
        assert names == sorted(names)
        assert "p4_info" in names
        edit = next(tool for tool in tools if tool["name"] == "p4_edit")
        assert edit["inputSchema"]["required"] == ["files"]

    def test_ping(self, server):
        assert server.handle_message({"id": "ping-1", "method": "ping"}) == {
            "jsonrpc": "2.0",
            "id": "ping-1",
            "result": {},
        }

    def test_call_tool(self, server):
        response = server.handle_message(_call("p4_changes", {"max": 2}))

        result = response["result"]
        assert result["isError"] is False
        assert result["content"][0]["type"] == "text"
        assert "Mock P4 Changes (max: 2)" in result["content"][0]["text"]
        assert len(result["structuredContent"]["changes"]) == 2

    def test_call_tool_without_arguments(self, server):
        response = server.handle_message(_call("p4_info"))
        assert response["result"]["isError"] is False
        assert response["result"]["structuredContent"]["info"]["user_name"] == "testuser"

    def test_unknown_tool_is_tool_error(self, server):
        response = server.handle_message(_call("nonexistent_tool", {}))

        assert "error" not in response
        assert response["result"]["isError"] is True
        assert "Unknown tool: nonexistent_tool" in response["result"]["content"][0]["text"]


class TestProtocolErrors:
    def test_unknown_method(self, server):
        response = server.handle_message({"id": 9, "method": "resources/list"})
        assert response["error"]["code"] == METHOD_NOT_FOUND

    def test_missing_tool_name(self, server):
        response = server.handle_message({"id": 4, "method": "tools/call", "params": {}})
        assert response["error"]["code"] == INVALID_PARAMS

    def test_arguments_not_object(self, server):
        response = server.handle_message(_call("p4_edit", ["a.txt"]))
        assert response["error"]["code"] == INVALID_PARAMS

    def test_params_not_object(self, server):
        response = server.handle_message({"id": 5, "method": "tools/list", "params": [1]})
        assert response["error"]["code"] == INVALID_PARAMS

    @pytest.mark.parametrize("message", [[1, 2], "ping", {"id": 1}, {"id": 1, "method": 5}])
    def test_invalid_request(self, server, message):
        response = server.handle_message(message)
        assert response["error"]["code"] == INVALID_REQUEST

    def test_parse_error(self, server):
        response = server.handle_line("{not json")
        assert response["id"] is None
        assert response["error"]["code"] == PARSE_ERROR

    def test_notifications_get_no_reply(self, server):
        assert server.handle_message({"jsonrpc": "2.0", "method": "notifications/initialized"}) is None
        assert server.handle_message({"method": "ping"}) is None

    def test_blank_line_ignored(self, server):
        assert server.handle_line("   \n") is None

    def test_handler_crash_is_internal_error(self, server, monkeypatch):
        def boom(request):
            raise RuntimeError("boom")

        monkeypatch.setattr(server.dispatcher, "dispatch", boom)
        response = server.handle_message(_call("p4_info"))

        assert response["error"]["code"] == INTERNAL_ERROR
        assert "boom" in response["error"]["message"]


class TestServeLoop:
    def test_serves_until_eof(self):
        lines = [
            json.dumps({"jsonrpc": "2.0", "id": "1", "method": "initialize", "params": {}}),
            json.dumps({"jsonrpc": "2.0", "method": "notifications/initialized"}),
            "",
            "garbage",
            json.dumps(_call("nonexistent_tool", {}, request_id="2")),
            json.dumps(_call("p4_opened", {}, request_id="3")),
        ]
        stdin = io.StringIO("\n".join(lines) + "\n")
        stdout = io.StringIO()
        server = StdioServer(
            Dispatcher(CommandCatalog.default(), ExecutionMode.MOCK),
            input_stream=stdin,
            output_stream=stdout,
        )

        server.serve()

        replies = [json.loads(line) for line in stdout.getvalue().splitlines()]
        assert [reply["id"] for reply in replies] == ["1", None, "2", "3"]
        assert replies[1]["error"]["code"] == PARSE_ERROR
        assert replies[2]["result"]["isError"] is True
        assert replies[3]["result"]["isError"] is False
        assert replies[3]["result"]["structuredContent"]["files"]
