"""
Tests for remote tool discovery and the MCP tool adapter.
"""

import json

import httpx
import respx

from agentgate.mcp import McpToolAdapter, discover_tools
from agentgate.mcp.client import McpClient
from agentgate.mcp.discovery import test_connection as check_connection
from agentgate.mcp.protocol import McpError, McpTool, TextContent, ToolCallResult

SERVER_URL = "http://mcp.test:8080/mcp"
HEALTH_URL = "http://mcp.test:8080/health"


def rpc_server(results: dict[str, object]):
    def respond(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        return httpx.Response(200, json={
            "jsonrpc": "2.0",
            "id": body["id"],
            "result": results[body["method"]],
        })

    return respond


INITIALIZE_RESULT = {
    "protocolVersion": "2024-11-05",
    "capabilities": {},
    "serverInfo": {"name": "docs", "version": "0.1"},
}


class StubClient:
    """Stands in for McpClient.call_tool."""

    def __init__(self, result: ToolCallResult | None = None, error: Exception | None = None):
        self.result = result
        self.error = error
        self.calls: list[tuple[str, dict]] = []

    def call_tool(self, name: str, arguments: dict) -> ToolCallResult:
        self.calls.append((name, arguments))
        if self.error is not None:
            raise self.error
        return self.result


def adapter_for(client) -> McpToolAdapter:
    tool = McpTool(
        name="search_docs",
        description="Search documentation",
        input_schema={"type": "object", "properties": {"query": {"type": "string"}}},
    )
    return McpToolAdapter(tool, client)


class TestMcpToolAdapter:
    """Tests for McpToolAdapter."""

    def test_exposes_remote_descriptor(self):
        adapter = adapter_for(StubClient())
        schema = adapter.to_openai_schema()

        assert adapter.name == "search_docs"
        assert schema["function"]["description"] == "Search documentation"
        assert schema["function"]["parameters"]["properties"]["query"] == {"type": "string"}

    def test_arguments_pass_through_unchanged(self):
        client = StubClient(ToolCallResult(content=[TextContent("hit")]))
        arguments = {"query": "x", "nested": {"deep": [1, 2]}}

        assert adapter_for(client).execute(arguments) == "hit"
        assert client.calls == [("search_docs", arguments)]

    def test_parts_are_joined_with_blank_line(self):
        client = StubClient(ToolCallResult(content=[TextContent("one"), TextContent("two")]))
        assert adapter_for(client).execute({}) == "one\n\ntwo"

    def test_empty_content(self):
        client = StubClient(ToolCallResult(content=[]))
        assert adapter_for(client).execute({}) == "(no output)"

    def test_remote_error_result(self):
        client = StubClient(ToolCallResult(content=[TextContent("index missing")], is_error=True))
        assert adapter_for(client).execute({}) == "ERROR: index missing"

    def test_protocol_failure_becomes_text(self):
        client = StubClient(error=McpError("Method not found", code=-32601))
        result = adapter_for(client).execute({})

        assert result.startswith("ERROR: Failed to call MCP tool 'search_docs':")
        assert "Method not found" in result


class TestDiscoverTools:
    """Tests for fail-soft discovery."""

    @respx.mock
    def test_discovers_and_adapts_tools(self):
        respx.get(HEALTH_URL).mock(return_value=httpx.Response(200))
        respx.post(SERVER_URL).mock(side_effect=rpc_server({
            "initialize": INITIALIZE_RESULT,
            "tools/list": {"tools": [
                {"name": "search_docs", "description": "Search", "inputSchema": {"type": "object"}},
                {"name": "ping", "description": "Ping"},
            ]},
            "tools/call": {"content": [{"type": "text", "text": "pong"}]},
        }))

        tools = discover_tools(SERVER_URL)

        assert [tool.name for tool in tools] == ["search_docs", "ping"]
        assert all(isinstance(tool, McpToolAdapter) for tool in tools)
        assert tools[1].execute({}) == "pong"
        tools[0].client.close()

    @respx.mock
    def test_unreachable_server_returns_empty_list(self):
        respx.get(HEALTH_URL).mock(side_effect=httpx.ConnectError("refused"))
        assert discover_tools(SERVER_URL) == []

    @respx.mock(assert_all_called=False)
    def test_unhealthy_server_skips_handshake(self):
        respx.get(HEALTH_URL).mock(return_value=httpx.Response(503))
        handshake = respx.post(SERVER_URL).mock(return_value=httpx.Response(200, json={}))

        assert discover_tools(SERVER_URL) == []
        assert not handshake.called

    @respx.mock
    def test_handshake_error_returns_empty_list(self):
        respx.get(HEALTH_URL).mock(return_value=httpx.Response(200))
        respx.post(SERVER_URL).mock(return_value=httpx.Response(200, json={
            "jsonrpc": "2.0",
            "id": 1,
            "error": {"code": -32603, "message": "Internal error"},
        }))

        assert discover_tools(SERVER_URL) == []

    @respx.mock
    def test_malformed_listing_returns_empty_list(self):
        respx.get(HEALTH_URL).mock(return_value=httpx.Response(200))
        respx.post(SERVER_URL).mock(side_effect=rpc_server({
            "initialize": INITIALIZE_RESULT,
            "tools/list": {"tools": [{"description": "no name"}]},
        }))

        assert discover_tools(SERVER_URL) == []

    @respx.mock
    def test_garbage_response_returns_empty_list(self):
        respx.get(HEALTH_URL).mock(return_value=httpx.Response(200))
        respx.post(SERVER_URL).mock(return_value=httpx.Response(200, text="not json"))

        assert discover_tools(SERVER_URL) == []

    def test_unexpected_exception_returns_empty_list(self, monkeypatch):
        def explode(self):
            raise RuntimeError("unexpected")

        monkeypatch.setattr(McpClient, "is_server_available", explode)
        assert discover_tools(SERVER_URL) == []


class TestConnectionCheck:
    """Tests for test_connection."""

    @respx.mock
    def test_reachable(self):
        respx.get(HEALTH_URL).mock(return_value=httpx.Response(200))
        assert check_connection(SERVER_URL) is True

    @respx.mock
    def test_unreachable(self):
        respx.get(HEALTH_URL).mock(side_effect=httpx.ConnectTimeout("timed out"))
        assert check_connection(SERVER_URL) is False
