"""Model Context Protocol support: client, tool adapter and discovery."""

from agentgate.mcp.adapter import McpToolAdapter
from agentgate.mcp.client import McpClient
from agentgate.mcp.discovery import discover_tools, test_connection
from agentgate.mcp.protocol import (
    InitializeResult,
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    McpError,
    McpTool,
    ServerInfo,
    TextContent,
    ToolCallResult,
)

__all__ = [
    "InitializeResult",
    "JsonRpcError",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "McpClient",
    "McpError",
    "McpTool",
    "McpToolAdapter",
    "ServerInfo",
    "TextContent",
    "ToolCallResult",
    "discover_tools",
    "test_connection",
]
