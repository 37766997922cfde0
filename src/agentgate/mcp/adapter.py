"""Expose a remote MCP tool through the local BaseTool contract."""

import logging
from typing import Any

from agentgate.mcp.client import McpClient
from agentgate.mcp.protocol import McpTool, ToolCallResult
from agentgate.tools import BaseTool

logger = logging.getLogger(__name__)

NO_OUTPUT = "(no output)"


class McpToolAdapter(BaseTool):
    """
    A remote tool that the orchestrator cannot tell apart from a native one.

    Arguments are forwarded unchanged. Remote errors and transport failures
    become "ERROR: ..." text, never exceptions.
    """

    def __init__(self, tool: McpTool, client: McpClient) -> None:
        self.name = tool.name
        self.description = tool.description
        self._schema = tool.input_schema
        self._client = client

    @property
    def client(self) -> McpClient:
        return self._client

    def parameters_schema(self) -> dict[str, Any]:
        return self._schema

    def execute(self, arguments: dict[str, Any]) -> str:
        try:
            result = self._client.call_tool(self.name, arguments)
        except Exception as e:
            logger.warning(f"MCP tool {self.name} failed: {e}")
            return f"ERROR: Failed to call MCP tool '{self.name}': {e}"

        text = format_result(result)
        if result.is_error:
            return f"ERROR: {text}"
        return text


def format_result(result: ToolCallResult) -> str:
    if not result.content:
        return NO_OUTPUT
    return "\n\n".join(part.text for part in result.content)
