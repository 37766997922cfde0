"""
JSON-RPC client for a Model Context Protocol server over HTTP.

One POST per request against a single endpoint. Request ids come from a
per-instance counter starting at 1 and are never reused. initialize() must
succeed before list_tools() or call_tool() may be used.
"""

import json
import logging
from typing import Any

import httpx

from agentgate.mcp.protocol import (
    CLIENT_NAME,
    CLIENT_VERSION,
    PROTOCOL_VERSION,
    InitializeResult,
    JsonRpcRequest,
    JsonRpcResponse,
    McpError,
    McpTool,
    ToolCallResult,
)

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_HEALTH_TIMEOUT = 5.0


class McpClient:
    """Synchronous MCP client: initialize, tools/list and tools/call."""

    def __init__(
        self,
        server_url: str,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        health_timeout: float = DEFAULT_HEALTH_TIMEOUT,
    ) -> None:
        self.server_url = server_url
        self.health_timeout = health_timeout
        self._request_id = 0
        self._initialized = False
        self.server_info: InitializeResult | None = None
        self._client = httpx.Client(
            timeout=timeout,
            headers={"Content-Type": "application/json"},
        )

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def health_url(self) -> str:
        """Liveness probe URL: a trailing /mcp path segment swapped for /health."""
        url = httpx.URL(self.server_url)
        path = url.path.rstrip("/")
        if path.endswith("/mcp"):
            path = path[: -len("/mcp")]
        return str(url.copy_with(path=f"{path}/health"))

    def _next_id(self) -> int:
        self._request_id += 1
        return self._request_id

    def initialize(self) -> InitializeResult:
        """Perform the capability handshake."""
        result = self._send_request("initialize", {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {},
            "clientInfo": {
                "name": CLIENT_NAME,
                "version": CLIENT_VERSION,
            },
        })
        if not isinstance(result, dict):
            raise McpError("Malformed initialize result: expected an object")

        init = InitializeResult.from_dict(result)
        self.server_info = init
        self._initialized = True
        logger.info(
            f"MCP server initialized: {init.server_info.name} {init.server_info.version} "
            f"(protocol {init.protocol_version})"
        )
        return init

    def list_tools(self) -> list[McpTool]:
        """Return the tool descriptors advertised by the server."""
        self._require_initialized()
        result = self._send_request("tools/list", {})
        tools = result.get("tools") if isinstance(result, dict) else None
        if not isinstance(tools, list):
            raise McpError("Malformed tools/list result: missing tools array")
        return [McpTool.from_dict(tool) for tool in tools]

    def call_tool(self, name: str, arguments: dict[str, Any]) -> ToolCallResult:
        """Invoke one remote tool. Remote tool failures come back with is_error set."""
        self._require_initialized()
        result = self._send_request("tools/call", {
            "name": name,
            "arguments": arguments,
        })
        if not isinstance(result, dict):
            raise McpError("Malformed tools/call result: expected an object")
        return ToolCallResult.from_dict(result)

    def is_server_available(self) -> bool:
        """Probe the health endpoint. Never raises."""
        try:
            response = self._client.get(self.health_url, timeout=self.health_timeout)
        except httpx.HTTPError as e:
            logger.debug(f"MCP health probe failed for {self.health_url}: {e}")
            return False
        return response.status_code == 200

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise McpError("Client not initialized. Call initialize() first.")

    def _send_request(self, method: str, params: dict[str, Any]) -> Any:
        request = JsonRpcRequest(id=self._next_id(), method=method, params=params)
        payload = request.to_dict()
        logger.debug(f"MCP request: {json.dumps(payload)}")

        try:
            response = self._client.post(self.server_url, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise McpError(
                f"HTTP error: {e.response.status_code} {e.response.reason_phrase}",
                code=e.response.status_code,
                data=e.response.text,
            ) from e
        except httpx.HTTPError as e:
            raise McpError(f"HTTP error: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise McpError("Invalid JSON response", data=response.text) from e

        logger.debug(f"MCP response: {json.dumps(data)}")

        rpc_response = JsonRpcResponse.from_dict(data)
        if rpc_response.id is not None and rpc_response.id != request.id:
            raise McpError(
                f"Response id {rpc_response.id} does not match request id {request.id}"
            )
        return rpc_response.unwrap()

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> "McpClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
