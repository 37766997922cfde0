"""
Model Context Protocol wire types (JSON-RPC 2.0, protocol 2024-11-05).

Only the subset needed for tool discovery is modelled: the initialize
handshake, tools/list and tools/call. Parsing helpers raise McpError on
malformed payloads so callers deal with a single exception type.
"""

from dataclasses import dataclass, field
from typing import Any

JSONRPC_VERSION = "2.0"
PROTOCOL_VERSION = "2024-11-05"
CLIENT_NAME = "agentgate"
CLIENT_VERSION = "0.1.0"


class McpError(Exception):
    """A failed JSON-RPC exchange: transport error, error response or bad payload."""

    def __init__(self, message: str, code: int | None = None, data: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.data = data

    def __str__(self) -> str:
        if self.code is not None:
            return f"{self.message} (code {self.code})"
        return self.message


@dataclass
class JsonRpcRequest:
    id: int
    method: str
    params: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "jsonrpc": JSONRPC_VERSION,
            "id": self.id,
            "method": self.method,
            "params": self.params,
        }


@dataclass
class JsonRpcError:
    code: int
    message: str
    data: Any = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JsonRpcError":
        return cls(
            code=data.get("code", 0),
            message=data.get("message", "Unknown error"),
            data=data.get("data"),
        )


@dataclass
class JsonRpcResponse:
    """A response carries either a result or an error, never both."""

    id: int | str | None
    result: Any = None
    error: JsonRpcError | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "JsonRpcResponse":
        if not isinstance(data, dict):
            raise McpError("Malformed JSON-RPC response: expected an object")

        error = data.get("error")
        if error is not None and not isinstance(error, dict):
            raise McpError("Malformed JSON-RPC response: error must be an object")

        return cls(
            id=data.get("id"),
            result=data.get("result"),
            error=JsonRpcError.from_dict(error) if error is not None else None,
        )

    def unwrap(self) -> Any:
        """Return the result or raise the error as McpError."""
        if self.error is not None:
            raise McpError(self.error.message, self.error.code, self.error.data)
        if self.result is None:
            raise McpError("No result in response")
        return self.result


@dataclass
class ServerInfo:
    name: str
    version: str


@dataclass
class InitializeResult:
    protocol_version: str
    capabilities: dict[str, Any]
    server_info: ServerInfo

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InitializeResult":
        try:
            info = data.get("serverInfo") or {}
            return cls(
                protocol_version=data["protocolVersion"],
                capabilities=data.get("capabilities") or {},
                server_info=ServerInfo(
                    name=info.get("name", "unknown"),
                    version=info.get("version", "unknown"),
                ),
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise McpError(f"Malformed initialize result: {e}") from e


@dataclass
class McpTool:
    """A tool descriptor as advertised by tools/list."""

    name: str
    description: str
    input_schema: dict[str, Any]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "McpTool":
        try:
            name = data["name"]
        except (KeyError, TypeError) as e:
            raise McpError(f"Malformed tool descriptor: {e}") from e
        if not isinstance(name, str) or not name:
            raise McpError("Malformed tool descriptor: name must be a non-empty string")

        schema = data.get("inputSchema") or {"type": "object", "properties": {}}
        return cls(
            name=name,
            description=data.get("description") or "",
            input_schema=schema,
        )


@dataclass
class TextContent:
    text: str
    type: str = "text"


@dataclass
class ToolCallResult:
    content: list[TextContent]
    is_error: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ToolCallResult":
        try:
            items = data.get("content") or []
            content = [
                TextContent(text=item.get("text", ""), type=item.get("type", "text"))
                for item in items
            ]
            return cls(content=content, is_error=bool(data.get("isError", False)))
        except (TypeError, AttributeError) as e:
            raise McpError(f"Malformed tool call result: {e}") from e
