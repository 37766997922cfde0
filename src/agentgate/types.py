"""
Core types for the agent system.

These types represent the data that flows through the orchestration loop.
The conversation is an append-only sequence of Message objects; it is the
only state the loop carries between iterations.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any


class Role(str, Enum):
    """Message roles in the conversation."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


@dataclass
class ToolCall:
    """
    A request from the model to execute a tool.

    The arguments are kept exactly as the completion service sent them
    (usually a JSON string) so that parsing happens at dispatch time, where
    a malformed payload can be reported back to the model.
    """
    id: str
    name: str
    arguments: str | dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        """Convert to OpenAI tool_call format."""
        arguments = self.arguments
        if not isinstance(arguments, str):
            arguments = json.dumps(arguments)
        return {
            "id": self.id,
            "type": "function",
            "function": {
                "name": self.name,
                "arguments": arguments,
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ToolCall":
        """Create from OpenAI tool_call format."""
        function = data.get("function", {})
        return cls(
            id=data["id"],
            name=function.get("name", ""),
            arguments=function.get("arguments", ""),
        )


@dataclass
class Message:
    """
    A single message in the conversation history.

    Assistant messages may carry tool_calls; tool messages carry the
    tool_call_id of the request they answer.
    """
    role: Role
    content: str
    name: str | None = None
    tool_call_id: str | None = None
    tool_calls: list[ToolCall] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to OpenAI API format."""
        result: dict[str, Any] = {
            "role": self.role.value,
            "content": self.content,
        }
        if self.name is not None:
            result["name"] = self.name
        if self.tool_call_id is not None:
            result["tool_call_id"] = self.tool_call_id
        if self.tool_calls:
            result["tool_calls"] = [tc.to_dict() for tc in self.tool_calls]
        return result


@dataclass
class ToolResult:
    """
    The result of executing a tool.

    This becomes a tool message in the conversation history. Failures are
    still results: success is False and content carries the diagnostic the
    model will see.
    """
    tool_call_id: str
    content: str
    success: bool = True
    error: str | None = None

    def to_message(self) -> Message:
        return Message(
            role=Role.TOOL,
            content=self.content,
            tool_call_id=self.tool_call_id,
        )
