"""
Tool System - the only way the agent affects the world.

Every capability the model can call (native file and shell tools, tools
discovered on a remote MCP server, the code-search sub-agent) implements
BaseTool and lives in a ToolRegistry under a unique name. The orchestrator
only ever looks tools up by name and calls execute().
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

EMPTY_SCHEMA: dict[str, Any] = {"type": "object", "properties": {}, "required": []}


class BaseTool(ABC):
    """
    A named capability with a JSON-Schema argument declaration.

    execute() returns text for the model. Expected failures are reported as
    "ERROR: ..." text rather than raised.
    """

    name: str
    description: str

    def parameters_schema(self) -> dict[str, Any]:
        """JSON Schema for the tool's arguments. Override in subclasses."""
        return dict(EMPTY_SCHEMA)

    @abstractmethod
    def execute(self, arguments: dict[str, Any]) -> str:
        """Run the tool."""

    def to_function_declaration(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters_schema(),
        }

    def to_openai_schema(self) -> dict[str, Any]:
        """Convert to OpenAI tool format."""
        return {
            "type": "function",
            "function": self.to_function_declaration(),
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


@dataclass(repr=False)
class FunctionTool(BaseTool):
    """A tool backed by a plain function taking keyword arguments."""

    name: str
    description: str
    parameters: dict[str, Any]
    handler: Callable[..., Any]

    def parameters_schema(self) -> dict[str, Any]:
        return self.parameters

    def execute(self, arguments: dict[str, Any]) -> str:
        try:
            return str(self.handler(**arguments))
        except Exception as e:
            logger.error(f"Tool {self.name} failed: {e}")
            return f"ERROR: {e}"


@dataclass
class ToolRegistry:
    """
    Name-keyed collection of available tools.

    Names are unique across native, remote and delegate tools; registering
    a second tool under an existing name is an error.
    """

    _tools: dict[str, BaseTool] = field(default_factory=dict)

    def register(self, tool: BaseTool) -> None:
        """Register a tool."""
        if tool.name in self._tools:
            raise ValueError(f"Tool already registered: {tool.name}")
        self._tools[tool.name] = tool
        logger.debug(f"Registered tool: {tool.name}")

    def register_all(self, tools: Iterable[BaseTool]) -> None:
        for tool in tools:
            self.register(tool)

    def register_function(
        self,
        name: str,
        description: str,
        parameters: dict[str, Any],
        handler: Callable[..., Any],
    ) -> FunctionTool:
        """Convenience method to register a function as a tool."""
        tool = FunctionTool(
            name=name,
            description=description,
            parameters=parameters,
            handler=handler,
        )
        self.register(tool)
        return tool

    def get(self, name: str) -> BaseTool | None:
        """Get a tool by name."""
        return self._tools.get(name)

    def get_schemas(self) -> list[dict[str, Any]]:
        """Get OpenAI-format schemas for all registered tools."""
        return [tool.to_openai_schema() for tool in self._tools.values()]

    @property
    def tool_names(self) -> list[str]:
        """List of registered tool names."""
        return list(self._tools.keys())

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[BaseTool]:
        return iter(self._tools.values())
