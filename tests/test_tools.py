"""
Tests for ToolRegistry - the only way the agent affects the world.

These tests verify the core constraint: every capability is a named tool,
and names are unique within a registry.
"""

import pytest

from agentgate.tools import BaseTool, FunctionTool, ToolRegistry


class EchoTool(BaseTool):
    name = "echo"
    description = "Echo the text argument"

    def parameters_schema(self):
        return {
            "type": "object",
            "properties": {"text": {"type": "string"}},
            "required": ["text"],
        }

    def execute(self, arguments):
        return arguments["text"]


class TestToolDefinition:
    """Test tool definition and schema generation."""

    def test_tool_to_openai_schema(self) -> None:
        """Tool should generate valid OpenAI schema."""
        tool = FunctionTool(
            name="test_tool",
            description="A test tool",
            parameters={
                "type": "object",
                "properties": {
                    "arg1": {"type": "string"},
                },
                "required": ["arg1"],
            },
            handler=lambda arg1: f"Got: {arg1}",
        )

        schema = tool.to_openai_schema()

        assert schema["type"] == "function"
        assert schema["function"]["name"] == "test_tool"
        assert schema["function"]["description"] == "A test tool"
        assert schema["function"]["parameters"]["required"] == ["arg1"]

    def test_default_schema_is_empty_object(self) -> None:
        """A tool that declares nothing still produces an object schema."""

        class Bare(BaseTool):
            name = "bare"
            description = "No arguments"

            def execute(self, arguments):
                return "ok"

        assert Bare().parameters_schema() == {"type": "object", "properties": {}, "required": []}

    def test_function_tool_execution_success(self) -> None:
        """FunctionTool passes arguments as keywords and stringifies the result."""
        tool = FunctionTool(
            name="add",
            description="Add numbers",
            parameters={"type": "object", "properties": {}},
            handler=lambda a, b: a + b,
        )

        assert tool.execute({"a": 2, "b": 3}) == "5"

    def test_function_tool_execution_error(self) -> None:
        """A raising handler becomes ERROR text instead of an exception."""

        def failing_handler() -> str:
            raise ValueError("Something went wrong")

        tool = FunctionTool(
            name="failing_tool",
            description="A tool that fails",
            parameters={"type": "object", "properties": {}},
            handler=failing_handler,
        )

        assert tool.execute({}) == "ERROR: Something went wrong"


class TestToolRegistry:
    """Test the tool registry."""

    def test_register_and_get_tool(self) -> None:
        """Should be able to register and retrieve tools."""
        registry = ToolRegistry()
        tool = EchoTool()

        registry.register(tool)

        assert "echo" in registry
        assert registry.get("echo") is tool
        assert registry.get("missing") is None
        assert len(registry) == 1

    def test_duplicate_name_is_rejected(self) -> None:
        """Names are unique within a registry."""
        registry = ToolRegistry()
        registry.register(EchoTool())

        with pytest.raises(ValueError, match="already registered: echo"):
            registry.register(EchoTool())

        assert len(registry) == 1

    def test_register_function_convenience(self) -> None:
        """register_function should create and register a tool."""
        registry = ToolRegistry()

        tool = registry.register_function(
            name="func_tool",
            description="Function tool",
            parameters={"type": "object", "properties": {}},
            handler=lambda: "done",
        )

        assert "func_tool" in registry
        assert registry.get("func_tool") is tool

    def test_register_all_keeps_order(self) -> None:
        registry = ToolRegistry()
        tools = [
            FunctionTool("b", "B", {"type": "object"}, lambda: "b"),
            FunctionTool("a", "A", {"type": "object"}, lambda: "a"),
        ]

        registry.register_all(tools)

        assert registry.tool_names == ["b", "a"]
        assert list(registry) == tools

    def test_get_schemas(self) -> None:
        """Should return schemas for all registered tools."""
        registry = ToolRegistry()
        registry.register(EchoTool())
        registry.register_function(
            name="tool2",
            description="Tool 2",
            parameters={"type": "object", "properties": {}},
            handler=lambda: "2",
        )

        schemas = registry.get_schemas()

        assert len(schemas) == 2
        names = [s["function"]["name"] for s in schemas]
        assert names == ["echo", "tool2"]

    def test_empty_registry(self) -> None:
        registry = ToolRegistry()
        assert len(registry) == 0
        assert registry.get_schemas() == []
