"""
Tests for wiring a runnable agent together.
"""

from agentgate.assembly import (
    ConfirmationMode,
    build_registry,
    create_agent_runtime,
    create_confirmation_handler,
    create_native_tools,
)
from agentgate.config import AgentConfig, LLMConfig, LoopConfig, McpConfig
from agentgate.confirmation import BraveConfirmationHandler, SafeConfirmationHandler
from agentgate.filesystem import LocalFileSystem
from agentgate.interactive import InteractiveConfirmationHandler
from agentgate.llm import ChatResponse
from agentgate.tools import FunctionTool


class MockLLMClient:
    """Mock LLM client for testing."""

    def __init__(self, responses=None):
        self._responses = list(responses or [])
        self._calls = []

    def chat(self, messages, tools=None, **kwargs):
        self._calls.append({"messages": messages, "tools": tools})
        if self._responses:
            return self._responses.pop(0)
        return ChatResponse(content="Default response", tool_calls=[], finish_reason="stop", raw_response={})


class ClosableClient:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


class RemoteTool(FunctionTool):
    """A discovered tool that holds a connection."""

    def __init__(self, name, client):
        super().__init__(name=name, description=f"Remote {name}", parameters={"type": "object"}, handler=lambda: name)
        self.client = client


def make_config(**loop) -> AgentConfig:
    return AgentConfig(
        llm=LLMConfig(base_url="http://llm.test/v1", api_key="sk", model="big"),
        loop=LoopConfig(**loop),
        mcp=McpConfig(server_url="http://mcp.test/mcp"),
    )


def function_tool(name: str) -> FunctionTool:
    return FunctionTool(name=name, description=name, parameters={"type": "object"}, handler=lambda: name)


class TestConfirmationHandlerFactory:
    def test_modes(self):
        assert isinstance(create_confirmation_handler(ConfirmationMode.SAFE), SafeConfirmationHandler)
        assert isinstance(create_confirmation_handler(ConfirmationMode.BRAVE), BraveConfirmationHandler)
        assert isinstance(create_confirmation_handler(ConfirmationMode.INTERACTIVE), InteractiveConfirmationHandler)


class TestBuildRegistry:
    """Tests for registry assembly order and collisions."""

    def test_native_tools(self, tmp_path):
        tools = create_native_tools(LocalFileSystem(root=tmp_path), BraveConfirmationHandler())
        registry = build_registry(tools)

        assert registry.tool_names == [
            "list__directory",
            "read__file",
            "create__file",
            "edit__file",
            "execute__shell_command",
        ]

    def test_order_is_native_remote_delegate(self):
        registry = build_registry([function_tool("a")], [function_tool("b")], [function_tool("c")])
        assert registry.tool_names == ["a", "b", "c"]

    def test_colliding_remote_tool_is_skipped(self):
        native = function_tool("read__file")
        remote = function_tool("read__file")

        registry = build_registry([native], [remote, function_tool("search")])

        assert registry.get("read__file") is native
        assert registry.tool_names == ["read__file", "search"]


class TestCreateAgentRuntime:
    """Tests for create_agent_runtime."""

    def test_without_remote_tools(self, tmp_path):
        llm = MockLLMClient([ChatResponse(content="finished", tool_calls=[])])

        with create_agent_runtime(
            str(tmp_path),
            make_config(max_iterations=7),
            llm_client=llm,
            subagent_llm_client=MockLLMClient(),
            discover=lambda *args, **kwargs: [],
        ) as runtime:
            result = runtime.run(str(tmp_path), "say hi")

        assert result == "finished"
        assert runtime.remote_tool_names == []
        assert "__find_in_codebase_agent__" in runtime.registry
        assert len(runtime.registry) == 6
        assert runtime.agent.max_iterations == 7
        assert isinstance(runtime.confirmation, SafeConfirmationHandler)

        messages = llm._calls[0]["messages"]
        assert messages[0]["role"] == "system"
        assert str(tmp_path) in messages[0]["content"]
        assert messages[1]["content"] == f"Project path: {tmp_path}\n\nTask: say hi"

    def test_discovery_arguments(self, tmp_path):
        seen = {}

        def discover(url, **kwargs):
            seen["url"] = url
            seen.update(kwargs)
            return []

        create_agent_runtime(
            str(tmp_path),
            make_config(),
            llm_client=MockLLMClient(),
            subagent_llm_client=MockLLMClient(),
            discover=discover,
        )

        assert seen == {"url": "http://mcp.test/mcp", "timeout": 30.0, "health_timeout": 5.0}

    def test_remote_tools_are_registered_and_closed(self, tmp_path):
        client = ClosableClient()
        remote = [RemoteTool("search_docs", client), RemoteTool("read__file", client)]

        runtime = create_agent_runtime(
            str(tmp_path),
            make_config(),
            mode=ConfirmationMode.BRAVE,
            llm_client=MockLLMClient(),
            subagent_llm_client=MockLLMClient(),
            discover=lambda *args, **kwargs: remote,
        )

        assert runtime.remote_tool_names == ["search_docs"]
        assert runtime.registry.tool_names[5] == "search_docs"
        assert runtime.registry.tool_names[-1] == "__find_in_codebase_agent__"

        runtime.close()
        assert client.closed

    def test_sub_agent_is_read_only(self, tmp_path):
        runtime = create_agent_runtime(
            str(tmp_path),
            make_config(subagent_max_iterations=4),
            llm_client=MockLLMClient(),
            subagent_llm_client=MockLLMClient(),
            discover=lambda *args, **kwargs: [],
        )

        sub_agent = runtime.registry.get("__find_in_codebase_agent__").agent
        assert sub_agent.tools.tool_names == ["list__directory", "read__file"]
        assert sub_agent.max_iterations == 4
        assert not sub_agent.tools.get("read__file").file_system.can_write

