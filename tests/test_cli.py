"""
Tests for the agentgate command line.
"""

import io

import pytest
from rich.console import Console

import agentgate.cli as cli
from agentgate.assembly import ConfirmationMode, create_agent_runtime
from agentgate.llm import ChatResponse
from agentgate.types import ToolCall


class MockLLMClient:
    """Mock LLM client for testing."""

    def __init__(self, responses=None, repeat=None):
        self._responses = list(responses or [])
        self._repeat = repeat

    def chat(self, messages, tools=None, **kwargs):
        if self._responses:
            return self._responses.pop(0)
        if self._repeat is not None:
            return self._repeat
        return ChatResponse(content="Default response", tool_calls=[], finish_reason="stop", raw_response={})


def make_console() -> tuple[Console, io.StringIO]:
    buffer = io.StringIO()
    return Console(file=buffer, width=200), buffer


@pytest.fixture
def env(monkeypatch):
    for name in ("OPENAI_API_KEY", "MCP_SERVER_URL", "AGENT_MAX_ITERATIONS"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LLM_API_KEY", "sk-test")
    return monkeypatch


@pytest.fixture
def fake_runtime(env):
    """Replace runtime creation with one backed by a scripted LLM."""
    captured = {}

    def install(llm):
        def factory(project_path, config, mode=ConfirmationMode.SAFE, console=None):
            captured.update(project_path=project_path, config=config, mode=mode)
            return create_agent_runtime(
                project_path,
                config,
                mode=mode,
                console=console,
                llm_client=llm,
                subagent_llm_client=MockLLMClient(),
                discover=lambda *args, **kwargs: [],
            )

        env.setattr(cli, "create_agent_runtime", factory)
        return captured

    return install


class TestParser:
    def test_defaults(self):
        args = cli.build_parser().parse_args(["/proj", "fix it"])

        assert args.project_path == "/proj"
        assert args.task == "fix it"
        assert cli.selected_mode(args) is ConfirmationMode.SAFE
        assert args.max_iterations is None

    def test_modes(self):
        parser = cli.build_parser()
        assert cli.selected_mode(parser.parse_args(["p", "t", "--brave"])) is ConfirmationMode.BRAVE
        assert cli.selected_mode(parser.parse_args(["p", "t", "--interactive"])) is ConfirmationMode.INTERACTIVE

    def test_modes_are_exclusive(self):
        with pytest.raises(SystemExit) as excinfo:
            cli.build_parser().parse_args(["p", "t", "--brave", "--interactive"])
        assert excinfo.value.code == 2

    def test_missing_task(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["p"])


class TestMain:
    """Tests for main()."""

    def test_missing_api_key(self, monkeypatch):
        monkeypatch.delenv("LLM_API_KEY", raising=False)
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        console, buffer = make_console()

        assert cli.main(["/proj", "task"], console=console) == 1
        assert "LLM_API_KEY (or OPENAI_API_KEY) environment variable not set" in buffer.getvalue()

    def test_invalid_max_iterations(self, env):
        console, buffer = make_console()
        assert cli.main(["/proj", "task", "--max-iterations", "0"], console=console) == 1
        assert "--max-iterations must be at least 1" in buffer.getvalue()

    def test_successful_run(self, fake_runtime, tmp_path):
        captured = fake_runtime(MockLLMClient([
            ChatResponse(content="Added the [bold] docstring", tool_calls=[]),
        ]))
        console, buffer = make_console()

        code = cli.main([str(tmp_path), "add docs", "--brave", "--user", "alice"], console=console)

        output = buffer.getvalue()
        assert code == 0
        assert captured["mode"] is ConfirmationMode.BRAVE
        assert "Mode: Brave" in output
        assert "User: alice" in output
        assert "No MCP server available" in output
        assert "Total tools available: 6" in output
        assert "Task Completed" in output
        assert "Added the [bold] docstring" in output

    def test_flag_overrides(self, fake_runtime, tmp_path):
        captured = fake_runtime(MockLLMClient())
        console, _ = make_console()

        cli.main(
            [str(tmp_path), "task", "--mcp-url", "http://tools:9000", "--max-iterations", "3"],
            console=console,
        )

        config = captured["config"]
        assert config.mcp.server_url == "http://tools:9000/mcp"
        assert config.loop.max_iterations == 3

    def test_iteration_limit(self, fake_runtime, tmp_path):
        looping = ChatResponse(
            content=None,
            tool_calls=[ToolCall(id="c", name="list__directory", arguments='{"path": "."}')],
            finish_reason="tool_calls",
        )
        fake_runtime(MockLLMClient(repeat=looping))
        console, buffer = make_console()

        code = cli.main([str(tmp_path), "loop", "--max-iterations", "2"], console=console)

        assert code == 1
        assert "Max iterations (2) reached" in buffer.getvalue()
