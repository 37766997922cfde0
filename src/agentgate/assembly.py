"""
Assembly of a runnable agent.

Builds the confirmation gate, the tool registry (native tools, discovered
MCP tools, the code-search delegate) and the top-level AgentLoop, and keeps
hold of every client that needs closing afterwards.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from rich.console import Console

from agentgate.agent_loop import AgentLoop
from agentgate.config import AgentConfig
from agentgate.confirmation import (
    BraveConfirmationHandler,
    ConfirmationHandler,
    SafeConfirmationHandler,
)
from agentgate.filesystem import FileSystemProvider, LocalFileSystem
from agentgate.fs_tools import CreateFileTool, EditFileTool, ListDirectoryTool, ReadFileTool
from agentgate.interactive import InteractiveConfirmationHandler
from agentgate.llm import CompletionService, LLMClient
from agentgate.mcp import discover_tools
from agentgate.prompts import get_system_prompt, initial_user_message
from agentgate.shell_tool import ExecuteShellCommandTool
from agentgate.subagents import CodeSearchAgentTool, create_code_search_agent
from agentgate.tools import BaseTool, ToolRegistry

logger = logging.getLogger(__name__)


class ConfirmationMode(Enum):
    SAFE = "safe"
    BRAVE = "brave"
    INTERACTIVE = "interactive"


def create_confirmation_handler(
    mode: ConfirmationMode,
    console: Console | None = None,
) -> ConfirmationHandler:
    if mode is ConfirmationMode.BRAVE:
        return BraveConfirmationHandler()
    if mode is ConfirmationMode.INTERACTIVE:
        return InteractiveConfirmationHandler(console=console)
    return SafeConfirmationHandler()


def create_native_tools(
    file_system: FileSystemProvider,
    confirmation: ConfirmationHandler,
) -> list[BaseTool]:
    return [
        ListDirectoryTool(file_system),
        ReadFileTool(file_system),
        CreateFileTool(file_system, confirmation),
        EditFileTool(file_system, confirmation),
        ExecuteShellCommandTool(confirmation),
    ]


def build_registry(
    native_tools: Iterable[BaseTool],
    remote_tools: Iterable[BaseTool] = (),
    delegate_tools: Iterable[BaseTool] = (),
) -> ToolRegistry:
    """
    Register native tools first, then remote tools, then delegates.

    A remote tool whose name is already taken is skipped with a warning so
    a misbehaving server cannot shadow a local capability.
    """
    registry = ToolRegistry()
    registry.register_all(native_tools)

    for tool in remote_tools:
        if tool.name in registry:
            logger.warning(f"Skipping MCP tool '{tool.name}': name already registered")
            continue
        registry.register(tool)

    registry.register_all(delegate_tools)
    return registry


@dataclass
class AgentRuntime:
    """A ready-to-run agent plus the resources to release when it is done."""
    agent: AgentLoop
    registry: ToolRegistry
    confirmation: ConfirmationHandler
    remote_tool_names: list[str] = field(default_factory=list)
    _closeables: list[Any] = field(default_factory=list, repr=False)

    def run(self, project_path: str, task: str) -> str:
        return self.agent.run(initial_user_message(project_path, task))

    def close(self) -> None:
        for resource in self._closeables:
            resource.close()
        self._closeables.clear()

    def __enter__(self) -> "AgentRuntime":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


def create_agent_runtime(
    project_path: str,
    config: AgentConfig,
    mode: ConfirmationMode = ConfirmationMode.SAFE,
    console: Console | None = None,
    llm_client: CompletionService | None = None,
    subagent_llm_client: CompletionService | None = None,
    discover: Callable[..., list[BaseTool]] = discover_tools,
) -> AgentRuntime:
    """
    Wire up everything the main agent needs.

    LLM clients are created from config unless supplied. MCP discovery
    failures only mean the agent starts with native tools.
    """
    closeables: list[Any] = []

    if llm_client is None:
        llm_client = LLMClient(config.llm)
        closeables.append(llm_client)
    if subagent_llm_client is None:
        subagent_llm_client = LLMClient(replace(config.llm, model=config.loop.subagent_model))
        closeables.append(subagent_llm_client)

    confirmation = create_confirmation_handler(mode, console)
    file_system = LocalFileSystem.read_write(root=project_path)
    native_tools = create_native_tools(file_system, confirmation)

    remote_tools = discover(
        config.mcp.server_url,
        timeout=config.mcp.request_timeout,
        health_timeout=config.mcp.health_timeout,
    )
    for tool in remote_tools:
        client = getattr(tool, "client", None)
        if client is not None and client not in closeables:
            closeables.append(client)

    code_search = CodeSearchAgentTool(create_code_search_agent(
        subagent_llm_client,
        LocalFileSystem.read_only(root=project_path),
        max_iterations=config.loop.subagent_max_iterations,
    ))

    registry = build_registry(native_tools, remote_tools, [code_search])
    logger.info(f"Total tools available: {len(registry)}")

    agent = AgentLoop(
        llm_client=llm_client,
        tools=registry,
        system_prompt=get_system_prompt(project_path),
        max_iterations=config.loop.max_iterations,
    )

    return AgentRuntime(
        agent=agent,
        registry=registry,
        confirmation=confirmation,
        remote_tool_names=[tool.name for tool in remote_tools if registry.get(tool.name) is tool],
        _closeables=closeables,
    )
