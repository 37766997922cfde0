"""
AgentLoop - the orchestration loop.

This module implements the loop that:
1. Receives the user's task
2. Sends the conversation and tool declarations to the completion service
3. Appends the assistant message verbatim
4. Dispatches each requested tool call, in request order, through the registry
5. Appends exactly one tool message per call
6. Repeats until an assistant message carries no tool calls

Tool failures never end a run. Unknown tools, malformed arguments and tools
that raise all become "ERROR: ..." tool messages the model can react to.
The only abnormal exit is running out of iterations.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from agentgate.llm import CompletionService
from agentgate.tools import ToolRegistry
from agentgate.types import Message, Role, ToolCall, ToolResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 20


class IterationLimitExceeded(Exception):
    """The model kept requesting tools past the iteration bound."""

    def __init__(self, max_iterations: int) -> None:
        super().__init__(f"Max iterations ({max_iterations}) reached")
        self.max_iterations = max_iterations


@dataclass
class AgentState:
    """Current state of the agent."""
    messages: list[Message] = field(default_factory=list)
    iteration: int = 0
    tool_call_count: int = 0
    is_complete: bool = False
    final_response: str = ""


class AgentLoop:
    """
    Turn-based agent loop over a completion service and a tool registry.

    Each iteration is one completion request. Tool calls within an
    iteration run strictly one after another so tool messages line up 1:1
    with the requests that produced them.
    """

    def __init__(
        self,
        llm_client: CompletionService,
        tools: ToolRegistry,
        system_prompt: str = "",
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ):
        self.llm_client = llm_client
        self.tools = tools
        self.system_prompt = system_prompt
        self.max_iterations = max_iterations
        self.reset()

    def reset(self) -> None:
        """Drop the conversation, keeping only the system prompt."""
        self.state = AgentState()
        if self.system_prompt:
            self.state.messages.append(Message(role=Role.SYSTEM, content=self.system_prompt))

    def add_user_message(self, content: str) -> None:
        """Add a user message to the conversation."""
        self.state.messages.append(Message(role=Role.USER, content=content))

    def get_messages(self) -> list[Message]:
        return list(self.state.messages)

    def run_step(self) -> tuple[str | None, list[ToolResult]]:
        """
        Run one iteration.

        Returns (text_response, tool_results):
        - If the assistant requested no tools: (text, [])
        - Otherwise: (None, [one result per requested call, in order])
        """
        self.state.iteration += 1
        logger.info(f"Agent loop iteration {self.state.iteration}/{self.max_iterations}")

        schemas = self.tools.get_schemas()
        messages_for_api = [msg.to_dict() for msg in self.state.messages]

        response = self.llm_client.chat(
            messages=messages_for_api,
            tools=schemas if schemas else None,
        )

        self.state.messages.append(Message(
            role=Role.ASSISTANT,
            content=response.content or "",
            tool_calls=list(response.tool_calls) if response.tool_calls else None,
        ))

        if not response.tool_calls:
            return response.content or "", []

        tool_results = []
        for tool_call in response.tool_calls:
            self.state.tool_call_count += 1
            result = self.dispatch(tool_call)
            tool_results.append(result)
            self.state.messages.append(result.to_message())

        return None, tool_results

    def dispatch(self, tool_call: ToolCall) -> ToolResult:
        """Execute one tool call. Always returns a result, never raises."""
        tool = self.tools.get(tool_call.name)
        if tool is None:
            logger.warning(f"Tool not found: {tool_call.name}")
            return _error_result(tool_call, f"Tool '{tool_call.name}' not found")

        try:
            arguments = parse_arguments(tool_call.arguments)
        except ValueError as e:
            logger.warning(f"Invalid arguments for {tool_call.name}: {e}")
            return _error_result(tool_call, f"Invalid arguments for tool '{tool_call.name}': {e}")

        logger.info(f"Executing tool: {tool_call.name}")
        logger.debug(f"Tool arguments: {arguments}")

        try:
            content = tool.execute(arguments)
        except Exception as e:
            logger.warning(f"Tool {tool_call.name} raised: {e}")
            return _error_result(tool_call, str(e))

        return ToolResult(
            tool_call_id=tool_call.id,
            content=content,
            success=not content.startswith("ERROR:"),
        )

    def run(self, user_input: str) -> str:
        """
        Run the agent loop until the model answers without requesting tools.

        Each call gets the full iteration budget; the conversation carries over
        unless reset() is called in between.

        Returns the final text response from the agent.

        Raises:
            IterationLimitExceeded: no final answer within max_iterations
        """
        self.add_user_message(user_input)
        self.state.iteration = 0
        self.state.is_complete = False

        while self.state.iteration < self.max_iterations:
            text_response, _ = self.run_step()
            if text_response is not None:
                self.state.is_complete = True
                self.state.final_response = text_response
                return text_response

        logger.error(f"Max iterations ({self.max_iterations}) reached")
        raise IterationLimitExceeded(self.max_iterations)


def parse_arguments(raw: str | dict[str, Any] | None) -> dict[str, Any]:
    """Decode a tool-call argument payload into a dict; ValueError if impossible."""
    if raw is None or raw == "":
        return {}
    if isinstance(raw, dict):
        return raw
    if not isinstance(raw, str):
        raise ValueError(f"expected a JSON object, got {type(raw).__name__}")
    arguments = json.loads(raw)
    if not isinstance(arguments, dict):
        raise ValueError(f"expected a JSON object, got {type(arguments).__name__}")
    return arguments


def _error_result(tool_call: ToolCall, message: str) -> ToolResult:
    return ToolResult(
        tool_call_id=tool_call.id,
        content=f"ERROR: {message}",
        success=False,
        error=message,
    )
