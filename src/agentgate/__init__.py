"""
agentgate - a tool-calling coding agent with gated side effects.

The model talks to the world only through tools:

1. Native tools read and write files and run shell commands
2. Remote tools are discovered on an MCP server and adapted to the same contract
3. A read-only code-search sub-agent is exposed as one more tool
4. Every file write and shell command passes a confirmation gate first

The run ends when the model answers without requesting a tool, or fails
when it exceeds the iteration bound.
"""

__version__ = "0.1.0"

from agentgate.agent_loop import AgentLoop, AgentState, IterationLimitExceeded
from agentgate.config import AgentConfig, LLMConfig, LoopConfig, McpConfig
from agentgate.confirmation import (
    BraveConfirmationHandler,
    ConfirmationHandler,
    ConfirmationOutcome,
    OperationRequest,
    SafeConfirmationHandler,
)
from agentgate.diff import DiffLine, DiffStats, compute_diff, compute_lcs, compute_stats, generate_diff
from agentgate.interactive import GateSession, InteractiveConfirmationHandler
from agentgate.llm import ChatResponse, LLMClient, LLMError
from agentgate.mcp import McpClient, McpError, McpToolAdapter, discover_tools
from agentgate.tools import BaseTool, FunctionTool, ToolRegistry
from agentgate.types import Message, Role, ToolCall, ToolResult

__all__ = [
    "AgentConfig",
    "AgentLoop",
    "AgentState",
    "BaseTool",
    "BraveConfirmationHandler",
    "ChatResponse",
    "ConfirmationHandler",
    "ConfirmationOutcome",
    "DiffLine",
    "DiffStats",
    "FunctionTool",
    "GateSession",
    "InteractiveConfirmationHandler",
    "IterationLimitExceeded",
    "LLMClient",
    "LLMConfig",
    "LLMError",
    "LoopConfig",
    "McpClient",
    "McpConfig",
    "McpError",
    "McpToolAdapter",
    "Message",
    "OperationRequest",
    "Role",
    "SafeConfirmationHandler",
    "ToolCall",
    "ToolRegistry",
    "ToolResult",
    "compute_diff",
    "compute_lcs",
    "compute_stats",
    "discover_tools",
    "generate_diff",
]
