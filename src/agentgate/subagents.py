"""
Sub-agent delegation.

A sub-agent is another AgentLoop with its own conversation, a smaller
model and a read-only tool set, exposed to the main agent as one tool.
"""

import logging
from typing import Any

from agentgate.agent_loop import AgentLoop
from agentgate.filesystem import FileSystemProvider, LocalFileSystem
from agentgate.fs_tools import ListDirectoryTool, ReadFileTool
from agentgate.llm import CompletionService
from agentgate.prompts import CODE_SEARCH_SYSTEM_PROMPT
from agentgate.tools import BaseTool, ToolRegistry

logger = logging.getLogger(__name__)

CODE_SEARCH_MAX_ITERATIONS = 15


def create_code_search_agent(
    llm_client: CompletionService,
    file_system: FileSystemProvider | None = None,
    max_iterations: int = CODE_SEARCH_MAX_ITERATIONS,
) -> AgentLoop:
    """Build a code-search agent that can only list directories and read files."""
    file_system = file_system or LocalFileSystem.read_only()
    registry = ToolRegistry()
    registry.register(ListDirectoryTool(file_system))
    registry.register(ReadFileTool(file_system))

    return AgentLoop(
        llm_client=llm_client,
        tools=registry,
        system_prompt=CODE_SEARCH_SYSTEM_PROMPT,
        max_iterations=max_iterations,
    )


class CodeSearchAgentTool(BaseTool):
    """Delegates a search query to a code-search sub-agent."""

    name = "__find_in_codebase_agent__"
    description = (
        "Delegates to a specialized code search agent to find code, functions, classes, "
        "or patterns in the codebase. Use this when you need to:\n"
        "- Find a specific function or class implementation\n"
        "- Search for patterns or keywords across files\n"
        "- Understand where certain functionality is implemented\n"
        "- Locate API usage examples\n"
        "- Find related code across multiple files\n\n"
        "The sub-agent will search strategically and return focused results "
        "with file locations and code snippets."
    )

    def __init__(self, agent: AgentLoop) -> None:
        self.agent = agent

    def parameters_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": (
                        'What to search for (e.g., "find the authentication function", '
                        '"locate the User class", "find where database connections are established")'
                    ),
                },
            },
            "required": ["query"],
        }

    def execute(self, arguments: dict[str, Any]) -> str:
        query = arguments.get("query")
        if not query or not str(query).strip():
            return "ERROR: Query cannot be empty"

        logger.info(f"Code search sub-agent invoked: {query!r}")
        # Each delegation starts from a fresh conversation.
        self.agent.reset()
        try:
            result = self.agent.run(str(query))
        except Exception as e:
            logger.warning(f"Code search sub-agent failed: {e}")
            return f"ERROR: Code search failed: {e}"

        logger.info("Code search sub-agent completed")
        return result
