"""
Configuration for the agent system.

All configuration is loaded from environment variables so the same code
runs against any OpenAI-compatible backend and any MCP server without
hardcoding values. CLI flags override individual fields after loading.
"""

import os
from dataclasses import dataclass, field

DEFAULT_MCP_SERVER_URL = "http://localhost:8080"


@dataclass
class LLMConfig:
    """Configuration for the LLM client."""
    base_url: str
    api_key: str
    model: str
    temperature: float = 0.7
    max_tokens: int = 4096

    @classmethod
    def from_env(cls) -> "LLMConfig":
        """Load configuration from environment variables."""
        return cls(
            base_url=os.getenv("LLM_BASE_URL", "https://api.openai.com/v1"),
            api_key=os.getenv("LLM_API_KEY") or os.getenv("OPENAI_API_KEY", ""),
            model=os.getenv("LLM_MODEL", "gpt-4o"),
            temperature=float(os.getenv("LLM_TEMPERATURE", "0.7")),
            max_tokens=int(os.getenv("LLM_MAX_TOKENS", "4096")),
        )


@dataclass
class LoopConfig:
    """
    Configuration for the agent loop.

    max_iterations is a hard cap on completion requests per run. It is the
    only thing that can stop a run abnormally.
    """
    max_iterations: int = 20
    subagent_max_iterations: int = 15
    subagent_model: str = "gpt-4o-mini"

    @classmethod
    def from_env(cls) -> "LoopConfig":
        """Load configuration from environment variables."""
        return cls(
            max_iterations=int(os.getenv("AGENT_MAX_ITERATIONS", "20")),
            subagent_max_iterations=int(os.getenv("SUBAGENT_MAX_ITERATIONS", "15")),
            subagent_model=os.getenv("SUBAGENT_MODEL", "gpt-4o-mini"),
        )


def normalize_mcp_url(url: str) -> str:
    """Append the /mcp endpoint path unless the URL already ends with it."""
    url = url.rstrip("/")
    return url if url.endswith("/mcp") else f"{url}/mcp"


@dataclass
class McpConfig:
    """Configuration for remote tool discovery."""
    server_url: str = field(default_factory=lambda: normalize_mcp_url(DEFAULT_MCP_SERVER_URL))
    request_timeout: float = 30.0
    health_timeout: float = 5.0

    @classmethod
    def from_env(cls) -> "McpConfig":
        """Load configuration from environment variables."""
        return cls(
            server_url=normalize_mcp_url(os.getenv("MCP_SERVER_URL", DEFAULT_MCP_SERVER_URL)),
            request_timeout=float(os.getenv("MCP_REQUEST_TIMEOUT", "30")),
            health_timeout=float(os.getenv("MCP_HEALTH_TIMEOUT", "5")),
        )


@dataclass
class AgentConfig:
    """Combined configuration for the entire agent system."""
    llm: LLMConfig
    loop: LoopConfig
    mcp: McpConfig

    @classmethod
    def from_env(cls) -> "AgentConfig":
        """Load all configuration from environment variables."""
        return cls(
            llm=LLMConfig.from_env(),
            loop=LoopConfig.from_env(),
            mcp=McpConfig.from_env(),
        )
