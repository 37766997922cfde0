"""
Remote tool discovery.

discover_tools() is a boundary function: whatever goes wrong (server down,
handshake rejected, garbage payload) the agent simply starts with no remote
tools.
"""

import logging

from agentgate.mcp.adapter import McpToolAdapter
from agentgate.mcp.client import DEFAULT_HEALTH_TIMEOUT, DEFAULT_REQUEST_TIMEOUT, McpClient
from agentgate.mcp.protocol import McpError
from agentgate.tools import BaseTool

logger = logging.getLogger(__name__)


def discover_tools(
    server_url: str,
    timeout: float = DEFAULT_REQUEST_TIMEOUT,
    health_timeout: float = DEFAULT_HEALTH_TIMEOUT,
) -> list[BaseTool]:
    """
    Discover every tool on an MCP server and wrap each in an adapter.

    Returns an empty list on any failure. The returned adapters share one
    open client; it lives as long as the adapters do.
    """
    client: McpClient | None = None
    try:
        client = McpClient(server_url, timeout=timeout, health_timeout=health_timeout)

        logger.info(f"Testing MCP connection to {server_url}")
        if not client.is_server_available():
            logger.info("MCP server not available")
            client.close()
            return []

        init = client.initialize()
        logger.info(f"MCP initialized: {init.server_info.name} {init.server_info.version}")

        remote_tools = client.list_tools()
        logger.info(f"Discovered {len(remote_tools)} MCP tools: {[t.name for t in remote_tools]}")

        if not remote_tools:
            client.close()
            return []
        return [McpToolAdapter(tool, client) for tool in remote_tools]

    except McpError as e:
        logger.warning(f"MCP discovery failed: {e.message} (code={e.code}, data={e.data})")
    except Exception as e:
        logger.warning(f"MCP discovery failed: {e}")

    if client is not None:
        client.close()
    return []


def test_connection(server_url: str, health_timeout: float = DEFAULT_HEALTH_TIMEOUT) -> bool:
    """True if the server's health endpoint answers 200. Never raises."""
    try:
        with McpClient(server_url, health_timeout=health_timeout) as client:
            return client.is_server_available()
    except Exception as e:
        logger.debug(f"MCP connection test failed: {e}")
        return False


