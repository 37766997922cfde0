"""
LLM Client - the completion service collaborator.

This client works with any OpenAI-compatible chat completions API. The
orchestrator only depends on the CompletionService protocol, so tests and
sub-agents can substitute any object with a matching chat() method.

Includes timeout and retry logic for resilience against API hangs.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from agentgate.config import LLMConfig
from agentgate.types import ToolCall

logger = logging.getLogger(__name__)

# Default timeout configuration (in seconds)
DEFAULT_CONNECT_TIMEOUT = 10.0
DEFAULT_READ_TIMEOUT = 180.0  # completions can take a while
DEFAULT_WRITE_TIMEOUT = 10.0
DEFAULT_POOL_TIMEOUT = 10.0

# Retry configuration
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY = 5.0


class LLMError(Exception):
    """Error from the LLM client."""
    pass


class CompletionService(Protocol):
    """Anything that turns a conversation plus tool declarations into one assistant reply."""

    def chat(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
    ) -> "ChatResponse": ...


class LLMClient:
    """
    Client for OpenAI-compatible LLM APIs.

    Synchronous on purpose: the agent loop awaits exactly one completion at
    a time and never overlaps requests.
    """

    def __init__(
        self,
        config: LLMConfig | None = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
    ) -> None:
        """Initialize the client with configuration.

        Args:
            config: LLM configuration (model, API key, etc.)
            max_retries: Maximum number of retries for timeout/network errors
            retry_delay: Seconds to wait before retrying after a timeout
        """
        self.config = config or LLMConfig.from_env()
        self.max_retries = max_retries
        self.retry_delay = retry_delay

        timeout = httpx.Timeout(
            connect=DEFAULT_CONNECT_TIMEOUT,
            read=DEFAULT_READ_TIMEOUT,
            write=DEFAULT_WRITE_TIMEOUT,
            pool=DEFAULT_POOL_TIMEOUT,
        )

        self._client = httpx.Client(
            base_url=self.config.base_url,
            headers={
                "Authorization": f"Bearer {self.config.api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
        )

    def chat(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
    ) -> "ChatResponse":
        """
        Send a chat completion request with automatic retry on timeout.

        Args:
            messages: The conversation history in OpenAI format
            tools: Optional list of tool definitions

        Returns:
            ChatResponse with the assistant's response

        Raises:
            LLMError: If all retries are exhausted or a non-retryable error occurs
        """
        payload: dict[str, Any] = {
            "model": self.config.model,
            "messages": messages,
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
        }

        if tools:
            payload["tools"] = tools
            payload["tool_choice"] = "auto"

        last_error: Exception | None = None

        for attempt in range(self.max_retries + 1):
            if attempt > 0:
                logger.info(f"Retry attempt {attempt}/{self.max_retries} after {self.retry_delay}s delay...")
                time.sleep(self.retry_delay)

            logger.debug(
                f"Sending chat request with {len(messages)} messages and "
                f"{len(tools or [])} tools (attempt {attempt + 1})"
            )

            try:
                response = self._client.post("/chat/completions", json=payload)
                response.raise_for_status()
                chat_response = ChatResponse.from_api_response(response.json())
                logger.debug(f"Token usage: {chat_response.usage}")
                return chat_response

            except httpx.TimeoutException as e:
                logger.warning(f"Request timed out (attempt {attempt + 1}): {e}")
                last_error = e
                continue

            except httpx.HTTPStatusError as e:
                if e.response.status_code == 429:
                    self._wait_for_rate_limit(e.response)
                    last_error = e
                    continue

                if e.response.status_code == 503:
                    logger.warning(f"Service unavailable (attempt {attempt + 1}): {e}")
                    last_error = e
                    continue

                logger.error(f"HTTP error: {e.response.status_code} - {e.response.text}")
                raise LLMError(f"HTTP {e.response.status_code}: {e.response.text}") from e

            except httpx.RequestError as e:
                logger.warning(f"Request error (attempt {attempt + 1}): {e}")
                last_error = e
                continue

            except (KeyError, IndexError, ValueError) as e:
                raise LLMError(f"Malformed completion response: {e}") from e

        logger.error(f"All {self.max_retries + 1} attempts failed. Last error: {last_error}")
        raise LLMError(f"Request failed after {self.max_retries + 1} attempts: {last_error}") from last_error

    def _wait_for_rate_limit(self, response: httpx.Response) -> None:
        retry_after = response.headers.get("Retry-After")
        wait_time = self.retry_delay
        if retry_after:
            try:
                wait_time = float(retry_after)
            except ValueError:
                pass
        logger.warning(f"Rate limited. Waiting {wait_time}s")
        time.sleep(wait_time)

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> "LLMClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


@dataclass
class TokenUsage:
    """Token accounting reported by the completion service."""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "TokenUsage":
        data = data or {}
        return cls(
            prompt_tokens=data.get("prompt_tokens", 0) or 0,
            completion_tokens=data.get("completion_tokens", 0) or 0,
            total_tokens=data.get("total_tokens", 0) or 0,
        )

    def __str__(self) -> str:
        return (
            f"{self.prompt_tokens} prompt, {self.completion_tokens} completion, "
            f"{self.total_tokens} total"
        )


class ChatResponse:
    """
    Response from a chat completion request.

    Wraps the API response and provides access to the content and any tool
    calls. Tool-call arguments stay as the raw string the service produced.
    """

    def __init__(
        self,
        content: str | None,
        tool_calls: list[ToolCall] | None,
        finish_reason: str = "stop",
        raw_response: dict[str, Any] | None = None,
        usage: TokenUsage | None = None,
    ) -> None:
        self.content = content or ""
        self.tool_calls = tool_calls or []
        self.finish_reason = finish_reason
        self.raw_response = raw_response or {}
        self.usage = usage or TokenUsage()

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "ChatResponse":
        """Parse an API response into a ChatResponse."""
        choices = data.get("choices") or []
        if not choices or "message" not in choices[0]:
            raise ValueError("No message in completion")

        choice = choices[0]
        message = choice["message"]

        tool_calls = [
            ToolCall.from_dict(tc)
            for tc in (message.get("tool_calls") or [])
        ]

        return cls(
            content=message.get("content"),
            tool_calls=tool_calls,
            finish_reason=choice.get("finish_reason") or "stop",
            raw_response=data,
            usage=TokenUsage.from_dict(data.get("usage")),
        )

    @property
    def has_tool_calls(self) -> bool:
        """Check if the response includes tool calls."""
        return len(self.tool_calls) > 0
