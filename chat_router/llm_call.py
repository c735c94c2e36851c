"""
LLM Call Interface for the chat router.

Wraps the OpenAI SDK for any OpenAI-compatible chat-completion endpoint
and turns its responses into either final text or a list of tool calls.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from openai import OpenAI

from .config import config
from .errors import ModelCallError
from .orchestration.conversation import ToolInvocationRequest

logger = logging.getLogger(__name__)


@dataclass
class ModelResponse:
    """One chat-completion result."""

    content: Optional[str] = None
    tool_calls: list[ToolInvocationRequest] = field(default_factory=list)
    usage: Optional[dict] = None

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)


def parse_tool_arguments(raw: Any) -> dict:
    """
    Parse the model's argument JSON for a tool call.

    Arguments arrive as untyped JSON text. Anything that does not decode
    to an object is wrapped as ``{"raw": ...}`` so schema validation
    reports it as a tool failure instead of the request crashing.
    """
    if isinstance(raw, dict):
        return raw
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return {}
    try:
        parsed = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        logger.warning("Failed to parse tool arguments: %s", str(raw)[:200])
        return {"raw": raw}
    if not isinstance(parsed, dict):
        return {"raw": raw}
    return parsed


class LLMClient:
    """Client for the upstream chat-completion endpoint."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = base_url or config.model.base_url
        self.model = model or config.model.model
        self.temperature = (
            temperature if temperature is not None else config.model.temperature
        )
        self.max_tokens = max_tokens if max_tokens is not None else config.model.max_tokens
        self.timeout = timeout if timeout is not None else config.model.timeout
        self._client = OpenAI(
            base_url=self.base_url,
            api_key=api_key or config.model.api_key or "not-configured",
            timeout=self.timeout,
            max_retries=0,
        )

    def build_request(
        self, messages: list[dict], tools: Optional[list[dict]] = None
    ) -> dict:
        """Build the chat-completion request body."""
        create_kwargs: dict = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        if tools:
            create_kwargs["tools"] = tools
            create_kwargs["tool_choice"] = "auto"
        return create_kwargs

    def complete(
        self, messages: list[dict], tools: Optional[list[dict]] = None
    ) -> ModelResponse:
        """
        Call the chat-completion endpoint.

        Args:
            messages: Conversation in OpenAI wire format.
            tools: OpenAI function definitions to advertise, if any.

        Returns:
            ModelResponse with either content or tool calls.

        Raises:
            ModelCallError: On transport errors, non-success status,
                timeouts or a response without a message.
        """
        create_kwargs = self.build_request(messages, tools)
        try:
            response = self._client.chat.completions.create(**create_kwargs)
        except Exception as e:
            logger.error(f"Chat completion call failed: {e}")
            raise ModelCallError(f"Model call failed: {e}") from e

        return self.parse_response(response)

    @staticmethod
    def parse_response(response: Any) -> ModelResponse:
        """Convert an SDK response into a ModelResponse."""
        choices = getattr(response, "choices", None)
        if not choices:
            raise ModelCallError("Model response contained no choices")
        message = getattr(choices[0], "message", None)
        if message is None:
            raise ModelCallError("Model response contained no message")

        tool_calls: list[ToolInvocationRequest] = []
        for index, call in enumerate(getattr(message, "tool_calls", None) or []):
            function = getattr(call, "function", None)
            name = getattr(function, "name", None)
            if not name:
                raise ModelCallError("Model returned a tool call without a function name")
            raw_arguments = getattr(function, "arguments", None) or "{}"
            tool_calls.append(
                ToolInvocationRequest(
                    id=getattr(call, "id", None) or f"call_{index}",
                    name=name,
                    arguments=parse_tool_arguments(raw_arguments),
                    raw_arguments=raw_arguments if isinstance(raw_arguments, str) else json.dumps(raw_arguments),
                )
            )

        usage = None
        if getattr(response, "usage", None) is not None:
            usage = {
                "prompt_tokens": getattr(response.usage, "prompt_tokens", None),
                "completion_tokens": getattr(response.usage, "completion_tokens", None),
                "total_tokens": getattr(response.usage, "total_tokens", None),
            }

        return ModelResponse(
            content=getattr(message, "content", None),
            tool_calls=tool_calls,
            usage=usage,
        )

    def close(self) -> None:
        """Close the underlying OpenAI client."""
        try:
            self._client.close()
        except Exception as e:
            logger.debug("Error closing OpenAI client: %s", e)
