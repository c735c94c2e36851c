"""
Tool executor.

Dispatches one named tool call to its handler and normalizes every
outcome into a ``ToolResult``. Nothing raised by a tool escapes: the model
sees failures as tool output and can explain or try something else.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from ..tools.registry import ToolRegistry
from ..tools.validation import ArgumentValidationError, validate_arguments

logger = logging.getLogger(__name__)

MAX_ERROR_CHARS = 500


@dataclass(frozen=True)
class ToolResult:
    """Outcome of a single tool call."""

    ok: bool
    payload: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def failure(cls, message: str) -> "ToolResult":
        return cls(ok=False, payload={"error": message})

    def to_content(self) -> str:
        """Serialize the payload as the tool message content."""
        return json.dumps(self.payload, ensure_ascii=False, default=str)


def _truncate(message: str) -> str:
    if len(message) > MAX_ERROR_CHARS:
        return message[:MAX_ERROR_CHARS] + "..."
    return message


class ToolExecutor:
    """Runs tool calls against a registry."""

    def __init__(self, registry: ToolRegistry):
        self.registry = registry

    def execute(self, name: str, arguments: Any) -> ToolResult:
        """
        Execute a tool by name.

        Args:
            name: Tool name requested by the model.
            arguments: Parsed arguments requested by the model (untrusted).

        Returns:
            ToolResult; ``ok`` is False for unknown tools, invalid
            arguments, handler errors and raised exceptions.
        """
        tool = self.registry.resolve(name)
        if tool is None:
            logger.warning("Unknown tool: %s", name)
            return ToolResult.failure(f"Unknown tool: {name}")

        try:
            validate_arguments(arguments, tool.parameters)
        except ArgumentValidationError as e:
            logger.warning("Invalid arguments for '%s': %s", name, e)
            return ToolResult.failure(f"Invalid arguments for {name}: {e}")

        try:
            payload = tool.handler(dict(arguments))
        except Exception as e:
            logger.error("Tool '%s' execution failed: %s", name, e)
            return ToolResult.failure(
                f"Tool '{name}' execution error: {_truncate(str(e))}"
            )

        if not isinstance(payload, dict):
            payload = {"result": payload}
        if payload.get("error"):
            logger.info("Tool '%s' reported an error: %s", name, payload["error"])
            return ToolResult(ok=False, payload=payload)
        return ToolResult(ok=True, payload=payload)
