"""
Tool Registry - Single source of truth for tool definitions.

The registry is built once at startup and shared read-only between the
tool executor and the HTTP layer.
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional


@dataclass(frozen=True)
class ToolDefinition:
    """Metadata for a tool - defined once, used everywhere."""

    name: str
    description: str
    parameters: dict[str, Any]  # JSON schema of the arguments object
    handler: Callable[[dict], dict]


class ToolRegistry:
    """Read-only catalog of tools, keyed by name, in registration order."""

    def __init__(self, definitions: Iterable[ToolDefinition]):
        tools: dict[str, ToolDefinition] = {}
        for tool in definitions:
            if tool.name in tools:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            tools[tool.name] = tool
        self._tools = tools

    def list_definitions(self) -> list[ToolDefinition]:
        """Get all tool definitions in registration order."""
        return list(self._tools.values())

    def resolve(self, name: str) -> Optional[ToolDefinition]:
        """Get a tool by name, or None if the name is unknown."""
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def get_tools_summary(self) -> str:
        """Get formatted summary of all tools for logs and the CLI."""
        lines = []
        for name, tool in self._tools.items():
            lines.append(f"- {name}: {tool.description}")
        return "\n".join(lines)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
