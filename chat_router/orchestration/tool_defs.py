"""
Tool definitions for the orchestration loop.

Projects ToolRegistry entries into the OpenAI function-calling format
advertised to the model, and into the plain listing served by /tools.
"""

from ..tools.registry import ToolRegistry


def build_tool_definitions(registry: ToolRegistry) -> list[dict]:
    """
    Build OpenAI function-calling tool definitions from the registry.

    Args:
        registry: The tool catalog.

    Returns:
        List of OpenAI-format tool definitions, in registry order.
    """
    return [
        {
            "type": "function",
            "function": {
                "name": tool.name,
                "description": tool.description,
                "parameters": tool.parameters,
            },
        }
        for tool in registry.list_definitions()
    ]


def describe_tools(registry: ToolRegistry) -> list[dict]:
    """List tools as {name, description, parameters} for API consumers."""
    return [
        {
            "name": tool.name,
            "description": tool.description,
            "parameters": tool.parameters,
        }
        for tool in registry.list_definitions()
    ]
