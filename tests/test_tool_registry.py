"""
Tests for the tool registry and the default tool catalog.
"""

import pytest

from chat_router.orchestration import build_tool_definitions, describe_tools
from chat_router.tools import build_default_registry, get_registry
from chat_router.tools.registry import ToolDefinition, ToolRegistry


def _echo(params: dict) -> dict:
    return params


class TestToolRegistry:
    """Tests for ToolRegistry lookups."""

    def test_resolve_known_tool(self):
        tool = ToolDefinition("echo", "Echo back", {"type": "object"}, _echo)
        registry = ToolRegistry([tool])
        assert registry.resolve("echo") is tool
        assert "echo" in registry

    def test_resolve_unknown_tool_returns_none(self):
        registry = ToolRegistry([])
        assert registry.resolve("nope") is None
        assert "nope" not in registry

    def test_duplicate_names_rejected(self):
        """Tool names must be unique within a registry."""
        tool = ToolDefinition("echo", "Echo back", {"type": "object"}, _echo)
        with pytest.raises(ValueError, match="Duplicate tool name"):
            ToolRegistry([tool, tool])

    def test_listing_keeps_registration_order(self):
        first = ToolDefinition("b", "B", {"type": "object"}, _echo)
        second = ToolDefinition("a", "A", {"type": "object"}, _echo)
        registry = ToolRegistry([first, second])
        assert registry.names() == ["b", "a"]
        assert registry.list_definitions() == [first, second]

    def test_tools_summary(self):
        registry = ToolRegistry([ToolDefinition("echo", "Echo back", {}, _echo)])
        assert registry.get_tools_summary() == "- echo: Echo back"


class TestDefaultRegistry:
    """Tests for the built-in tool catalog."""

    def test_contains_all_builtin_tools(self):
        registry = build_default_registry()
        assert registry.names() == [
            "get_weather",
            "search_web",
            "calculate",
            "get_current_time",
        ]

    def test_get_registry_is_shared(self):
        assert get_registry() is get_registry()

    def test_required_fields(self):
        registry = build_default_registry()
        assert registry.resolve("get_weather").parameters["required"] == ["location"]
        assert registry.resolve("search_web").parameters["required"] == ["query"]
        assert registry.resolve("calculate").parameters["required"] == ["expression"]
        assert "required" not in registry.resolve("get_current_time").parameters

    def test_weather_unit_enum(self):
        unit = build_default_registry().resolve("get_weather").parameters["properties"]["unit"]
        assert unit["enum"] == ["celsius", "fahrenheit"]


class TestToolDefinitionFormats:
    """Tests for the OpenAI and listing projections of the registry."""

    def test_openai_function_format(self):
        definitions = build_tool_definitions(build_default_registry())
        assert len(definitions) == 4
        for definition in definitions:
            assert definition["type"] == "function"
            assert set(definition["function"]) == {"name", "description", "parameters"}
            assert definition["function"]["parameters"]["type"] == "object"

    def test_describe_tools(self):
        listing = describe_tools(build_default_registry())
        assert [entry["name"] for entry in listing] == [
            "get_weather",
            "search_web",
            "calculate",
            "get_current_time",
        ]
        assert all(set(entry) == {"name", "description", "parameters"} for entry in listing)
