"""
Tests for tool argument validation and the tool executor.
"""

from unittest.mock import patch

import pytest

from chat_router.orchestration import ToolExecutor, ToolResult
from chat_router.tools import build_default_registry
from chat_router.tools.registry import ToolDefinition, ToolRegistry
from chat_router.tools.validation import ArgumentValidationError, validate_arguments


WEATHER_SCHEMA = build_default_registry().resolve("get_weather").parameters


class TestValidateArguments:
    """Tests for validate_arguments against tool schemas."""

    def test_valid_arguments(self):
        validate_arguments({"location": "Paris", "unit": "celsius"}, WEATHER_SCHEMA)

    def test_optional_argument_may_be_omitted(self):
        validate_arguments({"location": "Paris"}, WEATHER_SCHEMA)

    def test_missing_required(self):
        with pytest.raises(ArgumentValidationError, match="Missing required argument: location"):
            validate_arguments({}, WEATHER_SCHEMA)

    def test_wrong_type(self):
        with pytest.raises(ArgumentValidationError, match="'location' has wrong type"):
            validate_arguments({"location": 42}, WEATHER_SCHEMA)

    def test_enum_is_not_enforced(self):
        """Out-of-range units reach the tool, which falls back to celsius."""
        validate_arguments({"location": "Paris", "unit": "kelvin"}, WEATHER_SCHEMA)

    def test_optional_argument_may_be_null(self):
        validate_arguments({"location": "Paris", "unit": None}, WEATHER_SCHEMA)

    def test_extra_tool_argument_tolerated(self):
        validate_arguments({"location": "Paris", "country": "FR"}, WEATHER_SCHEMA)

    def test_unknown_argument_rejected_when_closed(self):
        schema = {
            "type": "object",
            "properties": {"a": {"type": "string"}},
            "additionalProperties": False,
        }
        with pytest.raises(ArgumentValidationError, match=r"Unknown argument\(s\) not allowed: b"):
            validate_arguments({"a": "x", "b": 1}, schema)

    def test_non_object_rejected(self):
        with pytest.raises(ArgumentValidationError, match="must be a JSON object"):
            validate_arguments(["Paris"], WEATHER_SCHEMA)

    def test_unparseable_arguments_fail(self):
        """Unparseable model output is wrapped as {"raw": ...} and rejected."""
        with pytest.raises(ArgumentValidationError):
            validate_arguments({"raw": "{location: Paris"}, WEATHER_SCHEMA)

    def test_number_accepts_int_and_float(self):
        schema = {"type": "object", "properties": {"n": {"type": "number"}}}
        validate_arguments({"n": 3}, schema)
        validate_arguments({"n": 3.5}, schema)

    def test_bool_is_not_a_number(self):
        schema = {"type": "object", "properties": {"n": {"type": "number"}}}
        with pytest.raises(ArgumentValidationError):
            validate_arguments({"n": True}, schema)

    def test_extra_arguments_allowed_without_flag(self):
        schema = {"type": "object", "properties": {"a": {"type": "string"}}}
        validate_arguments({"a": "x", "b": 1}, schema)


class TestToolExecutor:
    """Tests for ToolExecutor dispatch and failure normalization."""

    def test_unknown_tool(self):
        executor = ToolExecutor(build_default_registry())
        result = executor.execute("launch_rocket", {})
        assert result == ToolResult(ok=False, payload={"error": "Unknown tool: launch_rocket"})

    def test_successful_call(self):
        executor = ToolExecutor(build_default_registry())
        result = executor.execute("calculate", {"expression": "2 + 2"})
        assert result.ok is True
        assert result.payload["result"] == 4

    def test_invalid_arguments_not_dispatched(self):
        calls = []
        tool = ToolDefinition(
            name="recorder",
            description="Records calls",
            parameters={
                "type": "object",
                "properties": {"x": {"type": "string"}},
                "required": ["x"],
            },
            handler=lambda params: calls.append(params) or {"ok": True},
        )
        executor = ToolExecutor(ToolRegistry([tool]))

        result = executor.execute("recorder", {})

        assert result.ok is False
        assert result.payload["error"].startswith("Invalid arguments for recorder:")
        assert calls == []

    def test_tool_reported_error(self):
        executor = ToolExecutor(build_default_registry())
        result = executor.execute("calculate", {"expression": "1 / 0"})
        assert result.ok is False
        assert result.payload == {"error": "Invalid calculation result"}

    def test_raised_exception_is_captured(self):
        def explode(params):
            raise RuntimeError("boom")

        tool = ToolDefinition("explode", "Always fails", {"type": "object"}, explode)
        executor = ToolExecutor(ToolRegistry([tool]))

        result = executor.execute("explode", {})

        assert result.ok is False
        assert result.payload == {"error": "Tool 'explode' execution error: boom"}

    def test_long_exception_message_truncated(self):
        def explode(params):
            raise RuntimeError("x" * 2000)

        tool = ToolDefinition("explode", "Always fails", {"type": "object"}, explode)
        result = ToolExecutor(ToolRegistry([tool])).execute("explode", {})
        assert len(result.payload["error"]) < 600

    def test_non_dict_payload_wrapped(self):
        tool = ToolDefinition("answer", "Returns 42", {"type": "object"}, lambda params: 42)
        result = ToolExecutor(ToolRegistry([tool])).execute("answer", {})
        assert result == ToolResult(ok=True, payload={"result": 42})

    def test_to_content_is_json(self):
        result = ToolResult(ok=True, payload={"city": "Zürich"})
        assert result.to_content() == '{"city": "Zürich"}'


class TestToolFallbacksThroughExecutor:
    """Lenient model arguments reach the tool's own defaults."""

    WTTR = {
        "current_condition": [
            {
                "temp_C": "21",
                "temp_F": "70",
                "FeelsLikeC": "20",
                "FeelsLikeF": "68",
                "weatherDesc": [{"value": "Sunny"}],
                "humidity": "50",
                "windspeedKmph": "5",
                "winddir16Point": "N",
                "visibility": "10",
                "pressure": "1012",
                "uvIndex": "3",
            }
        ],
        "nearest_area": [{"areaName": [{"value": "Paris"}], "country": [{"value": "France"}]}],
    }

    @patch("chat_router.tools.weather.requests.get")
    def test_unknown_unit_falls_back_to_celsius(self, mock_get, http_response):
        mock_get.return_value = http_response(self.WTTR)
        executor = ToolExecutor(build_default_registry())

        result = executor.execute("get_weather", {"location": "Paris", "unit": "kelvin"})

        assert result.ok is True
        assert result.payload["temperature"] == "21°C"

    @patch("chat_router.tools.weather.requests.get")
    def test_null_unit_falls_back_to_celsius(self, mock_get, http_response):
        mock_get.return_value = http_response(self.WTTR)
        executor = ToolExecutor(build_default_registry())

        result = executor.execute("get_weather", {"location": "Paris", "unit": None})

        assert result.ok is True
        assert result.payload["temperature"] == "21°C"

    @patch("chat_router.tools.weather.requests.get")
    def test_extra_argument_ignored(self, mock_get, http_response):
        mock_get.return_value = http_response(self.WTTR)
        executor = ToolExecutor(build_default_registry())

        result = executor.execute("get_weather", {"location": "Paris", "country": "FR"})

        assert result.ok is True

    @patch("chat_router.tools.search.requests.get")
    def test_string_result_count_is_coerced(self, mock_get, http_response):
        mock_get.return_value = http_response(
            {
                "RelatedTopics": [
                    {"Text": f"Topic {i}", "FirstURL": f"https://duckduckgo.com/{i}"}
                    for i in range(8)
                ]
            }
        )
        executor = ToolExecutor(build_default_registry())

        result = executor.execute("search_web", {"query": "python", "num_results": "3"})

        assert result.ok is True
        assert result.payload["total_results"] == 3

    def test_null_timezone_defaults_to_utc(self):
        executor = ToolExecutor(build_default_registry())

        result = executor.execute("get_current_time", {"timezone": None})

        assert result.ok is True
        assert result.payload["timezone"] == "UTC"
