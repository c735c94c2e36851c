"""
Chat Router Tools Package

Available tools:
- get_weather: Current conditions via wttr.in
- search_web: Web search via the DuckDuckGo Instant Answer API
- calculate: Whitelisted arithmetic with a recursive-descent evaluator
- get_current_time: Current time in an IANA timezone
"""

from typing import Optional

from .registry import ToolDefinition, ToolRegistry
from .weather import get_weather, TOOL as WEATHER_TOOL
from .search import search_web, TOOL as SEARCH_TOOL
from .math_solver import calculate, TOOL as CALCULATE_TOOL
from .clock import get_current_time, TOOL as CLOCK_TOOL

_registry: Optional[ToolRegistry] = None


def build_default_registry() -> ToolRegistry:
    """Build the catalog of built-in tools, in advertised order."""
    return ToolRegistry([WEATHER_TOOL, SEARCH_TOOL, CALCULATE_TOOL, CLOCK_TOOL])


def get_registry() -> ToolRegistry:
    """Get the shared registry, building it on first use."""
    global _registry
    if _registry is None:
        _registry = build_default_registry()
    return _registry


__all__ = [
    "ToolDefinition",
    "ToolRegistry",
    "build_default_registry",
    "get_registry",
    "get_weather",
    "search_web",
    "calculate",
    "get_current_time",
]
