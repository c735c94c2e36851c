"""
Chat Router - tool-augmented chat completions.

This package provides:
- Tool registry and tools (weather, web search, calculator, clock)
- Bounded tool-calling orchestration loop
- OpenAI-compatible model client
- FastAPI server and interactive CLI
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
