"""
Tool-calling orchestration: conversation state, tool execution and the
bounded model/tool loop.
"""

from .conversation import Conversation, Message, ToolInvocationRequest, MAX_HISTORY_MESSAGES
from .executor import ToolExecutor, ToolResult
from .tool_defs import build_tool_definitions, describe_tools
from .loop import OrchestrationLoop, OrchestrationStep, LoopOutcome, MAX_ITERATIONS

__all__ = [
    "Conversation",
    "Message",
    "ToolInvocationRequest",
    "MAX_HISTORY_MESSAGES",
    "ToolExecutor",
    "ToolResult",
    "build_tool_definitions",
    "describe_tools",
    "OrchestrationLoop",
    "OrchestrationStep",
    "LoopOutcome",
    "MAX_ITERATIONS",
]
