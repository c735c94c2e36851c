"""
Tool-calling orchestration loop.

Interleaves chat-completion calls with tool execution until the model
answers without requesting tools, or the round cap is hit.

Per-round flow:
    1. Call the model with the conversation and the tool catalog
    2. No tool calls: the content is the final answer, stop
    3. Otherwise append the assistant turn (with its tool calls)
    4. Execute every requested call in order, appending one tool
       message per call, correlated by tool_call_id
    5. Next round

Running out of rounds is fatal: the loop raises rather than returning a
partial answer.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterable, Optional

from ..errors import IterationLimitError
from ..tools import get_registry
from ..tools.registry import ToolRegistry
from ..tracing import TracingContext
from .conversation import Conversation, ToolInvocationRequest
from .executor import ToolExecutor, ToolResult
from .tool_defs import build_tool_definitions

if TYPE_CHECKING:
    from ..llm_call import LLMClient, ModelResponse

logger = logging.getLogger(__name__)

# Hard ceiling on model calls per request.
MAX_ITERATIONS = 5

SYSTEM_PROMPT = (
    "You are a helpful AI assistant. You have access to tools for weather, "
    "web search, calculations and the current time. Use them when they help "
    "answer the user's question, then reply in clear natural language."
)


@dataclass
class OrchestrationStep:
    """A single round of the orchestration process."""

    step_number: int
    tool_calls: list[ToolInvocationRequest] = field(default_factory=list)
    results: list[ToolResult] = field(default_factory=list)
    is_final: bool = False
    final_answer: Optional[str] = None


@dataclass
class LoopOutcome:
    """Final answer of a completed loop."""

    final_text: str
    tools_used: bool
    iterations: int
    tool_names: list[str] = field(default_factory=list)


class OrchestrationLoop:
    """
    Bounded model-call / tool-execution loop for one request.

    A new instance is created per request; the registry is shared and
    read-only, the conversation and step trace are private to the run.
    """

    def __init__(
        self,
        llm_client: Optional["LLMClient"] = None,
        registry: Optional[ToolRegistry] = None,
        executor: Optional[ToolExecutor] = None,
        max_iterations: int = MAX_ITERATIONS,
        system_prompt: str = SYSTEM_PROMPT,
        execution_id: Optional[str] = None,
        tracing_context: Optional[TracingContext] = None,
    ):
        if llm_client is None:
            from ..llm_call import LLMClient

            llm_client = LLMClient()
        self.llm_client = llm_client
        self.registry = registry or get_registry()
        self.executor = executor or ToolExecutor(self.registry)
        self.max_iterations = max(1, min(max_iterations, MAX_ITERATIONS))
        self.system_prompt = system_prompt
        self.execution_id = execution_id
        self.tracing_context = tracing_context

        self.steps: list[OrchestrationStep] = []
        self.conversation: Optional[Conversation] = None

    @property
    def _id_prefix(self) -> str:
        return f"[{self.execution_id}] " if self.execution_id else ""

    def run(
        self,
        message: str,
        history: Optional[Iterable[Any]] = None,
        enable_tools: bool = True,
    ) -> LoopOutcome:
        """
        Run the loop for one user message.

        Args:
            message: The user's message.
            history: Prior turns as {role, content} entries.
            enable_tools: Whether to advertise tools to the model.

        Returns:
            LoopOutcome with the final text.

        Raises:
            ModelCallError: The model endpoint failed.
            IterationLimitError: Every allowed round requested tools.
        """
        self.steps = []
        self.conversation = Conversation.seed(self.system_prompt, history, message)
        tools = build_tool_definitions(self.registry) if enable_tools else None

        logger.debug("%sStarting orchestration for: %s", self._id_prefix, message[:200])

        try:
            for iteration in range(1, self.max_iterations + 1):
                step = OrchestrationStep(step_number=iteration)
                self.steps.append(step)

                response = self._call_llm(self.conversation.to_messages(), tools, iteration)

                if not response.has_tool_calls:
                    step.is_final = True
                    step.final_answer = response.content or ""
                    return LoopOutcome(
                        final_text=step.final_answer,
                        tools_used=iteration > 1,
                        iterations=iteration,
                        tool_names=self._unique_tools_used(),
                    )

                step.tool_calls = list(response.tool_calls)
                self.conversation.append_assistant(response.content, step.tool_calls)
                for call in step.tool_calls:
                    result = self._execute_tool(call, iteration)
                    step.results.append(result)
                    self.conversation.append_tool_result(call.id, result)
        finally:
            self._log_trace_summary()

        logger.warning(
            "%sMax iterations (%d) reached without a final answer",
            self._id_prefix,
            self.max_iterations,
        )
        raise IterationLimitError(self.max_iterations)

    def _call_llm(
        self, messages: list[dict], tools: Optional[list[dict]], iteration: int
    ) -> "ModelResponse":
        """Call the model, inside a generation span when tracing."""
        logger.debug(
            "%sRound %d: calling model with %d messages",
            self._id_prefix,
            iteration,
            len(messages),
        )
        if self.tracing_context is None:
            return self.llm_client.complete(messages, tools)

        with self.tracing_context.generation(
            name=f"chat_round_{iteration}",
            model=self.llm_client.model,
            input=messages,
            model_parameters={
                "temperature": self.llm_client.temperature,
                "max_tokens": self.llm_client.max_tokens,
            },
        ) as gen:
            try:
                response = self.llm_client.complete(messages, tools)
            except Exception:
                gen.set_status("error")
                raise
            gen.set_output(
                {
                    "content": (response.content or "")[:2000],
                    "tool_calls": [call.name for call in response.tool_calls],
                }
            )
            if response.usage:
                gen.set_usage(**response.usage)
            return response

    def _execute_tool(self, call: ToolInvocationRequest, iteration: int) -> ToolResult:
        """Execute one tool call, inside a span when tracing."""
        logger.info(
            "%sRound %d: executing tool '%s'", self._id_prefix, iteration, call.name
        )
        if self.tracing_context is None:
            return self.executor.execute(call.name, call.arguments)

        with self.tracing_context.span(
            name=f"tool:{call.name}",
            input=call.arguments,
            metadata={"tool_call_id": call.id, "round": iteration},
        ) as span:
            result = self.executor.execute(call.name, call.arguments)
            span.set_output(result.payload)
            if not result.ok:
                span.set_status("error")
            return result

    def _unique_tools_used(self) -> list[str]:
        """Unique tool names executed so far, in first-use order."""
        seen: list[str] = []
        for step in self.steps:
            for call in step.tool_calls:
                if call.name not in seen:
                    seen.append(call.name)
        return seen

    def _log_trace_summary(self) -> None:
        """Log a compact trace summary."""
        prefix = self._id_prefix
        logger.info("%s%s", prefix, "─" * 50)
        logger.info("%sTRACE SUMMARY", prefix)
        logger.info("%s%s", prefix, "─" * 50)
        for step in self.steps:
            if step.is_final:
                logger.info("%sRound %d [FINAL]", prefix, step.step_number)
                continue
            for call, result in zip(step.tool_calls, step.results):
                preview = result.to_content()
                if len(preview) > 80:
                    preview = preview[:80] + "..."
                status = "ok" if result.ok else "error"
                logger.info(
                    "%sRound %d: %s [%s] -> %s",
                    prefix,
                    step.step_number,
                    call.name,
                    status,
                    preview,
                )

    def get_trace(self) -> list[dict]:
        """
        Get a trace of all orchestration rounds.

        Returns:
            List of round dictionaries.
        """
        return [
            {
                "step": s.step_number,
                "tool_calls": [
                    {"id": c.id, "name": c.name, "arguments": c.arguments}
                    for c in s.tool_calls
                ],
                "results": [{"ok": r.ok, "payload": r.payload} for r in s.results],
                "is_final": s.is_final,
                "final_answer": s.final_answer,
            }
            for s in self.steps
        ]
