"""
Request-scoped tracing context using the Langfuse SDK v3.

One ``TracingContext`` per /chat request: a root span for the request,
child spans for tool calls and generations for model calls. Parent
links are passed explicitly through ``TraceContext`` so nesting does not
depend on OTEL context state across threads.
"""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Generator, Optional

from langfuse.types import TraceContext

from .client import get_tracing_client

logger = logging.getLogger(__name__)


@dataclass
class _Observation:
    """Shared start/end handling for spans and generations."""

    name: str
    enabled: bool = False
    input: Optional[Any] = None
    metadata: Optional[dict] = None
    _trace_context: Optional[TraceContext] = field(default=None, repr=False)
    _context_manager: Any = field(default=None, repr=False)
    _observation: Any = field(default=None, repr=False)
    _start_time: float = field(default=0.0, repr=False)
    _output: Optional[Any] = field(default=None, repr=False)
    _status: str = field(default="success", repr=False)

    as_type = "span"

    def _start_kwargs(self) -> dict:
        return {
            "trace_context": self._trace_context,
            "as_type": self.as_type,
            "name": self.name,
            "input": self.input,
            "metadata": self.metadata,
        }

    def _end_kwargs(self) -> dict:
        duration_ms = (time.time() - self._start_time) * 1000
        kwargs: dict[str, Any] = {
            "metadata": {"status": self._status, "duration_ms": round(duration_ms, 2)}
        }
        if self._output is not None:
            kwargs["output"] = self._output
        return kwargs

    def start(self) -> None:
        if not self.enabled:
            return
        client = get_tracing_client()
        if not client or not client.client:
            return
        try:
            self._start_time = time.time()
            self._context_manager = client.client.start_as_current_observation(
                **self._start_kwargs()
            )
            self._observation = self._context_manager.__enter__()
        except Exception as e:
            logger.warning(f"Failed to start {self.as_type} '{self.name}': {e}")
            self._observation = None

    def end(self) -> None:
        if not self.enabled or not self._observation:
            return
        try:
            self._observation.update(**self._end_kwargs())
            if self._context_manager:
                self._context_manager.__exit__(None, None, None)
        except Exception as e:
            logger.warning(f"Failed to end {self.as_type} '{self.name}': {e}")

    def set_output(self, output: Any) -> None:
        self._output = output

    def set_status(self, status: str) -> None:
        self._status = status


@dataclass
class SpanContext(_Observation):
    """A tracing span (tool execution, orchestration run)."""


@dataclass
class GenerationContext(_Observation):
    """An LLM generation with model name, parameters and token usage."""

    model: str = ""
    model_parameters: Optional[dict] = None
    _usage: Optional[dict] = field(default=None, repr=False)

    as_type = "generation"

    def _start_kwargs(self) -> dict:
        kwargs = super()._start_kwargs()
        kwargs["model"] = self.model
        kwargs["model_parameters"] = self.model_parameters
        return kwargs

    def _end_kwargs(self) -> dict:
        kwargs = super()._end_kwargs()
        if self._usage:
            kwargs["usage"] = self._usage
        return kwargs

    def set_usage(
        self,
        prompt_tokens: Optional[int] = None,
        completion_tokens: Optional[int] = None,
        total_tokens: Optional[int] = None,
    ) -> None:
        """Set token usage for the generation."""
        self._usage = {}
        if prompt_tokens is not None:
            self._usage["promptTokens"] = prompt_tokens
        if completion_tokens is not None:
            self._usage["completionTokens"] = completion_tokens
        if total_tokens is not None:
            self._usage["totalTokens"] = total_tokens


@dataclass
class TracingContext:
    """
    Request-scoped tracing context.

    Manages the lifecycle of a trace for a single API request,
    including nested spans and generations.
    """

    execution_id: str
    _context_manager: Any = field(default=None, repr=False)
    _root_span: Any = field(default=None, repr=False)
    _enabled: bool = field(default=False, repr=False)
    _start_time: float = field(default_factory=time.time, repr=False)
    _trace_id: Optional[str] = field(default=None, repr=False)
    _root_span_id: Optional[str] = field(default=None, repr=False)

    def __post_init__(self):
        client = get_tracing_client()
        self._enabled = client is not None and client.enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    def start_trace(
        self,
        name: str = "chat_request",
        input: Optional[Any] = None,
        metadata: Optional[dict] = None,
    ) -> None:
        """Start the root span for this request."""
        if not self._enabled:
            return
        client = get_tracing_client()
        if not client or not client.client:
            return

        try:
            trace_metadata = {"execution_id": self.execution_id, **(metadata or {})}
            self._context_manager = client.client.start_as_current_observation(
                as_type="span",
                name=name,
                input=input,
                metadata=trace_metadata,
            )
            self._root_span = self._context_manager.__enter__()
            self._trace_id = getattr(self._root_span, "trace_id", None)
            self._root_span_id = getattr(self._root_span, "id", None)
            self._start_time = time.time()
        except Exception as e:
            logger.warning(f"[{self.execution_id}] Failed to start trace: {e}")
            self._root_span = None

    def get_trace_context(self) -> Optional[TraceContext]:
        """TraceContext that makes new observations children of the root span."""
        if not self._trace_id or not self._root_span_id:
            return None
        return TraceContext(trace_id=self._trace_id, parent_span_id=self._root_span_id)

    def end_trace(
        self,
        output: Optional[Any] = None,
        status: str = "success",
        metadata: Optional[dict] = None,
    ) -> None:
        """End the root span and flush."""
        if not self._enabled or not self._root_span:
            return
        try:
            duration_ms = (time.time() - self._start_time) * 1000
            self._root_span.update(
                output=output,
                metadata={
                    "status": status,
                    "duration_ms": round(duration_ms, 2),
                    **(metadata or {}),
                },
            )
            if self._context_manager:
                self._context_manager.__exit__(None, None, None)
        except Exception as e:
            logger.warning(f"[{self.execution_id}] Failed to end trace: {e}")

        client = get_tracing_client()
        if client:
            client.flush()

    @contextmanager
    def span(
        self,
        name: str,
        input: Optional[Any] = None,
        metadata: Optional[dict] = None,
    ) -> Generator[SpanContext, None, None]:
        """Create a span context manager."""
        span_ctx = SpanContext(
            name=name,
            enabled=self._enabled,
            input=input,
            metadata=metadata,
            _trace_context=self.get_trace_context(),
        )
        try:
            span_ctx.start()
            yield span_ctx
        finally:
            span_ctx.end()

    @contextmanager
    def generation(
        self,
        name: str,
        model: str,
        input: Optional[Any] = None,
        metadata: Optional[dict] = None,
        model_parameters: Optional[dict] = None,
    ) -> Generator[GenerationContext, None, None]:
        """Create a generation context manager for LLM calls."""
        gen_ctx = GenerationContext(
            name=name,
            enabled=self._enabled,
            input=input,
            metadata=metadata,
            model=model,
            model_parameters=model_parameters,
            _trace_context=self.get_trace_context(),
        )
        try:
            gen_ctx.start()
            yield gen_ctx
        finally:
            gen_ctx.end()
