"""
Langfuse tracing for /chat requests.

One root span per request, a ``chat_round_<n>`` generation per model call
and a ``tool:<name>`` span per tool execution. Without credentials every
helper here is a no-op.
"""

from .client import (
    TracingClient,
    init_tracing_client,
    get_tracing_client,
    shutdown_tracing,
)
from .context import (
    TracingContext,
    SpanContext,
    GenerationContext,
)

__all__ = [
    "TracingClient",
    "init_tracing_client",
    "get_tracing_client",
    "shutdown_tracing",
    "TracingContext",
    "SpanContext",
    "GenerationContext",
]
