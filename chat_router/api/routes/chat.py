"""
Chat endpoint.

Runs one user message through the tool-calling orchestration loop and
returns the model's final reply.
"""

import logging
import uuid

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..schemas import ChatRequest, ChatResponse, ErrorResponse, utc_timestamp
from ...config import config
from ...llm_call import LLMClient
from ...orchestration import OrchestrationLoop
from ...tools import get_registry
from ...tracing import TracingContext

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing message"},
        500: {"model": ErrorResponse, "description": "Model or orchestration failure"},
    },
    summary="Chat with tools",
    description=(
        "Send a message (with optional history) to the language model. The model "
        "may call weather, search, calculator and clock tools for up to five "
        "rounds before it must answer."
    ),
)
def chat(request: ChatRequest) -> ChatResponse | JSONResponse:
    """Process a chat request through the orchestration loop."""
    if not request.message or not request.message.strip():
        logger.warning("Chat request without a message")
        return JSONResponse(status_code=400, content={"error": "Message is required"})

    execution_id = f"exec-{uuid.uuid4().hex[:8]}"
    logger.info(
        f"[{execution_id}] Processing chat request: {request.message[:100]} "
        f"(history={len(request.history or [])}, tools={request.enable_tools})"
    )

    tracing_context = TracingContext(execution_id=execution_id)
    tracing_context.start_trace(
        name="chat",
        input={"message": request.message},
        metadata={"enable_tools": request.enable_tools},
    )

    llm_client = None
    try:
        llm_client = LLMClient()
        loop = OrchestrationLoop(
            llm_client=llm_client,
            registry=get_registry(),
            max_iterations=config.model.max_iterations,
            execution_id=execution_id,
            tracing_context=tracing_context,
        )
        outcome = loop.run(
            request.message,
            history=request.history,
            enable_tools=request.enable_tools,
        )
    except Exception as e:
        logger.exception(f"[{execution_id}] Chat request failed: {e}")
        tracing_context.end_trace(output=str(e), status="error")
        return JSONResponse(
            status_code=500,
            content={"error": str(e), "timestamp": utc_timestamp()},
        )
    finally:
        if llm_client is not None:
            llm_client.close()

    logger.debug(f"[{execution_id}] Reply: {outcome.final_text[:200]}")
    tracing_context.end_trace(
        output=outcome.final_text,
        status="success",
        metadata={"iterations": outcome.iterations, "tools": outcome.tool_names},
    )

    return ChatResponse(reply=outcome.final_text, tools_used=outcome.tools_used)
