"""
Pytest configuration and fixtures for chat router tests.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from chat_router.llm_call import ModelResponse
from chat_router.orchestration import ToolInvocationRequest


@pytest.fixture
def fake_llm():
    """A stand-in LLMClient whose complete() is scripted per test."""
    llm = MagicMock()
    llm.model = "test-model"
    llm.temperature = 0.7
    llm.max_tokens = 1000
    return llm


@pytest.fixture
def text_reply():
    """Build a ModelResponse carrying final text."""

    def _build(content: str) -> ModelResponse:
        return ModelResponse(content=content)

    return _build


@pytest.fixture
def tool_reply():
    """Build a ModelResponse requesting tool calls from (id, name, arguments) tuples."""

    def _build(*calls, content=None) -> ModelResponse:
        return ModelResponse(
            content=content,
            tool_calls=[
                ToolInvocationRequest(id=call_id, name=name, arguments=arguments)
                for call_id, name, arguments in calls
            ],
        )

    return _build


@pytest.fixture
def sdk_completion():
    """
    Build an object shaped like an OpenAI SDK chat completion.

    SimpleNamespace rather than Mock so absent attributes stay absent.
    """

    def _build(content=None, tool_calls=None, usage=None):
        calls = [
            SimpleNamespace(
                id=call_id,
                type="function",
                function=SimpleNamespace(name=name, arguments=arguments),
            )
            for call_id, name, arguments in (tool_calls or [])
        ]
        message = SimpleNamespace(content=content, tool_calls=calls or None)
        return SimpleNamespace(
            choices=[SimpleNamespace(message=message, finish_reason="stop")],
            usage=SimpleNamespace(**usage) if usage else None,
        )

    return _build


@pytest.fixture
def http_response():
    """Build a mocked requests.Response."""

    def _build(payload=None, ok=True, status_code=200):
        response = MagicMock()
        response.ok = ok
        response.status_code = status_code
        response.json.return_value = payload if payload is not None else {}
        return response

    return _build
