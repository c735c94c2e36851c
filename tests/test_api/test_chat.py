"""Tests for the chat endpoint."""

from unittest.mock import patch

from fastapi.testclient import TestClient

from chat_router.api.main import app
from chat_router.errors import IterationLimitError, ModelCallError
from chat_router.orchestration import LoopOutcome

client = TestClient(app)


class TestChatValidation:
    """Tests for request validation on POST /chat."""

    @patch("chat_router.api.routes.chat.LLMClient")
    def test_missing_message(self, mock_llm_cls):
        response = client.post("/chat", json={})
        assert response.status_code == 400
        assert response.json() == {"error": "Message is required"}
        mock_llm_cls.assert_not_called()

    @patch("chat_router.api.routes.chat.LLMClient")
    def test_blank_message(self, mock_llm_cls):
        response = client.post("/chat", json={"message": "   "})
        assert response.status_code == 400
        mock_llm_cls.assert_not_called()

    def test_malformed_body(self):
        response = client.post("/chat", json={"message": "hi", "enableTools": "maybe"})
        assert response.status_code == 400


class TestChatSuccess:
    """Tests for successful chat requests."""

    @patch("chat_router.api.routes.chat.OrchestrationLoop")
    @patch("chat_router.api.routes.chat.LLMClient")
    def test_reply_without_tools(self, mock_llm_cls, mock_loop_cls):
        mock_loop_cls.return_value.run.return_value = LoopOutcome(
            final_text="Hello!", tools_used=False, iterations=1
        )

        response = client.post("/chat", json={"message": "Hi"})

        assert response.status_code == 200
        data = response.json()
        assert data["reply"] == "Hello!"
        assert data["toolsUsed"] is False
        assert data["timestamp"].endswith("Z")

    @patch("chat_router.api.routes.chat.OrchestrationLoop")
    @patch("chat_router.api.routes.chat.LLMClient")
    def test_reply_with_tools(self, mock_llm_cls, mock_loop_cls):
        mock_loop_cls.return_value.run.return_value = LoopOutcome(
            final_text="It is 21°C in Paris.",
            tools_used=True,
            iterations=2,
            tool_names=["get_weather"],
        )

        response = client.post("/chat", json={"message": "Weather in Paris?"})

        assert response.status_code == 200
        assert response.json()["toolsUsed"] is True

    @patch("chat_router.api.routes.chat.OrchestrationLoop")
    @patch("chat_router.api.routes.chat.LLMClient")
    def test_history_and_flag_forwarded(self, mock_llm_cls, mock_loop_cls):
        mock_loop_cls.return_value.run.return_value = LoopOutcome(
            final_text="ok", tools_used=False, iterations=1
        )
        history = [{"role": "user", "content": "earlier"}]

        client.post(
            "/chat",
            json={"message": "now", "history": history, "enableTools": False},
        )

        run_kwargs = mock_loop_cls.return_value.run.call_args.kwargs
        assert run_kwargs["history"] == history
        assert run_kwargs["enable_tools"] is False

    @patch("chat_router.api.routes.chat.OrchestrationLoop")
    @patch("chat_router.api.routes.chat.LLMClient")
    def test_client_closed(self, mock_llm_cls, mock_loop_cls):
        mock_loop_cls.return_value.run.return_value = LoopOutcome(
            final_text="ok", tools_used=False, iterations=1
        )
        client.post("/chat", json={"message": "Hi"})
        mock_llm_cls.return_value.close.assert_called_once()


class TestChatErrors:
    """Tests for failures inside the loop."""

    @patch("chat_router.api.routes.chat.OrchestrationLoop")
    @patch("chat_router.api.routes.chat.LLMClient")
    def test_model_failure(self, mock_llm_cls, mock_loop_cls):
        mock_loop_cls.return_value.run.side_effect = ModelCallError("Model call failed: 503")

        response = client.post("/chat", json={"message": "Hi"})

        assert response.status_code == 500
        data = response.json()
        assert data["error"] == "Model call failed: 503"
        assert "timestamp" in data
        mock_llm_cls.return_value.close.assert_called_once()

    @patch("chat_router.api.routes.chat.OrchestrationLoop")
    @patch("chat_router.api.routes.chat.LLMClient")
    def test_iteration_limit(self, mock_llm_cls, mock_loop_cls):
        mock_loop_cls.return_value.run.side_effect = IterationLimitError(5)

        response = client.post("/chat", json={"message": "Loop"})

        assert response.status_code == 500
        assert response.json()["error"] == "Maximum tool call iterations reached"


class TestChatEndToEnd:
    """The real loop behind the route, with only the OpenAI SDK mocked."""

    @patch("chat_router.llm_call.OpenAI")
    def test_endless_tool_calls_hit_the_cap(self, mock_openai_cls, sdk_completion):
        create = mock_openai_cls.return_value.chat.completions.create
        create.side_effect = [
            sdk_completion(tool_calls=[(f"call_{i}", "calculate", '{"expression": "1 + 1"}')])
            for i in range(10)
        ]

        response = client.post("/chat", json={"message": "Keep calculating"})

        assert response.status_code == 500
        assert response.json()["error"] == "Maximum tool call iterations reached"
        assert create.call_count == 5

    @patch("chat_router.llm_call.OpenAI")
    def test_tool_round_sets_tools_used(self, mock_openai_cls, sdk_completion):
        create = mock_openai_cls.return_value.chat.completions.create
        create.side_effect = [
            sdk_completion(tool_calls=[("call_1", "calculate", '{"expression": "2 + 2"}')]),
            sdk_completion(content="2 + 2 = 4"),
        ]

        response = client.post("/chat", json={"message": "What is 2 + 2?"})

        assert response.status_code == 200
        data = response.json()
        assert data["reply"] == "2 + 2 = 4"
        assert data["toolsUsed"] is True
        second_messages = create.call_args_list[1].kwargs["messages"]
        assert second_messages[-1]["role"] == "tool"
        assert second_messages[-1]["tool_call_id"] == "call_1"
        assert '"result": 4' in second_messages[-1]["content"]

    @patch("chat_router.llm_call.OpenAI")
    def test_direct_answer_leaves_tools_unused(self, mock_openai_cls, sdk_completion):
        create = mock_openai_cls.return_value.chat.completions.create
        create.return_value = sdk_completion(content="Hello!")

        response = client.post("/chat", json={"message": "Hi"})

        assert response.status_code == 200
        assert response.json()["toolsUsed"] is False
        assert create.call_count == 1
