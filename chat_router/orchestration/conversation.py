"""
Conversation state for one request.

Holds the ordered message list that is sent to the model on every round.
Each assistant tool call must be answered by exactly one tool message
before the list is handed to the model again.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from ..errors import ConversationStateError
from .executor import ToolResult

logger = logging.getLogger(__name__)

# Only the most recent history entries are replayed to the model.
MAX_HISTORY_MESSAGES = 10

HISTORY_ROLES = ("system", "user", "assistant")


@dataclass(frozen=True)
class ToolInvocationRequest:
    """A tool call requested by the model."""

    id: str
    name: str
    arguments: dict[str, Any]
    raw_arguments: str = "{}"

    def to_dict(self) -> dict:
        """OpenAI wire format for an assistant tool call."""
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.raw_arguments},
        }


@dataclass
class Message:
    """A single message in the conversation context window."""

    role: str
    content: str
    tool_call_id: Optional[str] = None
    tool_calls: list[ToolInvocationRequest] = field(default_factory=list)

    def to_dict(self) -> dict:
        data: dict[str, Any] = {"role": self.role, "content": self.content}
        if self.tool_calls and not self.content:
            data["content"] = None
        if self.tool_call_id is not None:
            data["tool_call_id"] = self.tool_call_id
        if self.tool_calls:
            data["tool_calls"] = [call.to_dict() for call in self.tool_calls]
        return data


def _history_message(entry: Any) -> Optional[Message]:
    """Convert one history entry, or None if it is malformed."""
    if isinstance(entry, Message):
        role, content = entry.role, entry.content
    elif isinstance(entry, dict):
        role, content = entry.get("role"), entry.get("content")
    else:
        role = getattr(entry, "role", None)
        content = getattr(entry, "content", None)

    if role not in HISTORY_ROLES:
        return None
    if not isinstance(content, str) or not content.strip():
        return None
    return Message(role=role, content=content)


class Conversation:
    """Ordered, request-local message list."""

    def __init__(self):
        self._messages: list[Message] = []
        self._pending: list[str] = []

    @classmethod
    def seed(
        cls,
        system_prompt: str,
        history: Optional[Iterable[Any]],
        user_message: str,
    ) -> "Conversation":
        """
        Build the initial context window.

        Args:
            system_prompt: System message placed first.
            history: Prior turns as {role, content} entries. Only the last
                MAX_HISTORY_MESSAGES are considered; entries without a
                known role or with empty content are dropped.
            user_message: The new user message, placed last.
        """
        conversation = cls()
        conversation._messages.append(Message(role="system", content=system_prompt))

        recent = list(history or [])[-MAX_HISTORY_MESSAGES:]
        for entry in recent:
            message = _history_message(entry)
            if message is None:
                logger.debug("Dropping malformed history entry: %r", entry)
                continue
            conversation._messages.append(message)

        conversation._messages.append(Message(role="user", content=user_message))
        return conversation

    def append_assistant(
        self,
        content: Optional[str],
        tool_calls: Optional[list[ToolInvocationRequest]] = None,
    ) -> None:
        """Append an assistant turn, registering its tool calls as pending."""
        if self._pending:
            raise ConversationStateError(
                f"Unanswered tool calls: {', '.join(self._pending)}"
            )
        calls = list(tool_calls or [])
        self._messages.append(
            Message(role="assistant", content=content or "", tool_calls=calls)
        )
        self._pending = [call.id for call in calls]

    def append_tool_result(self, tool_call_id: str, result: ToolResult) -> None:
        """Answer a pending tool call."""
        if tool_call_id not in self._pending:
            raise ConversationStateError(f"No pending tool call with id '{tool_call_id}'")
        self._pending.remove(tool_call_id)
        self._messages.append(
            Message(role="tool", content=result.to_content(), tool_call_id=tool_call_id)
        )

    def pending_tool_call_ids(self) -> list[str]:
        return list(self._pending)

    @property
    def messages(self) -> list[Message]:
        return list(self._messages)

    def to_messages(self) -> list[dict]:
        """Messages in OpenAI wire format, ready for the next model call."""
        if self._pending:
            raise ConversationStateError(
                f"Unanswered tool calls: {', '.join(self._pending)}"
            )
        return [message.to_dict() for message in self._messages]

    def __len__(self) -> int:
        return len(self._messages)
