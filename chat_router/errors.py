"""
Exception types for the chat router.

Only failures that end a request live here. Tool failures never raise
past the executor; they become structured tool results instead.
"""


class ChatRouterError(Exception):
    """Base class for request-terminating errors."""


class ModelCallError(ChatRouterError):
    """The chat-completion endpoint failed or returned an unusable response."""


class IterationLimitError(ChatRouterError):
    """The model kept requesting tools past the iteration cap."""

    def __init__(self, max_iterations: int):
        self.max_iterations = max_iterations
        super().__init__("Maximum tool call iterations reached")


class ConversationStateError(ChatRouterError):
    """A tool call and its result got out of step in the conversation."""
