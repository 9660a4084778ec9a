"""
Type definitions for term-ai.

Contains the chat message shapes, the decoded stream events and the user
input wrapper.
"""

from term_ai.types.events import (
    ControlSignal,
    HandleResult,
    StreamKind,
    StreamResponse,
)
from term_ai.types.input import UserInput
from term_ai.types.message import (
    ChatRequest,
    Message,
    MessageRole,
    OpenAIModel,
)

__all__ = [
    "ChatRequest",
    "ControlSignal",
    "HandleResult",
    "Message",
    "MessageRole",
    "OpenAIModel",
    "StreamKind",
    "StreamResponse",
    "UserInput",
]
