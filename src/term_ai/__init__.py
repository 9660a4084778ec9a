"""term-ai: chat with GPT models from the terminal.

The core is a streaming chat session engine: it decodes the event stream,
keeps the conversation history consistent, retries transient transport
failures and lets pluggable functions rewrite requests and act on replies.
"""
from __future__ import annotations

from term_ai.client import ChatSession, ConversationHistory, TurnResult, TurnStats
from term_ai.config import TermAiConfig
from term_ai.errors import (
    ConfigError,
    DecodeError,
    FunctionError,
    HistoryError,
    RemoteError,
    TermAiError,
    TransportError,
)
from term_ai.functions import FunctionPipeline, PipelineFunction
from term_ai.transport import ChatTransport
from term_ai.types import (
    ChatRequest,
    Message,
    MessageRole,
    OpenAIModel,
    StreamResponse,
    UserInput,
)

__version__ = "0.3.0"

__all__ = [
    # Client
    "ChatSession",
    "ChatTransport",
    "ConversationHistory",
    "TurnResult",
    "TurnStats",
    # Configuration
    "TermAiConfig",
    # Errors
    "ConfigError",
    "DecodeError",
    "FunctionError",
    "HistoryError",
    "RemoteError",
    "TermAiError",
    "TransportError",
    # Functions
    "FunctionPipeline",
    "PipelineFunction",
    # Types
    "ChatRequest",
    "Message",
    "MessageRole",
    "OpenAIModel",
    "StreamResponse",
    "UserInput",
    # Version
    "__version__",
]
