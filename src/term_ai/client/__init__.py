"""
Client module for term-ai.

Provides the chat session engine, its conversation history and turn
result types.
"""

from term_ai.client.core import ChatSession, TurnState
from term_ai.client.history import ConversationHistory, DeltaAccumulator
from term_ai.client.response import TurnResult, TurnStats

__all__ = [
    "ChatSession",
    "ConversationHistory",
    "DeltaAccumulator",
    "TurnResult",
    "TurnState",
    "TurnStats",
]
