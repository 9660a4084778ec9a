"""
Chat message and request types.

Provides the wire shapes of the chat-completions API:
- Message: one role-tagged message of the conversation
- ChatRequest: model + full message history + streaming flag
- OpenAIModel: supported model identifiers
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class MessageRole(str, Enum):
    """Message role enumeration."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """Role-tagged chat message.

    Messages are immutable once built. Functions that need to rewrite a
    request work on a draft copy obtained from ``with_content``.

    Examples:
        >>> msg = Message.user("Hello!")
        >>> msg = Message.system("You are a helpful assistant.")
        >>> draft = msg.with_content("Translate this:\\nHello!")
    """

    model_config = ConfigDict(use_enum_values=True, frozen=True)

    role: MessageRole = Field(description="Message role")
    content: str = Field(description="Message text")

    @classmethod
    def system(cls, text: str) -> Message:
        """Create a system message."""
        return cls(role=MessageRole.SYSTEM, content=text)

    @classmethod
    def user(cls, text: str) -> Message:
        """Create a user message."""
        return cls(role=MessageRole.USER, content=text)

    @classmethod
    def assistant(cls, text: str) -> Message:
        """Create an assistant message."""
        return cls(role=MessageRole.ASSISTANT, content=text)

    def with_content(self, content: str) -> Message:
        """Return a copy of this message with different content."""
        return self.model_copy(update={"content": content})

    @property
    def is_user(self) -> bool:
        return self.role == MessageRole.USER

    @property
    def is_assistant(self) -> bool:
        return self.role == MessageRole.ASSISTANT


class OpenAIModel(str, Enum):
    """Chat models selectable from the command line."""

    GPT3_5_TURBO = "gpt-3.5-turbo"
    GPT4 = "gpt-4"
    GPT4_0314 = "gpt-4-0314"
    GPT4_32K = "gpt-4-32k"
    GPT4_32K_0314 = "gpt-4-32k-0314"
    GPT4O = "gpt-4o"

    @classmethod
    def from_version(cls, version: str) -> OpenAIModel:
        """Resolve a short version flag (``gpt3``, ``4``, ``4o`` ...).

        Args:
            version: Version flag as typed on the command line

        Returns:
            Matching model

        Raises:
            ValueError: If the version is not supported
        """
        versions = {
            "gpt3": cls.GPT3_5_TURBO,
            "3": cls.GPT3_5_TURBO,
            "gpt4": cls.GPT4,
            "4": cls.GPT4,
            "gpt4o": cls.GPT4O,
            "4o": cls.GPT4O,
        }
        key = version.strip().lower()
        if key in versions:
            return versions[key]
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"{version} is not supported") from None


class ChatRequest(BaseModel):
    """Body of a streaming chat-completions request."""

    model_config = ConfigDict(use_enum_values=True, frozen=True)

    model: OpenAIModel = Field(description="Model identifier")
    messages: list[Message] = Field(default_factory=list, description="Full history")
    stream: bool = Field(default=True, description="Always stream")

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the JSON body sent over the wire."""
        return self.model_dump(mode="json")
