"""User input wrapper."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from term_ai.types.message import Message


class UserInput(BaseModel):
    """Raw text typed by the user (or passed on the command line)."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(description="Raw input, untrimmed")

    @property
    def stripped(self) -> str:
        return self.content.strip()

    @property
    def is_blank(self) -> bool:
        return not self.stripped

    def to_messages(self, limit: int) -> list[Message]:
        """Split the input into user messages of at most ``limit`` characters."""
        from term_ai.utils.chunker import chunk

        return chunk(self.content, limit)

    def __str__(self) -> str:
        return self.content
